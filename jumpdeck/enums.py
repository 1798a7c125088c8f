"""Enumerations for jumpdeck protocols, credential backends and connection states."""

from enum import Enum


class Protocol(str, Enum):
    """Protocols a profile can use.

    Each value has exactly one connector registered in the default registry.
    """

    SSH = "ssh"
    SFTP = "sftp"
    TELNET = "telnet"
    MOSH = "mosh"
    SSM = "ssm"
    GCLOUD = "gcloud"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


class BackendType(str, Enum):
    """Credential backend selections.

    These are the accepted values of both the ``JUMPDECK_CREDENTIALS_BACKEND``
    environment variable and the ``defaultBackend`` config key.
    """

    AUTO = "auto"
    ONEPASSWORD = "1password"
    KEYRING = "keyring"
    FILE = "file"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str) -> "BackendType":
        """Parse a user-supplied backend name.

        ``onepassword`` is accepted as a spelling of ``1password``.

        Raises:
            ValueError: If the name is not a known backend
        """
        normalized = value.strip().lower()
        if normalized == "onepassword":
            return cls.ONEPASSWORD
        return cls(normalized)


class ConnectionState(str, Enum):
    """Lifecycle of a single connection attempt.

    IDLE -> DISPATCHING -> LAUNCHED -> SUCCEEDED | FAILED | CANCELLED
    """

    IDLE = "idle"
    DISPATCHING = "dispatching"
    LAUNCHED = "launched"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"

    def __str__(self) -> str:
        return self.value

    @property
    def is_terminal(self) -> bool:
        return self in (ConnectionState.SUCCEEDED, ConnectionState.FAILED, ConnectionState.CANCELLED)
