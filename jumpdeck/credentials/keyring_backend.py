"""OS-level keyring backend using system credential stores.

Platform Support:
- Linux: Secret Service API (GNOME Keyring, KWallet)
- macOS: Keychain
- Windows: Windows Credential Locker
"""

from typing import cast

import keyring
import structlog
from keyring.backends import fail
from keyring.errors import KeyringError, PasswordDeleteError

from .exceptions import BackendNotAvailableError, CredentialError

log = structlog.get_logger(__name__)

SERVICE_NAME = "jumpdeck"


class KeyringBackend:
    """Profile passwords in the OS keyring.

    Each password is stored under service ``jumpdeck`` with username
    ``<profile>:password``.

    Example:
        >>> backend = KeyringBackend()
        >>> backend.set_password("web", "s3cret")
        >>> backend.get_password("web")
        's3cret'
    """

    @property
    def name(self) -> str:
        return "keyring"

    @property
    def available(self) -> bool:
        """Check if a functional keyring can be opened.

        Returns False if no backend is configured (headless systems) or the
        backend fails to initialize.
        """
        try:
            ring = keyring.get_keyring()
        except Exception as e:
            log.debug("keyring_unavailable", error=str(e))
            return False
        return not isinstance(ring, fail.Keyring)

    @staticmethod
    def _username(profile_name: str) -> str:
        return f"{profile_name}:password"

    def _require_available(self) -> None:
        if not self.available:
            raise BackendNotAvailableError(
                "Keyring backend is not available",
                suggestion="Use the encrypted file backend: export JUMPDECK_CREDENTIALS_BACKEND=file",
            )

    def get_password(self, profile_name: str) -> str:
        """Retrieve a profile password from the OS keyring.

        Returns:
            The password, or "" if none is stored

        Raises:
            BackendNotAvailableError: If keyring is not available
            CredentialError: If keyring operation fails
        """
        if not profile_name:
            raise ValueError("profile name required")
        self._require_available()

        try:
            password = cast(str | None, keyring.get_password(SERVICE_NAME, self._username(profile_name)))
        except KeyringError as e:
            raise CredentialError(f"Keyring operation failed: {e}", reference=f"keyring:{profile_name}") from e

        if password is None:
            return ""
        log.debug("password_retrieved", backend=self.name, profile=profile_name)
        return password

    def set_password(self, profile_name: str, password: str) -> None:
        if not profile_name:
            raise ValueError("profile name required")
        self._require_available()

        try:
            keyring.set_password(SERVICE_NAME, self._username(profile_name), password)
        except KeyringError as e:
            raise CredentialError(
                f"Failed to store password: {e}", reference=f"keyring:{profile_name}"
            ) from e
        log.info("password_stored", backend=self.name, profile=profile_name)

    def delete_password(self, profile_name: str) -> bool:
        if not profile_name:
            raise ValueError("profile name required")
        self._require_available()

        try:
            keyring.delete_password(SERVICE_NAME, self._username(profile_name))
        except PasswordDeleteError:
            # Nothing stored - not an error
            return False
        except KeyringError as e:
            raise CredentialError(
                f"Failed to delete password: {e}", reference=f"keyring:{profile_name}"
            ) from e

        log.info("password_deleted", backend=self.name, profile=profile_name)
        return True
