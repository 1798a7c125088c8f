"""Custom exception hierarchy for jumpdeck.

Exception Hierarchy:
    JumpdeckError (base)
    ├── ConfigurationError
    │   └── ProfileValidationError
    ├── ProfileNotFoundError
    ├── ConnectorNotFoundError
    ├── CredentialError
    │   ├── BackendNotAvailableError
    │   └── EncryptionError
    └── ConnectionAttemptError
        ├── SubprocessFailedError
        └── ConnectionCancelledError

A stored password that does not exist is not an error: backends return an
empty string for it.

Example Usage:
    >>> from jumpdeck.exceptions import ProfileNotFoundError
    >>> try:
    ...     config.get_profile("web")
    ... except ProfileNotFoundError as e:
    ...     click.echo(f"Error: {e.message}", err=True)
"""


class JumpdeckError(Exception):
    """Base exception for all jumpdeck errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(JumpdeckError):
    """The config file is unreadable, malformed, or holds invalid values."""

    pass


class ProfileValidationError(ConfigurationError):
    """A profile failed the checks applied before it is persisted.

    Attributes:
        field: Name of the profile field that violated a constraint
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class ProfileNotFoundError(JumpdeckError):
    """No profile with the requested name exists."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"profile {name!r} not found")


class ConnectorNotFoundError(JumpdeckError):
    """No connector is registered for the requested protocol."""

    def __init__(self, protocol: str) -> None:
        self.protocol = protocol
        super().__init__(f"no connector for protocol {protocol}")


class CredentialError(JumpdeckError):
    """Credential-related errors.

    Raised when a credential store cannot be read or written. Subclasses:
    - BackendNotAvailableError: Storage backend unavailable
    - EncryptionError: Encryption/decryption failed

    Attributes:
        message: Human-readable error description
        reference: The backend/profile pair that failed (e.g., "keyring:web")
        suggestion: Optional suggestion for resolution
    """

    def __init__(
        self,
        message: str,
        reference: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        self.reference = reference
        self.suggestion = suggestion

        full_message = message
        if reference:
            full_message = f"{message} (reference: {reference})"
        if suggestion:
            full_message = f"{full_message}\nSuggestion: {suggestion}"

        super().__init__(full_message)
        # Preserve original message (super sets self.message to full_message)
        self.message = message


class BackendNotAvailableError(CredentialError):
    """Requested backend is not available on this system."""

    pass


class EncryptionError(CredentialError):
    """Encryption or decryption operation failed."""

    pass


class ConnectionAttemptError(JumpdeckError):
    """Base class for outcomes of a launched external tool other than success."""

    pass


class SubprocessFailedError(ConnectionAttemptError):
    """The delegated tool exited non-zero.

    Attributes:
        exit_code: Exit status of the external process, preserved as-is
        command: Executable that was launched
        hint: Optional connector-specific explanation of the exit code
    """

    def __init__(
        self,
        message: str,
        exit_code: int,
        command: str | None = None,
        hint: str | None = None,
    ) -> None:
        self.exit_code = exit_code
        self.command = command
        self.hint = hint
        super().__init__(message)


class ConnectionCancelledError(ConnectionAttemptError):
    """The attempt was interrupted by the operator (Ctrl+C / SIGINT)."""

    def __init__(self, message: str = "connection cancelled") -> None:
        super().__init__(message)
