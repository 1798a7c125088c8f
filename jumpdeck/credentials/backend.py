"""Abstract backend protocol for profile password storage."""

from typing import Protocol


class CredentialBackend(Protocol):
    """Protocol defining the interface for password storage backends.

    All backends must implement these methods to be selectable by the
    CredentialBackendSelector. Passwords are stored per profile name.
    """

    @property
    def name(self) -> str:
        """Backend identifier (e.g., 'keyring', 'file')."""
        ...

    @property
    def available(self) -> bool:
        """Check if this backend is usable on the current system."""
        ...

    def get_password(self, profile_name: str) -> str:
        """Retrieve the password stored for a profile.

        Args:
            profile_name: Profile the password belongs to

        Returns:
            The password, or an empty string if none is stored

        Raises:
            CredentialError: If the store cannot be accessed
        """
        ...

    def set_password(self, profile_name: str, password: str) -> None:
        """Store (or replace) the password for a profile.

        Raises:
            ValueError: If profile_name is empty
            CredentialError: If the store cannot be written
        """
        ...

    def delete_password(self, profile_name: str) -> bool:
        """Delete the password for a profile.

        Returns:
            True if a password was deleted, False if none was stored

        Raises:
            CredentialError: If the store cannot be accessed
        """
        ...
