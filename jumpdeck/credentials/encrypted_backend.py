"""Encrypted file backend using AES-256-GCM.

Security Model:
- Key derived from the user's home directory plus a fixed application salt
  (SHA-256), so no master password is needed and the key is stable per user
- All profile passwords live in one JSON document encrypted as a whole
- Every write uses a fresh random 96-bit nonce, stored in front of the
  ciphertext
- File stored at <config dir>/passwords.enc with mode 600, written atomically

This protects against casual disclosure of the file (backups, dotfile repos),
not against another process running as the same user.
"""

import hashlib
import json
import os
import secrets
import tempfile
from pathlib import Path
from typing import cast

import structlog
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .exceptions import EncryptionError

log = structlog.get_logger(__name__)

KEY_SALT = b"jumpdeck-password-encryption-salt-v1"
NONCE_SIZE = 12
PASSWORDS_FILE_NAME = "passwords.enc"


def derive_key(home: str) -> bytes:
    """Derive the 32-byte file key for a home directory path."""
    return hashlib.sha256(home.encode("utf-8") + KEY_SALT).digest()


class EncryptedFileBackend:
    """Encrypted file-based password storage.

    Always available: it is the fallback when neither a password manager
    nor an OS keyring can be used.

    Example:
        >>> backend = EncryptedFileBackend(Path("~/.config/jumpdeck/passwords.enc").expanduser())
        >>> backend.set_password("web", "s3cret")
        >>> backend.get_password("web")
        's3cret'
    """

    def __init__(self, file_path: Path, home: str | None = None) -> None:
        """Initialize encrypted file backend.

        Args:
            file_path: Path to the encrypted passwords file
            home: Home directory the key is derived from (defaults to the
                current user's)
        """
        self.file_path = file_path
        self._aesgcm = AESGCM(derive_key(home if home is not None else str(Path.home())))

    @property
    def name(self) -> str:
        return "file"

    @property
    def available(self) -> bool:
        return True

    def _encrypt(self, plaintext: bytes) -> bytes:
        nonce = secrets.token_bytes(NONCE_SIZE)
        return nonce + self._aesgcm.encrypt(nonce, plaintext, None)

    def _decrypt(self, data: bytes) -> bytes:
        if len(data) < NONCE_SIZE:
            raise EncryptionError("Passwords file is truncated", reference=str(self.file_path))
        nonce, ciphertext = data[:NONCE_SIZE], data[NONCE_SIZE:]
        try:
            return self._aesgcm.decrypt(nonce, ciphertext, None)
        except InvalidTag as e:
            raise EncryptionError(
                "Passwords file cannot be decrypted",
                reference=str(self.file_path),
                suggestion="The file was written for another home directory or is corrupted",
            ) from e

    def _load_passwords(self) -> dict[str, str]:
        """Load and decrypt all stored passwords.

        Raises:
            EncryptionError: If the file cannot be read, decrypted or parsed
        """
        try:
            with open(self.file_path, "rb") as f:
                encrypted_data = f.read()
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise EncryptionError(f"Failed to read passwords file: {e}") from e

        plaintext = self._decrypt(encrypted_data)
        try:
            passwords = json.loads(plaintext.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise EncryptionError(
                "Passwords file is corrupted",
                suggestion="Delete it and store the passwords again",
            ) from e
        return cast(dict[str, str], passwords or {})

    def _save_passwords(self, passwords: dict[str, str]) -> None:
        """Encrypt and write all passwords atomically.

        Raises:
            EncryptionError: If the file cannot be written
        """
        encrypted_data = self._encrypt(json.dumps(passwords).encode("utf-8"))
        temp_name = None

        try:
            self.file_path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(dir=self.file_path.parent, prefix=f".{self.file_path.name}.")
            with os.fdopen(fd, "wb") as f:
                f.write(encrypted_data)
            # Atomic rename
            os.replace(temp_name, self.file_path)
        except OSError as e:
            if temp_name is not None:
                Path(temp_name).unlink(missing_ok=True)
            raise EncryptionError(f"Failed to save passwords file: {e}") from e

        log.debug("passwords_file_saved", path=str(self.file_path))

    def get_password(self, profile_name: str) -> str:
        if not profile_name:
            raise ValueError("profile name required")
        return self._load_passwords().get(profile_name, "")

    def set_password(self, profile_name: str, password: str) -> None:
        if not profile_name:
            raise ValueError("profile name required")
        passwords = self._load_passwords()
        passwords[profile_name] = password
        self._save_passwords(passwords)
        log.info("password_stored", backend=self.name, profile=profile_name)

    def delete_password(self, profile_name: str) -> bool:
        if not profile_name:
            raise ValueError("profile name required")
        passwords = self._load_passwords()
        if profile_name not in passwords:
            return False
        del passwords[profile_name]
        self._save_passwords(passwords)
        log.info("password_deleted", backend=self.name, profile=profile_name)
        return True
