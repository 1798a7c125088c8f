"""Password storage for connection profiles.

Backends:
    - OnePasswordBackend: 1Password CLI (``op``), one item per profile
    - KeyringBackend: OS keyring (Keychain, Secret Service, Credential Locker)
    - EncryptedFileBackend: AES-256-GCM encrypted file, always available

CredentialBackendSelector picks the active backend
(forced -> config default -> auto-detect) and caches it.
"""

from .backend import CredentialBackend
from .encrypted_backend import EncryptedFileBackend
from .exceptions import BackendNotAvailableError, CredentialError, EncryptionError
from .keyring_backend import KeyringBackend
from .onepassword_backend import OnePasswordBackend
from .selector import BackendSelection, CredentialBackendSelector, default_factories

__all__ = [
    "BackendNotAvailableError",
    "BackendSelection",
    "CredentialBackend",
    "CredentialBackendSelector",
    "CredentialError",
    "EncryptedFileBackend",
    "EncryptionError",
    "KeyringBackend",
    "OnePasswordBackend",
    "default_factories",
]
