"""Credential-related exceptions.

This module re-exports credential exceptions from jumpdeck.exceptions so the
backends can import them relative to the package.
"""

from jumpdeck.exceptions import (
    BackendNotAvailableError,
    CredentialError,
    EncryptionError,
)

__all__ = [
    "CredentialError",
    "BackendNotAvailableError",
    "EncryptionError",
]
