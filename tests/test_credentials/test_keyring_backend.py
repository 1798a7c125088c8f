"""Tests for keyring backend."""

from unittest.mock import MagicMock, patch

import pytest
from keyring.backends import fail
from keyring.errors import KeyringError, PasswordDeleteError

from jumpdeck.credentials import BackendNotAvailableError, CredentialError, KeyringBackend


class TestKeyringBackend:
    """Test KeyringBackend functionality."""

    @pytest.fixture
    def backend(self):
        """Create KeyringBackend instance."""
        return KeyringBackend()

    def test_backend_name(self, backend):
        """Test backend name property."""
        assert backend.name == "keyring"

    @patch("jumpdeck.credentials.keyring_backend.keyring")
    def test_available_with_real_backend(self, mock_keyring, backend):
        """Test backend reports available when a keyring can be opened."""
        mock_keyring.get_keyring.return_value = MagicMock()

        assert backend.available is True

    @patch("jumpdeck.credentials.keyring_backend.keyring")
    def test_unavailable_with_fail_keyring(self, mock_keyring, backend):
        """Test the fail backend (headless systems) counts as unavailable."""
        mock_keyring.get_keyring.return_value = fail.Keyring()

        assert backend.available is False

    @patch("jumpdeck.credentials.keyring_backend.keyring")
    def test_unavailable_when_keyring_fails(self, mock_keyring, backend):
        """Test backend reports unavailable when keyring fails to initialize."""
        mock_keyring.get_keyring.side_effect = Exception("Keyring failed")

        assert backend.available is False

    @patch("jumpdeck.credentials.keyring_backend.keyring")
    def test_get_password(self, mock_keyring, backend):
        """Test successful retrieval uses the profile username."""
        mock_keyring.get_keyring.return_value = MagicMock()
        mock_keyring.get_password.return_value = "s3cret"

        assert backend.get_password("web") == "s3cret"
        mock_keyring.get_password.assert_called_once_with("jumpdeck", "web:password")

    @patch("jumpdeck.credentials.keyring_backend.keyring")
    def test_get_password_not_found(self, mock_keyring, backend):
        """Test nothing stored returns an empty string."""
        mock_keyring.get_keyring.return_value = MagicMock()
        mock_keyring.get_password.return_value = None

        assert backend.get_password("web") == ""

    @patch("jumpdeck.credentials.keyring_backend.keyring")
    def test_get_raises_when_unavailable(self, mock_keyring, backend):
        """Test get raises BackendNotAvailableError when unavailable."""
        mock_keyring.get_keyring.return_value = fail.Keyring()

        with pytest.raises(BackendNotAvailableError) as exc_info:
            backend.get_password("web")

        assert exc_info.value.suggestion is not None

    @patch("jumpdeck.credentials.keyring_backend.keyring")
    def test_get_raises_on_keyring_error(self, mock_keyring, backend):
        """Test keyring failures become CredentialError."""
        mock_keyring.get_keyring.return_value = MagicMock()
        mock_keyring.get_password.side_effect = KeyringError("locked")

        with pytest.raises(CredentialError) as exc_info:
            backend.get_password("web")

        assert exc_info.value.reference == "keyring:web"

    @patch("jumpdeck.credentials.keyring_backend.keyring")
    def test_set_password(self, mock_keyring, backend):
        """Test storage."""
        mock_keyring.get_keyring.return_value = MagicMock()

        backend.set_password("web", "s3cret")

        mock_keyring.set_password.assert_called_once_with("jumpdeck", "web:password", "s3cret")

    @patch("jumpdeck.credentials.keyring_backend.keyring")
    def test_delete_password(self, mock_keyring, backend):
        """Test deletion returns True when something was removed."""
        mock_keyring.get_keyring.return_value = MagicMock()

        assert backend.delete_password("web") is True
        mock_keyring.delete_password.assert_called_once_with("jumpdeck", "web:password")

    @patch("jumpdeck.credentials.keyring_backend.keyring")
    def test_delete_missing_password(self, mock_keyring, backend):
        """Test deleting a password that does not exist returns False."""
        mock_keyring.get_keyring.return_value = MagicMock()
        mock_keyring.delete_password.side_effect = PasswordDeleteError("not found")

        assert backend.delete_password("web") is False

    def test_empty_profile_name_rejected(self, backend):
        """Test an empty name raises ValueError."""
        with pytest.raises(ValueError):
            backend.get_password("")
