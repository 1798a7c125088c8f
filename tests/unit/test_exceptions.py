"""Tests for the exception hierarchy and enums."""

import pytest

from jumpdeck.cli.output import exit_code_for
from jumpdeck.enums import BackendType, ConnectionState, Protocol
from jumpdeck.exceptions import (
    BackendNotAvailableError,
    ConfigurationError,
    ConnectionAttemptError,
    ConnectionCancelledError,
    CredentialError,
    JumpdeckError,
    ProfileNotFoundError,
    ProfileValidationError,
    SubprocessFailedError,
)


class TestExceptions:
    """Test exception attributes and inheritance."""

    def test_hierarchy(self):
        """Test every error is a JumpdeckError."""
        assert issubclass(ProfileValidationError, ConfigurationError)
        assert issubclass(BackendNotAvailableError, CredentialError)
        assert issubclass(SubprocessFailedError, ConnectionAttemptError)
        assert issubclass(ConnectionCancelledError, ConnectionAttemptError)
        for error in (ConfigurationError, ProfileNotFoundError, CredentialError, ConnectionAttemptError):
            assert issubclass(error, JumpdeckError)

    def test_credential_error_formatting(self):
        """Test reference and suggestion are appended but message is preserved."""
        error = CredentialError("Keyring locked", reference="keyring:web", suggestion="Unlock it")

        assert error.message == "Keyring locked"
        assert str(error) == "Keyring locked (reference: keyring:web)\nSuggestion: Unlock it"

    def test_profile_not_found_message(self):
        """Test the profile name is quoted in the message."""
        error = ProfileNotFoundError("web")

        assert error.name == "web"
        assert error.message == "profile 'web' not found"

    @pytest.mark.parametrize(
        "error,code",
        [
            (ConfigurationError("bad"), 1),
            (ConnectionCancelledError(), 130),
            (SubprocessFailedError("failed", exit_code=255), 255),
            (SubprocessFailedError("killed", exit_code=-9), 1),
        ],
    )
    def test_exit_codes(self, error, code):
        """Test CLI exit codes per error type."""
        assert exit_code_for(error) == code


class TestEnums:
    """Test enum helpers."""

    def test_protocol_values(self):
        """Test the supported protocol set."""
        assert Protocol.values() == ["ssh", "sftp", "telnet", "mosh", "ssm", "gcloud"]
        assert str(Protocol.MOSH) == "mosh"

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("auto", BackendType.AUTO),
            (" Keyring ", BackendType.KEYRING),
            ("1password", BackendType.ONEPASSWORD),
            ("onepassword", BackendType.ONEPASSWORD),
            ("FILE", BackendType.FILE),
        ],
    )
    def test_backend_type_parse(self, value, expected):
        """Test accepted backend spellings."""
        assert BackendType.parse(value) is expected

    def test_backend_type_parse_unknown(self):
        """Test unknown backend names raise ValueError."""
        with pytest.raises(ValueError):
            BackendType.parse("vault")

    def test_terminal_states(self):
        """Test which connection states are terminal."""
        terminal = {state for state in ConnectionState if state.is_terminal}

        assert terminal == {ConnectionState.SUCCEEDED, ConnectionState.FAILED, ConnectionState.CANCELLED}
