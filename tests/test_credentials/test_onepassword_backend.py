"""Tests for the 1Password CLI backend."""

import json
import subprocess
from unittest.mock import patch

import pytest

from jumpdeck.credentials import BackendNotAvailableError, CredentialError, OnePasswordBackend


def _completed(returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(args=["op"], returncode=returncode, stdout=stdout, stderr=stderr)


class TestAvailability:
    """Test the availability check."""

    @patch("jumpdeck.credentials.onepassword_backend.shutil.which", return_value=None)
    def test_not_installed(self, mock_which):
        """Test unavailable without the op binary, which is not a sign-in problem."""
        assert OnePasswordBackend().available is False
        assert OnePasswordBackend().signed_out is False

    @patch("jumpdeck.credentials.onepassword_backend.subprocess.run")
    @patch("jumpdeck.credentials.onepassword_backend.shutil.which", return_value="/usr/bin/op")
    def test_signed_in(self, mock_which, mock_run):
        """Test available with a signed-in account."""
        mock_run.side_effect = [_completed(stdout="2.30.0"), _completed(stdout="URL  EMAIL\nmy.1password.com me@x")]

        assert OnePasswordBackend().available is True

    @patch("jumpdeck.credentials.onepassword_backend.subprocess.run")
    @patch("jumpdeck.credentials.onepassword_backend.shutil.which", return_value="/usr/bin/op")
    def test_no_accounts(self, mock_which, mock_run):
        """Test an installed CLI without accounts is unavailable and signed out."""
        mock_run.side_effect = [_completed(stdout="2.30.0"), _completed(stdout="")] * 2

        backend = OnePasswordBackend()

        assert backend.available is False
        assert backend.signed_out is True

    @patch("jumpdeck.credentials.onepassword_backend.subprocess.run")
    @patch("jumpdeck.credentials.onepassword_backend.shutil.which", return_value="/usr/bin/op")
    def test_check_timeout(self, mock_which, mock_run):
        """Test a hanging CLI means unavailable."""
        mock_run.side_effect = subprocess.TimeoutExpired("op", 10)

        assert OnePasswordBackend().available is False


class TestOnePasswordBackend:
    """Test password operations."""

    @pytest.fixture
    def backend(self):
        return OnePasswordBackend(vault="Infra")

    def test_name_and_title(self, backend):
        """Test backend name and item naming."""
        assert backend.name == "1password"
        assert backend.item_title("web") == "jumpdeck - web"

    @patch("jumpdeck.credentials.onepassword_backend.subprocess.run")
    def test_get_password_json(self, mock_run, backend):
        """Test the password field is read from JSON output."""
        mock_run.return_value = _completed(stdout=json.dumps({"label": "password", "value": "s3cret"}))

        assert backend.get_password("web") == "s3cret"
        args = mock_run.call_args.args[0]
        assert args[:3] == ["op", "item", "get"]
        assert "jumpdeck - web" in args
        assert "label=password" in args
        assert "--reveal" in args
        assert args[-2:] == ["--vault", "Infra"]

    @patch("jumpdeck.credentials.onepassword_backend.subprocess.run")
    def test_get_password_plain_output(self, mock_run, backend):
        """Test bare value output from older CLIs."""
        mock_run.return_value = _completed(stdout="s3cret\n")

        assert backend.get_password("web") == "s3cret"

    @patch("jumpdeck.credentials.onepassword_backend.subprocess.run")
    def test_get_password_not_found(self, mock_run, backend):
        """Test a missing item returns an empty string."""
        mock_run.return_value = _completed(returncode=1, stderr='"jumpdeck - web" isn\'t an item in the "Infra" vault')

        assert backend.get_password("web") == ""

    @patch("jumpdeck.credentials.onepassword_backend.subprocess.run")
    def test_get_password_cli_error(self, mock_run, backend):
        """Test other CLI failures raise CredentialError."""
        mock_run.return_value = _completed(returncode=1, stderr="session expired")

        with pytest.raises(CredentialError) as exc_info:
            backend.get_password("web")

        assert exc_info.value.reference == "1password:web"

    @patch("jumpdeck.credentials.onepassword_backend.subprocess.run", side_effect=FileNotFoundError("op"))
    def test_cli_missing_at_call_time(self, mock_run, backend):
        """Test a vanished binary raises BackendNotAvailableError."""
        with pytest.raises(BackendNotAvailableError):
            backend.get_password("web")

    @patch("jumpdeck.credentials.onepassword_backend.subprocess.run")
    def test_set_password_creates_item(self, mock_run, backend):
        """Test a new item is created when none exists."""
        mock_run.side_effect = [_completed(returncode=1, stderr="isn't an item"), _completed()]

        backend.set_password("web", "s3cret")

        create_args = mock_run.call_args_list[1].args[0]
        assert create_args[:3] == ["op", "item", "create"]
        assert "--category" in create_args and "password" in create_args
        assert "jumpdeck - web" in create_args
        assert "password=s3cret" in create_args

    @patch("jumpdeck.credentials.onepassword_backend.subprocess.run")
    def test_set_password_edits_existing_item(self, mock_run, backend):
        """Test an existing item is edited in place."""
        mock_run.side_effect = [_completed(stdout="{}"), _completed()]

        backend.set_password("web", "n3w")

        edit_args = mock_run.call_args_list[1].args[0]
        assert edit_args[:4] == ["op", "item", "edit", "jumpdeck - web"]
        assert edit_args[-1] == "password=n3w"

    @patch("jumpdeck.credentials.onepassword_backend.subprocess.run")
    def test_delete_password(self, mock_run, backend):
        """Test delete results."""
        mock_run.return_value = _completed()
        assert backend.delete_password("web") is True

        mock_run.return_value = _completed(returncode=1, stderr="No item found")
        assert backend.delete_password("web") is False
