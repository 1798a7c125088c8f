"""Tests for the connection dispatcher."""

from unittest.mock import Mock

import pytest

from jumpdeck.connectors import CommandSpec, ConnectorRegistry, create_default_registry
from jumpdeck.connectors.ssh import SSHConnector
from jumpdeck.credentials.selector import CredentialBackendSelector
from jumpdeck.engine.dispatcher import ConnectionAttempt, ConnectionDispatcher, fetch_password
from jumpdeck.enums import BackendType, ConnectionState
from jumpdeck.exceptions import (
    BackendNotAvailableError,
    ConnectionCancelledError,
    ConnectorNotFoundError,
    ProfileValidationError,
    SubprocessFailedError,
)
from jumpdeck.profiles.models import Profile


@pytest.fixture
def selector(fake_factories):
    backends, factories = fake_factories
    backends[BackendType.ONEPASSWORD].passwords["web"] = "s3cret"
    return CredentialBackendSelector(forced="1password", factories=factories)


@pytest.fixture
def registry():
    registry = ConnectorRegistry()
    registry.register("ssh", SSHConnector(which=lambda name: "/usr/bin/sshpass"))
    return registry


@pytest.fixture
def profile():
    return Profile(name="web", protocol="ssh", host="web.example.com", port=22)


class TestFetchPassword:
    """Test non-fatal password retrieval."""

    def test_returns_stored_password(self, selector):
        """Test the password comes from the active backend."""
        assert fetch_password(selector, "web") == "s3cret"

    def test_nothing_stored(self, selector):
        """Test an absent password is an empty string."""
        assert fetch_password(selector, "other") == ""

    def test_backend_failure_is_not_fatal(self):
        """Test a credential error degrades to no password."""
        selector = Mock()
        selector.get_password.side_effect = BackendNotAvailableError("keyring locked")

        assert fetch_password(selector, "web") == ""


class TestConnectionAttempt:
    """Test the attempt state record."""

    def test_transitions_record_times(self):
        """Test launch and finish timestamps."""
        attempt = ConnectionAttempt(profile="web", protocol="ssh")
        attempt.transition(ConnectionState.DISPATCHING)
        attempt.transition(ConnectionState.LAUNCHED)
        attempt.transition(ConnectionState.SUCCEEDED)

        assert attempt.started_at is not None
        assert attempt.duration is not None and attempt.duration >= 0

    def test_terminal_state_is_final(self):
        """Test no transition leaves a terminal state."""
        attempt = ConnectionAttempt(profile="web", protocol="ssh", state=ConnectionState.FAILED)

        with pytest.raises(RuntimeError):
            attempt.transition(ConnectionState.LAUNCHED)


class TestConnectionDispatcher:
    """Test ConnectionDispatcher.connect."""

    def test_success(self, registry, selector, profile):
        """Test a zero exit ends in SUCCEEDED and the password is injected."""
        runner = Mock(return_value=0)
        dispatcher = ConnectionDispatcher(registry, selector, runner=runner, notify=Mock())

        attempt = dispatcher.connect(profile)

        assert attempt.state is ConnectionState.SUCCEEDED
        assert attempt.exit_code == 0
        spec = runner.call_args.args[0]
        assert spec.argv[:3] == ["/usr/bin/sshpass", "-e", "ssh"]
        assert spec.env == {"SSHPASS": "s3cret"}
        runner.assert_called_once()

    def test_non_zero_exit_raises_with_hint(self, registry, selector, profile):
        """Test exit codes are preserved and explained."""
        dispatcher = ConnectionDispatcher(registry, selector, runner=Mock(return_value=5), notify=Mock())

        with pytest.raises(SubprocessFailedError) as exc_info:
            dispatcher.connect(profile)

        assert exc_info.value.exit_code == 5
        assert "password may be incorrect" in exc_info.value.hint

    def test_no_retry_on_failure(self, registry, selector, profile):
        """Test the tool is launched exactly once."""
        runner = Mock(return_value=255)
        dispatcher = ConnectionDispatcher(registry, selector, runner=runner, notify=Mock())

        with pytest.raises(SubprocessFailedError):
            dispatcher.connect(profile)

        runner.assert_called_once()

    def test_cancellation_propagates(self, registry, selector, profile):
        """Test an interrupted session raises ConnectionCancelledError."""
        runner = Mock(side_effect=ConnectionCancelledError())
        dispatcher = ConnectionDispatcher(registry, selector, runner=runner, notify=Mock())

        with pytest.raises(ConnectionCancelledError):
            dispatcher.connect(profile)

    def test_unknown_protocol(self, registry, selector):
        """Test a profile with an unregistered protocol never launches."""
        runner = Mock()
        dispatcher = ConnectionDispatcher(registry, selector, runner=runner, notify=Mock())

        with pytest.raises(ConnectorNotFoundError):
            dispatcher.connect(Profile(name="t", protocol="telnet", host="h"))

        runner.assert_not_called()

    def test_notices_emitted_once(self, selector, profile):
        """Test connector notices reach the user exactly once."""
        registry = ConnectorRegistry()
        registry.register("ssh", SSHConnector(which=lambda name: None))
        notify = Mock()
        dispatcher = ConnectionDispatcher(registry, selector, runner=Mock(return_value=0), notify=notify)

        attempt = dispatcher.connect(profile)

        notify.assert_called_once()
        assert "sshpass" in notify.call_args.args[0]
        assert len(attempt.notices) == 1

    def test_no_forward_strips_forwards(self, selector):
        """Test --no-forward drops -L/-R/-D for the attempt."""
        runner = Mock(return_value=0)
        dispatcher = ConnectionDispatcher(create_default_registry(), selector, runner=runner, notify=Mock())
        profile = Profile(name="fwd", protocol="ssh", host="h", local_forwards=["8080:localhost:80"])

        dispatcher.connect(profile, no_forward=True)

        spec: CommandSpec = runner.call_args.args[0]
        assert "-L" not in spec.argv

    def test_credential_failure_still_connects(self, registry, profile):
        """Test a broken backend does not block the connection."""
        selector = Mock()
        selector.get_password.side_effect = BackendNotAvailableError("no backend")
        runner = Mock(return_value=0)
        dispatcher = ConnectionDispatcher(registry, selector, runner=runner, notify=Mock())

        attempt = dispatcher.connect(profile)

        assert attempt.state is ConnectionState.SUCCEEDED
        assert runner.call_args.args[0].argv[0] == "ssh"


class TestRunCommand:
    """Test ConnectionDispatcher.run_command."""

    def test_runs_command_over_ssh(self, registry, selector, profile):
        """Test the command is passed to ssh as one remote argument."""
        runner = Mock(return_value=0)
        dispatcher = ConnectionDispatcher(registry, selector, runner=runner, notify=Mock())

        attempt = dispatcher.run_command(profile, ["ls", "-la", "/var/log"])

        assert attempt.state is ConnectionState.SUCCEEDED
        spec = runner.call_args.args[0]
        assert spec.argv[-1] == "ls -la /var/log"
        assert "-t" not in spec.argv
        assert spec.env == {"SSHPASS": "s3cret"}

    def test_remote_exit_status_is_kept(self, registry, selector, profile):
        """Test the remote command's status surfaces on the error."""
        dispatcher = ConnectionDispatcher(registry, selector, runner=Mock(return_value=3), notify=Mock())

        with pytest.raises(SubprocessFailedError) as exc_info:
            dispatcher.run_command(profile, ["false"])

        assert exc_info.value.exit_code == 3

    def test_rejects_non_ssh_profiles(self, registry, selector):
        """Test other protocols are refused before anything runs."""
        runner = Mock()
        dispatcher = ConnectionDispatcher(registry, selector, runner=runner, notify=Mock())

        with pytest.raises(ProfileValidationError, match="only supports SSH"):
            dispatcher.run_command(Profile(name="t", protocol="telnet", host="h"), ["uptime"])

        runner.assert_not_called()

    def test_missing_ssh_connector(self, selector, profile):
        """Test an empty registry fails without launching."""
        runner = Mock()
        dispatcher = ConnectionDispatcher(ConnectorRegistry(), selector, runner=runner, notify=Mock())

        with pytest.raises(ConnectorNotFoundError):
            dispatcher.run_command(profile, ["uptime"])

        runner.assert_not_called()
