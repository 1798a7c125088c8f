"""Tests for attached subprocess execution."""

import signal
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from jumpdeck.connectors.base import CommandSpec
from jumpdeck.exceptions import ConnectionCancelledError, SubprocessFailedError
from jumpdeck.utils.process import run_attached


class TestRunAttached:
    """Test run_attached."""

    @patch("jumpdeck.utils.process.subprocess.Popen")
    def test_returns_exit_code(self, mock_popen):
        """Test the child's exit code is returned."""
        mock_popen.return_value.wait.return_value = 3

        assert run_attached(CommandSpec(argv=["ssh", "h"])) == 3
        mock_popen.assert_called_once_with(["ssh", "h"], env=None)

    @patch("jumpdeck.utils.process.subprocess.Popen")
    def test_passes_merged_environment(self, mock_popen):
        """Test env overrides reach the child."""
        mock_popen.return_value.wait.return_value = 0

        run_attached(CommandSpec(argv=["aws"], env={"AWS_PROFILE": "prod"}))

        assert mock_popen.call_args.kwargs["env"]["AWS_PROFILE"] == "prod"

    @patch("jumpdeck.utils.process.subprocess.Popen", side_effect=FileNotFoundError)
    def test_missing_executable(self, mock_popen):
        """Test a missing tool maps to exit code 127."""
        with pytest.raises(SubprocessFailedError) as exc_info:
            run_attached(CommandSpec(argv=["mosh", "h"]))

        assert exc_info.value.exit_code == 127
        assert "mosh" in exc_info.value.message

    @patch("jumpdeck.utils.process.subprocess.Popen")
    def test_child_killed_by_sigint(self, mock_popen):
        """Test a SIGINT death is reported as cancellation."""
        mock_popen.return_value.wait.return_value = -signal.SIGINT

        with pytest.raises(ConnectionCancelledError):
            run_attached(CommandSpec(argv=["ssh", "h"]))

    @patch("jumpdeck.utils.process.subprocess.Popen")
    def test_keyboard_interrupt_forwards_sigint(self, mock_popen):
        """Test Ctrl+C is forwarded to the child before cancelling."""
        process = MagicMock()
        process.wait.side_effect = [KeyboardInterrupt, 130]
        process.poll.return_value = None
        mock_popen.return_value = process

        with pytest.raises(ConnectionCancelledError):
            run_attached(CommandSpec(argv=["ssh", "h"]))

        process.send_signal.assert_called_once_with(signal.SIGINT)
        process.terminate.assert_not_called()

    @patch("jumpdeck.utils.process.subprocess.Popen")
    def test_keyboard_interrupt_escalates(self, mock_popen):
        """Test a child ignoring SIGINT is terminated."""
        process = MagicMock()
        process.wait.side_effect = [KeyboardInterrupt, subprocess.TimeoutExpired("ssh", 3), 0]
        process.poll.return_value = None
        mock_popen.return_value = process

        with pytest.raises(ConnectionCancelledError):
            run_attached(CommandSpec(argv=["ssh", "h"]))

        process.terminate.assert_called_once()
        process.kill.assert_not_called()
