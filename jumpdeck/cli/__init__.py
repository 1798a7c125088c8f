"""CLI commands for jumpdeck.

The entry point ``jumpdeck`` lives in :mod:`jumpdeck.main`; every command
receives its dependencies through ``ctx.obj``:

    config_path  Path of the YAML config file
    config       Loaded :class:`~jumpdeck.config.settings.Config`
    selector     :class:`~jumpdeck.credentials.selector.CredentialBackendSelector`
    registry     :class:`~jumpdeck.connectors.registry.ConnectorRegistry`
    runner       Callable running a CommandSpec attached to the terminal

Module Structure:
    - profiles.py: add, edit, clone, favorite, remove, list, show
    - connect.py: connect, run, test, scp, rsync
    - portability.py: export, import, import-ssh
    - history.py: history
    - credentials.py: password set/delete, backends, set-backend
    - output.py: error reporting and exit codes
"""

from jumpdeck.cli.connect import connect_command, rsync_command, run_command, scp_command, tcp_test_command
from jumpdeck.cli.credentials import backends_command, password_group, set_backend_command
from jumpdeck.cli.history import history_command
from jumpdeck.cli.portability import export_command, import_command, import_ssh_command
from jumpdeck.cli.profiles import (
    add_command,
    clone_command,
    edit_command,
    favorite_command,
    list_command,
    remove_command,
    show_command,
)

__all__ = [
    "add_command",
    "backends_command",
    "clone_command",
    "connect_command",
    "edit_command",
    "export_command",
    "favorite_command",
    "history_command",
    "import_command",
    "import_ssh_command",
    "list_command",
    "password_group",
    "remove_command",
    "rsync_command",
    "run_command",
    "scp_command",
    "set_backend_command",
    "show_command",
    "tcp_test_command",
]
