"""Connectors: translate an effective profile plus secret into a subprocess command.

Key Components:
    - Connector / CommandSpec: the connector interface and its output
    - ConnectorRegistry / create_default_registry: protocol -> connector lookup
    - shell_quote / build_remote_command: quoting for composite shell strings
    - build_scp_command / build_rsync_command: file transfer commands
"""

from .base import CommandSpec, Connector
from .gcloud import GCloudConnector
from .mosh import MoshConnector
from .quoting import build_remote_command, shell_quote
from .registry import ConnectorRegistry, create_default_registry
from .sftp import SFTPConnector
from .ssh import SSHConnector
from .ssm import SSMConnector
from .telnet import TelnetConnector
from .transfer import (
    TransferPath,
    build_rsync_command,
    build_scp_command,
    parse_transfer_path,
    split_transfer,
)

__all__ = [
    "CommandSpec",
    "Connector",
    "ConnectorRegistry",
    "GCloudConnector",
    "MoshConnector",
    "SFTPConnector",
    "SSHConnector",
    "SSMConnector",
    "TelnetConnector",
    "TransferPath",
    "build_remote_command",
    "build_rsync_command",
    "build_scp_command",
    "create_default_registry",
    "parse_transfer_path",
    "shell_quote",
    "split_transfer",
]
