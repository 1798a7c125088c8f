"""jumpdeck: console connection manager for SSH, SFTP, Telnet, Mosh and more.

Profiles describing remote targets are stored in a YAML file; connections are
delegated to the native tools (``ssh``, ``sftp``, ``mosh``, ``aws``, ...).
"""

__version__ = "0.4.0"
