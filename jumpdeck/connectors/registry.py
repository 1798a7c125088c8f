"""Protocol-keyed registry of connectors.

Example:
    >>> registry = create_default_registry()
    >>> connector = registry.get("ssh")
    >>> spec = connector.execute(profile, secret)
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from jumpdeck.enums import Protocol
from jumpdeck.exceptions import ConnectorNotFoundError

from .gcloud import GCloudConnector
from .mosh import MoshConnector
from .sftp import SFTPConnector
from .ssh import SSHConnector
from .ssm import SSMConnector
from .telnet import TelnetConnector

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .base import Connector


class ConnectorRegistry:
    """Mutable registry mapping protocols to connectors.

    Registration normally happens once, in :func:`create_default_registry`;
    lookups are safe from several threads.
    """

    def __init__(self) -> None:
        self._connectors: dict[Protocol, Connector] = {}
        self._lock = threading.RLock()

    def register(self, protocol: Protocol | str, connector: Connector) -> None:
        """Register ``connector`` for ``protocol``, replacing any previous one."""
        with self._lock:
            self._connectors[Protocol(protocol)] = connector

    def get(self, protocol: Protocol | str) -> Connector:
        """Connector for ``protocol``.

        Raises:
            ConnectorNotFoundError: If the protocol is unknown or unregistered
        """
        try:
            key = Protocol(protocol)
        except ValueError:
            raise ConnectorNotFoundError(str(protocol)) from None
        with self._lock:
            connector = self._connectors.get(key)
        if connector is None:
            raise ConnectorNotFoundError(key.value)
        return connector

    def protocols(self) -> list[Protocol]:
        with self._lock:
            return list(self._connectors)

    def __iter__(self) -> Iterator[Protocol]:
        return iter(self.protocols())

    def __len__(self) -> int:
        return len(self._connectors)


def create_default_registry() -> ConnectorRegistry:
    """Registry holding one connector per supported protocol."""
    registry = ConnectorRegistry()
    for connector in (
        SSHConnector(),
        SFTPConnector(),
        TelnetConnector(),
        MoshConnector(),
        SSMConnector(),
        GCloudConnector(),
    ):
        registry.register(connector.protocol, connector)
    return registry
