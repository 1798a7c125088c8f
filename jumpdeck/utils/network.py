"""TCP reachability checks for profile hosts."""

import socket
import time

import structlog

log = structlog.get_logger(__name__)

DEFAULT_TIMEOUT = 10.0


def tcp_connect_time(host: str, port: int, timeout: float = DEFAULT_TIMEOUT) -> float:
    """Open and close a TCP connection to ``host:port``.

    Returns:
        Seconds taken to connect

    Raises:
        OSError: If the host cannot be resolved or reached within ``timeout``
    """
    start = time.monotonic()
    with socket.create_connection((host, port), timeout=timeout):
        elapsed = time.monotonic() - start
    log.debug("tcp_reachable", host=host, port=port, elapsed=round(elapsed, 3))
    return elapsed
