"""Connection dispatch: profile + secret -> connector command -> attached process."""

from .dispatcher import ConnectionAttempt, ConnectionDispatcher, fetch_password

__all__ = ["ConnectionAttempt", "ConnectionDispatcher", "fetch_password"]
