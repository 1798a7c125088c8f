"""Telnet connector."""

from jumpdeck.enums import Protocol
from jumpdeck.profiles.models import Profile

from .base import CommandSpec, Connector


class TelnetConnector(Connector):
    protocol = Protocol.TELNET

    def execute(self, profile: Profile, secret: str = "") -> CommandSpec:
        args = ["telnet", profile.host]
        if profile.port > 0:
            args.append(str(profile.port))
        return CommandSpec(argv=args, notices=self.unused_secret_notices(secret))
