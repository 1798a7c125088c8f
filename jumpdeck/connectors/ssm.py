"""AWS Systems Manager Session Manager connector."""

from jumpdeck.enums import Protocol
from jumpdeck.profiles.models import Profile

from .base import CommandSpec, Connector


class SSMConnector(Connector):
    """Runs ``aws ssm start-session`` against ``instance_id``.

    The AWS named profile is passed through ``AWS_PROFILE``.
    """

    protocol = Protocol.SSM

    def execute(self, profile: Profile, secret: str = "") -> CommandSpec:
        args = ["aws", "ssm", "start-session", "--target", profile.instance_id]
        if profile.aws_region:
            args += ["--region", profile.aws_region]
        args += profile.extra_args

        env = {"AWS_PROFILE": profile.aws_profile} if profile.aws_profile else {}
        return CommandSpec(argv=args, env=env, notices=self.unused_secret_notices(secret))
