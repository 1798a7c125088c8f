"""Google Cloud ``gcloud compute ssh`` connector."""

from jumpdeck.enums import Protocol
from jumpdeck.profiles.models import Profile

from .base import CommandSpec, Connector


class GCloudConnector(Connector):
    """Runs ``gcloud compute ssh``; ``host`` holds the instance name."""

    protocol = Protocol.GCLOUD

    def execute(self, profile: Profile, secret: str = "") -> CommandSpec:
        args = ["gcloud", "compute", "ssh", profile.target]
        if profile.gcp_project:
            args += ["--project", profile.gcp_project]
        if profile.gcp_zone:
            args += ["--zone", profile.gcp_zone]
        if profile.gcp_use_tunnel:
            args.append("--tunnel-through-iap")
        args += profile.extra_args
        if profile.remote_command:
            args += ["--command", profile.remote_command]
        return CommandSpec(argv=args, notices=self.unused_secret_notices(secret))
