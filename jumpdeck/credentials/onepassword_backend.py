"""1Password backend driving the ``op`` command-line client.

Each profile password is one 1Password item of category ``password`` titled
``jumpdeck - <profile>``. The backend only counts as available when ``op`` is
installed *and* has a signed-in account.
"""

import json
import shutil
import subprocess

import structlog

from .exceptions import BackendNotAvailableError, CredentialError

log = structlog.get_logger(__name__)

OP_BINARY = "op"
ITEM_TITLE_PREFIX = "jumpdeck - "
NOT_FOUND_MARKERS = ("isn't an item", "isn't in", "not found", "No item found")
CHECK_TIMEOUT = 10.0


class OnePasswordBackend:
    """Profile passwords stored as 1Password items.

    Example:
        >>> backend = OnePasswordBackend(vault="Infra")
        >>> if backend.available:
        ...     backend.set_password("web", "s3cret")
    """

    def __init__(self, vault: str | None = None, binary: str = OP_BINARY) -> None:
        """Initialize the backend.

        Args:
            vault: Vault to store items in (default vault if None)
            binary: Name or path of the 1Password CLI
        """
        self.vault = vault
        self.binary = binary

    @property
    def name(self) -> str:
        return "1password"

    @property
    def available(self) -> bool:
        """True when ``op`` is on PATH and at least one account is signed in."""
        if shutil.which(self.binary) is None:
            return False
        try:
            version = subprocess.run(
                [self.binary, "--version"], capture_output=True, text=True, timeout=CHECK_TIMEOUT, check=False
            )
            if version.returncode != 0:
                return False
            accounts = subprocess.run(
                [self.binary, "account", "list"], capture_output=True, text=True, timeout=CHECK_TIMEOUT, check=False
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            log.debug("onepassword_check_failed", error=str(e))
            return False
        return accounts.returncode == 0 and bool(accounts.stdout.strip())

    @property
    def signed_out(self) -> bool:
        """True when ``op`` is installed but the availability check fails."""
        return shutil.which(self.binary) is not None and not self.available

    @staticmethod
    def item_title(profile_name: str) -> str:
        return f"{ITEM_TITLE_PREFIX}{profile_name}"

    def _vault_args(self) -> list[str]:
        return ["--vault", self.vault] if self.vault else []

    def _run(self, args: list[str], profile_name: str) -> subprocess.CompletedProcess[str]:
        try:
            return subprocess.run([self.binary, *args], capture_output=True, text=True, check=False)
        except OSError as e:
            raise BackendNotAvailableError(
                f"1Password CLI could not be started: {e}",
                reference=f"1password:{profile_name}",
                suggestion="Install the 1Password CLI and run: op signin",
            ) from e

    @staticmethod
    def _is_not_found(result: subprocess.CompletedProcess[str]) -> bool:
        output = f"{result.stdout}\n{result.stderr}"
        return any(marker in output for marker in NOT_FOUND_MARKERS)

    def _item_exists(self, profile_name: str) -> bool:
        result = self._run(["item", "get", self.item_title(profile_name), *self._vault_args()], profile_name)
        return result.returncode == 0

    def get_password(self, profile_name: str) -> str:
        if not profile_name:
            raise ValueError("profile name required")

        result = self._run(
            [
                "item",
                "get",
                self.item_title(profile_name),
                "--fields",
                "label=password",
                "--reveal",
                "--format",
                "json",
                *self._vault_args(),
            ],
            profile_name,
        )
        if result.returncode != 0:
            if self._is_not_found(result):
                return ""
            raise CredentialError(
                f"1Password CLI error: {result.stderr.strip()}", reference=f"1password:{profile_name}"
            )

        try:
            value = json.loads(result.stdout).get("value", "")
        except (json.JSONDecodeError, AttributeError):
            # Older CLI versions print the bare field value
            value = result.stdout
        return str(value).strip()

    def set_password(self, profile_name: str, password: str) -> None:
        if not profile_name:
            raise ValueError("profile name required")

        if self._item_exists(profile_name):
            args = ["item", "edit", self.item_title(profile_name), *self._vault_args(), f"password={password}"]
        else:
            args = [
                "item",
                "create",
                *self._vault_args(),
                "--category",
                "password",
                "--title",
                self.item_title(profile_name),
                f"password={password}",
                f"notesPlain=Connection profile: {profile_name}\n\nManaged by jumpdeck",
            ]

        result = self._run(args, profile_name)
        if result.returncode != 0:
            raise CredentialError(
                f"1Password CLI error: {result.stderr.strip()}", reference=f"1password:{profile_name}"
            )
        log.info("password_stored", backend=self.name, profile=profile_name)

    def delete_password(self, profile_name: str) -> bool:
        if not profile_name:
            raise ValueError("profile name required")

        result = self._run(["item", "delete", self.item_title(profile_name), *self._vault_args()], profile_name)
        if result.returncode != 0:
            if self._is_not_found(result):
                return False
            raise CredentialError(
                f"1Password CLI error: {result.stderr.strip()}", reference=f"1password:{profile_name}"
            )
        log.info("password_deleted", backend=self.name, profile=profile_name)
        return True
