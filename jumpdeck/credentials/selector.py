"""Selection of the active credential backend.

Resolution order, evaluated on first use and cached on the selector:

1. Forced backend (constructor argument, else ``JUMPDECK_CREDENTIALS_BACKEND``)
2. ``defaultBackend`` from the config file
3. Auto-detection: 1Password CLI, then OS keyring, then encrypted file

A named backend (forced or configured) must be available; there is no
fallback for it. Only ``auto`` walks the fallback chain, and the encrypted
file backend at its end is always available.
"""

import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path

import structlog

from jumpdeck.config.settings import JumpdeckSettings, default_config_dir
from jumpdeck.enums import BackendType

from .backend import CredentialBackend
from .encrypted_backend import PASSWORDS_FILE_NAME, EncryptedFileBackend
from .exceptions import BackendNotAvailableError
from .keyring_backend import KeyringBackend
from .onepassword_backend import OnePasswordBackend

log = structlog.get_logger(__name__)

AUTO_ORDER = (BackendType.ONEPASSWORD, BackendType.KEYRING, BackendType.FILE)

SUGGESTIONS = {
    BackendType.ONEPASSWORD: "Install the 1Password CLI and sign in with: op signin",
    BackendType.KEYRING: "No usable OS keyring; try: export JUMPDECK_CREDENTIALS_BACKEND=file",
    BackendType.FILE: None,
}

BackendFactory = Callable[[], CredentialBackend]


def default_factories(config_dir: Path | None = None) -> dict[BackendType, BackendFactory]:
    """Factories for the built-in backends."""
    passwords_file = (config_dir or default_config_dir()) / PASSWORDS_FILE_NAME
    return {
        BackendType.ONEPASSWORD: OnePasswordBackend,
        BackendType.KEYRING: KeyringBackend,
        BackendType.FILE: lambda: EncryptedFileBackend(passwords_file),
    }


@dataclass(frozen=True)
class BackendSelection:
    """Where the active backend came from.

    Attributes:
        source: "forced", "config" or "auto"
        requested: Backend type that was asked for
        backend: Name of the resolved backend
    """

    source: str
    requested: BackendType
    backend: str


class CredentialBackendSelector:
    """Resolves and caches the active credential backend.

    One selector is constructed per process and handed to whatever needs
    passwords. Cache reads and resets are serialized with a lock so the
    selector can be shared by threads of a host application.

    Example:
        >>> selector = CredentialBackendSelector(config_default=config.default_backend)
        >>> password = selector.get_password("web")
    """

    def __init__(
        self,
        forced: str | BackendType | None = None,
        config_default: str | BackendType | None = None,
        factories: Mapping[BackendType, BackendFactory] | None = None,
        settings: JumpdeckSettings | None = None,
    ) -> None:
        """Initialize selector.

        Args:
            forced: Backend that must be used. When None, the
                ``JUMPDECK_CREDENTIALS_BACKEND`` environment variable is used.
            config_default: ``defaultBackend`` value from the config file
            factories: Backend constructors by type (tests inject fakes here)
            settings: Environment settings (read from the environment if None)
        """
        if forced is None:
            forced = (settings or JumpdeckSettings()).credentials_backend or None
        self._forced = forced
        self._config_default = config_default or None
        self._factories = dict(factories) if factories is not None else default_factories()
        self._lock = threading.Lock()
        self._backend: CredentialBackend | None = None
        self._selection: BackendSelection | None = None

    def force(self, backend_type: str | BackendType | None) -> None:
        """Replace the forced backend and drop the cached instance."""
        with self._lock:
            self._forced = backend_type or None
            self._clear()

    def set_default(self, backend_type: str | BackendType | None) -> None:
        """Replace the configured default backend and drop the cached instance."""
        with self._lock:
            self._config_default = backend_type or None
            self._clear()

    def reset(self) -> None:
        """Drop the cached backend so the next access re-resolves."""
        with self._lock:
            self._clear()

    def _clear(self) -> None:
        self._backend = None
        self._selection = None

    @property
    def selection(self) -> BackendSelection | None:
        """How the cached backend was chosen, or None before first use."""
        return self._selection

    def get_active_backend(self) -> CredentialBackend:
        """Return the active backend, resolving it on first use.

        Raises:
            BackendNotAvailableError: If a forced or configured backend is
                unknown or unusable
        """
        with self._lock:
            if self._backend is None:
                self._backend, self._selection = self._resolve()
                log.debug(
                    "backend_selected",
                    backend=self._selection.backend,
                    source=self._selection.source,
                    requested=str(self._selection.requested),
                )
            return self._backend

    def _resolve(self) -> tuple[CredentialBackend, BackendSelection]:
        if self._forced:
            source, requested = "forced", self._parse(self._forced)
        elif self._config_default:
            source, requested = "config", self._parse(self._config_default)
        else:
            source, requested = "auto", BackendType.AUTO

        if requested is BackendType.AUTO:
            backend = self._auto_detect()
        else:
            backend = self._require(requested, source)
        return backend, BackendSelection(source=source, requested=requested, backend=backend.name)

    @staticmethod
    def _parse(value: str | BackendType) -> BackendType:
        if isinstance(value, BackendType):
            return value
        try:
            return BackendType.parse(value)
        except ValueError as e:
            valid = ", ".join(b.value for b in BackendType)
            raise BackendNotAvailableError(
                f"Unknown credential backend: {value}",
                suggestion=f"Use one of: {valid}",
            ) from e

    def _require(self, backend_type: BackendType, source: str) -> CredentialBackend:
        backend = self._factories[backend_type]()
        if not backend.available:
            raise BackendNotAvailableError(
                f"Credential backend '{backend_type}' ({source}) is not available",
                suggestion=SUGGESTIONS.get(backend_type),
            )
        return backend

    def _auto_detect(self) -> CredentialBackend:
        for backend_type in AUTO_ORDER:
            backend = self._factories[backend_type]()
            if backend.available:
                return backend
            log.debug("backend_unavailable", backend=str(backend_type))
        raise BackendNotAvailableError("No credential backend is available")

    def get_password(self, profile_name: str) -> str:
        """Password stored for ``profile_name`` in the active backend ("" if none)."""
        return self.get_active_backend().get_password(profile_name)

    def set_password(self, profile_name: str, password: str) -> None:
        self.get_active_backend().set_password(profile_name, password)

    def delete_password(self, profile_name: str) -> bool:
        return self.get_active_backend().delete_password(profile_name)

    @property
    def forced(self) -> str | BackendType | None:
        return self._forced

    @property
    def config_default(self) -> str | BackendType | None:
        return self._config_default

    def backend_status(self) -> dict[BackendType, bool]:
        """Availability of every built-in backend, in auto-detection order.

        Constructs fresh instances; the cached active backend is untouched.
        """
        return {backend_type: self._factories[backend_type]().available for backend_type in AUTO_ORDER}

    def signed_out_backends(self) -> set[BackendType]:
        """Backends whose client is installed but has no signed-in session."""
        return {
            backend_type
            for backend_type in AUTO_ORDER
            if getattr(self._factories[backend_type](), "signed_out", False)
        }
