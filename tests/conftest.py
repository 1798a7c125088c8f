"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest
import structlog

from jumpdeck.config.settings import Config
from jumpdeck.enums import BackendType
from jumpdeck.profiles.models import Profile


class FakeBackend:
    """In-memory credential backend for tests."""

    def __init__(self, name: str = "fake", available: bool = True) -> None:
        self._name = name
        self._available = available
        self.passwords: dict[str, str] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def available(self) -> bool:
        return self._available

    def get_password(self, profile_name: str) -> str:
        if not profile_name:
            raise ValueError("profile name required")
        return self.passwords.get(profile_name, "")

    def set_password(self, profile_name: str, password: str) -> None:
        self.passwords[profile_name] = password

    def delete_password(self, profile_name: str) -> bool:
        return self.passwords.pop(profile_name, None) is not None


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep tests away from the real config directory and env overrides."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.delenv("JUMPDECK_CREDENTIALS_BACKEND", raising=False)
    monkeypatch.delenv("JUMPDECK_CONFIG", raising=False)
    monkeypatch.delenv("JUMPDECK_LOG_LEVEL", raising=False)


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo logging configuration done by CLI invocations."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    """Config file location inside a temp directory."""
    return tmp_path / "jumpdeck" / "config.yaml"


@pytest.fixture
def ssh_profile() -> Profile:
    """Plain SSH profile."""
    return Profile(name="web", protocol="ssh", host="web.example.com", port=22, username="deploy")


@pytest.fixture
def sample_config() -> Config:
    """Config with a small inheritance chain."""
    return Config(
        profiles={
            "base": Profile(
                name="base",
                protocol="ssh",
                host="bastion.example.com",
                port=2222,
                username="ops",
                identity_file="/home/ops/.ssh/id_ed25519",
                tags=["prod"],
            ),
            "web": Profile(name="web", extends="base", host="web.internal", group="app"),
            "db": Profile(name="db", protocol="ssh", host="db.internal", port=22, group="data"),
        }
    )


@pytest.fixture
def fake_factories():
    """Backend factories returning in-memory fakes; all available."""
    backends = {
        BackendType.ONEPASSWORD: FakeBackend("1password"),
        BackendType.KEYRING: FakeBackend("keyring"),
        BackendType.FILE: FakeBackend("file"),
    }
    return backends, {backend_type: (lambda b=backend: b) for backend_type, backend in backends.items()}


@pytest.fixture
def fake_backend_cls() -> type[FakeBackend]:
    """The in-memory backend class, for tests that build their own."""
    return FakeBackend
