import pytest
from pathlib import Path
from typer.testing import CliRunner

from localhub_cache.core.registry import build_cache_registry
from localhub_cache.infrastructure.config.settings import CacheSettings, clear_test_config, set_config_for_testing
from localhub_cache.infrastructure.storage.memory_medium import MemoryMedium

class FakeClock:
    """Manually advanced Unix clock."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

@pytest.fixture
def clock():
    return FakeClock()

@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()

@pytest.fixture
def settings(tmp_path: Path):
    return CacheSettings(
        max_cache_size=3,
        persistent_dir=tmp_path / "persistent",
        auto_cleanup=False,
    )

@pytest.fixture
def registry(settings, clock):
    """Registry wired to in-memory media and the fake clock."""
    reg = build_cache_registry(
        settings,
        session_medium=MemoryMedium(),
        persistent_medium=MemoryMedium(),
        clock=clock,
    )
    yield reg
    reg.close()

@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path):
    """Points the CLI at a temporary persistent directory and keeps test overrides local."""
    set_config_for_testing({
        'cache.persistent_dir': str(tmp_path / "cli_persistent"),
        'cache.auto_cleanup': False,
    })
    yield
    clear_test_config()
