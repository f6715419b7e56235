import pytest

from hu_persist import InMemoryMedium, FileMedium, PersistenceService
from hu_persist.config import clear_config_cache


class FakeClock:
    """Manually advanced clock (seconds)."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session_medium():
    return InMemoryMedium()


@pytest.fixture
def local_medium(tmp_path):
    return FileMedium(tmp_path / "local")


@pytest.fixture
def service(session_medium, local_medium, clock):
    return PersistenceService(
        session_medium=session_medium,
        local_medium=local_medium,
        clock=clock,
    )


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    monkeypatch.setenv("HU_PERSIST_HOME", str(tmp_path / "home"))
    monkeypatch.delenv("HU_PERSIST_CONFIG_PATH", raising=False)
    clear_config_cache()
    yield
    clear_config_cache()
