"""Root pytest configuration for charthost tests."""
import pytest

from charthost.session import RegistrySession
from charthost.settings import default_settings
from charthost.storage.http import ChartHTTP
from .storage.fakes import FakeChartRepo, FakeOrasChartRegistry


# Keep the user's helm configuration out of every test
@pytest.fixture(autouse=True)
def test_env(monkeypatch, tmp_path):
    """Automatically point helm locations at a temporary directory."""
    monkeypatch.setenv("HELM_REPOSITORY_CONFIG", str(tmp_path / "helm" / "repositories.yaml"))
    monkeypatch.setenv("HELM_REPOSITORY_CACHE", str(tmp_path / "helm" / "cache"))
    monkeypatch.setenv("HELM_REGISTRY_CONFIG", str(tmp_path / "helm" / "registry" / "config.json"))
    for var in ("CHARTHOST_HTTP_TIMEOUT", "CHARTHOST_HTTP_RETRY", "CHARTHOST_REGISTRY_INSECURE",
                "CONFIG_PATH", "CHARTHOST_CONFIG_PATH", "OUTPUT_PATH", "OUTPUT_DIR"):
        monkeypatch.delenv(var, raising=False)


# Standardized test fixtures
@pytest.fixture
def settings(tmp_path):
    """Standard test settings rooted in the test's temporary directory."""
    return default_settings(tmp_path / "state")


@pytest.fixture
def chart_repo():
    """Fake legacy chart repository served over httpx.MockTransport."""
    return FakeChartRepo()


@pytest.fixture
def http(settings, chart_repo):
    """HTTP client wired to the fake chart repository."""
    client = ChartHTTP(settings, transport=chart_repo.transport())
    yield client
    client.close()


@pytest.fixture
def fake_registry():
    """Standard fake OCI registry for testing."""
    return FakeOrasChartRegistry()


@pytest.fixture
def session(fake_registry):
    """Registry session backed by the fake OCI registry."""
    return RegistrySession(fake_registry)


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / "charts"
