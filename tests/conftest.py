"""Shared test fixtures.

Every test gets a fresh in-memory SQLite cache, a fake remote store and a
fake Claude client, so nothing leaves the process.
"""

from contextlib import ExitStack

import pytest
import pytest_asyncio
from dependency_injector import providers
from fastapi.testclient import TestClient

from pap.config import Settings
from pap.container import AppContainer
from pap.database import build_engine, build_session_factory, init_schema
from pap.main import create_app
from pap.prompts.manager import PromptManager
from pap.services.analysis_service import AnalysisService
from pap.services.enrichment_service import EnrichmentService
from pap.services.sync_coordinator import SyncCoordinator
from pap.stores.local_cache import LocalCacheStore
from tests.fixtures import load_fixture
from tests.fixtures.fakes import FakeLLMClient, FakeRemoteStore


@pytest.fixture()
def cache_engine():
    engine = build_engine("sqlite:///:memory:")
    init_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(cache_engine):
    return build_session_factory(cache_engine)


@pytest.fixture()
def local_cache(session_factory) -> LocalCacheStore:
    return LocalCacheStore(session_factory)


@pytest.fixture()
def remote_data() -> dict:
    return {
        "claims": load_fixture("remote_claims.json"),
        "claimants": load_fixture("remote_claimants.json"),
    }


@pytest.fixture()
def offline_remote() -> FakeRemoteStore:
    return FakeRemoteStore(reachable=False)


@pytest.fixture()
def online_remote(remote_data) -> FakeRemoteStore:
    return FakeRemoteStore(data=remote_data)


@pytest.fixture()
def empty_remote() -> FakeRemoteStore:
    return FakeRemoteStore()


@pytest.fixture()
def fake_llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture()
def analysis_service(fake_llm) -> AnalysisService:
    return AnalysisService(llm_client=fake_llm, prompt_manager=PromptManager(), ai_timeout=0.5)


# ── Started coordinators ─────────────────────────────────────────────────

async def _started(local_cache, remote) -> SyncCoordinator:
    coordinator = SyncCoordinator(local_cache, remote, remote_fetch_timeout=0.5)
    await coordinator.start()
    return coordinator


@pytest_asyncio.fixture()
async def demo_coordinator(local_cache, offline_remote):
    """Nothing cached, remote unreachable: seed data in demo mode."""
    coordinator = await _started(local_cache, offline_remote)
    yield coordinator
    await coordinator.dispose()


@pytest_asyncio.fixture()
async def online_coordinator(local_cache, online_remote):
    """Remote reachable and holding the fixture collections."""
    coordinator = await _started(local_cache, online_remote)
    yield coordinator
    await coordinator.dispose()


@pytest_asyncio.fixture()
async def enrichment(online_coordinator, analysis_service) -> EnrichmentService:
    return EnrichmentService(online_coordinator, analysis_service)


# ── FastAPI app over fakes ───────────────────────────────────────────────

@pytest.fixture()
def make_client(cache_engine):
    """Build a TestClient whose container uses the in-memory cache and the given fakes.

    ``started=False`` skips the lifespan, leaving both collections unloaded.
    """
    with ExitStack() as stack:

        def _make(remote, llm=None, started: bool = True) -> TestClient:
            container = AppContainer()
            container.settings.override(providers.Object(Settings(_env_file=None, json_logs=True)))
            container.cache_engine.override(providers.Object(cache_engine))
            container.remote_store.override(providers.Object(remote))
            container.llm_client.override(providers.Object(llm or FakeLLMClient()))
            stack.callback(container.reset_override)

            client = TestClient(create_app(container))
            if started:
                stack.enter_context(client)
            return client

        yield _make


@pytest.fixture()
def client(make_client, online_remote, fake_llm) -> TestClient:
    """Started app backed by the fixture collections."""
    return make_client(online_remote, fake_llm)


@pytest.fixture()
def demo_client(make_client, offline_remote, fake_llm) -> TestClient:
    """Started app with nothing cached and the remote store unreachable."""
    return make_client(offline_remote, fake_llm)
