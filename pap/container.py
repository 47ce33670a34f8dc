"""Dependency Injection Container.

Usage::

    from pap.container import AppContainer

    container = AppContainer()
    container.init_resources()  # create the cache tables

    coordinator = container.sync_coordinator()
    await coordinator.start()

Tests swap pieces with ``container.remote_store.override(providers.Object(fake))``.
"""

from dependency_injector import containers, providers

from pap.clients.llm_client import LLMClient
from pap.clients.remote_store import RemoteStoreClient
from pap.config import Settings
from pap.database import build_engine, build_session_factory, init_schema
from pap.prompts.manager import PromptManager
from pap.services.analysis_service import AnalysisService
from pap.services.enrichment_service import EnrichmentService
from pap.services.sync_coordinator import SyncCoordinator
from pap.stores.local_cache import LocalCacheStore


class AppContainer(containers.DeclarativeContainer):
    """Application Dependency Injection Container.

    Everything stateful is a Singleton: there is one coordinator per
    process and it must be the only writer of both stores.
    """

    # ══════════════════════════════════════════════════════════════════
    # CONFIGURATION
    # ══════════════════════════════════════════════════════════════════

    settings = providers.Singleton(Settings)

    # ══════════════════════════════════════════════════════════════════
    # LOCAL CACHE
    # ══════════════════════════════════════════════════════════════════

    cache_engine = providers.Singleton(
        build_engine,
        database_url=settings.provided.cache_database_url,
        echo=False,
    )

    cache_schema = providers.Resource(
        init_schema,
        engine=cache_engine,
    )

    session_factory = providers.Singleton(
        build_session_factory,
        engine=cache_engine,
    )

    local_cache = providers.Singleton(
        LocalCacheStore,
        session_factory=session_factory,
    )

    # ══════════════════════════════════════════════════════════════════
    # EXTERNAL CLIENTS
    # ══════════════════════════════════════════════════════════════════

    remote_store = providers.Singleton(
        RemoteStoreClient,
        database_url=settings.provided.firebase_database_url,
        auth_token=settings.provided.firebase_auth_token,
        namespace=settings.provided.remote_namespace,
        timeout=settings.provided.remote_request_timeout,
        retry_max_attempts=settings.provided.retry_max_attempts,
    )

    llm_client = providers.Singleton(
        LLMClient,
        api_key=settings.provided.anthropic_api_key,
        model=settings.provided.claude_model,
        retry_max_attempts=settings.provided.retry_max_attempts,
    )

    prompt_manager = providers.Singleton(PromptManager)

    # ══════════════════════════════════════════════════════════════════
    # SERVICES
    # ══════════════════════════════════════════════════════════════════

    analysis_service = providers.Singleton(
        AnalysisService,
        llm_client=llm_client,
        prompt_manager=prompt_manager,
        ai_timeout=settings.provided.ai_timeout,
        language_hint=settings.provided.language_hint,
    )

    sync_coordinator = providers.Singleton(
        SyncCoordinator,
        local_cache=local_cache,
        remote_store=remote_store,
        remote_fetch_timeout=settings.provided.remote_fetch_timeout,
    )

    enrichment_service = providers.Singleton(
        EnrichmentService,
        sync_coordinator=sync_coordinator,
        analysis_service=analysis_service,
    )
