"""FastAPI dependency functions.

Every request resolves its services from the container attached to the
application in :func:`pap.main.create_app`.
"""

from fastapi import Request

from pap.config import Settings
from pap.container import AppContainer
from pap.services.analysis_service import AnalysisService
from pap.services.enrichment_service import EnrichmentService
from pap.services.sync_coordinator import SyncCoordinator


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


def get_settings(request: Request) -> Settings:
    return get_container(request).settings()


def get_sync_coordinator(request: Request) -> SyncCoordinator:
    return get_container(request).sync_coordinator()


def get_analysis_service(request: Request) -> AnalysisService:
    return get_container(request).analysis_service()


def get_enrichment_service(request: Request) -> EnrichmentService:
    return get_container(request).enrichment_service()
