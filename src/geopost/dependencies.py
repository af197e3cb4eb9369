"""FastAPI dependency providers built from application state.

The lifespan in ``main.py`` attaches ``settings``, ``index``, ``store`` and
``scorer`` to ``app.state``; tests replace them with fakes.
"""

from fastapi import Request

from .config import Settings
from .lib.elasticsearch import SearchIndex
from .services.identity import CredentialService
from .services.pipeline import PostIngestionPipeline
from .services.queries import PostQueryService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_search_index(request: Request) -> SearchIndex:
    return request.app.state.index


def get_credential_service(request: Request) -> CredentialService:
    settings = get_settings(request)
    return CredentialService(
        get_search_index(request),
        signing_key=settings.jwt_signing_key,
        user_index=settings.user_index,
        token_ttl_hours=settings.token_ttl_hours,
    )


def get_pipeline(request: Request) -> PostIngestionPipeline:
    settings = get_settings(request)
    return PostIngestionPipeline(
        store=request.app.state.store,
        scorer=request.app.state.scorer,
        index=get_search_index(request),
        post_index=settings.post_index,
    )


def get_query_service(request: Request) -> PostQueryService:
    settings = get_settings(request)
    return PostQueryService(
        get_search_index(request),
        post_index=settings.post_index,
        default_range_km=settings.default_search_range_km,
    )
