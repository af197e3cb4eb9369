import logging
from contextlib import asynccontextmanager

from elasticsearch import AsyncElasticsearch
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from google.cloud import storage, vision

from .config import load_settings
from .errors import GeoPostError, IndexUnavailable, InputInvalid
from .lib.elasticsearch import SearchIndex
from .lib.scoring import MediaScorer
from .lib.storage import ObjectStore
from .models import POST_MAPPINGS, USER_MAPPINGS
from .routers import auth, health, posts

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the application-scoped clients and attach them to ``app.state``."""
    settings = load_settings()
    logging.getLogger("geopost").setLevel(settings.log_level.upper())

    es = AsyncElasticsearch(
        settings.es_url,
        api_key=settings.es_api_key,
        request_timeout=settings.external_timeout,
    )
    index = SearchIndex(es, default_size=settings.search_size)
    try:
        await index.ensure_index(settings.post_index, POST_MAPPINGS)
        await index.ensure_index(settings.user_index, USER_MAPPINGS)
    except IndexUnavailable:
        logger.warning("Starting without verified index mappings")

    storage_client = storage.Client()
    vision_client = vision.ImageAnnotatorClient()

    app.state.settings = settings
    app.state.es = es
    app.state.index = index
    app.state.store = ObjectStore(
        storage_client, settings.bucket_name, timeout=settings.external_timeout
    )
    app.state.scorer = MediaScorer(vision_client, timeout=settings.external_timeout)
    logger.info("Started GeoPost API against %s", settings.es_url)
    try:
        yield
    finally:
        await es.close()
        storage_client.close()
        vision_client.transport.close()


app = FastAPI(
    title="GeoPost API",
    description="An API server for geo-tagged photo and video posts",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(posts.router)


@app.exception_handler(GeoPostError)
async def geopost_error_handler(request: Request, exc: GeoPostError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.kind, "detail": exc.message},
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=InputInvalid.status_code,
        content={"error": InputInvalid.kind, "detail": jsonable_encoder(exc.errors())},
    )
