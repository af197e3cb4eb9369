"""Posts router – create posts and search them.

POST /post
    Multipart upload of a geo-tagged post with an ``image`` attachment.

GET /search
    Posts within a radius (km) of a point.

GET /cluster
    Posts whose numeric ``term`` field is at least 0.9 (e.g. ``face``).
"""

import logging
import math
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status

from ..dependencies import get_pipeline, get_query_service
from ..errors import InputInvalid
from ..models import Post
from ..security import CurrentUser
from ..services.pipeline import PostIngestionPipeline, parse_coordinate
from ..services.queries import PostQueryService

router = APIRouter(tags=["posts"])

logger = logging.getLogger(__name__)


def parse_range(value: str | None) -> float | None:
    """Parse the optional radius; an absent or empty value means the default."""
    if value is None or not value.strip():
        return None
    try:
        distance = float(value)
    except ValueError:
        raise InputInvalid(f"Invalid range: {value!r}") from None
    if not math.isfinite(distance) or distance <= 0:
        raise InputInvalid(f"Range must be a positive number of kilometres: {value!r}")
    return distance


@router.post("/post", status_code=status.HTTP_201_CREATED, response_class=Response)
async def create_post(
    user: CurrentUser,
    pipeline: Annotated[PostIngestionPipeline, Depends(get_pipeline)],
    lat: Annotated[str | None, Form()] = None,
    lon: Annotated[str | None, Form()] = None,
    message: Annotated[str, Form()] = "",
    image: Annotated[UploadFile | None, File()] = None,
) -> Response:
    """Store the attached media and index the post for the calling user."""
    logger.info("Received one post request from %s", user.username)
    await pipeline.ingest(
        user.username,
        message,
        lat,
        lon,
        media=image.file if image is not None else None,
        filename=image.filename if image is not None else None,
        content_type=image.content_type if image is not None else None,
    )
    return Response(status_code=status.HTTP_201_CREATED)


@router.get("/search", response_model=list[Post])
async def search_posts(
    user: CurrentUser,
    queries: Annotated[PostQueryService, Depends(get_query_service)],
    lat: str | None = Query(None, description="Latitude of the search centre"),
    lon: str | None = Query(None, description="Longitude of the search centre"),
    range_km: str | None = Query(
        None, alias="range", description="Search radius in kilometres; empty means default"
    ),
) -> list[Post]:
    return await queries.search_nearby(
        parse_coordinate(lat), parse_coordinate(lon), parse_range(range_km)
    )


@router.get("/cluster", response_model=list[Post])
async def cluster_posts(
    user: CurrentUser,
    queries: Annotated[PostQueryService, Depends(get_query_service)],
    term: str = Query(..., min_length=1, description="Numeric field to threshold, e.g. face"),
) -> list[Post]:
    return await queries.search_threshold(term)
