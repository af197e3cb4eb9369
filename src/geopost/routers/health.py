from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..dependencies import get_search_index
from ..lib.elasticsearch import SearchIndex

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str


class ReadinessResponse(BaseModel):
    status: str
    index: str


@router.get("/health", response_model=HealthResponse, status_code=200)
async def healthcheck():
    return {"status": "ok"}


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness(index: Annotated[SearchIndex, Depends(get_search_index)]):
    """Report whether the search index answers; 503 when it does not."""
    if await index.ping():
        return {"status": "ok", "index": "up"}
    return JSONResponse(status_code=503, content={"status": "unavailable", "index": "down"})
