"""Post retrieval by location and by numeric threshold."""

import logging

from ..lib.elasticsearch import SearchIndex
from ..lib.predicates import GeoRadius, NumericRange
from ..models import Post

logger = logging.getLogger(__name__)

# Default radius for nearby searches when the caller gives none.
DEFAULT_RANGE_KM = 200.0

# Minimum value for threshold ("cluster") searches, e.g. face confidence.
CLUSTER_THRESHOLD = 0.9


class PostQueryService:
    def __init__(
        self,
        index: SearchIndex,
        post_index: str = "post",
        default_range_km: float = DEFAULT_RANGE_KM,
    ):
        self.index = index
        self.post_index = post_index
        self.default_range_km = default_range_km

    async def search_nearby(
        self, lat: float, lon: float, range_km: float | None = None
    ) -> list[Post]:
        """Posts within *range_km* (great-circle) of ``(lat, lon)``."""
        distance = range_km if range_km is not None else self.default_range_km
        logger.debug("Nearby search at (%s, %s) within %skm", lat, lon, distance)
        predicate = GeoRadius(field="location", lat=lat, lon=lon, distance_km=distance)
        return await self.index.query(self.post_index, predicate, Post)

    async def search_threshold(self, term: str) -> list[Post]:
        """Posts whose numeric field *term* is at least ``CLUSTER_THRESHOLD``."""
        predicate = NumericRange(field=term, operator="gte", threshold=CLUSTER_THRESHOLD)
        return await self.index.query(self.post_index, predicate, Post)
