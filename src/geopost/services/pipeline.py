"""Post ingestion pipeline.

Turns one submission into a stored post:

1. Parse the coordinates (unparseable values become ``0.0``).
2. Require a media attachment.
3. Classify the media and generate the post id.
4. Store the media under the post id.
5. Score images for face confidence.
6. Index the post document under the same id.

Nothing is rolled back: a failure after step 4 leaves the stored media
without a document.
"""

import logging
import math
import uuid
from typing import BinaryIO

from ..errors import (
    IndexUnavailable,
    IndexWriteFailed,
    MediaRequired,
    MediaStoreFailed,
    ScoringFailed,
)
from ..lib.elasticsearch import SearchIndex
from ..lib.media import classify
from ..lib.scoring import MediaScorer, ScoringUnavailable
from ..lib.storage import ObjectStore, ObjectStoreError
from ..models import Location, MediaKind, Post

logger = logging.getLogger(__name__)


def parse_coordinate(value) -> float:
    """Parse a latitude/longitude value, falling back to ``0.0``.

    Empty, malformed and non-finite values all degrade to ``0.0`` instead of
    rejecting the submission.
    """
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return 0.0
    return parsed if math.isfinite(parsed) else 0.0


class PostIngestionPipeline:
    def __init__(
        self,
        store: ObjectStore,
        scorer: MediaScorer,
        index: SearchIndex,
        post_index: str = "post",
    ):
        self.store = store
        self.scorer = scorer
        self.index = index
        self.post_index = post_index

    async def ingest(
        self,
        author: str,
        text: str,
        lat,
        lon,
        media: BinaryIO | None = None,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> Post:
        """Store *media*, score it and index the resulting post.

        *author* is trusted as-is; it comes from an already verified token.
        """
        location = Location(lat=parse_coordinate(lat), lon=parse_coordinate(lon))

        if media is None:
            raise MediaRequired("Image is not available")

        media_kind = classify(filename)
        post_id = str(uuid.uuid4())

        try:
            media_address = await self.store.put(post_id, media, content_type=content_type)
        except ObjectStoreError as exc:
            logger.exception("Failed to save media", extra={"post_id": post_id})
            raise MediaStoreFailed("Failed to save media to object storage") from exc

        face_score = 0.0
        if media_kind is MediaKind.IMAGE:
            try:
                face_score = await self.scorer.score(self.store.internal_address(post_id))
            except ScoringUnavailable as exc:
                logger.exception("Failed to annotate image", extra={"post_id": post_id})
                raise ScoringFailed("Failed to annotate image") from exc

        post = Post(
            post_id=post_id,
            author=author,
            text=text or "",
            location=location,
            media_address=media_address,
            media_kind=media_kind,
            face_score=face_score,
        )

        try:
            await self.index.upsert(self.post_index, post_id, post)
        except IndexUnavailable as exc:
            # The media object stays in the bucket without a document.
            logger.error("Failed to save post %s; media left at %s", post_id, media_address)
            raise IndexWriteFailed("Failed to save post to the search index") from exc

        logger.info("Post %s by %s saved (%s)", post_id, author, media_kind.value)
        return post
