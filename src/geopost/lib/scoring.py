"""Face-detection scoring through Google Cloud Vision."""

import asyncio
import logging

from google.cloud import vision

logger = logging.getLogger(__name__)


class ScoringUnavailable(Exception):
    """The scoring service could not be reached or reported an error."""


class MediaScorer:
    """Scores a stored image by the confidence of its most prominent face.

    ``client`` is a ``google.cloud.vision.ImageAnnotatorClient``.  The image is
    referenced by its storage address; bytes are never uploaded.
    """

    def __init__(self, client, timeout: float = 10.0):
        self.client = client
        self.timeout = timeout

    async def score(self, address: str) -> float:
        """Return a confidence in [0, 1]; ``0.0`` when no face is detected."""
        return await asyncio.to_thread(self._score, address)

    def _score(self, address: str) -> float:
        image = vision.Image(source=vision.ImageSource(image_uri=address))
        try:
            response = self.client.face_detection(
                image=image, max_results=1, timeout=self.timeout
            )
        except Exception as exc:
            raise ScoringUnavailable(f"Face detection request failed for {address}") from exc

        if response.error.message:
            raise ScoringUnavailable(
                f"Face detection failed for {address}: {response.error.message}"
            )

        faces = response.face_annotations
        if not faces:
            logger.info("No faces found in %s", address)
            return 0.0
        return float(faces[0].detection_confidence)
