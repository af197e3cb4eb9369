"""Search index access on top of ``AsyncElasticsearch``.

``SearchIndex`` stores documents under caller-chosen ids and evaluates
single-predicate queries, validating each hit against a declared pydantic
model.  Every transport or API failure surfaces as ``IndexUnavailable``.
"""

import logging
from typing import TypeVar

from elastic_transport import ObjectApiResponse
from elasticsearch import ConflictError
from pydantic import BaseModel, ValidationError

from ..errors import IndexUnavailable
from .predicates import Predicate

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

DEFAULT_SEARCH_SIZE = 100


def unwrap_es_response(resp) -> dict:
    """Unwrap an Elasticsearch response, handling both ObjectApiResponse and dict.

    Raises ``IndexUnavailable`` if the response type is unexpected.
    """
    if isinstance(resp, ObjectApiResponse):
        return resp.body
    elif isinstance(resp, dict):
        return resp
    else:
        logger.error("Unexpected Elasticsearch response type: %s", type(resp))
        raise IndexUnavailable("Invalid Elasticsearch response")


class SearchIndex:
    """Document store and query front-end for an Elasticsearch cluster.

    ``es`` is an ``AsyncElasticsearch`` client (or a fake exposing the same
    async ``index`` / ``create`` / ``search`` / ``count`` / ``indices`` methods).
    """

    def __init__(self, es, default_size: int = DEFAULT_SEARCH_SIZE):
        self.es = es
        self.default_size = default_size

    async def ping(self) -> bool:
        """True when the cluster answers; connection errors count as down."""
        try:
            return bool(await self.es.ping())
        except Exception:
            logger.warning("Elasticsearch ping failed", exc_info=True)
            return False

    async def ensure_index(self, index: str, mappings: dict) -> None:
        """Create *index* with *mappings* unless it already exists."""
        try:
            if await self.es.indices.exists(index=index):
                return
            await self.es.indices.create(index=index, mappings=mappings)
        except Exception as exc:
            logger.exception("Failed to ensure index", extra={"index": index})
            raise IndexUnavailable(f"Could not prepare index '{index}'") from exc
        logger.info("Created index %s", index)

    async def upsert(self, index: str, doc_id: str, document: BaseModel) -> None:
        """Write *document* under *doc_id*, replacing any existing document."""
        body = document.model_dump(mode="json", by_alias=True)
        try:
            await self.es.index(index=index, id=doc_id, document=body)
        except Exception as exc:
            logger.exception(
                "Elasticsearch index request failed",
                extra={"index": index, "doc_id": doc_id},
            )
            raise IndexUnavailable(f"Failed to write document to '{index}'") from exc
        logger.info("Saved document %s to index %s", doc_id, index)

    async def create(self, index: str, doc_id: str, document: BaseModel) -> bool:
        """Write *document* under *doc_id* only if that id is free.

        Returns ``False`` when a document with *doc_id* already exists.
        """
        body = document.model_dump(mode="json", by_alias=True)
        try:
            await self.es.create(index=index, id=doc_id, document=body)
        except ConflictError:
            logger.info("Document %s already exists in index %s", doc_id, index)
            return False
        except Exception as exc:
            logger.exception(
                "Elasticsearch create request failed",
                extra={"index": index, "doc_id": doc_id},
            )
            raise IndexUnavailable(f"Failed to create document in '{index}'") from exc
        logger.info("Created document %s in index %s", doc_id, index)
        return True

    async def query(
        self,
        index: str,
        predicate: Predicate,
        model: type[ModelT],
        size: int | None = None,
    ) -> list[ModelT]:
        """Return the hits matching *predicate*, validated into *model*.

        Hits whose ``_source`` does not fit *model* are skipped.
        """
        query = predicate.to_query()
        try:
            resp = await self.es.search(
                index=index, query=query, size=size or self.default_size
            )
        except Exception as exc:
            logger.exception(
                "Elasticsearch search failed",
                extra={"index": index, "query": query},
            )
            raise IndexUnavailable(f"Failed to query '{index}'") from exc

        data = unwrap_es_response(resp)
        results: list[ModelT] = []
        for hit in data.get("hits", {}).get("hits", []):
            src = hit.get("_source") or {}
            try:
                results.append(model.model_validate(src))
            except ValidationError:
                logger.warning(
                    "Skipping document %s in %s: does not match %s",
                    hit.get("_id"),
                    index,
                    model.__name__,
                )
        return results

    async def count(self, index: str, predicate: Predicate) -> int:
        """Return the number of documents matching *predicate*."""
        query = predicate.to_query()
        try:
            resp = await self.es.count(index=index, query=query)
        except Exception as exc:
            logger.exception(
                "Elasticsearch count failed",
                extra={"index": index, "query": query},
            )
            raise IndexUnavailable(f"Failed to count documents in '{index}'") from exc
        return int(unwrap_es_response(resp).get("count", 0))
