"""Semantic retriever: embed a query, search, validate, format.

Usage::

    retriever = SemanticRetriever(store)
    hits = retriever.search(descriptor, provider, "How do I configure auth?", limit=5)
    print(format_results(hits))
"""

from __future__ import annotations

import logging

from ragdocs.ingestion.embedder import EmbeddingProvider
from ragdocs.retrieval.base import VectorStoreBase
from ragdocs.retrieval.models import CollectionDescriptor, SearchHit, decode_payload

logger = logging.getLogger(__name__)

RESULT_SEPARATOR = "\n---\n"
NO_RESULTS = "No results found."


class SemanticRetriever:
    """Nearest-neighbour search over the document collection.

    Parameters
    ----------
    store:
        A concrete vector-store backend.
    default_limit:
        Number of results when the caller passes none.
    """

    def __init__(self, store: VectorStoreBase, *, default_limit: int = 5) -> None:
        self._store = store
        self.default_limit = default_limit

    def search(
        self,
        descriptor: CollectionDescriptor,
        provider: EmbeddingProvider,
        query: str,
        *,
        limit: int | None = None,
    ) -> list[SearchHit]:
        """Embed *query* with *provider* and return decoded hits.

        Raises
        ------
        SchemaValidationError
            If *any* returned payload is not a valid document chunk; the
            whole search fails rather than silently dropping a result.
        """
        limit = limit or self.default_limit
        vector = provider.embed(query)
        descriptor.check_vector(vector)

        raw_hits = self._store.search(descriptor.name, vector, limit=limit)
        hits = [SearchHit(chunk=decode_payload(hit.get("payload")), score=hit["score"]) for hit in raw_hits]
        logger.info("Search for %r returned %d result(s)", query, len(hits))
        return hits


def format_results(hits: list[SearchHit]) -> str:
    """Render *hits* as text blocks in ranking order."""
    if not hits:
        return NO_RESULTS
    return RESULT_SEPARATOR.join(hit.render() for hit in hits)
