"""Ingestion orchestrator: acquire → embed → upsert, one chunk at a time.

Chunks are embedded and written strictly in order, each upsert waiting
for the store's acknowledgement before the next chunk is embedded.  A
failure on any chunk aborts the rest of the document; chunks already
written stay in the store.
"""

from __future__ import annotations

import logging
import secrets

from ragdocs.ingestion.embedder import EmbeddingProvider
from ragdocs.ingestion.loader import ContentAcquirer
from ragdocs.ingestion.models import IngestionSummary
from ragdocs.retrieval.base import VectorStoreBase
from ragdocs.retrieval.models import CollectionDescriptor, IndexedPoint, encode_payload

logger = logging.getLogger(__name__)


def generate_point_id() -> str:
    """Random 128-bit point id, hex encoded."""
    return secrets.token_hex(16)


class IngestionOrchestrator:
    """Drives one URL through the ingestion pipeline.

    Parameters
    ----------
    acquirer:
        Fetches and chunks the URL.
    store:
        Vector-store backend receiving the points.
    """

    def __init__(self, acquirer: ContentAcquirer, store: VectorStoreBase) -> None:
        self._acquirer = acquirer
        self._store = store

    def ingest(
        self,
        url: str,
        descriptor: CollectionDescriptor,
        provider: EmbeddingProvider,
    ) -> IngestionSummary:
        document = self._acquirer.acquire(url)
        total = len(document.chunks)
        logger.info("Fetched %d chunk(s) from %s", total, url)

        for i, chunk in enumerate(document.chunks, 1):
            vector = provider.embed(chunk.text)
            descriptor.check_vector(vector)
            point = IndexedPoint(id=generate_point_id(), vector=vector, payload=encode_payload(chunk))
            self._store.upsert(descriptor.name, point)
            logger.debug("Upserted chunk %d/%d of %s as %s", i, total, url, point.id)

        logger.info("Ingested %s (%d chunks)", url, total)
        if document.is_pdf:
            return IngestionSummary(
                url=url,
                chunks=total,
                is_pdf=True,
                title=document.title,
                author=document.author,
                page_count=document.page_count,
            )
        return IngestionSummary(url=url, chunks=total)
