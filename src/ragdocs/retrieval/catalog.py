"""Source catalog: the distinct documents currently indexed."""

from __future__ import annotations

import logging

from ragdocs.errors import SchemaValidationError
from ragdocs.retrieval.base import VectorStoreBase
from ragdocs.retrieval.models import decode_payload

logger = logging.getLogger(__name__)

NO_SOURCES = "No documentation sources found."


class SourceCatalog:
    """Lists ``"title (url)"`` entries by scanning every stored payload."""

    def __init__(self, store: VectorStoreBase) -> None:
        self._store = store

    def list_sources(self, collection: str) -> list[str]:
        """Return one entry per distinct title+URL pair.

        Payloads that are not valid document chunks are skipped.
        """
        sources: dict[str, None] = {}
        skipped = 0
        for raw in self._store.scroll(collection):
            try:
                chunk = decode_payload(raw)
            except SchemaValidationError as exc:
                skipped += 1
                logger.debug("Skipping payload: %s", exc)
                continue
            sources.setdefault(f"{chunk.title} ({chunk.url})", None)

        if skipped:
            logger.warning("Skipped %d invalid payload(s) while listing sources", skipped)
        return list(sources)


def format_sources(sources: list[str]) -> str:
    return "\n".join(sources) if sources else NO_SOURCES
