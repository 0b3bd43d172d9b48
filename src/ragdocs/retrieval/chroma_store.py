"""Chroma implementation of the vector-store abstraction.

Chroma has no native notion of a declared vector size, so the size and
distance metric are recorded in the collection metadata when the
collection is created (``vector_size`` and ``hnsw:space``).
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

import chromadb

from ragdocs.config import settings
from ragdocs.errors import CollectionError, StoreConnectionError
from ragdocs.retrieval.base import VectorStoreBase
from ragdocs.retrieval.models import IndexedPoint

logger = logging.getLogger(__name__)

VECTOR_SIZE_KEY = "vector_size"
DISTANCE_KEY = "hnsw:space"


class ChromaVectorStore(VectorStoreBase):
    """Chroma-backed vector store.

    Parameters
    ----------
    host:
        Chroma server hostname.
    port:
        Chroma server port.
    scroll_batch_size:
        Number of points fetched per page while scrolling.
    client:
        Pre-built client (tests); when *None* an ``HttpClient`` is created
        on first use.
    """

    def __init__(
        self,
        *,
        host: str = settings.chroma_host,
        port: int = settings.chroma_port,
        scroll_batch_size: int = settings.scroll_batch_size,
        client: Any = None,
    ) -> None:
        self._host = host
        self._port = port
        self._scroll_batch_size = scroll_batch_size
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            try:
                self._client = chromadb.HttpClient(host=self._host, port=self._port)
            except Exception as exc:
                raise StoreConnectionError(
                    f"Failed to connect to Chroma at {self._host}:{self._port}: {exc}"
                ) from exc
        return self._client

    def _collection(self, name: str) -> Any:
        try:
            return self.client.get_collection(name, embedding_function=None)
        except Exception as exc:
            raise CollectionError(f"Collection {name!r} is not available: {exc}") from exc

    # -- connectivity / collections -------------------------------------------

    def ping(self) -> None:
        try:
            self.client.heartbeat()
        except StoreConnectionError:
            raise
        except Exception as exc:
            logger.warning("Chroma health-check failed", exc_info=True)
            raise StoreConnectionError(
                f"Failed to connect to Chroma at {self._host}:{self._port}: {exc}"
            ) from exc

    def list_collections(self) -> list[str]:
        try:
            collections = self.client.list_collections()
        except Exception as exc:
            raise StoreConnectionError(f"Failed to list Chroma collections: {exc}") from exc
        # chromadb>=0.6 returns names, older releases return Collection objects
        return [c if isinstance(c, str) else c.name for c in collections]

    def create_collection(self, name: str, vector_size: int, distance: str = "cosine") -> None:
        try:
            self.client.create_collection(
                name,
                metadata={VECTOR_SIZE_KEY: vector_size, DISTANCE_KEY: distance},
                embedding_function=None,
            )
        except Exception as exc:
            raise CollectionError(f"Failed to create collection {name!r}: {exc}") from exc

    def delete_collection(self, name: str) -> None:
        try:
            self.client.delete_collection(name)
        except Exception as exc:
            raise CollectionError(f"Failed to delete collection {name!r}: {exc}") from exc

    def get_vector_size(self, name: str) -> int | None:
        metadata = self._collection(name).metadata or {}
        size = metadata.get(VECTOR_SIZE_KEY)
        if isinstance(size, int) and not isinstance(size, bool) and size > 0:
            return size
        return None

    # -- points ---------------------------------------------------------------

    def upsert(self, collection: str, point: IndexedPoint) -> None:
        # HttpClient calls are synchronous; returning means the write landed.
        try:
            self._collection(collection).upsert(
                ids=[point.id],
                embeddings=[point.vector],
                metadatas=[point.payload],
            )
        except CollectionError:
            raise
        except Exception as exc:
            raise CollectionError(f"Failed to upsert point {point.id}: {exc}") from exc

    def search(self, collection: str, vector: list[float], *, limit: int = 5) -> list[dict[str, Any]]:
        try:
            results = self._collection(collection).query(
                query_embeddings=[vector],
                n_results=limit,
                include=["metadatas", "distances"],
            )
        except CollectionError:
            raise
        except Exception as exc:
            raise CollectionError(f"Search against {collection!r} failed: {exc}") from exc

        ids = (results.get("ids") or [[]])[0]
        metas = (results.get("metadatas") or [[]])[0]
        distances = (results.get("distances") or [[]])[0]

        hits: list[dict[str, Any]] = []
        for point_id, meta, dist in zip(ids, metas, distances):
            # cosine distance -> cosine similarity
            hits.append({"id": point_id, "score": 1.0 - dist, "payload": meta})
        hits.sort(key=lambda h: h["score"], reverse=True)
        return hits

    def scroll(self, collection: str) -> Iterator[dict[str, Any]]:
        handle = self._collection(collection)
        offset = 0
        while True:
            try:
                page = handle.get(include=["metadatas"], limit=self._scroll_batch_size, offset=offset)
            except Exception as exc:
                raise CollectionError(f"Scroll over {collection!r} failed: {exc}") from exc
            metas = page.get("metadatas") or []
            yield from metas
            if len(metas) < self._scroll_batch_size:
                return
            offset += len(metas)
