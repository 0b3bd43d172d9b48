"""Shared pytest configuration and fixtures.

All tests run without Chroma, Ollama, OpenAI or a browser: the fakes
below stand in for the vector store, the embedding provider and the
content acquirer.
"""

from __future__ import annotations

import hashlib
import math
from collections.abc import Iterator
from datetime import datetime, timezone
from typing import Any

import pytest

from ragdocs.errors import DimensionMismatchError, StoreConnectionError
from ragdocs.ingestion.embedder import EmbeddingProvider, ProviderKind
from ragdocs.ingestion.models import AcquiredDocument, DocumentChunk
from ragdocs.retrieval.base import VectorStoreBase
from ragdocs.retrieval.models import IndexedPoint


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


# ── Fake vector store ───────────────────────────────────────────────────


class InMemoryVectorStore(VectorStoreBase):
    """Dict-backed store with cosine search and call counters."""

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, Any]] = {}
        self.reachable = True
        self.creates = 0
        self.deletes = 0
        self.upserts: list[IndexedPoint] = []
        self.searched_vectors: list[list[float]] = []

    def declare(self, name: str, size: int | None) -> None:
        """Pre-populate a collection (``size=None`` means unreadable)."""
        self.collections[name] = {"size": size, "points": {}}

    def ping(self) -> None:
        if not self.reachable:
            raise StoreConnectionError("Failed to connect to fake store")

    def list_collections(self) -> list[str]:
        self.ping()
        return list(self.collections)

    def create_collection(self, name: str, vector_size: int, distance: str = "cosine") -> None:
        self.creates += 1
        self.collections[name] = {"size": vector_size, "points": {}}

    def delete_collection(self, name: str) -> None:
        self.deletes += 1
        self.collections.pop(name, None)

    def get_vector_size(self, name: str) -> int | None:
        return self.collections[name]["size"]

    def upsert(self, collection: str, point: IndexedPoint) -> None:
        coll = self.collections[collection]
        if len(point.vector) != coll["size"]:
            raise DimensionMismatchError(coll["size"], len(point.vector))
        coll["points"][point.id] = (point.vector, dict(point.payload))
        self.upserts.append(point)

    def search(self, collection: str, vector: list[float], *, limit: int = 5) -> list[dict[str, Any]]:
        coll = self.collections[collection]
        if len(vector) != coll["size"]:
            raise DimensionMismatchError(coll["size"], len(vector))
        self.searched_vectors.append(vector)
        hits = [
            {"id": pid, "score": _cosine(vector, vec), "payload": payload}
            for pid, (vec, payload) in coll["points"].items()
        ]
        hits.sort(key=lambda h: h["score"], reverse=True)
        return hits[:limit]

    def scroll(self, collection: str) -> Iterator[dict[str, Any]]:
        for _, payload in self.collections[collection]["points"].values():
            yield payload

    def add_raw(self, collection: str, point_id: str, vector: list[float], payload: Any) -> None:
        """Insert a point bypassing validation (for malformed payloads)."""
        self.collections[collection]["points"][point_id] = (vector, payload)

    def vector_sizes(self, collection: str) -> set[int]:
        return {len(vec) for vec, _ in self.collections[collection]["points"].values()}


def _cosine(a: list[float], b: list[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    return dot / norm if norm else 0.0


# ── Fake embedding provider ─────────────────────────────────────────────


class FakeProvider(EmbeddingProvider):
    """Deterministic hash-based embeddings of a chosen size."""

    kind = ProviderKind.OLLAMA
    default_model = "fake-embed"
    known_dimensions: dict[str, int] = {}

    def __init__(self, dimension: int = 8, *, fail_on: str | None = None) -> None:
        super().__init__(dimensions=dimension)
        self.fail_on = fail_on
        self.calls: list[str] = []

    def _embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.fail_on is not None and self.fail_on in text:
            raise RuntimeError("connection reset by peer")
        digest = hashlib.sha256(text.encode()).digest()
        return [(digest[i % len(digest)] + 1) / 256.0 for i in range(self.dimension)]


# ── Fake acquirer ───────────────────────────────────────────────────────


class FakeAcquirer:
    """Returns canned documents per URL.

    A plain chunk list is wrapped into an :class:`AcquiredDocument` whose
    metadata comes from the first chunk.
    """

    def __init__(self, documents: dict[str, AcquiredDocument | list[DocumentChunk]] | None = None) -> None:
        self.documents = documents or {}
        self.calls: list[str] = []

    def acquire(self, url: str) -> AcquiredDocument:
        self.calls.append(url)
        doc = self.documents.get(url, [])
        if isinstance(doc, AcquiredDocument):
            return doc.model_copy(deep=True)
        chunks = [chunk.model_copy() for chunk in doc]
        first = chunks[0] if chunks else None
        return AcquiredDocument(
            url=url,
            title=first.title if first else url,
            chunks=chunks,
            is_pdf=bool(first and first.is_pdf),
            author=first.author if first else None,
            page_count=first.page_count if first else None,
        )


def make_chunk(text: str, url: str = "https://docs.example.com/guide", title: str = "Guide", **extra: Any) -> DocumentChunk:
    return DocumentChunk(
        text=text,
        url=url,
        title=title,
        timestamp=datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc),
        **extra,
    )


# ── Fixtures ────────────────────────────────────────────────────────────


@pytest.fixture()
def store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture()
def provider() -> FakeProvider:
    return FakeProvider(dimension=8)


@pytest.fixture()
def guide_chunks() -> list[DocumentChunk]:
    return [
        make_chunk("Install the CLI with pip and run the init command."),
        make_chunk("Configure authentication by exporting an API token."),
        make_chunk("Deploy the service behind a reverse proxy."),
    ]


