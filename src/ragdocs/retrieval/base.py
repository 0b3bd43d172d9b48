"""Abstract base class for vector-store backends.

Adding a new backend only requires subclassing :class:`VectorStoreBase`
and implementing its abstract methods.  The collection lifecycle,
ingestion and retrieval layers are backend-agnostic.

Implementations raise :class:`~ragdocs.errors.StoreConnectionError` when
the store cannot be reached and :class:`~ragdocs.errors.CollectionError`
for other store-side failures.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Any

from ragdocs.retrieval.models import IndexedPoint


class VectorStoreBase(ABC):
    """Backend-agnostic vector-store interface."""

    # -- connectivity / collections -------------------------------------------

    @abstractmethod
    def ping(self) -> None:
        """Return quietly when the store is reachable, raise otherwise."""
        ...

    @abstractmethod
    def list_collections(self) -> list[str]:
        """Names of all collections in the store."""
        ...

    @abstractmethod
    def create_collection(self, name: str, vector_size: int, distance: str = "cosine") -> None:
        ...

    @abstractmethod
    def delete_collection(self, name: str) -> None:
        ...

    @abstractmethod
    def get_vector_size(self, name: str) -> int | None:
        """Declared vector size of *name*, or ``None`` when unreadable."""
        ...

    # -- points ---------------------------------------------------------------

    @abstractmethod
    def upsert(self, collection: str, point: IndexedPoint) -> None:
        """Write *point* and return only once the store acknowledged it."""
        ...

    @abstractmethod
    def search(self, collection: str, vector: list[float], *, limit: int = 5) -> list[dict[str, Any]]:
        """Return the top-*limit* points nearest to *vector*.

        Each result dict **must** contain:

        * ``"id"`` – point identifier
        * ``"score"`` – similarity score (higher = more similar)
        * ``"payload"`` – the raw stored payload

        Results are ordered by descending score.
        """
        ...

    @abstractmethod
    def scroll(self, collection: str) -> Iterator[dict[str, Any]]:
        """Yield the raw payload of every point in *collection*."""
        ...

    # -- optional overrides ---------------------------------------------------

    def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        try:
            self.ping()
        except Exception:
            return False
        return True
