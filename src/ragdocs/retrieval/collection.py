"""Collection lifecycle: keep the collection's vector size in step with
the active embedding provider.

:meth:`CollectionManager.ensure_collection` runs before every ingestion
and search:

1. ping the store (unreachable → :class:`~ragdocs.errors.StoreConnectionError`);
2. create the collection if it is absent;
3. otherwise read its declared vector size, treating an unreadable size
   as a mismatch;
4. on mismatch, **delete and recreate** the collection at the new size.

Step 4 discards every previously indexed point.  Switching embedding
provider or model therefore wipes the index; this is logged, not raised.
"""

from __future__ import annotations

import logging

from ragdocs.errors import CollectionError
from ragdocs.retrieval.base import VectorStoreBase
from ragdocs.retrieval.models import COSINE, CollectionDescriptor

logger = logging.getLogger(__name__)


class CollectionManager:
    """Creates, verifies and recreates the deployment's single collection.

    Parameters
    ----------
    store:
        The vector-store backend.
    name:
        Collection name.
    """

    def __init__(self, store: VectorStoreBase, name: str) -> None:
        self._store = store
        self.name = name

    def ensure_collection(self, vector_size: int) -> CollectionDescriptor:
        """Guarantee the collection exists with *vector_size* dimensions."""
        self._store.ping()

        descriptor = CollectionDescriptor(name=self.name, vector_size=vector_size, distance=COSINE)
        if self.name not in self._store.list_collections():
            logger.info("Creating collection %r with vector size %d", self.name, vector_size)
            self._store.create_collection(self.name, vector_size, COSINE)
            return descriptor

        try:
            current = self._store.get_vector_size(self.name)
        except CollectionError:
            logger.warning("Could not read collection %r info", self.name, exc_info=True)
            current = None

        if current is None:
            logger.warning("Could not determine vector size of %r, recreating collection", self.name)
            self.recreate(vector_size, previous=None)
        elif current != vector_size:
            self.recreate(vector_size, previous=current)
        return descriptor

    def recreate(self, vector_size: int, *, previous: int | None) -> None:
        """Drop the collection and create it again at *vector_size*."""
        logger.warning(
            "Vector size mismatch on %r (collection=%s, required=%d): recreating; "
            "all previously indexed documents are discarded",
            self.name,
            previous if previous is not None else "unknown",
            vector_size,
        )
        self._store.delete_collection(self.name)
        self._store.create_collection(self.name, vector_size, COSINE)
        logger.info("Collection %r recreated with vector size %d", self.name, vector_size)
