"""
Retrieval: vector store boundary, collection lifecycle, search and catalog.

Public surface
--------------
- :class:`VectorStoreBase`: abstract backend.
- :class:`ChromaVectorStore`: default Chroma backend (lazy import).
- :class:`CollectionManager`: keeps the collection's vector size in step with the provider.
- :class:`SemanticRetriever`, :func:`format_results`: search.
- :class:`SourceCatalog`, :func:`format_sources`: distinct ingested sources.
"""

from ragdocs.retrieval.base import VectorStoreBase
from ragdocs.retrieval.catalog import SourceCatalog, format_sources
from ragdocs.retrieval.collection import CollectionManager
from ragdocs.retrieval.models import CollectionDescriptor, DocumentPayload, SearchHit, decode_payload
from ragdocs.retrieval.retriever import SemanticRetriever, format_results

__all__ = [
    "ChromaVectorStore",
    "CollectionDescriptor",
    "CollectionManager",
    "DocumentPayload",
    "SearchHit",
    "SemanticRetriever",
    "SourceCatalog",
    "VectorStoreBase",
    "decode_payload",
    "format_results",
    "format_sources",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaVectorStore to avoid pulling in chromadb at import time."""
    if name == "ChromaVectorStore":
        from ragdocs.retrieval.chroma_store import ChromaVectorStore

        return ChromaVectorStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
