"""DocsService: the four documentation operations behind one lock.

Every operation holds a process-wide request lock for its whole
duration, so collection verification/recreation, upserts and searches
from different requests never interleave.
"""

from __future__ import annotations

import logging
import threading

from ragdocs.config import Settings, settings as default_settings
from ragdocs.ingestion.browser import BrowserManager
from ragdocs.ingestion.embedder import (
    EmbeddingProvider,
    create_embedding_provider,
    provider_from_settings,
)
from ragdocs.ingestion.loader import ContentAcquirer
from ragdocs.ingestion.models import IngestionSummary
from ragdocs.ingestion.orchestrator import IngestionOrchestrator
from ragdocs.retrieval.base import VectorStoreBase
from ragdocs.retrieval.catalog import SourceCatalog
from ragdocs.retrieval.collection import CollectionManager
from ragdocs.retrieval.models import SearchHit
from ragdocs.retrieval.retriever import SemanticRetriever

logger = logging.getLogger(__name__)


class DocsService:
    """Ingestion, search, catalog and provider switching.

    Parameters
    ----------
    store:
        Vector-store backend.
    provider:
        Initially active embedding provider.
    acquirer:
        Content acquirer used for ingestion.
    collection_name:
        Name of the single collection.
    browser:
        Shared browser closed by :meth:`close`; optional.
    default_limit:
        Search result count when none is given.
    ollama_url / embedding_timeout:
        Used when :meth:`test_embeddings` builds a new provider.
    embedding_dimensions:
        Vector size for a :meth:`test_embeddings` model missing from the
        provider's known-model table.
    """

    def __init__(
        self,
        store: VectorStoreBase,
        provider: EmbeddingProvider,
        acquirer: ContentAcquirer,
        *,
        collection_name: str = "documentation",
        browser: BrowserManager | None = None,
        default_limit: int = 5,
        ollama_url: str = "http://localhost:11434",
        embedding_timeout: float = 60.0,
        embedding_dimensions: int | None = None,
    ) -> None:
        self._store = store
        self._provider = provider
        self._browser = browser
        self._collections = CollectionManager(store, collection_name)
        self._orchestrator = IngestionOrchestrator(acquirer, store)
        self._retriever = SemanticRetriever(store, default_limit=default_limit)
        self._catalog = SourceCatalog(store)
        self._ollama_url = ollama_url
        self._embedding_timeout = embedding_timeout
        self._embedding_dimensions = embedding_dimensions
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, cfg: Settings = default_settings) -> DocsService:
        """Wire the production stack from *cfg*.

        Raises
        ------
        ConfigError
            If the configured embedding provider is invalid.
        """
        from ragdocs.retrieval.chroma_store import ChromaVectorStore

        provider = provider_from_settings(cfg)
        browser = BrowserManager()
        acquirer = ContentAcquirer(
            browser,
            chunk_size=cfg.chunk_size,
            max_pdf_bytes=cfg.max_pdf_bytes,
            head_timeout=cfg.head_timeout,
            download_timeout=cfg.download_timeout,
            page_timeout_ms=cfg.page_timeout_ms,
        )
        store = ChromaVectorStore(
            host=cfg.chroma_host,
            port=cfg.chroma_port,
            scroll_batch_size=cfg.scroll_batch_size,
        )
        logger.info("Using %r with Chroma at %s:%d", provider, cfg.chroma_host, cfg.chroma_port)
        return cls(
            store,
            provider,
            acquirer,
            collection_name=cfg.collection_name,
            browser=browser,
            default_limit=cfg.default_search_limit,
            ollama_url=cfg.ollama_url,
            embedding_timeout=cfg.embedding_timeout,
            embedding_dimensions=cfg.embedding_dimensions,
        )

    @property
    def provider(self) -> EmbeddingProvider:
        return self._provider

    # -- operations -----------------------------------------------------------

    def add_documentation(self, url: str) -> IngestionSummary:
        with self._lock:
            descriptor = self._collections.ensure_collection(self._provider.dimension)
            return self._orchestrator.ingest(url, descriptor, self._provider)

    def search_documentation(self, query: str, limit: int | None = None) -> list[SearchHit]:
        with self._lock:
            descriptor = self._collections.ensure_collection(self._provider.dimension)
            return self._retriever.search(descriptor, self._provider, query, limit=limit)

    def list_sources(self) -> list[str]:
        with self._lock:
            descriptor = self._collections.ensure_collection(self._provider.dimension)
            return self._catalog.list_sources(descriptor.name)

    def test_embeddings(
        self,
        text: str,
        provider: str = "ollama",
        *,
        api_key: str | None = None,
        model: str | None = None,
        dimensions: int | None = None,
    ) -> str:
        """Try a provider configuration and make it active if it works.

        The candidate is built (failing fast on bad config) and asked to
        embed *text*; only then does it replace the active provider and
        is the collection brought to the new vector size.
        """
        candidate = create_embedding_provider(
            provider,
            model=model,
            api_key=api_key,
            dimensions=dimensions,
            fallback_dimensions=self._embedding_dimensions,
            ollama_url=self._ollama_url,
            timeout=self._embedding_timeout,
        )
        with self._lock:
            vector = candidate.embed(text)
            previous, self._provider = self._provider, candidate
            logger.info("Switched embedding provider %r -> %r", previous, candidate)
            self._collections.ensure_collection(candidate.dimension)

        return (
            f"Successfully configured {candidate.kind.value} embeddings ({candidate.model}).\n"
            f"Vector size: {len(vector)}\n"
            "Collection updated to match new vector size."
        )

    def close(self) -> None:
        if self._browser is not None:
            self._browser.close()
