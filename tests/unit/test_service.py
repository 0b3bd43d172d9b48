"""Unit tests for DocsService: collection sync, provider switching, locking."""

import threading
import time
from unittest.mock import MagicMock, patch

import pytest
from conftest import FakeAcquirer, FakeProvider, InMemoryVectorStore

from ragdocs.config import Settings
from ragdocs.errors import ConfigError, ProviderCallError, StoreConnectionError
from ragdocs.service import DocsService

NAME = "documentation"
URL = "https://docs.example.com/guide"


@pytest.fixture()
def acquirer(guide_chunks) -> FakeAcquirer:
    return FakeAcquirer({URL: guide_chunks})


@pytest.fixture()
def service(store, acquirer) -> DocsService:
    return DocsService(store, FakeProvider(768), acquirer, collection_name=NAME)


def _switch_to(service: DocsService, dimension: int, **kwargs) -> str:
    with patch("ragdocs.service.create_embedding_provider", return_value=FakeProvider(dimension, **kwargs)) as factory:
        message = service.test_embeddings("hello world", "openai", api_key="sk-test")
    factory.assert_called_once()
    return message


class TestIngestAndSearch:
    def test_first_ingest_creates_collection(self, service, store) -> None:
        summary = service.add_documentation(URL)
        assert summary.chunks == 3
        assert store.collections[NAME]["size"] == 768
        assert store.vector_sizes(NAME) == {768}

    def test_search_finds_ingested_text(self, service, guide_chunks) -> None:
        service.add_documentation(URL)
        hits = service.search_documentation(guide_chunks[2].text, limit=1)
        assert [h.chunk.text for h in hits] == [guide_chunks[2].text]

    def test_same_url_twice_lists_one_source(self, service, store) -> None:
        service.add_documentation(URL)
        service.add_documentation(URL)
        assert len(store.upserts) == 6
        assert service.list_sources() == ["Guide (https://docs.example.com/guide)"]

    def test_unreachable_store_aborts_before_fetch(self, service, store, acquirer) -> None:
        store.reachable = False
        with pytest.raises(StoreConnectionError):
            service.add_documentation(URL)
        assert acquirer.calls == []


class TestProviderSwitch:
    def test_switch_recreates_collection_once(self, service, store) -> None:
        service.add_documentation(URL)
        message = _switch_to(service, 1536)

        assert message == (
            "Successfully configured ollama embeddings (fake-embed).\n"
            "Vector size: 1536\n"
            "Collection updated to match new vector size."
        )
        assert service.provider.dimension == 1536
        assert store.collections[NAME]["size"] == 1536
        assert store.deletes == 1

        assert service.search_documentation("install") == []
        assert service.list_sources() == []
        assert store.deletes == 1

    def test_vectors_always_match_collection_size(self, service, store) -> None:
        service.add_documentation(URL)
        _switch_to(service, 384)
        service.add_documentation(URL)
        assert store.vector_sizes(NAME) == {store.collections[NAME]["size"]} == {384}

    def test_failed_candidate_keeps_active_provider(self, service, store) -> None:
        service.add_documentation(URL)
        original = service.provider
        with pytest.raises(ProviderCallError):
            _switch_to(service, 1536, fail_on="hello")
        assert service.provider is original
        assert store.collections[NAME]["size"] == 768
        assert store.deletes == 0

    def test_configured_dimensions_cover_unlisted_model(self, store, acquirer) -> None:
        service = DocsService(store, FakeProvider(768), acquirer, collection_name=NAME, embedding_dimensions=1024)
        with patch("ragdocs.ingestion.embedder.OllamaEmbeddings") as ollama_cls:
            ollama_cls.return_value.embed_query.return_value = [0.5] * 1024
            message = service.test_embeddings("hi", "ollama", model="bge-m3")

        assert "(bge-m3)" in message
        assert "Vector size: 1024" in message
        assert service.provider.dimension == 1024
        assert store.collections[NAME]["size"] == 1024

    def test_from_settings_forwards_embedding_dimensions(self) -> None:
        cfg = Settings(embedding_model="bge-m3", embedding_dimensions=1024)
        with patch("ragdocs.ingestion.embedder.OllamaEmbeddings"):
            service = DocsService.from_settings(cfg)
        assert service.provider.dimension == 1024

        with patch(
            "ragdocs.service.create_embedding_provider", return_value=FakeProvider(1024, fail_on="hi")
        ) as factory:
            with pytest.raises(ProviderCallError):
                service.test_embeddings("hi", "ollama", model="another-model")
        assert factory.call_args.kwargs["fallback_dimensions"] == 1024

    def test_bad_provider_config(self, service) -> None:
        with pytest.raises(ConfigError):
            service.test_embeddings("hello", "cohere")
        with pytest.raises(ConfigError, match="API key"):
            service.test_embeddings("hello", "openai")


def test_operations_do_not_interleave(store, guide_chunks) -> None:
    events: list[str] = []
    started = threading.Event()

    class SlowAcquirer(FakeAcquirer):
        def acquire(self, url: str):
            events.append("ingest-start")
            started.set()
            time.sleep(0.05)
            events.append("ingest-end")
            return super().acquire(url)

    service = DocsService(store, FakeProvider(8), SlowAcquirer({URL: guide_chunks}), collection_name=NAME)
    ingest = threading.Thread(target=service.add_documentation, args=(URL,))
    ingest.start()
    assert started.wait(timeout=5)
    service.list_sources()
    events.append("list")
    ingest.join()

    assert events == ["ingest-start", "ingest-end", "list"]


def test_close_shuts_browser(store, acquirer) -> None:
    browser = MagicMock()
    DocsService(store, FakeProvider(8), acquirer, browser=browser).close()
    browser.close.assert_called_once()
