"""Unit tests for the ingestion orchestrator."""

import pytest
from conftest import FakeAcquirer, FakeProvider, InMemoryVectorStore, make_chunk

from ragdocs.errors import DimensionMismatchError, ProviderCallError
from ragdocs.ingestion.models import AcquiredDocument
from ragdocs.ingestion.orchestrator import IngestionOrchestrator, generate_point_id
from ragdocs.retrieval.models import CollectionDescriptor, decode_payload

URL = "https://docs.example.com/guide"


@pytest.fixture()
def descriptor(store: InMemoryVectorStore) -> CollectionDescriptor:
    store.declare("documentation", 8)
    return CollectionDescriptor(name="documentation", vector_size=8)


def test_point_ids_are_unique_hex() -> None:
    ids = {generate_point_id() for _ in range(200)}
    assert len(ids) == 200
    assert all(len(i) == 32 and int(i, 16) >= 0 for i in ids)


def test_html_chunks_upserted_in_order(store, provider, descriptor, guide_chunks) -> None:
    orchestrator = IngestionOrchestrator(FakeAcquirer({URL: guide_chunks}), store)
    summary = orchestrator.ingest(URL, descriptor, provider)

    assert [decode_payload(p.payload).text for p in store.upserts] == [c.text for c in guide_chunks]
    assert provider.calls == [c.text for c in guide_chunks]
    assert summary.render() == f"Successfully added documentation from {URL} (3 chunks processed)"


def test_pdf_summary(store, provider, descriptor) -> None:
    pdf = "https://docs.example.com/manual.pdf"
    pages = [
        make_chunk(f"Page {n} body", url=pdf, title="Manual", page=n, page_count=2, author="Ada", is_pdf=True)
        for n in (1, 2)
    ]
    summary = IngestionOrchestrator(FakeAcquirer({pdf: pages}), store).ingest(pdf, descriptor, provider)
    text = summary.render()
    assert text.startswith(f"Successfully added PDF from {pdf}")
    assert "Title: Manual" in text
    assert "Author: Ada" in text
    assert "Pages: 2" in text
    assert "Chunks: 2" in text


def test_failure_midway_keeps_earlier_chunks(store, descriptor, guide_chunks) -> None:
    provider = FakeProvider(8, fail_on="authentication")
    orchestrator = IngestionOrchestrator(FakeAcquirer({URL: guide_chunks}), store)
    with pytest.raises(ProviderCallError):
        orchestrator.ingest(URL, descriptor, provider)
    assert len(store.upserts) == 1
    assert len(provider.calls) == 2


def test_wrong_dimension_never_reaches_store(store, descriptor, guide_chunks) -> None:
    orchestrator = IngestionOrchestrator(FakeAcquirer({URL: guide_chunks}), store)
    with pytest.raises(DimensionMismatchError):
        orchestrator.ingest(URL, descriptor, FakeProvider(4))
    assert store.upserts == []


def test_empty_document(store, provider, descriptor) -> None:
    summary = IngestionOrchestrator(FakeAcquirer(), store).ingest(URL, descriptor, provider)
    assert summary.chunks == 0
    assert store.upserts == []


def test_pdf_without_text_still_reports_pdf_metadata(store, provider, descriptor) -> None:
    pdf = "https://docs.example.com/scan.pdf"
    scanned = AcquiredDocument(url=pdf, title="Scanned", is_pdf=True, author="Ada", page_count=12)
    summary = IngestionOrchestrator(FakeAcquirer({pdf: scanned}), store).ingest(pdf, descriptor, provider)

    assert store.upserts == []
    assert summary.render() == (
        f"Successfully added PDF from {pdf}\nTitle: Scanned\nAuthor: Ada\nPages: 12\nChunks: 0"
    )
