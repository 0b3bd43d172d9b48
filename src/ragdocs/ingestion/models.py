"""Domain models produced by the ingestion stage."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class DocumentChunk(BaseModel):
    """One bounded slice of extracted document text plus its provenance.

    Attributes
    ----------
    text:
        The chunk text (one chunker segment, or one PDF page).
    url:
        The URL the document was acquired from.
    title:
        Page or document title; falls back to the URL.
    timestamp:
        UTC instant the chunk was created.
    page:
        1-based page number (PDF sources only).
    page_count:
        Total number of pages in the source PDF.
    author:
        Document author from PDF metadata, when present.
    is_pdf:
        ``True`` for chunks produced by the PDF path.
    """

    text: str
    url: str
    title: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    page: int | None = None
    page_count: int | None = None
    author: str | None = None
    is_pdf: bool = False


class PdfMetadata(BaseModel):
    """Document-level metadata read from a parsed PDF."""

    title: str = ""
    author: str = ""
    page_count: int = 0


class IngestionSummary(BaseModel):
    """What an ``add_documentation`` call did."""

    url: str
    chunks: int
    is_pdf: bool = False
    title: str | None = None
    author: str | None = None
    page_count: int | None = None

    def render(self) -> str:
        if self.is_pdf:
            return (
                f"Successfully added PDF from {self.url}\n"
                f"Title: {self.title}\n"
                f"Author: {self.author or 'unknown'}\n"
                f"Pages: {self.page_count}\n"
                f"Chunks: {self.chunks}"
            )
        return f"Successfully added documentation from {self.url} ({self.chunks} chunks processed)"


class AcquiredDocument(BaseModel):
    """A fetched document: its chunks plus document-level metadata.

    A PDF with no extractable text still carries ``is_pdf``, title,
    author and page count, with an empty ``chunks`` list.
    """

    url: str
    title: str
    chunks: list[DocumentChunk] = Field(default_factory=list)
    is_pdf: bool = False
    author: str | None = None
    page_count: int | None = None
