"""Domain models for stored points, the collection, and search results."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ragdocs.errors import DimensionMismatchError, SchemaValidationError
from ragdocs.ingestion.models import DocumentChunk

DOCUMENT_CHUNK_TYPE = "DocumentChunk"
COSINE = "cosine"


class CollectionDescriptor(BaseModel):
    """The single collection this deployment indexes into.

    Attributes
    ----------
    name:
        Collection name in the vector store.
    vector_size:
        Declared dimensionality; every stored and queried vector must match.
    distance:
        Similarity metric (always cosine).
    """

    name: str
    vector_size: int
    distance: Literal["cosine"] = COSINE

    def check_vector(self, vector: list[float]) -> None:
        """Reject *vector* unless its length equals :attr:`vector_size`."""
        if len(vector) != self.vector_size:
            raise DimensionMismatchError(self.vector_size, len(vector))


class DocumentPayload(BaseModel):
    """Stored form of a :class:`DocumentChunk`, tagged with ``_type``.

    The ``_type`` discriminator marks the record as a document chunk so
    readers never have to guess at the shape of other record kinds that
    may share the store.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    record_type: Literal["DocumentChunk"] = Field(default=DOCUMENT_CHUNK_TYPE, alias="_type")
    text: str
    url: str
    title: str
    timestamp: datetime
    page: int | None = None
    page_count: int | None = None
    author: str | None = None
    is_pdf: bool = False

    @classmethod
    def from_chunk(cls, chunk: DocumentChunk) -> DocumentPayload:
        return cls(**chunk.model_dump())

    def to_chunk(self) -> DocumentChunk:
        return DocumentChunk(**self.model_dump(exclude={"record_type"}))

    def to_store(self) -> dict[str, Any]:
        """Flat JSON-safe dict; ``None`` fields are omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def encode_payload(chunk: DocumentChunk) -> dict[str, Any]:
    """Serialise *chunk* into a tagged payload dict."""
    return DocumentPayload.from_chunk(chunk).to_store()


def decode_payload(raw: Any) -> DocumentChunk:
    """Decode a stored payload back into a :class:`DocumentChunk`.

    Raises
    ------
    SchemaValidationError
        If the discriminator is missing/wrong or a required field is
        absent or of the wrong type.
    """
    if not isinstance(raw, dict) or raw.get("_type") != DOCUMENT_CHUNK_TYPE:
        raise SchemaValidationError("Invalid payload type: not a DocumentChunk record")
    try:
        return DocumentPayload.model_validate(raw).to_chunk()
    except ValidationError as exc:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
        raise SchemaValidationError(
            f"Invalid DocumentChunk payload (bad fields: {', '.join(fields)})",
            {"fields": fields},
        ) from exc


class IndexedPoint(BaseModel):
    """One ``(id, vector, payload)`` record to upsert."""

    id: str
    vector: list[float]
    payload: dict[str, Any]


class SearchHit(BaseModel):
    """A decoded search result."""

    chunk: DocumentChunk
    score: float

    def render(self) -> str:
        return (
            f"[{self.chunk.title}]({self.chunk.url})\n"
            f"Score: {self.score}\n"
            f"Content: {self.chunk.text}\n"
        )
