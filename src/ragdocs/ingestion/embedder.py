"""Embedding providers: single place to swap embedding backends.

Supports two providers, selected by :class:`ProviderKind`:

1. **ollama** (default): a local Ollama server, ``nomic-embed-text``
   (768 dimensions) unless another model is configured.
2. **openai**: the hosted OpenAI embeddings API,
   ``text-embedding-3-small`` (1536 dimensions) by default.  Requires an
   API key.

Providers are validated when they are constructed: an unknown provider
name, a missing key or a model with no known dimensionality raises
:class:`~ragdocs.errors.ConfigError` immediately rather than on first use.
Every failure while embedding is re-raised as
:class:`~ragdocs.errors.ProviderCallError`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING

from langchain_ollama import OllamaEmbeddings
from langchain_openai import OpenAIEmbeddings

from ragdocs.errors import ConfigError, ProviderCallError

if TYPE_CHECKING:
    from ragdocs.config import Settings

logger = logging.getLogger(__name__)


class ProviderKind(str, Enum):
    OLLAMA = "ollama"
    OPENAI = "openai"


class EmbeddingProvider(ABC):
    """Produces fixed-length vectors for text.

    Subclasses implement :meth:`_embed`; :meth:`embed` adds error wrapping
    and the dimensionality check.
    """

    kind: ProviderKind
    default_model: str
    known_dimensions: dict[str, int]

    def __init__(
        self,
        model: str | None = None,
        *,
        dimensions: int | None = None,
        fallback_dimensions: int | None = None,
    ) -> None:
        self.model = model or self.default_model
        if dimensions is None and self.model not in self.known_dimensions:
            dimensions = fallback_dimensions
        if dimensions is not None:
            if dimensions <= 0:
                raise ConfigError(f"Embedding dimensions must be positive, got {dimensions}")
            self._dimension = dimensions
        elif self.model in self.known_dimensions:
            self._dimension = self.known_dimensions[self.model]
        else:
            raise ConfigError(
                f"Unknown {self.kind.value} embedding model {self.model!r}; "
                f"known models: {sorted(self.known_dimensions)}. "
                "Set EMBEDDING_DIMENSIONS or pass dimensions to use another model."
            )

    @property
    def dimension(self) -> int:
        """Length of every vector this provider returns."""
        return self._dimension

    def embed(self, text: str) -> list[float]:
        """Return the embedding of *text*.

        Raises
        ------
        ProviderCallError
            On any backend failure, or if the backend returns a vector of
            the wrong length.
        """
        logger.debug("Embedding %d chars with %s/%s", len(text), self.kind.value, self.model)
        try:
            vector = self._embed(text)
        except Exception as exc:
            raise ProviderCallError(self.kind.value, str(exc)) from exc

        if len(vector) != self._dimension:
            raise ProviderCallError(
                self.kind.value,
                f"model {self.model!r} returned {len(vector)} dimensions, expected {self._dimension}",
            )
        return [float(x) for x in vector]

    @abstractmethod
    def _embed(self, text: str) -> list[float]: ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self.model!r}, dimension={self._dimension})"


class OllamaEmbeddingProvider(EmbeddingProvider):
    """Local embeddings served by Ollama."""

    kind = ProviderKind.OLLAMA
    default_model = "nomic-embed-text"
    known_dimensions = {
        "nomic-embed-text": 768,
        "mxbai-embed-large": 1024,
        "all-minilm": 384,
    }

    def __init__(
        self,
        model: str | None = None,
        *,
        dimensions: int | None = None,
        fallback_dimensions: int | None = None,
        base_url: str = "http://localhost:11434",
        timeout: float = 60.0,
    ) -> None:
        super().__init__(model, dimensions=dimensions, fallback_dimensions=fallback_dimensions)
        self._client = OllamaEmbeddings(
            model=self.model,
            base_url=base_url,
            client_kwargs={"timeout": timeout},
        )

    def _embed(self, text: str) -> list[float]:
        return self._client.embed_query(text)


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """Hosted embeddings from the OpenAI API."""

    kind = ProviderKind.OPENAI
    default_model = "text-embedding-3-small"
    known_dimensions = {
        "text-embedding-3-small": 1536,
        "text-embedding-3-large": 3072,
        "text-embedding-ada-002": 1536,
    }

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        *,
        dimensions: int | None = None,
        fallback_dimensions: int | None = None,
        timeout: float = 60.0,
    ) -> None:
        if not api_key:
            raise ConfigError("OpenAI API key is required")
        super().__init__(model, dimensions=dimensions, fallback_dimensions=fallback_dimensions)
        self._client = OpenAIEmbeddings(model=self.model, api_key=api_key, timeout=timeout)

    def _embed(self, text: str) -> list[float]:
        return self._client.embed_query(text)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def create_embedding_provider(
    provider: str | ProviderKind,
    *,
    model: str | None = None,
    api_key: str | None = None,
    dimensions: int | None = None,
    fallback_dimensions: int | None = None,
    ollama_url: str = "http://localhost:11434",
    timeout: float = 60.0,
) -> EmbeddingProvider:
    """Build the provider named by *provider*.

    *dimensions* always sets the vector size.  *fallback_dimensions* is
    used only for a model missing from the provider's known-model table.

    Raises
    ------
    ConfigError
        Unknown provider name, missing OpenAI key, or unknown model.
    """
    try:
        kind = ProviderKind(provider)
    except ValueError:
        raise ConfigError(
            f"Unknown embedding provider: {provider!r} "
            f"(expected one of {[k.value for k in ProviderKind]})"
        ) from None

    if kind is ProviderKind.OPENAI:
        return OpenAIEmbeddingProvider(
            api_key or "",
            model,
            dimensions=dimensions,
            fallback_dimensions=fallback_dimensions,
            timeout=timeout,
        )
    return OllamaEmbeddingProvider(
        model,
        dimensions=dimensions,
        fallback_dimensions=fallback_dimensions,
        base_url=ollama_url,
        timeout=timeout,
    )


def provider_from_settings(cfg: Settings) -> EmbeddingProvider:
    """Build the provider described by the application settings."""
    return create_embedding_provider(
        cfg.embedding_provider,
        model=cfg.embedding_model,
        api_key=cfg.openai_api_key,
        dimensions=cfg.embedding_dimensions,
        ollama_url=cfg.ollama_url,
        timeout=cfg.embedding_timeout,
    )
