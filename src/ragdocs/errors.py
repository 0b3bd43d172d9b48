"""Exception hierarchy for ragdocs.

Every failure that a tool call can report to its caller derives from
:class:`RagDocsError`.  The tool dispatcher (:mod:`ragdocs.tools`) is the
only place these are turned into user-visible failure results; anything
that is *not* a ``RagDocsError`` is treated as an internal error.
"""

from __future__ import annotations

from typing import Any


class RagDocsError(Exception):
    """Base exception for all ragdocs errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class ConfigError(RagDocsError):
    """Unknown embedding provider, unknown model, or missing API key."""


class StoreConnectionError(RagDocsError):
    """The vector store is unreachable."""


class CollectionError(RagDocsError):
    """Creating or deleting the collection failed on a reachable store."""


class FetchError(RagDocsError):
    """A URL could not be fetched or rendered."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch URL {url}: {reason}", {"url": url})
        self.url = url


class SizeLimitError(RagDocsError):
    """A downloaded PDF is larger than the configured ceiling."""

    def __init__(self, url: str, size: int, limit: int) -> None:
        super().__init__(
            f"PDF too large ({size / 1024 / 1024:.2f}MB). "
            f"Max allowed is {limit / 1024 / 1024:.0f}MB.",
            {"url": url, "size": size, "limit": limit},
        )
        self.size = size
        self.limit = limit


class ParseError(RagDocsError):
    """A downloaded PDF could not be parsed."""


class SchemaValidationError(RagDocsError):
    """A stored payload is not a well-formed document-chunk record."""


class ProviderCallError(RagDocsError):
    """An embedding provider call failed (network, auth, malformed response)."""

    def __init__(self, provider: str, detail: str) -> None:
        super().__init__(
            f"Failed to generate embeddings with {provider}: {detail}",
            {"provider": provider, "detail": detail},
        )
        self.provider = provider
        self.detail = detail


class DimensionMismatchError(RagDocsError):
    """A vector's length differs from the collection's declared size."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"Vector has {actual} dimensions but the collection expects {expected}",
            {"expected": expected, "actual": actual},
        )
        self.expected = expected
        self.actual = actual


# ---------------------------------------------------------------------------
# Tool-call protocol errors (raised by the dispatcher, never by a tool)
# ---------------------------------------------------------------------------


class ToolRequestError(RagDocsError):
    """The tool call itself is malformed."""


class UnknownToolError(ToolRequestError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}", {"tool": name})
        self.name = name


class InvalidToolArgumentsError(ToolRequestError):
    def __init__(self, name: str, problems: list[str]) -> None:
        super().__init__(f"Invalid arguments for {name}: {'; '.join(problems)}", {"tool": name, "problems": problems})
        self.name = name
        self.problems = problems
