"""Tool definitions: the call surface exposed to clients.

A tool call is an opaque name plus a loosely-typed argument bag.  This
module validates the bag against each tool's pydantic schema, runs the
matching :class:`~ragdocs.service.DocsService` operation and converts
every :class:`~ragdocs.errors.RagDocsError` into a failure
:class:`ToolResult`.  Malformed calls (unknown tool, bad arguments) raise
:class:`~ragdocs.errors.ToolRequestError`; any other exception is an
internal error and propagates.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ragdocs.errors import InvalidToolArgumentsError, RagDocsError, UnknownToolError
from ragdocs.retrieval.catalog import format_sources
from ragdocs.retrieval.retriever import format_results
from ragdocs.service import DocsService

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Argument schemas
# ---------------------------------------------------------------------------


class AddDocumentationArgs(BaseModel):
    url: str = Field(min_length=1, description="URL of the documentation to fetch")


class SearchDocumentationArgs(BaseModel):
    query: str = Field(min_length=1, description="Search query")
    limit: int | None = Field(default=None, ge=1, description="Maximum number of results to return (default 5)")


class ListSourcesArgs(BaseModel):
    pass


class EmbeddingsCheckArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(min_length=1, description="Text to generate embeddings for")
    provider: str = Field(default="ollama", description="Embedding provider to use (ollama or openai)")
    api_key: str | None = Field(default=None, alias="apiKey", description="OpenAI API key (required for openai)")
    model: str | None = Field(default=None, description="Model to use for embeddings")
    dimensions: int | None = Field(
        default=None, ge=1, description="Vector size, required for models the provider does not know"
    )


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class ToolResult(BaseModel):
    """Outcome of one tool call."""

    content: str
    is_error: bool = False


@dataclass
class ToolSpec:
    """A named tool: schema, handler and the prefix used for failures."""

    name: str
    description: str
    args_schema: type[BaseModel]
    handler: Callable[[Any], str]
    error_prefix: str

    def schema(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.args_schema.model_json_schema(by_alias=True),
        }


def build_tool_registry(service: DocsService) -> dict[str, ToolSpec]:
    """Bind the four documentation tools to *service*."""

    def add_documentation(args: AddDocumentationArgs) -> str:
        return service.add_documentation(args.url).render()

    def search_documentation(args: SearchDocumentationArgs) -> str:
        return format_results(service.search_documentation(args.query, args.limit))

    def list_sources(args: ListSourcesArgs) -> str:
        return format_sources(service.list_sources())

    def check_embeddings(args: EmbeddingsCheckArgs) -> str:
        return service.test_embeddings(
            args.text,
            args.provider,
            api_key=args.api_key,
            model=args.model,
            dimensions=args.dimensions,
        )

    specs = [
        ToolSpec(
            name="add_documentation",
            description="Add documentation from a URL (web page or PDF) to the RAG database",
            args_schema=AddDocumentationArgs,
            handler=add_documentation,
            error_prefix="Failed to add documentation",
        ),
        ToolSpec(
            name="search_documentation",
            description="Search through stored documentation",
            args_schema=SearchDocumentationArgs,
            handler=search_documentation,
            error_prefix="Search failed",
        ),
        ToolSpec(
            name="list_sources",
            description="List all documentation sources currently stored",
            args_schema=ListSourcesArgs,
            handler=list_sources,
            error_prefix="Failed to list sources",
        ),
        ToolSpec(
            name="test_embeddings",
            description="Test an embedding provider configuration and make it the active provider",
            args_schema=EmbeddingsCheckArgs,
            handler=check_embeddings,
            error_prefix="Failed to test embeddings",
        ),
    ]
    return {spec.name: spec for spec in specs}


def list_tools(registry: dict[str, ToolSpec]) -> list[dict[str, Any]]:
    return [spec.schema() for spec in registry.values()]


def dispatch_tool(
    registry: dict[str, ToolSpec],
    name: str,
    arguments: dict[str, Any] | None = None,
) -> ToolResult:
    """Validate *arguments*, run tool *name* and wrap the outcome.

    Raises
    ------
    UnknownToolError
        *name* is not registered.
    InvalidToolArgumentsError
        *arguments* do not match the tool's schema.
    """
    spec = registry.get(name)
    if spec is None:
        raise UnknownToolError(name)

    try:
        args = spec.args_schema.model_validate(arguments or {})
    except ValidationError as exc:
        problems = [f"{'.'.join(str(p) for p in err['loc']) or 'arguments'}: {err['msg']}" for err in exc.errors()]
        raise InvalidToolArgumentsError(name, problems) from exc

    try:
        content = spec.handler(args)
    except RagDocsError as exc:
        logger.warning("Tool %s failed: %s", name, exc)
        return ToolResult(content=f"{spec.error_prefix}: {exc}", is_error=True)
    return ToolResult(content=content)
