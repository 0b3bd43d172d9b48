"""
ragdocs: ingest web pages and PDFs into a vector index and search them.

Public API
----------
- :class:`DocsService`: add / search / list sources / switch embedding provider.
- :func:`build_tool_registry`, :func:`dispatch_tool`: the tool-call surface.
"""

from ragdocs.service import DocsService
from ragdocs.tools import ToolResult, build_tool_registry, dispatch_tool

__all__ = ["DocsService", "ToolResult", "build_tool_registry", "dispatch_tool"]

__version__ = "0.1.0"
