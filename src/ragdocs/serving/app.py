"""FastAPI application exposing the documentation tools over HTTP.

All tool calls run on one dedicated worker thread.  This serialises
requests and keeps every use of the shared headless browser on the
thread that launched it (Playwright's sync API is thread-bound).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Body, FastAPI, HTTPException, Request

from ragdocs.errors import InvalidToolArgumentsError, UnknownToolError
from ragdocs.service import DocsService
from ragdocs.tools import ToolResult, build_tool_registry, dispatch_tool, list_tools

logger = logging.getLogger(__name__)


def create_app(service: DocsService | None = None) -> FastAPI:
    """Build the app.

    When *service* is ``None`` a :class:`DocsService` is wired from the
    global settings at startup.  The service (and its shared browser) is
    closed on shutdown, which uvicorn triggers on SIGINT / SIGTERM.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        svc = service or DocsService.from_settings()
        worker = ThreadPoolExecutor(max_workers=1, thread_name_prefix="ragdocs-worker")
        app.state.service = svc
        app.state.tools = build_tool_registry(svc)
        app.state.worker = worker
        logger.info("ragdocs ready (%d tools)", len(app.state.tools))
        try:
            yield
        finally:
            logger.info("Shutting down ragdocs")
            await asyncio.get_running_loop().run_in_executor(worker, svc.close)
            worker.shutdown(wait=True)

    app = FastAPI(
        title="ragdocs",
        version="0.1.0",
        description="Documentation ingestion and semantic search tools.",
        lifespan=lifespan,
    )

    # ── Routes ────────────────────────────────────────────────────────────
    @app.get("/health")
    async def health() -> dict[str, str]:
        """Liveness probe."""
        return {"status": "ok"}

    @app.get("/tools")
    async def tools(request: Request) -> list[dict[str, Any]]:
        return list_tools(request.app.state.tools)

    @app.post("/tools/{name}", response_model=ToolResult)
    async def call_tool(
        name: str,
        request: Request,
        arguments: dict[str, Any] | None = Body(default=None),
    ) -> ToolResult:
        """Run tool *name* with the JSON body as its arguments."""
        state = request.app.state
        try:
            return await asyncio.get_running_loop().run_in_executor(
                state.worker, dispatch_tool, state.tools, name, arguments
            )
        except UnknownToolError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except InvalidToolArgumentsError as exc:
            raise HTTPException(status_code=422, detail=exc.problems) from exc

    return app


app = create_app()
