"""Run the ragdocs HTTP server: ``python -m ragdocs``."""

from __future__ import annotations

import logging
import sys

import uvicorn

from ragdocs.config import settings


def main() -> None:
    # stdout stays clean for clients that pipe the server's output
    logging.basicConfig(
        level=settings.log_level.upper(),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("ragdocs.serving.app:app", host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
