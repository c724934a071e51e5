"""FastAPI application serving the ENS registration router."""

from __future__ import annotations

import argparse
import logging
import os
from typing import Final, List

import uvicorn
from fastapi import FastAPI, Response

from registrar import metrics
from registrar.logging_utils import configure_logging
from routes.ens import router as ens_router

LOGGER: Final[logging.Logger] = logging.getLogger("registrar.api")


def _configure_logging() -> None:
    level = os.environ.get("ENS_API_LOG_LEVEL", "INFO").upper()
    configure_logging(
        os.environ.get("ENS_API_LOG_FILE") or None,
        level=getattr(logging, level, logging.INFO),
        recovery_file=os.environ.get("ENS_RECOVERY_LOG_FILE") or None,
    )
    LOGGER.info("ENS API logging configured", extra={"event": "api_logging", "data": {"level": level}})


def create_app() -> FastAPI:
    """Instantiate the FastAPI application with the ENS router."""

    _configure_logging()
    app = FastAPI(title="ENS Registration Agent", version="0.1.0", docs_url="/docs")
    app.include_router(ens_router)

    @app.get("/healthz", tags=["health"])
    def root_health() -> dict[str, bool]:
        return {"ok": True}

    @app.get("/metrics", tags=["health"])
    def prometheus_metrics() -> Response:
        payload, content_type = metrics.render()
        return Response(content=payload, media_type=content_type)

    return app


app = create_app()


def build_server(app_obj: object, *, host: str, port: int) -> uvicorn.Server:
    return uvicorn.Server(
        uvicorn.Config(app_obj, host=host, port=port, loop="asyncio")
    )


def main(argv: List[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Serve the ENS registration API.")
    parser.add_argument("--host", default=os.environ.get("ENS_API_HOST", "127.0.0.1"))
    parser.add_argument("--port", type=int, default=int(os.environ.get("ENS_API_PORT", "8000")))
    args = parser.parse_args(argv)
    build_server(app, host=args.host, port=args.port).run()


if __name__ == "__main__":  # pragma: no cover - server entry point
    main()
