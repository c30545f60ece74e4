# main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.providers import init_providers
from core.settings import Settings, get_settings
from documents.manifest import ManifestStore
from documents.router import router as documents_router
from health.router import router as health_router

logger = logging.getLogger(__name__)

CORS_ALLOW_METHODS = ["GET", "POST", "PUT", "OPTIONS"]
CORS_ALLOW_HEADERS = ["X-Requested-With", "Content-Type", "Accept", "Origin"]


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.server.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings)

        # A missing or malformed manifest is fatal: ManifestError propagates
        # and the server never starts accepting requests.
        manifest = ManifestStore(settings.docs.manifest_path)
        manifest.load()
        app.state.manifest = manifest
        init_providers(app, settings)

        if not settings.docs.write_token:
            logger.warning("DOCS_WRITE_TOKEN not set; POST /documents accepts any token")

        logger.info("Document repository ready (%d documents)", len(manifest))
        yield
        logger.info("Shutting down")

    app = FastAPI(
        title="Document Repository",
        lifespan=lifespan,
    )

    # Allow-credentials stays off: browsers reject "*" origins with credentials.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_allow_origins,
        allow_credentials=False,
        allow_methods=CORS_ALLOW_METHODS,
        allow_headers=CORS_ALLOW_HEADERS,
    )

    app.include_router(documents_router)
    app.include_router(health_router)
    return app


app = create_app()


if __name__ == "__main__":
    s = get_settings()
    uvicorn.run(
        "main:app",
        host=s.server.host,
        port=s.server.port,
    )
