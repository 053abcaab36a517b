"""Collector FastAPI application entry point.

Configures the app, CORS (the Figma plugin iframe posts cross-origin), and
includes the route modules.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from labeler.config import CORS_ORIGINS, DATASET_DIR
from labeler.logging_config import get_collector_logger

logger = logging.getLogger("collector")


@asynccontextmanager
async def lifespan(app: FastAPI):
    get_collector_logger()
    logger.info(f"collector: storing samples under {DATASET_DIR!r}")
    yield


app = FastAPI(title="UI Dataset Collector", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

from .routes.download import router as download_router  # noqa: E402

app.include_router(download_router)


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    from labeler.config import API_HOST, API_PORT

    uvicorn.run(app, host=API_HOST, port=API_PORT)
