"""Collection endpoint the labeler uploads to."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from collector.schemas import DownloadRequest, DownloadResponse
from collector.storage import DatasetStore, get_store

logger = logging.getLogger("collector.routes.download")

router = APIRouter(tags=["dataset"])


@router.post("/download", response_model=DownloadResponse)
async def download(
    req: DownloadRequest,
    store: DatasetStore = Depends(get_store),
) -> DownloadResponse:
    """Store one rendered frame with its annotation."""
    try:
        index = await store.save(
            req.fileName, bytes(req.pngBlob), req.jsonData.model_dump(),
        )
    except OSError as e:
        logger.error(f"download: failed to store {req.fileName!r}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to store sample: {e}")

    return DownloadResponse(fileName=req.fileName, index=index)


@router.get("/datasets/{device}")
async def dataset_info(
    device: str,
    store: DatasetStore = Depends(get_store),
) -> dict:
    """Number of samples stored for a device."""
    return {"fileName": device, "count": store.count(device)}
