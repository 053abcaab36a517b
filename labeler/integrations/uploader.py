"""Dataset uploader: POSTs one (image, annotation) pair to the collector.

Wire format (JSON body):
    {"pngBlob": [int, ...], "jsonData": {"contentBoxes": ..., "labels": ...},
     "fileName": "<device>"}

Only a 200 response counts as success. No retries: the caller decides what a
failed container means for the batch.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .. import settings
from ..config import COLLECTOR_URL
from ..core.classifier import ClassificationResult

logger = logging.getLogger("labeler.integrations.uploader")


class UploadError(Exception):
    """Raised when the collector rejects or never receives an upload."""


def build_payload(
    png_bytes: bytes, result: ClassificationResult, device: str,
) -> Dict[str, Any]:
    return {
        "pngBlob": list(png_bytes),
        "jsonData": result.to_dict(),
        "fileName": device,
    }


class DatasetUploader:
    """Async client for the dataset collector.

    Args:
        url: Collection endpoint. Falls back to COLLECTOR_URL.
        timeout: HTTP request timeout in seconds.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: float = settings.UPLOAD_HTTP_TIMEOUT,
    ):
        self._url = url or COLLECTOR_URL
        self._timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def url(self) -> str:
        return self._url

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers={"Content-Type": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "DatasetUploader":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def upload(
        self, png_bytes: bytes, result: ClassificationResult, device: str,
    ) -> str:
        """Upload one pair and return the collector's status text."""
        client = await self._get_client()
        body = build_payload(png_bytes, result, device)
        try:
            resp = await client.post(self._url, json=body)
        except httpx.TimeoutException as e:
            raise UploadError(f"Collector timeout: {self._url}") from e
        except httpx.HTTPError as e:
            raise UploadError(f"Collector unreachable: {e}") from e

        if resp.status_code != 200:
            raise UploadError(f"{resp.status_code}: {resp.reason_phrase}")

        logger.info(
            f"upload: device={device!r}, boxes={len(result)}, bytes={len(png_bytes)}"
        )
        return resp.reason_phrase
