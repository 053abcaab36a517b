"""Figma REST API client for the labeling pipeline.

Fetches page node trees and exports rendered frame images using Personal
Access Token (PAT) authentication.

Environment:
    FIGMA_TOKEN: Figma Personal Access Token (required)

Usage:
    client = FigmaClient()
    page = await client.get_page("6kGd851qaAX4TiL44vpIrO", "0:1")
    png = await client.export_png("6kGd851qaAX4TiL44vpIrO", "16650:538")
"""

from __future__ import annotations

import logging
import os
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from .. import settings
from ..core.nodes import Node

logger = logging.getLogger("labeler.integrations.figma")

FIGMA_API_BASE = "https://api.figma.com"

ImageSource = Callable[[Node], Awaitable[bytes]]


class FigmaClientError(Exception):
    """Raised when a Figma API call fails."""


class FigmaClient:
    """Async Figma REST API client.

    Args:
        token: Figma PAT. Falls back to FIGMA_TOKEN env var.
        timeout: HTTP request timeout in seconds.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        timeout: float = settings.FIGMA_HTTP_TIMEOUT,
    ):
        self._token = token or os.getenv("FIGMA_TOKEN", "")
        if not self._token:
            raise FigmaClientError(
                "Figma token not configured. Set FIGMA_TOKEN environment variable "
                "or pass token= to FigmaClient()."
            )
        self._client: Optional[httpx.AsyncClient] = None
        self._timeout = timeout

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=FIGMA_API_BASE,
                headers={"X-FIGMA-TOKEN": self._token},
                timeout=self._timeout,
                limits=httpx.Limits(max_connections=5, max_keepalive_connections=3),
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _get(self, path: str, params: Optional[Dict] = None) -> Dict[str, Any]:
        """Make a GET request to the Figma API."""
        client = await self._get_client()
        try:
            resp = await client.get(path, params=params)
        except httpx.TimeoutException as e:
            raise FigmaClientError(f"Figma API timeout: {path}") from e
        except httpx.ConnectError as e:
            raise FigmaClientError(f"Figma API connection error: {path}") from e
        except httpx.HTTPError as e:
            raise FigmaClientError(f"Figma API transport error: {path}: {e}") from e

        if resp.status_code == 403:
            raise FigmaClientError(
                "Figma API returned 403 Forbidden. Check that FIGMA_TOKEN is valid "
                "and has file_content:read scope."
            )
        if resp.status_code == 404:
            raise FigmaClientError(f"Figma resource not found: {path}")
        if resp.status_code == 429:
            raise FigmaClientError("Figma API rate limit exceeded. Retry later.")
        if resp.status_code != 200:
            raise FigmaClientError(
                f"Figma API error {resp.status_code}: {resp.text[:200]}"
            )

        try:
            return resp.json()
        except ValueError as e:
            raise FigmaClientError(f"Figma API returned invalid JSON: {path}") from e

    # ------------------------------------------------------------------
    # Node trees
    # ------------------------------------------------------------------

    async def get_file_nodes(
        self,
        file_key: str,
        node_ids: List[str],
    ) -> Dict[str, Any]:
        """Fetch specific nodes from a Figma file.

        GET /v1/files/:key/nodes?ids=...
        """
        ids_param = ",".join(node_ids)
        data = await self._get(f"/v1/files/{file_key}/nodes", params={"ids": ids_param})
        logger.info(
            f"get_file_nodes: file={file_key}, requested={len(node_ids)}, "
            f"returned={len(data.get('nodes', {}))}"
        )
        return data

    async def get_page(self, file_key: str, page_id: str) -> Dict[str, Any]:
        """Fetch one page (CANVAS node) document with its full subtree."""
        data = await self.get_file_nodes(file_key, [page_id])
        entry = (data.get("nodes") or {}).get(page_id)
        if not entry or not entry.get("document"):
            raise FigmaClientError(f"Page '{page_id}' not found in file {file_key}")
        return entry["document"]

    # ------------------------------------------------------------------
    # Image export
    # ------------------------------------------------------------------

    async def get_node_images(
        self,
        file_key: str,
        node_ids: List[str],
        fmt: str = settings.FIGMA_EXPORT_FORMAT,
        scale: int = settings.FIGMA_EXPORT_SCALE,
    ) -> Dict[str, Optional[str]]:
        """Render node images via Figma's image export API.

        GET /v1/images/:key?ids=...&format=png&scale=1
        """
        data = await self._get(
            f"/v1/images/{file_key}",
            params={"ids": ",".join(node_ids), "format": fmt, "scale": str(scale)},
        )

        if data.get("err"):
            raise FigmaClientError(f"Figma image render error: {data['err']}")

        images = data.get("images", {})
        logger.info(
            f"get_node_images: file={file_key}, requested={len(node_ids)}, "
            f"rendered={sum(1 for v in images.values() if v)}"
        )
        return images

    async def download_image(self, url: str) -> bytes:
        """Download a rendered image from Figma's CDN."""
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as dl_client:
                resp = await dl_client.get(url)
        except httpx.HTTPError as e:
            raise FigmaClientError(f"Image download failed: {url}") from e
        if resp.status_code != 200:
            raise FigmaClientError(
                f"Image download failed: HTTP {resp.status_code} for {url}"
            )
        return resp.content

    async def export_png(self, file_key: str, node_id: str) -> bytes:
        """Export one node as PNG bytes."""
        images = await self.get_node_images(file_key, [node_id])
        url = images.get(node_id)
        if not url:
            raise FigmaClientError(f"Figma returned no image for node {node_id}")
        content = await self.download_image(url)
        logger.info(f"export_png: {node_id} ({len(content)} bytes)")
        return content

    def image_source(self, file_key: str) -> ImageSource:
        """Bind ``export_png`` to a file, for use by LabelingSession."""

        async def _export(node: Node) -> bytes:
            if not node.id:
                raise FigmaClientError(f"Node {node.name!r} has no id to export")
            return await self.export_png(file_key, node.id)

        return _export
