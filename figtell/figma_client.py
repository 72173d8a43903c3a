"""
Figma REST API client.

Wraps the three endpoints figtell consumes (file, images, nodes). Every call
is a single authenticated GET; there is no retry at this layer.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from figtell.errors import FigmaApiError

logger = logging.getLogger(__name__)

# ============================================================================
# Constants
# ============================================================================

FIGMA_API_BASE = "https://api.figma.com/v1"
DEFAULT_TIMEOUT = 30.0


def _error_detail(response: httpx.Response) -> str:
    """Return " - <err>" when the error body carries a Figma error message."""
    try:
        data = response.json()
    except ValueError:
        return ""
    if isinstance(data, dict) and data.get('err'):
        return f" - {data['err']}"
    return ""


def _clean_file_id(file_id: str) -> str:
    return file_id.replace('design/', '', 1)


class FigmaClient:
    """Async client for the Figma REST API."""

    def __init__(
        self,
        token: str,
        base_url: str = FIGMA_API_BASE,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._token = token
        self._base_url = base_url.rstrip('/')
        self._timeout = timeout
        self._transport = transport

    async def _get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        """Make an authenticated GET request to the Figma API."""
        logger.debug("GET %s/%s params=%s", self._base_url, endpoint, params)
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                return await client.get(
                    f"{self._base_url}/{endpoint}",
                    headers={"X-Figma-Token": self._token},
                    params=params,
                    timeout=self._timeout,
                )
        except httpx.TimeoutException as e:
            raise FigmaApiError("Request to Figma timed out. The file might be too large.") from e
        except httpx.RequestError as e:
            raise FigmaApiError(f"Request to Figma failed: {e}") from e

    async def get_file(self, file_id: str) -> Dict[str, Any]:
        """Fetch the full document of a Figma file."""
        response = await self._get(f"files/{file_id}")
        if response.is_error:
            raise FigmaApiError(
                f"Failed to fetch Figma file: {response.reason_phrase}",
                status_code=response.status_code,
            )
        return response.json()

    async def get_image(self, file_id: str, node_id: str) -> Dict[str, str]:
        """
        Get the rendered image URL of a single node.

        Returns:
            dict: {'url': <image url>, 'ref': <node id>}
        """
        response = await self._get(f"images/{_clean_file_id(file_id)}", params={"ids": node_id})
        if response.is_error:
            raise FigmaApiError(
                f"Failed to get image URL: {response.reason_phrase}{_error_detail(response)}",
                status_code=response.status_code,
            )

        data = response.json()
        image_url = (data.get('images') or {}).get(node_id)
        if not image_url:
            raise FigmaApiError(f"No image URL found for node: {node_id}")

        return {'url': image_url, 'ref': node_id}

    async def get_node_images(self, file_id: str, node_ids: List[str]) -> Dict[str, Any]:
        """Fetch the documents of several nodes in one request."""
        response = await self._get(
            f"files/{_clean_file_id(file_id)}/nodes",
            params={"ids": ','.join(node_ids)},
        )
        if response.is_error:
            raise FigmaApiError(
                f"Failed to get nodes: {response.reason_phrase}{_error_detail(response)}",
                status_code=response.status_code,
            )
        return response.json()
