"""
Figma URL parsing.

Turns links such as https://www.figma.com/design/KEY/Title?node-id=1-2 into
a FigmaUrl carrying the resource type, file id, node id and title.
"""

from typing import Dict, Optional
from urllib.parse import parse_qsl, unquote, urlparse

from pydantic import BaseModel, Field

from figtell.errors import InvalidUrlError


class FigmaUrl(BaseModel):
    """Parsed Figma file or design URL."""

    type: Optional[str] = Field(default=None, description="Resource type: 'file' or 'design'")
    file_id: Optional[str] = Field(default=None, description="Figma file key")
    node_id: Optional[str] = Field(default=None, description="Value of the node-id query parameter")
    page: Optional[str] = Field(default=None, description="Value of the p query parameter")
    view_type: Optional[str] = Field(default=None, description="Value of the t query parameter")
    title: Optional[str] = Field(default=None, description="URL-decoded file title")
    full_path: str = ""
    original_url: str = ""
    params: Dict[str, str] = Field(default_factory=dict)


def parse_figma_url(url: str) -> FigmaUrl:
    """
    Parse a Figma URL.

    Args:
        url: Figma link, with or without the https:// scheme

    Returns:
        FigmaUrl: the parsed components

    Raises:
        InvalidUrlError: if the string is not a URL or its host is not figma.com
    """
    candidate = url.strip()
    if not candidate.startswith('http'):
        candidate = f"https://{candidate}"

    try:
        parsed = urlparse(candidate)
        hostname = parsed.hostname or ''
    except ValueError as e:
        raise InvalidUrlError(f"Invalid URL format: {url}") from e

    if 'figma.com' not in hostname:
        raise InvalidUrlError(f"Not a valid Figma URL: {url}")

    path_parts = [part for part in parsed.path.split('/') if part]

    params: Dict[str, str] = {}
    for key, value in parse_qsl(parsed.query, keep_blank_values=True):
        params.setdefault(key, value)

    return FigmaUrl(
        type=path_parts[0] if path_parts else None,
        file_id=path_parts[1] if len(path_parts) > 1 else None,
        node_id=params.get('node-id'),
        page=params.get('p'),
        view_type=params.get('t'),
        title=unquote(path_parts[2]) if len(path_parts) > 2 else None,
        full_path=parsed.path,
        original_url=url,
        params=params,
    )
