#!/usr/bin/env python3
"""
figtell MCP Server - Model Context Protocol server for figtell.

Exposes the figtell pipeline as MCP tools:
- Figma URL parsing
- Design token extraction
- Node image URLs and node documents
- Full design rules report (tokens, canvases, instances, pseudo-code)
"""

import json
import re
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator
from mcp.server.fastmcp import FastMCP

from figtell.config import MODEL_CHOICES, Settings, build_ai_config
from figtell.errors import FigmaApiError, FigtellError
from figtell.figma_client import FigmaClient
from figtell.pipeline import generate_design_rules
from figtell.pseudo_generator import PseudoCodeGenerator
from figtell.tokens import process_design_tokens
from figtell.url_parser import parse_figma_url

# ============================================================================
# Constants
# ============================================================================

CHARACTER_LIMIT = 25000

# ============================================================================
# Initialize MCP Server
# ============================================================================

mcp = FastMCP("figtell_mcp")

READ_ONLY_ANNOTATIONS = {
    "readOnlyHint": True,
    "destructiveHint": False,
    "idempotentHint": True,
    "openWorldHint": True
}

# ============================================================================
# Enums and Types
# ============================================================================

class ResponseFormat(str, Enum):
    """Output format for tool responses."""
    MARKDOWN = "markdown"
    JSON = "json"


# ============================================================================
# Pydantic Input Models
# ============================================================================

def _file_key_from(value: str) -> str:
    """Accept either a bare file key or a full Figma URL."""
    if 'figma.com' in value:
        match = re.search(r'figma\.com/(?:design|file)/([a-zA-Z0-9]+)', value)
        if match:
            return match.group(1)
        raise ValueError("Could not extract file key from Figma URL")
    return value


class FigmaUrlInput(BaseModel):
    """Input model for URL parsing."""
    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    url: str = Field(
        ...,
        description="Figma file or design URL (e.g., 'https://www.figma.com/design/KEY/Title?node-id=1-2')",
        min_length=1
    )


class FigmaTokensInput(BaseModel):
    """Input model for design token extraction."""
    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    file_key: str = Field(
        ...,
        description="Figma file key (from URL: figma.com/design/FILE_KEY/...) or full URL",
        min_length=1
    )

    @field_validator('file_key')
    @classmethod
    def validate_file_key(cls, v: str) -> str:
        return _file_key_from(v)


class FigmaImageInput(BaseModel):
    """Input model for node image URLs."""
    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    file_key: str = Field(..., description="Figma file key or full URL", min_length=1)
    node_id: str = Field(..., description="Node ID (e.g., '1:2' or '1-2')", min_length=1)

    @field_validator('file_key')
    @classmethod
    def validate_file_key(cls, v: str) -> str:
        return _file_key_from(v)

    @field_validator('node_id')
    @classmethod
    def normalize_node_id(cls, v: str) -> str:
        # Convert 1-2 format to 1:2
        return v.replace('-', ':')


class FigmaNodesInput(BaseModel):
    """Input model for fetching several node documents."""
    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    file_key: str = Field(..., description="Figma file key or full URL", min_length=1)
    node_ids: List[str] = Field(..., description="Node IDs (e.g., ['1:2', '3-4'])", min_length=1)

    @field_validator('file_key')
    @classmethod
    def validate_file_key(cls, v: str) -> str:
        return _file_key_from(v)

    @field_validator('node_ids')
    @classmethod
    def normalize_node_ids(cls, v: List[str]) -> List[str]:
        return [node_id.strip().replace('-', ':') for node_id in v]


class DesignRulesInput(BaseModel):
    """Input model for the full design rules report."""
    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    url: str = Field(..., description="Figma file or design URL", min_length=1)
    no_ai: bool = Field(default=False, description="Skip the LLM and embed raw JSON instead of pseudo-code")
    tailwind: bool = Field(default=False, description="Append a generated tailwind.config.js")
    model: str = Field(default="claude", description="Primary LLM provider: 'claude' or 'gpt4'")
    response_format: ResponseFormat = Field(
        default=ResponseFormat.MARKDOWN,
        description="Output format: 'markdown' (report) or 'json' (tokens, canvases, pseudo-code)"
    )

    @field_validator('model')
    @classmethod
    def validate_model(cls, v: str) -> str:
        if v not in MODEL_CHOICES:
            raise ValueError(f"model must be one of: {', '.join(MODEL_CHOICES)}")
        return v


# ============================================================================
# Helpers
# ============================================================================

def _figma_client() -> FigmaClient:
    return FigmaClient(Settings.from_env().require_figma_token())


def _handle_error(e: Exception) -> str:
    """Format errors for user-friendly messages."""
    if isinstance(e, FigmaApiError):
        status = e.status_code
        if status == 401:
            return "Error: Invalid Figma API token. Check your FIGMA_ACCESS_TOKEN environment variable."
        elif status == 403:
            return "Error: Access denied. You don't have permission to view this file."
        elif status == 404:
            return "Error: File or node not found. Check the file key and node ID."
        elif status == 429:
            return "Error: Rate limit exceeded. Please wait before making more requests."
        return f"Error: {e}"
    elif isinstance(e, FigtellError):
        return f"Error: {e}"
    return f"Error: {type(e).__name__}: {str(e)}"


def _limit(result: str, hint: str) -> str:
    if len(result) > CHARACTER_LIMIT:
        return result[:CHARACTER_LIMIT] + f"\n\n[Truncated at {CHARACTER_LIMIT} characters. {hint}]"
    return result


# ============================================================================
# Tools
# ============================================================================

@mcp.tool(
    name="figtell_parse_url",
    annotations={"title": "Parse Figma URL", **READ_ONLY_ANNOTATIONS, "openWorldHint": False}
)
async def figtell_parse_url(params: FigmaUrlInput) -> str:
    """
    Parse a Figma URL into its type, file id, node id, title and query parameters.

    Args:
        params: FigmaUrlInput containing:
            - url (str): Figma file or design URL

    Returns:
        str: JSON with type, file_id, node_id, page, view_type, title and params
    """
    try:
        return parse_figma_url(params.url).model_dump_json(indent=2)
    except Exception as e:
        return _handle_error(e)


@mcp.tool(
    name="figtell_get_design_tokens",
    annotations={"title": "Extract Design Tokens", **READ_ONLY_ANNOTATIONS}
)
async def figtell_get_design_tokens(params: FigmaTokensInput) -> str:
    """
    Extract categorized design tokens from a Figma file.

    Typography is split into heading levels, body and other; colors into
    primary, secondary, text, background and other; effects into shadows,
    blurs and other. Spacing comes from auto-layout frames.

    Args:
        params: FigmaTokensInput containing:
            - file_key (str): Figma file key or full URL

    Returns:
        str: JSON formatted TokenSet
    """
    try:
        data = await _figma_client().get_file(params.file_key)
        tokens = process_design_tokens(data.get('document'))
        return _limit(
            json.dumps({'figmaFile': params.file_key, 'tokens': tokens}, indent=2),
            "Use figtell_get_nodes to inspect a smaller part of the file."
        )
    except Exception as e:
        return _handle_error(e)


@mcp.tool(
    name="figtell_get_image",
    annotations={"title": "Get Node Image URL", **READ_ONLY_ANNOTATIONS}
)
async def figtell_get_image(params: FigmaImageInput) -> str:
    """
    Get the rendered image URL for a node.

    Args:
        params: FigmaImageInput containing:
            - file_key (str): Figma file key or full URL
            - node_id (str): Node ID

    Returns:
        str: JSON with 'url' and 'ref'
    """
    try:
        image = await _figma_client().get_image(params.file_key, params.node_id)
        return json.dumps(image, indent=2)
    except Exception as e:
        return _handle_error(e)


@mcp.tool(
    name="figtell_get_nodes",
    annotations={"title": "Get Node Documents", **READ_ONLY_ANNOTATIONS}
)
async def figtell_get_nodes(params: FigmaNodesInput) -> str:
    """
    Fetch the documents of specific nodes.

    Args:
        params: FigmaNodesInput containing:
            - file_key (str): Figma file key or full URL
            - node_ids (List[str]): Node IDs

    Returns:
        str: JSON response of the Figma nodes endpoint
    """
    try:
        data = await _figma_client().get_node_images(params.file_key, params.node_ids)
        return _limit(json.dumps(data, indent=2), "Request fewer nodes at a time.")
    except Exception as e:
        return _handle_error(e)


@mcp.tool(
    name="figtell_generate_design_rules",
    annotations={"title": "Generate Design Rules Report", **READ_ONLY_ANNOTATIONS}
)
async def figtell_generate_design_rules(params: DesignRulesInput) -> str:
    """
    Generate the full design rules report for a Figma file.

    Fetches the file, extracts tokens, canvases and component instances, and
    renders each component and frame as pseudo-XML with an LLM (or raw JSON
    when AI is disabled or unavailable).

    Args:
        params: DesignRulesInput containing:
            - url (str): Figma file or design URL
            - no_ai (bool): Skip the LLM
            - tailwind (bool): Append a generated tailwind.config.js
            - model (str): 'claude' or 'gpt4'
            - response_format: 'markdown' or 'json'

    Returns:
        str: Markdown report, or JSON with tokens, canvases and pseudo-code
    """
    try:
        settings = Settings.from_env()
        client = FigmaClient(settings.require_figma_token())
        generator = PseudoCodeGenerator(build_ai_config(settings, model=params.model, no_ai=params.no_ai))
        rules = await generate_design_rules(params.url, client, generator, tailwind=params.tailwind)

        if params.response_format == ResponseFormat.JSON:
            return _limit(json.dumps(rules.export(), indent=2), "Use response_format='markdown' for a condensed view.")

        result = rules.report
        if rules.tailwind_config is not None:
            result += f"\n## Tailwind Config\n\n```js\n{rules.tailwind_config}```\n"
        return _limit(result, "Split the file or use figtell_get_design_tokens for tokens only.")

    except Exception as e:
        return _handle_error(e)


# ============================================================================
# Entry Point
# ============================================================================

def main() -> None:
    mcp.run()


if __name__ == "__main__":
    main()
