"""
End-to-end run: URL -> Figma file -> tokens/canvases -> pseudo-code -> report.

Shared by the CLI and the MCP server. Everything up to token extraction is
all-or-nothing; only per-artifact LLM failures are recovered downstream.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from figtell.canvases import generate_component_yaml, process_canvases, process_component_instances
from figtell.errors import InvalidUrlError
from figtell.figma_client import FigmaClient
from figtell.pseudo_generator import Progress, PseudoCodeGenerator, PseudoCodeResults
from figtell.report import build_report
from figtell.tailwind import build_tailwind_theme, generate_tailwind_config
from figtell.tokens import format_token_count, process_design_tokens
from figtell.url_parser import FigmaUrl, parse_figma_url

logger = logging.getLogger(__name__)


@dataclass
class DesignRules:
    """Everything produced by one run."""
    url: FigmaUrl
    figma_data: Dict[str, Any]
    tokens: Dict[str, Any]
    canvases: List[Dict[str, Any]]
    instances: List[Dict[str, Any]]
    component_yaml: str
    pseudo_code: PseudoCodeResults
    report: str
    tailwind_config: Optional[str] = None

    def export(self) -> Dict[str, Any]:
        """Structured export: tokens, canvases, instances, component manifest and pseudo-code."""
        data: Dict[str, Any] = {
            'tokens': self.tokens,
            'canvases': self.canvases,
            'instances': self.instances,
            'componentStructure': self.component_yaml,
            'pseudoCode': self.pseudo_code.model_dump(),
        }
        if self.tailwind_config is not None:
            data['tailwindConfig'] = self.tailwind_config
        return data


async def generate_design_rules(
    figma_url: str,
    client: FigmaClient,
    generator: PseudoCodeGenerator,
    tailwind: bool = False,
    progress: Optional[Progress] = None,
) -> DesignRules:
    """
    Run the whole pipeline for one Figma URL.

    Raises:
        InvalidUrlError: the URL is not a Figma file/design link
        FigmaApiError: the file could not be fetched
    """
    notify = progress or (lambda message: None)

    url_info = parse_figma_url(figma_url)
    if not url_info.file_id:
        raise InvalidUrlError(f"No file id found in URL: {figma_url}")

    notify("Fetching file data from Figma API...")
    figma_data = await client.get_file(url_info.file_id)
    document = figma_data.get('document')

    notify("Processing design tokens...")
    tokens = process_design_tokens(document)
    logger.info("Total tokens found: %s", format_token_count(tokens))

    notify("Processing canvas information...")
    canvases = process_canvases(document)
    instances = process_component_instances(document)
    component_yaml = generate_component_yaml(tokens['components'], instances)

    notify("Generating pseudo components and frames...")
    pseudo_code = await generator.generate_all(
        tokens['components'], instances, tokens, figma_data, progress=notify
    )

    report = build_report(url_info, figma_data, tokens, canvases, instances, component_yaml, pseudo_code)

    tailwind_config = None
    if tailwind:
        notify("Generating Tailwind config...")
        tailwind_config = await generate_tailwind_config(build_tailwind_theme(tokens), pseudo_code, generator)

    return DesignRules(
        url=url_info,
        figma_data=figma_data,
        tokens=tokens,
        canvases=canvases,
        instances=instances,
        component_yaml=component_yaml,
        pseudo_code=pseudo_code,
        report=report,
        tailwind_config=tailwind_config,
    )
