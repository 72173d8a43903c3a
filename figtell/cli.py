"""
figtell command line.

    figtell <figma-url> [--tailwind] [--no-ai] [--output=<path>] [--export-json=<path>]

Exits 0 on success and 1 on any reported error.
"""

import asyncio
import logging
import sys
from typing import Optional

import click
from rich.console import Console

from figtell.config import MODEL_CHOICES, Settings, build_ai_config
from figtell.errors import FigtellError, UsageError
from figtell.figma_client import FigmaClient
from figtell.pipeline import DesignRules, generate_design_rules
from figtell.pseudo_generator import PseudoCodeGenerator
from figtell.report import DEFAULT_REPORT_PATH, write_json, write_output
from figtell.tailwind import DEFAULT_TAILWIND_PATH
from figtell.tokens import format_token_count

logger = logging.getLogger(__name__)

console = Console(stderr=True)


async def _run(
    figma_url: str,
    settings: Settings,
    model: str,
    no_ai: bool,
    tailwind: bool,
) -> DesignRules:
    client = FigmaClient(settings.require_figma_token())
    generator = PseudoCodeGenerator(build_ai_config(settings, model=model, no_ai=no_ai))
    if not generator.enabled:
        console.print("[blue]i[/blue] Running without AI enhancement - will output raw data")

    with console.status("Processing Figma URL details...", spinner="dots") as status:
        return await generate_design_rules(
            figma_url,
            client,
            generator,
            tailwind=tailwind,
            progress=lambda message: status.update(message),
        )


@click.command()
@click.argument('figma_url', required=False)
@click.option('--tailwind', is_flag=True, help='Also write a tailwind.config.js derived from the tokens')
@click.option('--no-ai', is_flag=True, help='Skip the LLM and embed raw JSON for components and frames')
@click.option('--output', default=DEFAULT_REPORT_PATH, show_default=True, help='Path of the Markdown report')
@click.option('--tailwind-output', default=DEFAULT_TAILWIND_PATH, show_default=True,
              help='Path of the generated Tailwind config')
@click.option('--model', type=click.Choice(MODEL_CHOICES), default='claude', show_default=True,
              help='Primary LLM provider; the other one is used as fallback when configured')
@click.option('--export-json', type=click.Path(dir_okay=False), default=None,
              help='Also write tokens, canvases, instances, component structure and pseudo-code as JSON '
                   '(e.g. design-tokens.json)')
@click.option('--dump-json', type=click.Path(dir_okay=False), default=None,
              help='Also write the raw Figma file JSON to this path')
@click.option('--env-file', default='.env', show_default=True, help='Path to .env file')
@click.option('--debug', is_flag=True, help='Enable debug logging')
def cli(
    figma_url: Optional[str],
    tailwind: bool,
    no_ai: bool,
    output: str,
    tailwind_output: str,
    model: str,
    export_json: Optional[str],
    dump_json: Optional[str],
    env_file: str,
    debug: bool,
) -> None:
    """Extract design tokens and pseudo-code from a Figma file into a design rules report."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    try:
        settings = Settings.from_env(env_file)
        figma_url = figma_url or settings.default_url
        if not figma_url:
            raise UsageError("Please provide a Figma URL\n\nUsage:\n  figtell <figma-url>")

        rules = asyncio.run(_run(figma_url, settings, model, no_ai, tailwind))
        console.print(f"[green]✓[/green] Total tokens found: {format_token_count(rules.tokens)}")

        if export_json:
            write_json(export_json, rules.export())
            console.print(f"[green]✓[/green] All information saved to {export_json}")

        if dump_json:
            write_json(dump_json, rules.figma_data)
            console.print(f"[green]✓[/green] Figma file JSON saved to {dump_json}")

        write_output(output, rules.report)
        console.print(f"[green]✓[/green] Design rules saved to {output}")

        if rules.tailwind_config is not None:
            write_output(tailwind_output, rules.tailwind_config)
            console.print(f"[green]✓[/green] Tailwind config saved to {tailwind_output}")

    except FigtellError as e:
        console.print(f"Error: {e}", style="red", markup=False, soft_wrap=True)
        sys.exit(1)


def main() -> None:
    cli()


if __name__ == '__main__':
    main()
