"""
Markdown "design rules" report.

Pure formatting over the outputs of the processors and the pseudo-code
generator. Section order is fixed; output is byte-identical for identical
inputs.
"""

import json
import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Optional

from figtell.colors import format_number
from figtell.errors import WriteError
from figtell.pseudo_generator import PseudoCodeResults
from figtell.tokens import HEADING_LEVELS, format_token_count
from figtell.url_parser import FigmaUrl

logger = logging.getLogger(__name__)

DEFAULT_REPORT_PATH = ".designrules"


def format_last_modified(value: Optional[str]) -> str:
    """Render Figma's ISO-8601 lastModified timestamp in UTC."""
    if not value:
        return 'Unknown'
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return value
    return parsed.strftime('%Y-%m-%d %H:%M:%S %Z').strip()


def _has_size(size: Dict[str, Any]) -> bool:
    return bool(size.get('width') and size.get('height'))


def _size(size: Dict[str, Any]) -> str:
    return f"{format_number(size['width'])}x{format_number(size['height'])}"


# ============================================================================
# Sections
# ============================================================================

def render_file_info(url_info: FigmaUrl, figma_data: Dict[str, Any]) -> str:
    lines = [
        '## File Information',
        f"Type: {url_info.type}",
        f"File ID: {url_info.file_id}",
        f"Title: {url_info.title or 'Not specified'}",
        f"Node ID: {url_info.node_id or 'Not specified'}",
        '',
        f"File Name: {figma_data.get('name')}",
        f"Last Modified: {format_last_modified(figma_data.get('lastModified'))}",
    ]
    return '\n'.join(lines) + '\n\n'


def render_token_summary(tokens: Dict[str, Any]) -> str:
    return f"## Design Tokens Summary\n{format_token_count(tokens)}\n\n"


def _render_text_style(style: Dict[str, Any], include_letter_spacing: bool = True) -> str:
    values = style['style']
    out = f"- {style['name']}\n"
    out += f"  - Font: {values.get('fontFamily')} ({format_number(values.get('fontWeight'))})\n"
    out += f"  - Size: {format_number(values.get('fontSize'))}px\n"
    out += f"  - Line Height: {format_number(values.get('lineHeight'))}\n"
    if include_letter_spacing and values.get('letterSpacing'):
        out += f"  - Letter Spacing: {format_number(values['letterSpacing'])}\n"
    return out + '\n'


def render_typography(tokens: Dict[str, Any]) -> str:
    typography = tokens['typography']
    out = '## Typography\n\n'
    for level in HEADING_LEVELS:
        styles = typography['headings'][level]
        if styles:
            out += f"### {level.upper()}\n"
            out += ''.join(_render_text_style(style) for style in styles)
    for bucket in ('body', 'other'):
        if typography[bucket]:
            out += f"### {bucket.upper()}\n"
            out += ''.join(_render_text_style(style) for style in typography[bucket])
    return out


def render_colors(tokens: Dict[str, Any]) -> str:
    out = '## Colors\n\n'
    for category, colors in tokens['colors'].items():
        if not colors:
            continue
        out += f"### {category.upper()}\n"
        for color in colors:
            rgb = color['color']
            out += f"- {color['name']}\n"
            out += f"  - HEX: {color['hex']}\n"
            out += f"  - RGB: {rgb['r']}, {rgb['g']}, {rgb['b']}\n"
            if color['opacity'] != 1:
                out += f"  - Opacity: {format_number(color['opacity'])}\n"
            out += '\n'
    return out


def render_canvases(canvases: List[Dict[str, Any]]) -> str:
    out = '## Canvases and Frames\n\n'
    for canvas in canvases:
        out += f"### {canvas['name']}\n"
        out += f"- ID: {canvas['id']}\n"
        out += f"- Type: {canvas['type']}\n"
        out += f"- Total Elements: {canvas['children']}\n"
        frames = canvas.get('frames') or []
        if frames:
            out += f"\n#### Frames ({len(frames)})\n"
            for frame in frames:
                out += f"\n##### {frame['name']}\n"
                out += f"- ID: {frame['id']}\n"
                if _has_size(frame['size']):
                    out += f"- Size: {_size(frame['size'])}\n"
                if frame.get('layoutMode'):
                    out += f"- Layout: {frame['layoutMode']}\n"
                    # Figma omits itemSpacing when it is the default 0
                    out += f"- Item Spacing: {format_number(frame.get('itemSpacing') or 0)}\n"
        out += '\n'
    return out


def render_instances(instances: List[Dict[str, Any]]) -> str:
    out = '## Component Instances\n\n'
    for instance in instances:
        out += f"### {instance['name']}\n"
        out += f"- ID: {instance['id']}\n"
        out += f"- Component ID: {instance['componentId']}\n"
        if _has_size(instance['size']):
            out += f"- Size: {_size(instance['size'])}\n"
        out += '\n'
    return out


def render_component_structure(component_yaml: str) -> str:
    return f"## Component Structure\n\n```yaml\n{component_yaml}```\n\n"


def render_pseudo_code(results: PseudoCodeResults) -> str:
    out = '## Pseudo Components\n\n```xml\n'
    for component in results.components.values():
        out += f"# {component.componentName}\n{component.pseudoCode}\n\n"
    out += '```\n\n'

    out += '## Frame Layouts\n\n```xml\n'
    for frame in results.frames.values():
        out += f"# {frame.frameName}\n{frame.pseudoCode}\n\n"
    out += '```\n'
    return out


def build_report(
    url_info: FigmaUrl,
    figma_data: Dict[str, Any],
    tokens: Dict[str, Any],
    canvases: List[Dict[str, Any]],
    instances: List[Dict[str, Any]],
    component_yaml: str,
    results: PseudoCodeResults,
) -> str:
    """Assemble the full Markdown report."""
    return ''.join([
        '# Figma Design Rules\n\n',
        render_file_info(url_info, figma_data),
        render_token_summary(tokens),
        render_typography(tokens),
        render_colors(tokens),
        render_canvases(canvases),
        render_instances(instances),
        render_component_structure(component_yaml),
        render_pseudo_code(results),
    ])


# ============================================================================
# Output files
# ============================================================================

def write_output(path: str, content: str) -> str:
    """Write a text file, creating parent directories. Returns the path."""
    try:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(content)
    except OSError as e:
        raise WriteError(f"Failed to write {path}: {e}") from e
    logger.debug("Wrote %d characters to %s", len(content), path)
    return path


def write_json(path: str, data: Any) -> str:
    """Write data as indented JSON."""
    return write_output(path, json.dumps(data, indent=2, ensure_ascii=False))
