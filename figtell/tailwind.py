"""
Tailwind theme generation.

Derives flat theme maps from the TokenSet, renders them as a
tailwind.config.js source, and optionally lets the LLM enhance that config.
"""

import json
import logging
import re
from typing import Any, Dict, Optional

from figtell.colors import figma_color_channels, format_number
from figtell.errors import ProviderError
from figtell.prompts import TAILWIND_FUNCTION, build_tailwind_prompt
from figtell.pseudo_generator import PseudoCodeGenerator, PseudoCodeResults
from figtell.tokens import HEADING_LEVELS

logger = logging.getLogger(__name__)

DEFAULT_TAILWIND_PATH = "tailwind.config.js"


def slugify(name: str) -> str:
    """Turn the last segment of a qualified token name into a theme key."""
    last = name.rsplit('/', 1)[-1]
    slug = re.sub(r'[^a-z0-9]+', '-', last.lower()).strip('-')
    return slug or 'token'


def _px(value: Any) -> str:
    return f"{format_number(value)}px"


def shadow_to_css(effect: Dict[str, Any]) -> str:
    """Render a DROP_SHADOW/INNER_SHADOW effect as a CSS box-shadow value."""
    offset = effect.get('offset') or {}
    color = effect.get('color') or {}
    r, g, b = figma_color_channels(color)
    alpha = round(color.get('a', 1), 2)
    inset = 'inset ' if effect.get('type') == 'INNER_SHADOW' else ''
    return (
        f"{inset}{_px(offset.get('x', 0))} {_px(offset.get('y', 0))} "
        f"{_px(effect.get('radius', 0))} {_px(effect.get('spread', 0))} "
        f"rgba({r}, {g}, {b}, {format_number(alpha)})"
    )


def build_tailwind_theme(tokens: Dict[str, Any]) -> Dict[str, Dict[str, str]]:
    """
    Build flat Tailwind theme maps from a TokenSet.

    Keys are slugified token names; when two tokens share a key, the first
    one in traversal order wins.
    """
    theme: Dict[str, Dict[str, str]] = {
        'colors': {},
        'fontSize': {},
        'spacing': {},
        'boxShadow': {},
    }

    for category, colors in tokens['colors'].items():
        for color in colors:
            key = slugify(color['name'])
            if category != 'other' and not key.startswith(category):
                key = f"{category}-{key}"
            theme['colors'].setdefault(key, color['hex'])

    typography = tokens['typography']
    for level in HEADING_LEVELS:
        for style in typography['headings'][level]:
            if style['style'].get('fontSize') is not None:
                theme['fontSize'].setdefault(level, _px(style['style']['fontSize']))
    for bucket in ('body', 'other'):
        for style in typography[bucket]:
            if style['style'].get('fontSize') is not None:
                key = 'body' if bucket == 'body' else slugify(style['name'])
                theme['fontSize'].setdefault(key, _px(style['style']['fontSize']))

    for spacing in tokens['spacing']:
        if spacing.get('itemSpacing') is not None:
            theme['spacing'].setdefault(slugify(spacing['name']), _px(spacing['itemSpacing']))

    for shadow in tokens['effects']['shadows']:
        theme['boxShadow'].setdefault(slugify(shadow['name']), shadow_to_css(shadow['value']))

    return theme


def render_tailwind_config(theme: Dict[str, Dict[str, str]]) -> str:
    """Render theme maps as a tailwind.config.js source file."""
    extend = json.dumps(theme, indent=2, ensure_ascii=False).replace('\n', '\n    ')
    return (
        "/** @type {import('tailwindcss').Config} */\n"
        "module.exports = {\n"
        "  content: ['./src/**/*.{html,js,jsx,ts,tsx,vue}'],\n"
        "  theme: {\n"
        f"    extend: {extend},\n"
        "  },\n"
        "  plugins: [],\n"
        "};\n"
    )


async def generate_tailwind_config(
    theme: Dict[str, Dict[str, str]],
    results: PseudoCodeResults,
    generator: Optional[PseudoCodeGenerator] = None,
) -> str:
    """
    Produce the tailwind.config.js source.

    With AI enabled, the theme and the pseudo-code results are sent to the
    LLM for one enhancement pass; any failure falls back to the plain
    rendering of the theme.
    """
    plain = render_tailwind_config(theme)
    if generator is None or not generator.enabled:
        return plain

    prompt = build_tailwind_prompt(theme, results.model_dump())
    try:
        arguments = await generator.call_function(prompt, TAILWIND_FUNCTION)
    except ProviderError as e:
        logger.warning("Tailwind enhancement failed, using extracted theme - %s", e)
        return plain

    config = arguments.get('config')
    if not isinstance(config, str) or ('module.exports' not in config and 'export default' not in config):
        logger.warning("Tailwind enhancement returned no usable config, using extracted theme")
        return plain
    return config if config.endswith('\n') else config + '\n'
