"""Color and number formatting helpers shared by the processors and the report."""

import math
from typing import Any, Dict, Optional, Tuple


def to_channel(value: float) -> int:
    """Scale a Figma [0, 1] color channel to an integer in [0, 255].

    Rounds half up like JavaScript's Math.round, so 0.5 * 255 -> 128.
    """
    return int(math.floor(value * 255 + 0.5))


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Convert integer RGB channels to a lowercase #rrggbb string."""
    return f"#{r:02x}{g:02x}{b:02x}"


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """Parse #rgb or #rrggbb into integer channels."""
    value = hex_color.lstrip('#')
    if len(value) == 3:
        value = ''.join(c * 2 for c in value)
    if len(value) != 6:
        raise ValueError(f"Invalid hex color: {hex_color}")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def hex_to_rgb_string(hex_color: str) -> str:
    """Convert #rrggbb to the "r,g,b" form used in prompts."""
    r, g, b = hex_to_rgb(hex_color)
    return f"{r},{g},{b}"


def figma_color_channels(color: Dict[str, float]) -> Tuple[int, int, int]:
    """Scale a Figma color dict to integer RGB channels."""
    return (
        to_channel(color.get('r', 0)),
        to_channel(color.get('g', 0)),
        to_channel(color.get('b', 0)),
    )


def describe_color(color: Optional[Dict[str, float]]) -> Optional[Dict[str, Any]]:
    """Annotate a Figma color with hex, "r,g,b" and opacity."""
    if not color:
        return None
    r, g, b = figma_color_channels(color)
    return {
        'hex': rgb_to_hex(r, g, b),
        'rgb': f"{r},{g},{b}",
        'opacity': color.get('a'),
    }


def format_number(value: Any) -> str:
    """Render a value the way the report expects.

    Integral floats drop their fractional part (297.0 -> "297") and a missing
    value renders as "n/a".
    """
    if value is None:
        return 'n/a'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
