"""
Design token extraction.

A single recursive pre-order walk over the Figma document that files each
node into the TokenSet buckets below. Bucket order follows traversal order,
so the same document always yields the same TokenSet.
"""

import re
from typing import Any, Dict, Optional

from figtell.colors import figma_color_channels, rgb_to_hex

HEADING_LEVELS = ('h1', 'h2', 'h3', 'h4', 'h5', 'h6')
COLOR_CATEGORIES = ('primary', 'secondary', 'text', 'background', 'other')
EFFECT_CATEGORIES = ('shadows', 'blurs', 'other')

SHADOW_EFFECTS = ('DROP_SHADOW', 'INNER_SHADOW')
BLUR_EFFECTS = ('LAYER_BLUR', 'BACKGROUND_BLUR')

_HEADING_PATTERN = re.compile(r'h([1-6])')


def new_token_set() -> Dict[str, Any]:
    """Return an empty TokenSet with every bucket present."""
    return {
        'typography': {
            'headings': {level: [] for level in HEADING_LEVELS},
            'body': [],
            'other': [],
        },
        'colors': {category: [] for category in COLOR_CATEGORIES},
        'spacing': [],
        'effects': {category: [] for category in EFFECT_CATEGORIES},
        'components': [],
        'styles': [],
    }


def qualified_name(node: Dict[str, Any], parent_name: str = '') -> str:
    """Join the ancestor path and the node name with '/'."""
    name = node.get('name', '')
    return f"{parent_name}/{name}" if parent_name else name


# ============================================================================
# Classification helpers
# ============================================================================

def heading_level(name: str) -> Optional[str]:
    """Return 'h1'..'h6' when a lower-cased node name carries a level marker."""
    match = _HEADING_PATTERN.search(name)
    return f"h{match.group(1)}" if match else None


def typography_bucket(name: str) -> Optional[str]:
    """
    Pick the typography bucket for a TEXT node's own name.

    A name that says "heading" without an h1-h6 marker returns None: the node
    is a heading of no known level and is not filed anywhere.
    """
    name_lower = name.lower()
    if 'heading' in name_lower or _HEADING_PATTERN.search(name_lower):
        return heading_level(name_lower)
    if 'body' in name_lower or 'text' in name_lower or 'paragraph' in name_lower:
        return 'body'
    return 'other'


def color_category(name: str) -> str:
    """Pick the color bucket for a shape node's own name."""
    name_lower = name.lower()
    if 'primary' in name_lower:
        return 'primary'
    if 'secondary' in name_lower:
        return 'secondary'
    if 'text' in name_lower or 'typography' in name_lower:
        return 'text'
    if 'background' in name_lower or 'bg' in name_lower:
        return 'background'
    return 'other'


def effect_category(effect_type: Optional[str]) -> str:
    if effect_type in SHADOW_EFFECTS:
        return 'shadows'
    if effect_type in BLUR_EFFECTS:
        return 'blurs'
    return 'other'


# ============================================================================
# Token builders
# ============================================================================

def build_color_token(node: Dict[str, Any], full_name: str, fill: Dict[str, Any]) -> Dict[str, Any]:
    """Build a ColorToken from a SOLID fill."""
    color = fill.get('color', {})
    r, g, b = figma_color_channels(color)
    return {
        'id': node.get('id'),
        'name': full_name,
        'color': {'r': r, 'g': g, 'b': b, 'a': color.get('a')},
        'hex': rgb_to_hex(r, g, b),
        'opacity': color.get('a'),
    }


def build_typography_token(node: Dict[str, Any], full_name: str) -> Dict[str, Any]:
    style = node.get('style') or {}
    return {
        'id': node.get('id'),
        'name': full_name,
        'content': node.get('characters'),
        'style': {
            'fontFamily': style.get('fontFamily'),
            'fontWeight': style.get('fontWeight'),
            'fontSize': style.get('fontSize'),
            'lineHeight': style.get('lineHeightPx') or style.get('lineHeight'),
            'letterSpacing': style.get('letterSpacing'),
            'textCase': style.get('textCase'),
            'textDecoration': style.get('textDecoration'),
            'textAlignHorizontal': style.get('textAlignHorizontal'),
            'paragraphSpacing': style.get('paragraphSpacing'),
            'fills': node.get('fills'),
        },
    }


def build_padding(node: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'top': node.get('paddingTop'),
        'right': node.get('paddingRight'),
        'bottom': node.get('paddingBottom'),
        'left': node.get('paddingLeft'),
    }


# ============================================================================
# Tree walk
# ============================================================================

def process_design_tokens(
    node: Optional[Dict[str, Any]],
    tokens: Optional[Dict[str, Any]] = None,
    parent_name: str = '',
) -> Dict[str, Any]:
    """
    Recursively classify a Figma node tree into a TokenSet.

    Args:
        node: Figma document (or any subtree); never mutated
        tokens: TokenSet to append to, a fresh one when omitted
        parent_name: qualified name of the parent node

    Returns:
        dict: the TokenSet
    """
    if tokens is None:
        tokens = new_token_set()
    if not node:
        return tokens

    full_name = qualified_name(node, parent_name)
    node_type = node.get('type')

    if node_type in ('COMPONENT', 'COMPONENT_SET'):
        tokens['components'].append({
            'id': node.get('id'),
            'name': full_name,
            'type': node_type,
            'description': node.get('description') or None,
            'styles': node.get('styles') or None,
        })

    elif node_type == 'TEXT':
        bucket = typography_bucket(node.get('name', ''))
        if bucket in HEADING_LEVELS:
            tokens['typography']['headings'][bucket].append(build_typography_token(node, full_name))
        elif bucket is not None:
            tokens['typography'][bucket].append(build_typography_token(node, full_name))

    elif node_type in ('RECTANGLE', 'VECTOR', 'ELLIPSE'):
        category = color_category(node.get('name', ''))
        for fill in node.get('fills') or []:
            if fill.get('type') == 'SOLID':
                tokens['colors'][category].append(build_color_token(node, full_name, fill))

        for effect in node.get('effects') or []:
            tokens['effects'][effect_category(effect.get('type'))].append({
                'id': node.get('id'),
                'name': full_name,
                'type': effect.get('type'),
                'value': effect,
            })

    elif node_type == 'FRAME':
        if node.get('layoutMode') in ('VERTICAL', 'HORIZONTAL'):
            tokens['spacing'].append({
                'id': node.get('id'),
                'name': full_name,
                'type': node.get('layoutMode'),
                'itemSpacing': node.get('itemSpacing'),
                'padding': build_padding(node),
            })

    if node.get('styles'):
        tokens['styles'].append({
            'id': node.get('id'),
            'name': full_name,
            'styles': node['styles'],
        })

    for child in node.get('children') or []:
        process_design_tokens(child, tokens, full_name)

    return tokens


def count_tokens(tokens: Dict[str, Any]) -> Dict[str, int]:
    """Count tokens per top-level category."""
    typography = tokens['typography']
    return {
        'typography': sum(len(styles) for styles in typography['headings'].values())
        + len(typography['body'])
        + len(typography['other']),
        'colors': sum(len(colors) for colors in tokens['colors'].values()),
        'effects': sum(len(effects) for effects in tokens['effects'].values()),
        'spacing': len(tokens['spacing']),
        'components': len(tokens['components']),
        'styles': len(tokens['styles']),
    }


def format_token_count(tokens: Dict[str, Any]) -> str:
    """Render token counts as "typography: N, colors: N, ..."."""
    return ', '.join(f"{key}: {value}" for key, value in count_tokens(tokens).items())
