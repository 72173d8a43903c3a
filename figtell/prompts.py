"""
Prompt construction for pseudo-code generation.

Prompts embed a condensed design-system summary, the artifact's own
attributes, a fixed requirement list and a one-shot example of the
pseudo-XML shape we want back.
"""

import json
from typing import Any, Dict, List, Optional

from figtell.colors import describe_color
from figtell.providers import FunctionSpec
from figtell.tokens import HEADING_LEVELS

CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> float:
    """Rough token estimate: one token per four characters, not rounded."""
    return len(text) / CHARS_PER_TOKEN


def to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


# ============================================================================
# Function schemas
# ============================================================================

COMPONENT_FUNCTION = FunctionSpec(
    name="create_pseudo_component",
    description=(
        "Generate a pseudo-XML component based on Figma component details. The component should "
        "include all styling information, using style references when available and direct values "
        "when not. The output should be valid XML-like syntax with proper nesting and attribute "
        "formatting. Consider accessibility, maintainability, and design system consistency in the output."
    ),
    parameters={
        "type": "object",
        "properties": {
            "componentName": {
                "type": "string",
                "description": "The name of the component",
            },
            "pseudoCode": {
                "type": "string",
                "description": (
                    "The pseudo-XML code for the component with detailed styling, including "
                    "accessibility attributes, style references, and comprehensive documentation"
                ),
            },
        },
        "required": ["componentName", "pseudoCode"],
    },
)

FRAME_FUNCTION = FunctionSpec(
    name="create_pseudo_frame",
    description=(
        "Generate a semantic, accessible pseudo-XML frame layout based on Figma frame details. "
        "Focus on capturing layout structure, styling, and component relationships in a maintainable format."
    ),
    parameters={
        "type": "object",
        "properties": {
            "frameName": {
                "type": "string",
                "description": "The name of the frame",
            },
            "pseudoCode": {
                "type": "string",
                "description": "The semantic pseudo-XML code for the frame layout",
            },
            "layout": {
                "type": "object",
                "description": "Layout system details",
                "properties": {
                    "type": {"type": "string", "enum": ["stack", "grid", "free"]},
                    "direction": {"type": "string", "enum": ["vertical", "horizontal"]},
                    "spacing": {"type": "number", "description": "Space between elements"},
                    "padding": {
                        "type": "object",
                        "properties": {
                            "top": {"type": "number"},
                            "right": {"type": "number"},
                            "bottom": {"type": "number"},
                            "left": {"type": "number"},
                        },
                    },
                },
            },
        },
        "required": ["frameName", "pseudoCode"],
    },
)

TAILWIND_FUNCTION = FunctionSpec(
    name="create_tailwind_config",
    description="Generate a complete tailwind.config.js source file for the design system.",
    parameters={
        "type": "object",
        "properties": {
            "config": {
                "type": "string",
                "description": "JavaScript source of tailwind.config.js",
            },
        },
        "required": ["config"],
    },
)


# ============================================================================
# Design system summary
# ============================================================================

def _color_entry(token: Dict[str, Any]) -> Dict[str, Any]:
    color = token['color']
    return {
        'name': token['name'],
        'hex': token['hex'],
        'rgb': f"{color['r']},{color['g']},{color['b']}",
        'opacity': token['opacity'],
    }


def build_design_system(tokens: Dict[str, Any]) -> Dict[str, Any]:
    """Condense a TokenSet into the summary embedded in component prompts."""
    headings = {}
    for level in HEADING_LEVELS:
        styles = tokens['typography']['headings'][level]
        if styles:
            headings[level] = styles[0]['style']
    body = tokens['typography']['body']

    return {
        'typography': {
            'headings': headings,
            'body': body[0]['style'] if body else None,
        },
        'colors': {
            category: [_color_entry(token) for token in colors]
            for category, colors in tokens['colors'].items()
        },
        'spacing': [
            {'name': s['name'], 'value': s['itemSpacing'], 'padding': s['padding']}
            for s in tokens['spacing']
        ],
        'effects': {
            'shadows': [
                {
                    'name': s['name'],
                    'type': s['type'],
                    **s['value'],
                    'color': describe_color(s['value'].get('color')),
                }
                for s in tokens['effects']['shadows']
            ],
            'blurs': [
                {'name': b['name'], 'type': b['type'], **b['value']}
                for b in tokens['effects']['blurs']
            ],
        },
    }


# ============================================================================
# Component-specific styles
# ============================================================================

def resolve_style(style_id: str, tokens: Dict[str, Any], figma_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Look up a style id in the file's style definitions and the TokenSet.

    The file-level `styles` map carries the published name and description;
    otherwise the first node that references the style lends its name.
    """
    definition = (figma_data.get('styles') or {}).get(style_id)
    name = definition.get('name') if definition else None
    if not name:
        for record in tokens['styles']:
            if style_id in (record.get('styles') or {}).values():
                name = record['name']
                break
    return {
        'id': style_id,
        'name': name or 'Unknown Style',
        'description': definition.get('description') if definition else None,
        'value': definition,
    }


def _style_ref(instance: Dict[str, Any], *keys: str) -> Optional[str]:
    styles = instance.get('styles') or {}
    for key in keys:
        if styles.get(key):
            return styles[key]
    return None


def build_component_styles(
    instance: Dict[str, Any],
    tokens: Dict[str, Any],
    figma_data: Dict[str, Any],
) -> Dict[str, Any]:
    """Resolve an instance's fills, effects and style references for the prompt."""
    fill_style = _style_ref(instance, 'fills', 'fill')
    effect_style = _style_ref(instance, 'effects', 'effect')

    fills = []
    for fill in instance.get('fills') or []:
        if fill.get('type') != 'SOLID':
            fills.append(fill)
            continue
        entry: Dict[str, Any] = {'type': fill['type']}
        if fill_style:
            style = resolve_style(fill_style, tokens, figma_data)
            entry.update({
                'styleId': fill_style,
                'styleName': style['name'],
                'styleType': 'fill',
                'description': style['description'],
            })
        entry['color'] = describe_color(fill.get('color'))
        fills.append(entry)

    effects = []
    for effect in instance.get('effects') or []:
        if not effect_style:
            effects.append(effect)
            continue
        style = resolve_style(effect_style, tokens, figma_data)
        effects.append({
            'type': effect.get('type'),
            'styleId': effect_style,
            'styleName': style['name'],
            'styleType': 'effect',
            'description': style['description'],
            'value': {**effect, 'color': describe_color(effect.get('color'))},
        })

    styles = {}
    for key, style_id in (instance.get('styles') or {}).items():
        style = resolve_style(style_id, tokens, figma_data)
        styles[key] = {**style, 'type': key}

    return {'styles': styles, 'fills': fills, 'effects': effects}


# ============================================================================
# Prompts
# ============================================================================

COMPONENT_REQUIREMENTS = """Requirements:
1. Generate semantic, accessible pseudo-XML code that represents this component
2. Use style references (styleId) when available instead of direct values
3. Include ALL styling details (colors, shadows, effects) with exact values
4. Include ARIA attributes and roles for accessibility
5. Document style decisions and token usage in comments
6. Specify exact padding, margins, and spacing values
7. Include responsive behavior hints
8. Add semantic class names and data attributes
9. Include state handling (hover, focus, active)
10. Document any accessibility considerations

Example format:
<Button
  styleId="style_123"
  role="button"
  aria-label="Primary action button"
  data-component="primary-button"
  className="primary-action-btn"
  states="hover:opacity-80 focus:ring-2"
>
  <Icon name="star" fills="style_id_234" />
  <Text fills="style_id_567" font-size="16px">Click me</Text>
</Button>

Generate ONLY the pseudo-XML code with detailed styling attributes, preferring style references over direct values."""

FRAME_REQUIREMENTS = """Requirements:
1. Use semantic element types (Container, Image, Text) based on content
2. Include complete font details for all text elements
3. Use stack-based layout with proper direction and alignment
4. Include border radius and effects when present
5. Only use position information for free layout or absolute positioning
6. Convert Rectangle to Image only when image evidence exists
7. Preserve all text content exactly as specified
8. Keep styling information semantic and complete
9. Maintain proper nesting and hierarchy
10. Focus on maintainability and readability

Example format:
<Container name="Card" layout="stack" direction="vertical" spacing="16">
    <Image name="Thumbnail" fill="stretch" cornerRadius="8,8,0,0" imageRef="abc123" />
    <Text
        content="Heading"
        typography={{ font: { family: "Inter", weight: 600, size: 16, lineHeight: "24px" },
                      color: { hex: "#000000", opacity: 1 } }}
    />
</Container>

Generate ONLY the pseudo-XML code without any additional explanation. Ensure all text content and styling from the frame data is accurately represented."""


def build_component_prompt(
    component: Dict[str, Any],
    instance: Dict[str, Any],
    tokens: Dict[str, Any],
    figma_data: Dict[str, Any],
) -> str:
    """Prompt for one component, using its first instance for size and styles."""
    size = instance.get('size') or {}
    return f"""Design System Details:

```
{to_json(build_design_system(tokens))}
```

Component to Generate:
Name: {component['name']}
Type: {component['type']}
Description: {component.get('description') or 'No description provided'}
Size: {size.get('width')}x{size.get('height')}

Component Specific Styles and References:
```
{to_json(build_component_styles(instance, tokens, figma_data))}
```

{COMPONENT_REQUIREMENTS}"""


def determine_element_type(node: Dict[str, Any]) -> str:
    """Name the semantic element a node most likely represents."""
    node_type = node.get('type', '')
    if node_type == 'RECTANGLE':
        for fill in node.get('fills') or []:
            if fill.get('type') == 'IMAGE' or fill.get('imageRef') or fill.get('imageHash'):
                return 'Image'
        return 'Rectangle'
    if node_type == 'FRAME':
        children = node.get('children') or []
        if all(child.get('type') == 'TEXT' or child.get('layoutMode') == 'VERTICAL' for child in children):
            return 'Container'
        return 'Frame'
    return node_type


def canvas_metadata(canvas: Dict[str, Any]) -> Dict[str, Any]:
    """Canvas attributes without its children."""
    return {key: value for key, value in canvas.items() if key != 'children'}


def build_frame_prompt(
    frame: Dict[str, Any],
    canvas: Dict[str, Any],
    components: List[Dict[str, Any]],
    frame_data: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Prompt for one top-level frame.

    Args:
        frame: raw FRAME node
        canvas: raw CANVAS node containing the frame
        components: ComponentRecords; only their names are listed
        frame_data: what to embed as frame data, the whole frame by default
    """
    bbox = frame.get('absoluteBoundingBox') or {}
    canvas_bbox = canvas.get('absoluteBoundingBox') or {}
    padding = {
        'top': frame.get('paddingTop') or 0,
        'right': frame.get('paddingRight') or 0,
        'bottom': frame.get('paddingBottom') or 0,
        'left': frame.get('paddingLeft') or 0,
    }
    component_list = '\n'.join(f"- {c['name']}" for c in components) or '- (none)'

    return f"""Frame Summary:
Name: {frame.get('name')}
Type: {determine_element_type(frame)}
Size: {bbox.get('width', 0)}x{bbox.get('height', 0)}
Layout: {frame.get('layoutMode') or 'FREE'}
Spacing: {frame.get('itemSpacing') or 0}
Padding: {json.dumps(padding)}
Elements: {len(frame.get('children') or [])}

Canvas Summary:
Name: {canvas.get('name')}
Type: {canvas.get('type')}
Size: {canvas_bbox.get('width', 0)}x{canvas_bbox.get('height', 0)}

Available Components:
{component_list}

Complete Frame Data:
```
{to_json(frame if frame_data is None else frame_data)}
```

Complete Canvas Data:
```
{to_json(canvas_metadata(canvas))}
```

{FRAME_REQUIREMENTS}"""


def frame_chunks(frame: Dict[str, Any], chunk_size: int = 2) -> List[Dict[str, Any]]:
    """
    Split a frame into metadata plus slices of its children.

    The first chunk carries only id, name, type, layout and size; each
    following chunk carries `chunk_size` children and their index range.
    """
    bbox = frame.get('absoluteBoundingBox') or {}
    chunks = [{
        'id': frame.get('id'),
        'name': frame.get('name'),
        'type': frame.get('type'),
        'layoutMode': frame.get('layoutMode'),
        'size': {'width': bbox.get('width'), 'height': bbox.get('height')},
    }]

    children = frame.get('children') or []
    for start in range(0, len(children), chunk_size):
        batch = children[start:start + chunk_size]
        chunks.append({
            'id': frame.get('id'),
            'name': frame.get('name'),
            'childrenRange': f"{start}-{start + len(batch) - 1}",
            'children': batch,
        })
    return chunks


def build_tailwind_prompt(theme: Dict[str, Any], pseudo_code: Dict[str, Any]) -> str:
    """Prompt for the one-shot Tailwind enhancement pass."""
    return f"""Tailwind Theme Extracted From Figma:
```
{to_json(theme)}
```

Pseudo Components and Frames:
```
{to_json(pseudo_code)}
```

Requirements:
1. Produce a complete tailwind.config.js using module.exports
2. Keep every color, font size, spacing and shadow value from the extracted theme
3. Add semantic aliases (e.g. primary, surface, heading) where the pseudo code suggests them
4. Do not invent values that are not backed by the theme
5. Return ONLY the JavaScript source"""
