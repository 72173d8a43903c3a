"""
Canvas, frame and component-instance extraction.

Two walks over the same document as figtell.tokens, kept separate because
they filter differently and emit different shapes, plus the YAML-like
component manifest consumed verbatim by the report.
"""

from typing import Any, Dict, List, Optional

from figtell.tokens import build_padding, qualified_name


def _size(node: Dict[str, Any]) -> Dict[str, Any]:
    bbox = node.get('absoluteBoundingBox') or {}
    return {
        'width': bbox.get('width') or None,
        'height': bbox.get('height') or None,
    }


def _position(node: Dict[str, Any]) -> Dict[str, Any]:
    """Parent-relative x/y as Figma reports them, 0 when absent."""
    return {'x': node.get('x') or 0, 'y': node.get('y') or 0}


def summarize_frame(frame: Dict[str, Any]) -> Dict[str, Any]:
    """Build a FrameSummary from a FRAME node."""
    return {
        'id': frame.get('id'),
        'name': frame.get('name'),
        'type': frame.get('type'),
        'size': _size(frame),
        'position': _position(frame),
        'background': frame.get('backgroundColor'),
        'layoutMode': frame.get('layoutMode'),
        'itemSpacing': frame.get('itemSpacing'),
        'padding': build_padding(frame),
        'constraints': frame.get('constraints'),
        'clipsContent': frame.get('clipsContent'),
        'elements': len(frame.get('children') or []),
    }


def frame_nodes(canvas: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Return the direct FRAME children of a canvas."""
    return [child for child in canvas.get('children') or [] if child.get('type') == 'FRAME']


def process_canvases(document: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Summarize every canvas (page) of the document with its top-level frames.

    Only direct FRAME children become frame summaries; `children` keeps the
    raw child count of the canvas.
    """
    if not document or not document.get('children'):
        return []

    canvases = []
    for canvas in document['children']:
        children = canvas.get('children') or []
        canvases.append({
            'id': canvas.get('id'),
            'name': canvas.get('name'),
            'type': canvas.get('type'),
            'backgroundColor': canvas.get('backgroundColor'),
            'children': len(children),
            'size': _size(canvas),
            'constraints': canvas.get('constraints') or None,
            'exportSettings': canvas.get('exportSettings') or [],
            'flowStartingPoints': canvas.get('flowStartingPoints') or [],
            'prototypeStartNode': canvas.get('prototypeStartNodeID') or None,
            'frames': [summarize_frame(frame) for frame in frame_nodes(canvas)],
        })
    return canvases


def process_component_instances(
    node: Optional[Dict[str, Any]],
    instances: Optional[List[Dict[str, Any]]] = None,
    parent_name: str = '',
) -> List[Dict[str, Any]]:
    """Recursively collect every INSTANCE node in document order."""
    if instances is None:
        instances = []
    if not node:
        return instances

    full_name = qualified_name(node, parent_name)

    if node.get('type') == 'INSTANCE':
        instances.append({
            'id': node.get('id'),
            'name': full_name,
            'componentId': node.get('componentId'),
            'mainComponent': node.get('mainComponent'),
            'styles': node.get('styles') or None,
            'fills': node.get('fills') or [],
            'effects': node.get('effects') or [],
            'position': _position(node),
            'size': _size(node),
        })

    for child in node.get('children') or []:
        process_component_instances(child, instances, full_name)

    return instances


def instances_of(component: Dict[str, Any], instances: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Return the instances that reference a component."""
    return [instance for instance in instances if instance.get('componentId') == component.get('id')]


def generate_component_yaml(components: List[Dict[str, Any]], instances: List[Dict[str, Any]]) -> str:
    """
    Render the component -> instances manifest.

    Instances pointing at an unknown component are left out. The text layout
    (field order, 2-space indents, double-quoted names) is part of the report
    format.
    """
    component_map: Dict[str, Dict[str, Any]] = {}
    for component in components:
        component_map[component['id']] = {
            'name': component.get('name'),
            'type': component.get('type'),
            'description': component.get('description'),
            'instances': [],
        }

    for instance in instances:
        entry = component_map.get(instance.get('componentId'))
        if entry is not None:
            entry['instances'].append({'id': instance['id'], 'name': instance['name']})

    lines = ['components:']
    for component_id, value in component_map.items():
        lines.append(f"  {component_id}:")
        lines.append(f'    name: "{value["name"]}"')
        lines.append(f"    type: {value['type']}")
        if value['description']:
            lines.append(f'    description: "{value["description"]}"')
        if value['instances']:
            lines.append('    instances:')
            for instance in value['instances']:
                lines.append(f"      - id: {instance['id']}")
                lines.append(f'        name: "{instance["name"]}"')
        lines.append('')

    return '\n'.join(lines) + '\n'
