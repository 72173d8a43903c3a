"""Tests for prompt construction."""
from figtell.prompts import (
    build_component_prompt,
    build_component_styles,
    build_design_system,
    build_frame_prompt,
    canvas_metadata,
    determine_element_type,
    estimate_tokens,
    frame_chunks,
    resolve_style,
)
from figtell.tokens import process_design_tokens


class TestEstimateTokens:

    def test_four_chars_per_token(self):
        assert estimate_tokens('a' * 400) == 100
        assert estimate_tokens('') == 0

    def test_partial_tokens_are_kept(self):
        assert estimate_tokens('a' * 42) == 10.5
        assert estimate_tokens('abc') == 0.75


class TestDesignSystem:

    def test_summary(self, figma_document):
        system = build_design_system(process_design_tokens(figma_document))
        assert list(system['typography']['headings']) == ['h1']
        assert system['typography']['body']['fontSize'] == 16
        assert system['colors']['primary'] == [{
            'name': 'Document/Page 1/Home/Primary/Fill',
            'hex': '#3366ff',
            'rgb': '51,102,255',
            'opacity': 1,
        }]
        shadow = system['effects']['shadows'][0]
        assert shadow['color'] == {'hex': '#000000', 'rgb': '0,0,0', 'opacity': 0.25}
        assert shadow['radius'] == 4


class TestStyleResolution:

    def test_from_file_styles(self, figma_file):
        tokens = process_design_tokens(figma_file['document'])
        style = resolve_style('S:1', tokens, figma_file)
        assert style['name'] == 'Brand/Primary'
        assert style['description'] == 'Main brand color'

    def test_from_style_records(self, figma_file):
        tokens = process_design_tokens(figma_file['document'])
        style = resolve_style('S:1', tokens, {})
        assert style['name'] == 'Document/Page 1/Home/Button'
        assert style['description'] is None

    def test_unknown(self, figma_file):
        tokens = process_design_tokens(figma_file['document'])
        assert resolve_style('S:404', tokens, figma_file)['name'] == 'Unknown Style'

    def test_component_styles(self, figma_file):
        from figtell.canvases import process_component_instances

        tokens = process_design_tokens(figma_file['document'])
        instance = process_component_instances(figma_file['document'])[0]
        styles = build_component_styles(instance, tokens, figma_file)
        fill = styles['fills'][0]
        assert fill['styleId'] == 'S:1'
        assert fill['styleName'] == 'Brand/Primary'
        assert fill['color']['hex'] == '#3366ff'
        assert styles['styles']['fill']['type'] == 'fill'
        assert styles['effects'] == []


class TestComponentPrompt:

    def test_contains_component_details(self, figma_file):
        from figtell.canvases import process_component_instances

        tokens = process_design_tokens(figma_file['document'])
        instance = process_component_instances(figma_file['document'])[0]
        prompt = build_component_prompt(tokens['components'][0], instance, tokens, figma_file)
        assert 'Name: Document/Page 1/Button' in prompt
        assert 'Description: Primary button' in prompt
        assert 'Size: 120x40' in prompt
        assert '"styleName": "Brand/Primary"' in prompt
        assert prompt.endswith('preferring style references over direct values.')


class TestElementType:

    def test_image_rectangle(self):
        assert determine_element_type({'type': 'RECTANGLE', 'fills': [{'type': 'IMAGE', 'imageRef': 'x'}]}) == 'Image'
        assert determine_element_type({'type': 'RECTANGLE', 'fills': [{'type': 'SOLID'}]}) == 'Rectangle'

    def test_frames(self):
        assert determine_element_type({'type': 'FRAME', 'children': [{'type': 'TEXT'}]}) == 'Container'
        assert determine_element_type({'type': 'FRAME', 'children': [{'type': 'RECTANGLE'}]}) == 'Frame'

    def test_other_types_pass_through(self):
        assert determine_element_type({'type': 'VECTOR'}) == 'VECTOR'


class TestFramePrompt:

    def test_summary_lines(self, figma_document, home_frame):
        canvas = figma_document['children'][0]
        prompt = build_frame_prompt(home_frame, canvas, [{'name': 'Button'}])
        assert 'Name: Home' in prompt
        assert 'Layout: VERTICAL' in prompt
        assert 'Spacing: 0' in prompt
        assert 'Elements: 4' in prompt
        assert '- Button' in prompt

    def test_no_components(self, figma_document, home_frame):
        prompt = build_frame_prompt(home_frame, figma_document['children'][0], [])
        assert 'Available Components:\n- (none)' in prompt

    def test_canvas_metadata_excludes_children(self, figma_document):
        metadata = canvas_metadata(figma_document['children'][0])
        assert 'children' not in metadata
        assert metadata['name'] == 'Page 1'

    def test_custom_frame_data(self, figma_document, home_frame):
        prompt = build_frame_prompt(home_frame, figma_document['children'][0], [], frame_data={'id': 'chunk'})
        assert '"id": "chunk"' in prompt
        assert '"characters": "Welcome"' not in prompt


class TestFrameChunks:

    def test_metadata_then_child_slices(self):
        frame = {
            'id': 'f', 'name': 'Big', 'type': 'FRAME', 'layoutMode': 'HORIZONTAL',
            'absoluteBoundingBox': {'width': 100, 'height': 50},
            'children': [{'id': str(i)} for i in range(5)],
        }
        chunks = frame_chunks(frame, chunk_size=2)
        assert chunks[0] == {
            'id': 'f', 'name': 'Big', 'type': 'FRAME', 'layoutMode': 'HORIZONTAL',
            'size': {'width': 100, 'height': 50},
        }
        assert [c['childrenRange'] for c in chunks[1:]] == ['0-1', '2-3', '4-4']
        assert [len(c['children']) for c in chunks[1:]] == [2, 2, 1]

    def test_no_children(self):
        assert len(frame_chunks({'id': 'f', 'name': 'Empty'})) == 1
