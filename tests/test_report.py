"""Tests for the Markdown design rules report."""
import pytest

from figtell.canvases import generate_component_yaml, process_canvases, process_component_instances
from figtell.config import AIConfig
from figtell.errors import WriteError
from figtell.pseudo_generator import PseudoCodeGenerator, PseudoCodeResults, PseudoComponent, PseudoFrame
from figtell.report import (
    build_report,
    format_last_modified,
    render_colors,
    render_pseudo_code,
    render_typography,
    write_json,
    write_output,
)
from figtell.tokens import process_design_tokens
from figtell.url_parser import parse_figma_url

SAMPLE_URL = 'https://www.figma.com/design/KEY123/Sample%20File?node-id=1-1&t=abc'


async def render(figma_file):
    document = figma_file['document']
    tokens = process_design_tokens(document)
    instances = process_component_instances(document)
    results = await PseudoCodeGenerator(AIConfig.disabled()).generate_all(
        tokens['components'], instances, tokens, figma_file
    )
    return build_report(
        parse_figma_url(SAMPLE_URL),
        figma_file,
        tokens,
        process_canvases(document),
        instances,
        generate_component_yaml(tokens['components'], instances),
        results,
    )


class TestBuildReport:

    @pytest.mark.asyncio
    async def test_header_and_file_info(self, figma_file):
        report = await render(figma_file)
        assert report.startswith(
            '# Figma Design Rules\n\n'
            '## File Information\n'
            'Type: design\n'
            'File ID: KEY123\n'
            'Title: Sample File\n'
            'Node ID: 1-1\n'
            '\n'
            'File Name: Sample File\n'
            'Last Modified: 2024-01-15 10:30:00 UTC\n'
        )

    @pytest.mark.asyncio
    async def test_section_order(self, figma_file):
        report = await render(figma_file)
        headings = [line for line in report.splitlines() if line.startswith('## ')]
        assert headings == [
            '## File Information',
            '## Design Tokens Summary',
            '## Typography',
            '## Colors',
            '## Canvases and Frames',
            '## Component Instances',
            '## Component Structure',
            '## Pseudo Components',
            '## Frame Layouts',
        ]

    @pytest.mark.asyncio
    async def test_frame_details(self, figma_file):
        report = await render(figma_file)
        assert '##### Home\n- ID: 1:1\n- Size: 297x332\n- Layout: VERTICAL\n- Item Spacing: 0\n' in report
        assert '#### Frames (1)\n' in report
        assert '- Total Elements: 2\n' in report

    @pytest.mark.asyncio
    async def test_token_sections(self, figma_file):
        report = await render(figma_file)
        assert 'typography: 2, colors: 1, effects: 1, spacing: 1, components: 1, styles: 1' in report
        assert '### H1\n- Document/Page 1/Home/Heading H1\n  - Font: Inter (700)\n  - Size: 32px\n' in report
        assert '- HEX: #3366ff\n  - RGB: 51, 102, 255\n' in report

    @pytest.mark.asyncio
    async def test_instances_and_yaml(self, figma_file):
        report = await render(figma_file)
        assert '### Document/Page 1/Home/Button\n- ID: 1:5\n- Component ID: 2:1\n- Size: 120x40\n' in report
        assert '```yaml\ncomponents:\n  2:1:\n    name: "Document/Page 1/Button"\n' in report

    @pytest.mark.asyncio
    async def test_raw_pseudo_code_without_ai(self, figma_file):
        report = await render(figma_file)
        assert '## Pseudo Components\n\n```xml\n# Document/Page 1/Button\n# Document/Page 1/Button\n{' in report
        assert '# Home\n# Home (Canvas: Page 1)\n{' in report
        assert report.endswith('```\n')

    @pytest.mark.asyncio
    async def test_byte_identical_across_runs(self, figma_file):
        assert await render(figma_file) == await render(figma_file)


class TestSections:

    def test_body_and_other_typography(self, figma_document):
        tokens = process_design_tokens(figma_document)
        out = render_typography(tokens)
        assert '### BODY\n- Document/Page 1/Home/Body Text\n' in out
        assert '  - Letter Spacing: 0.5\n' in out
        assert '### OTHER' not in out

    def test_opacity_only_when_translucent(self):
        tokens = process_design_tokens({'id': '1', 'name': 'Overlay bg', 'type': 'RECTANGLE', 'fills': [
            {'type': 'SOLID', 'color': {'r': 0, 'g': 0, 'b': 0, 'a': 0.4}},
        ]})
        out = render_colors(tokens)
        assert '### BACKGROUND\n' in out
        assert '  - Opacity: 0.4\n' in out

    def test_pseudo_code_blocks(self):
        results = PseudoCodeResults(
            components={'A': PseudoComponent(componentName='Button', pseudoCode='<Button />')},
            frames={'F': PseudoFrame(frameName='Home', pseudoCode='<Home />')},
        )
        assert render_pseudo_code(results) == (
            '## Pseudo Components\n\n```xml\n# Button\n<Button />\n\n```\n\n'
            '## Frame Layouts\n\n```xml\n# Home\n<Home />\n\n```\n'
        )


class TestLastModified:

    def test_utc(self):
        assert format_last_modified('2024-01-15T10:30:00Z') == '2024-01-15 10:30:00 UTC'

    def test_missing(self):
        assert format_last_modified(None) == 'Unknown'

    def test_unparseable_is_kept(self):
        assert format_last_modified('yesterday') == 'yesterday'


class TestWriteOutput:

    def test_creates_parent_directories(self, tmp_path):
        path = tmp_path / 'out' / 'rules.md'
        write_output(str(path), '# Rules\n')
        assert path.read_text(encoding='utf-8') == '# Rules\n'

    def test_write_json(self, tmp_path):
        path = tmp_path / 'figma.json'
        write_json(str(path), {'name': 'Sample'})
        assert path.read_text(encoding='utf-8') == '{\n  "name": "Sample"\n}'

    def test_failure_raises_write_error(self, tmp_path):
        blocker = tmp_path / 'blocker'
        blocker.write_text('not a directory')
        with pytest.raises(WriteError):
            write_output(str(blocker / 'rules.md'), 'x')


class TestSingleFrameScenario:
    """One CANVAS with one VERTICAL frame, no components or instances."""

    FIGMA_FILE = {
        'name': 'Scenario',
        'lastModified': '2024-01-15T10:30:00Z',
        'document': {
            'id': '0:0', 'name': 'Document', 'type': 'DOCUMENT',
            'children': [{
                'id': '0:1', 'name': 'Page 1', 'type': 'CANVAS',
                'children': [{
                    'id': '1:1', 'name': 'Screen', 'type': 'FRAME', 'layoutMode': 'VERTICAL',
                    'absoluteBoundingBox': {'x': 0, 'y': 0, 'width': 297, 'height': 332},
                    'children': [],
                }],
            }],
        },
    }

    @pytest.mark.asyncio
    async def test_report(self):
        report = await render(self.FIGMA_FILE)
        assert (
            '## Canvases and Frames\n\n'
            '### Page 1\n- ID: 0:1\n- Type: CANVAS\n- Total Elements: 1\n'
            '\n#### Frames (1)\n'
            '\n##### Screen\n- ID: 1:1\n- Size: 297x332\n- Layout: VERTICAL\n- Item Spacing: 0\n'
            '\n## Component Instances\n\n## Component Structure\n'
        ) in report
        assert '## Frame Layouts\n\n```xml\n# Screen\n# Screen (Canvas: Page 1)\n{\n  "id": "1:1",' in report
