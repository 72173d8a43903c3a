"""Shared test fixtures for figtell tests."""
import copy

import pytest

from figtell.providers import LLMProvider

ENV_VARS = (
    'FIGMA_ACCESS_TOKEN',
    'FIGMA_TOKEN',
    'ANTHROPIC_API_KEY',
    'CLAUDE_API_KEY',
    'OPENAI_API_KEY',
    'FIGMA_URL',
    'FIGTELL_CLAUDE_MODEL',
    'FIGTELL_OPENAI_MODEL',
    'FIGTELL_CLAUDE_MAX_PROMPT_TOKENS',
    'FIGTELL_OPENAI_MAX_PROMPT_TOKENS',
)

SAMPLE_URL = 'https://www.figma.com/design/KEY123/Sample%20File?node-id=1-1&t=abc'

DEFAULT_RESPONSES = {
    'create_pseudo_component': {'componentName': 'Fake', 'pseudoCode': '<Fake />'},
    'create_pseudo_frame': {'frameName': 'Fake', 'pseudoCode': '<Frame />'},
    'create_tailwind_config': {'config': 'module.exports = {};'},
}


class FakeProvider(LLMProvider):
    """Scripted provider: pops one response (dict or exception) per call."""

    def __init__(self, name='fake', responses=None, max_prompt_tokens=None):
        super().__init__(model='fake-model', max_prompt_tokens=max_prompt_tokens)
        self.name = name
        self.responses = list(responses or [])
        self.calls = []

    async def call_function(self, prompt, function):
        self.calls.append((prompt, function.name))
        response = self.responses.pop(0) if self.responses else DEFAULT_RESPONSES[function.name]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def make_provider():
    """Factory for scripted providers."""
    return FakeProvider


@pytest.fixture
def sleeps():
    """Records every delay instead of sleeping."""
    return []


@pytest.fixture
def fake_sleep(sleeps):
    async def _sleep(delay):
        sleeps.append(delay)
    return _sleep


@pytest.fixture
def figma_url():
    return SAMPLE_URL


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every environment variable figtell reads."""
    for name in ENV_VARS:
        # setenv first so teardown also undoes values loaded from .env files
        monkeypatch.setenv(name, '')
        monkeypatch.delenv(name)
    return monkeypatch


@pytest.fixture
def text_heading():
    """TEXT node named as an H1 heading."""
    return {
        'id': '1:2',
        'name': 'Heading H1',
        'type': 'TEXT',
        'characters': 'Welcome',
        'style': {
            'fontFamily': 'Inter',
            'fontWeight': 700,
            'fontSize': 32.0,
            'lineHeightPx': 40.0,
            'letterSpacing': 0,
        },
        'fills': [{'type': 'SOLID', 'color': {'r': 0, 'g': 0, 'b': 0, 'a': 1}}],
    }


@pytest.fixture
def text_body():
    """TEXT node classified as body copy."""
    return {
        'id': '1:3',
        'name': 'Body Text',
        'type': 'TEXT',
        'characters': 'Hello there',
        'style': {
            'fontFamily': 'Inter',
            'fontWeight': 400,
            'fontSize': 16,
            'lineHeightPx': 24,
            'letterSpacing': 0.5,
        },
    }


@pytest.fixture
def primary_rectangle():
    """RECTANGLE with one SOLID fill and a drop shadow."""
    return {
        'id': '1:4',
        'name': 'Primary/Fill',
        'type': 'RECTANGLE',
        'fills': [{'type': 'SOLID', 'color': {'r': 0.2, 'g': 0.4, 'b': 1.0, 'a': 1}}],
        'effects': [{
            'type': 'DROP_SHADOW', 'visible': True, 'radius': 4, 'spread': 0,
            'color': {'r': 0, 'g': 0, 'b': 0, 'a': 0.25},
            'offset': {'x': 0, 'y': 2},
        }],
    }


@pytest.fixture
def button_instance():
    """INSTANCE of the Button component with a fill style reference."""
    return {
        'id': '1:5',
        'name': 'Button',
        'type': 'INSTANCE',
        'componentId': '2:1',
        'styles': {'fill': 'S:1'},
        'fills': [{'type': 'SOLID', 'color': {'r': 0.2, 'g': 0.4, 'b': 1.0, 'a': 1}}],
        'effects': [],
        'x': 16,
        'y': 120,
        'absoluteBoundingBox': {'x': 10, 'y': 20, 'width': 120, 'height': 40},
    }


@pytest.fixture
def home_frame(text_heading, text_body, primary_rectangle, button_instance):
    """Top-level VERTICAL auto-layout frame without itemSpacing (297x332)."""
    return {
        'id': '1:1',
        'name': 'Home',
        'type': 'FRAME',
        'layoutMode': 'VERTICAL',
        'paddingTop': 16,
        'paddingRight': 16,
        'paddingBottom': 16,
        'paddingLeft': 16,
        'absoluteBoundingBox': {'x': 0, 'y': 0, 'width': 297.0, 'height': 332.0},
        'children': [text_heading, text_body, primary_rectangle, button_instance],
    }


@pytest.fixture
def button_component():
    return {
        'id': '2:1',
        'name': 'Button',
        'type': 'COMPONENT',
        'description': 'Primary button',
        'children': [],
    }


@pytest.fixture
def figma_document(home_frame, button_component):
    """DOCUMENT with one CANVAS holding a frame and a component."""
    return {
        'id': '0:0',
        'name': 'Document',
        'type': 'DOCUMENT',
        'children': [{
            'id': '0:1',
            'name': 'Page 1',
            'type': 'CANVAS',
            'backgroundColor': {'r': 1, 'g': 1, 'b': 1, 'a': 1},
            'prototypeStartNodeID': '1:1',
            'children': [home_frame, button_component],
        }],
    }


@pytest.fixture
def figma_file(figma_document):
    """Response of GET /v1/files/:key."""
    return {
        'name': 'Sample File',
        'lastModified': '2024-01-15T10:30:00Z',
        'document': figma_document,
        'styles': {
            'S:1': {'name': 'Brand/Primary', 'description': 'Main brand color', 'styleType': 'FILL'},
        },
    }


@pytest.fixture
def figma_file_copy(figma_file):
    """Independent deep copy, for mutation checks."""
    return copy.deepcopy(figma_file)
