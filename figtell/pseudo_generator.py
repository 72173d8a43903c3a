"""
Pseudo-code generation.

Turns components and top-level frames into pseudo-XML descriptions through
an LLM provider. Every artifact is independent: a provider failure for one
of them is logged and replaced by a raw JSON rendering, never fatal.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from figtell.canvases import frame_nodes, instances_of
from figtell.config import AIConfig
from figtell.errors import ProviderError, RateLimitError
from figtell.prompts import (
    COMPONENT_FUNCTION,
    FRAME_FUNCTION,
    build_component_prompt,
    build_frame_prompt,
    estimate_tokens,
    frame_chunks,
    to_json,
)
from figtell.providers import FunctionSpec, LLMProvider

logger = logging.getLogger(__name__)

Sleeper = Callable[[float], Awaitable[Any]]
Progress = Callable[[str], None]


class PseudoComponent(BaseModel):
    """Pseudo-XML rendering of a component."""
    model_config = ConfigDict(extra='ignore')

    componentName: str
    pseudoCode: str


class PseudoFrame(BaseModel):
    """Pseudo-XML rendering of a top-level frame."""
    model_config = ConfigDict(extra='ignore')

    frameName: str
    pseudoCode: str


class PseudoCodeResults(BaseModel):
    """Results keyed by component id and frame id, in generation order."""

    components: Dict[str, PseudoComponent] = Field(default_factory=dict)
    frames: Dict[str, PseudoFrame] = Field(default_factory=dict)


def component_fallback(component: Dict[str, Any], instance: Dict[str, Any]) -> PseudoComponent:
    return PseudoComponent(
        componentName=component['name'],
        pseudoCode=f"# {component['name']}\n{to_json(instance)}",
    )


def frame_fallback(frame: Dict[str, Any], canvas: Dict[str, Any]) -> PseudoFrame:
    return PseudoFrame(
        frameName=frame.get('name', ''),
        pseudoCode=f"# {frame.get('name')} (Canvas: {canvas.get('name')})\n{to_json(frame)}",
    )


class PseudoCodeGenerator:
    """Generates pseudo-code for components and frames with the configured providers."""

    def __init__(self, ai_config: AIConfig, sleep: Sleeper = asyncio.sleep):
        self._config = ai_config
        self._sleep = sleep

    @property
    def enabled(self) -> bool:
        return self._config.enabled

    # ------------------------------------------------------------------
    # Provider calls
    # ------------------------------------------------------------------

    def select_provider(self, prompt: str) -> LLMProvider:
        """Route oversized prompts to the fallback provider when one exists."""
        primary = self._config.primary
        if primary is None:
            raise ProviderError("AI is disabled", provider="none")

        estimated = estimate_tokens(prompt)
        fallback = self._config.fallback
        if fallback is not None and primary.exceeds_ceiling(estimated):
            logger.info(
                "Prompt of ~%.0f tokens exceeds %s ceiling (%d); using %s",
                estimated, primary.name, primary.max_prompt_tokens, fallback.name,
            )
            return fallback
        return primary

    def backoff_delay(self, attempt: int) -> float:
        return min(self._config.retry_base_delay * 2 ** attempt, self._config.retry_max_delay)

    async def call_with_backoff(
        self,
        provider: LLMProvider,
        prompt: str,
        function: FunctionSpec,
    ) -> Dict[str, Any]:
        """Call a provider, retrying rate-limit errors with exponential backoff."""
        attempt = 0
        while True:
            try:
                return await provider.call_function(prompt, function)
            except RateLimitError:
                if attempt >= self._config.max_retries:
                    raise
                delay = self.backoff_delay(attempt)
                logger.info(
                    "%s rate limited; retry %d/%d in %.1fs",
                    provider.name, attempt + 1, self._config.max_retries, delay,
                )
                await self._sleep(delay)
                attempt += 1

    async def call_function(self, prompt: str, function: FunctionSpec) -> Dict[str, Any]:
        """Route a prompt to a provider and call it with backoff."""
        provider = self.select_provider(prompt)
        return await self.call_with_backoff(provider, prompt, function)

    # ------------------------------------------------------------------
    # Artifacts
    # ------------------------------------------------------------------

    async def generate_component(
        self,
        component: Dict[str, Any],
        instance: Dict[str, Any],
        tokens: Dict[str, Any],
        figma_data: Dict[str, Any],
    ) -> PseudoComponent:
        """Generate pseudo-code for one component from its first instance."""
        if not self.enabled:
            return component_fallback(component, instance)

        prompt = build_component_prompt(component, instance, tokens, figma_data)
        try:
            arguments = await self.call_function(prompt, COMPONENT_FUNCTION)
            return PseudoComponent.model_validate(arguments)
        except (ProviderError, ValidationError) as e:
            logger.warning("Skipping pseudo generation for component %s - %s", component['name'], e)
            return component_fallback(component, instance)

    async def generate_frame(
        self,
        frame: Dict[str, Any],
        canvas: Dict[str, Any],
        components: List[Dict[str, Any]],
    ) -> PseudoFrame:
        """Generate pseudo-code for one top-level frame, chunking it when it is too large."""
        if not self.enabled:
            return frame_fallback(frame, canvas)

        prompt = build_frame_prompt(frame, canvas, components)
        try:
            provider = self.select_provider(prompt)
            if provider.exceeds_ceiling(estimate_tokens(prompt)) and frame.get('children'):
                return await self._generate_chunked_frame(provider, frame, canvas, components)
            arguments = await self.call_with_backoff(provider, prompt, FRAME_FUNCTION)
            return PseudoFrame.model_validate(arguments)
        except (ProviderError, ValidationError) as e:
            logger.warning("Skipping pseudo generation for frame %s - %s", frame.get('name'), e)
            return frame_fallback(frame, canvas)

    async def _generate_chunked_frame(
        self,
        provider: LLMProvider,
        frame: Dict[str, Any],
        canvas: Dict[str, Any],
        components: List[Dict[str, Any]],
    ) -> PseudoFrame:
        chunks = frame_chunks(frame, self._config.chunk_size)
        logger.info("Frame %s is too large; sending %d chunks to %s", frame.get('name'), len(chunks), provider.name)

        results: List[PseudoFrame] = []
        for index, chunk in enumerate(chunks):
            if index:
                await self._sleep(self._config.chunk_delay)
            prompt = build_frame_prompt(frame, canvas, components, frame_data=chunk)
            arguments = await self.call_with_backoff(provider, prompt, FRAME_FUNCTION)
            results.append(PseudoFrame.model_validate(arguments))

        # Only the first chunk's name survives; bodies are concatenated
        return PseudoFrame(
            frameName=results[0].frameName,
            pseudoCode='\n'.join(result.pseudoCode for result in results),
        )

    async def generate_all(
        self,
        components: List[Dict[str, Any]],
        instances: List[Dict[str, Any]],
        tokens: Dict[str, Any],
        figma_data: Dict[str, Any],
        progress: Optional[Progress] = None,
    ) -> PseudoCodeResults:
        """
        Generate pseudo-code for every instantiated component, then every frame.

        Components come first because frame prompts list the component names.
        """
        notify = progress or (lambda message: None)
        results = PseudoCodeResults()

        if not self.enabled:
            logger.info("Running without AI enhancement - will output raw data")

        for component in components:
            component_instances = instances_of(component, instances)
            if not component_instances:
                continue
            notify(f"Processing component: {component['name']}")
            results.components[component['id']] = await self.generate_component(
                component, component_instances[0], tokens, figma_data
            )

        document = figma_data.get('document') or {}
        for canvas in document.get('children') or []:
            for frame in frame_nodes(canvas):
                notify(f"Processing frame: {frame.get('name')}")
                results.frames[frame['id']] = await self.generate_frame(frame, canvas, components)

        return results
