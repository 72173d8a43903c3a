"""
LLM providers.

Both providers expose one capability: submit a prompt together with a
function schema, force the model to call that function, and hand back the
argument object. Provider SDK errors are translated into figtell's
ProviderError hierarchy at this boundary.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import anthropic
import httpx
import openai
from pydantic import BaseModel, Field

from figtell.errors import (
    MalformedResponseError,
    PayloadTooLargeError,
    ProviderAuthError,
    ProviderError,
    RateLimitError,
)

logger = logging.getLogger(__name__)

DEFAULT_CLAUDE_MODEL = "claude-sonnet-4-20250514"
DEFAULT_OPENAI_MODEL = "gpt-4o"
DEFAULT_MAX_TOKENS = 4096


class FunctionSpec(BaseModel):
    """A named function with a JSON-schema described argument object."""

    name: str
    description: str
    parameters: Dict[str, Any] = Field(..., description="JSON schema of the single argument object")


class LLMProvider(ABC):
    """Submit a prompt plus a function schema, get back the call arguments."""

    name: str = "provider"

    def __init__(self, model: str, max_prompt_tokens: Optional[int] = None):
        self.model = model
        # None means the provider has no conservative prompt ceiling
        self.max_prompt_tokens = max_prompt_tokens

    @abstractmethod
    async def call_function(self, prompt: str, function: FunctionSpec) -> Dict[str, Any]:
        """Return the argument object of the forced function call."""

    def exceeds_ceiling(self, estimated_tokens: float) -> bool:
        return self.max_prompt_tokens is not None and estimated_tokens > self.max_prompt_tokens

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self.model!r})"


def _translate_status_error(provider: str, status: Optional[int], message: str) -> ProviderError:
    """Map an HTTP status from a provider SDK to a ProviderError subclass."""
    if status == 429:
        return RateLimitError(f"Rate limit exceeded: {message}", provider=provider)
    if status == 413:
        return PayloadTooLargeError(f"Input too long: {message}", provider=provider)
    if status == 400 and 'token' in message.lower():
        return PayloadTooLargeError(f"Token limit exceeded: {message}", provider=provider)
    if status in (401, 403):
        return ProviderAuthError(f"Invalid API key or authentication error: {message}", provider=provider)
    return ProviderError(f"{provider} API error: {message}", provider=provider)


class ClaudeProvider(LLMProvider):
    """Anthropic Messages API with a forced tool_use block."""

    name = "claude"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_CLAUDE_MODEL,
        max_prompt_tokens: Optional[int] = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        client: Optional[anthropic.AsyncAnthropic] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(model, max_prompt_tokens)
        self.max_tokens = max_tokens
        # Rate limits are retried by PseudoCodeGenerator.call_with_backoff only
        self._client = client or anthropic.AsyncAnthropic(
            api_key=api_key, max_retries=0, http_client=http_client
        )

    async def call_function(self, prompt: str, function: FunctionSpec) -> Dict[str, Any]:
        try:
            message = await self._client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                messages=[{"role": "user", "content": prompt}],
                tools=[{
                    "name": function.name,
                    "description": function.description,
                    "input_schema": function.parameters,
                }],
                tool_choice={"type": "tool", "name": function.name},
            )
        except anthropic.APIStatusError as e:
            raise _translate_status_error(self.name, e.status_code, str(e)) from e
        except anthropic.APIError as e:
            raise ProviderError(f"claude API error: {e}", provider=self.name) from e
        except Exception as e:
            raise ProviderError(f"claude request failed: {type(e).__name__}: {e}", provider=self.name) from e

        for block in message.content:
            if block.type == 'tool_use' and block.name == function.name:
                if not isinstance(block.input, dict):
                    raise MalformedResponseError("tool_use input is not an object", provider=self.name)
                return block.input

        raise MalformedResponseError("No tool_use block found in response", provider=self.name)


class OpenAIProvider(LLMProvider):
    """OpenAI Chat Completions API with a forced function tool call."""

    name = "gpt4"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_OPENAI_MODEL,
        max_prompt_tokens: Optional[int] = None,
        client: Optional[openai.AsyncOpenAI] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(model, max_prompt_tokens)
        self._client = client or openai.AsyncOpenAI(
            api_key=api_key, max_retries=0, http_client=http_client
        )

    async def call_function(self, prompt: str, function: FunctionSpec) -> Dict[str, Any]:
        try:
            completion = await self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                tools=[{
                    "type": "function",
                    "function": {
                        "name": function.name,
                        "description": function.description,
                        "parameters": function.parameters,
                    },
                }],
                tool_choice={"type": "function", "function": {"name": function.name}},
            )
        except openai.APIStatusError as e:
            raise _translate_status_error(self.name, e.status_code, str(e)) from e
        except openai.APIError as e:
            raise ProviderError(f"gpt4 API error: {e}", provider=self.name) from e
        except Exception as e:
            raise ProviderError(f"gpt4 request failed: {type(e).__name__}: {e}", provider=self.name) from e

        if not completion.choices:
            raise MalformedResponseError("Empty completion", provider=self.name)

        tool_calls: List[Any] = completion.choices[0].message.tool_calls or []
        for call in tool_calls:
            if call.function.name == function.name:
                try:
                    arguments = json.loads(call.function.arguments)
                except json.JSONDecodeError as e:
                    raise MalformedResponseError(
                        f"Function arguments are not valid JSON: {e}", provider=self.name
                    ) from e
                if not isinstance(arguments, dict):
                    raise MalformedResponseError("Function arguments are not an object", provider=self.name)
                return arguments

        raise MalformedResponseError("No function call found in response", provider=self.name)
