"""
Configuration.

Settings are read once at startup from the environment (optionally seeded
from a .env file) and passed explicitly to whatever needs them.
"""

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from figtell.errors import UsageError
from figtell.providers import (
    DEFAULT_CLAUDE_MODEL,
    DEFAULT_OPENAI_MODEL,
    ClaudeProvider,
    LLMProvider,
    OpenAIProvider,
)

logger = logging.getLogger(__name__)

DEFAULT_CLAUDE_MAX_PROMPT_TOKENS = 40000
DEFAULT_OPENAI_MAX_PROMPT_TOKENS = 100000
MODEL_CHOICES = ('claude', 'gpt4')


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        value = int(raw)
    except ValueError:
        raise UsageError(f"{name} must be an integer, got {raw!r}") from None
    # 0 disables the ceiling
    return value or None


class Settings(BaseModel):
    """Runtime settings for one figtell run."""
    model_config = ConfigDict(frozen=True)

    figma_token: Optional[str] = Field(default=None, description="Figma personal access token")
    anthropic_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    default_url: Optional[str] = Field(default=None, description="Design URL used when none is given")

    claude_model: str = DEFAULT_CLAUDE_MODEL
    openai_model: str = DEFAULT_OPENAI_MODEL
    claude_max_prompt_tokens: Optional[int] = DEFAULT_CLAUDE_MAX_PROMPT_TOKENS
    openai_max_prompt_tokens: Optional[int] = DEFAULT_OPENAI_MAX_PROMPT_TOKENS

    max_retries: int = Field(default=3, ge=0)
    retry_base_delay: float = Field(default=1.0, ge=0, description="Seconds")
    retry_max_delay: float = Field(default=30.0, ge=0, description="Seconds")
    chunk_size: int = Field(default=2, ge=1, description="Frame children per chunk")
    chunk_delay: float = Field(default=1.0, ge=0, description="Seconds between chunk calls")

    @classmethod
    def from_env(cls, env_file: Optional[str] = '.env') -> "Settings":
        """Load settings from the environment, seeding it from env_file when it exists."""
        if env_file and os.path.exists(env_file):
            load_dotenv(env_file)
            logger.debug("Loaded environment from %s", env_file)

        return cls(
            figma_token=os.getenv("FIGMA_ACCESS_TOKEN") or os.getenv("FIGMA_TOKEN"),
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY") or os.getenv("CLAUDE_API_KEY"),
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            default_url=os.getenv("FIGMA_URL"),
            claude_model=os.getenv("FIGTELL_CLAUDE_MODEL") or DEFAULT_CLAUDE_MODEL,
            openai_model=os.getenv("FIGTELL_OPENAI_MODEL") or DEFAULT_OPENAI_MODEL,
            claude_max_prompt_tokens=_env_int(
                "FIGTELL_CLAUDE_MAX_PROMPT_TOKENS", DEFAULT_CLAUDE_MAX_PROMPT_TOKENS
            ),
            openai_max_prompt_tokens=_env_int(
                "FIGTELL_OPENAI_MAX_PROMPT_TOKENS", DEFAULT_OPENAI_MAX_PROMPT_TOKENS
            ),
        )

    def require_figma_token(self) -> str:
        if not self.figma_token:
            raise UsageError(
                "Figma API token not found. Set FIGMA_ACCESS_TOKEN in your environment or .env file. "
                "Get your token from: https://www.figma.com/developers/api#access-tokens"
            )
        return self.figma_token


class AIConfig(BaseModel):
    """Which providers the pseudo-code generator may call, and how patiently."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    primary: Optional[LLMProvider] = None
    fallback: Optional[LLMProvider] = None
    max_retries: int = 3
    retry_base_delay: float = 1.0
    retry_max_delay: float = 30.0
    chunk_size: int = 2
    chunk_delay: float = 1.0

    @property
    def enabled(self) -> bool:
        return self.primary is not None

    @classmethod
    def disabled(cls) -> "AIConfig":
        return cls()


def _build_provider(settings: Settings, model: str) -> Optional[LLMProvider]:
    if model == 'claude' and settings.anthropic_api_key:
        return ClaudeProvider(
            api_key=settings.anthropic_api_key,
            model=settings.claude_model,
            max_prompt_tokens=settings.claude_max_prompt_tokens,
        )
    if model == 'gpt4' and settings.openai_api_key:
        return OpenAIProvider(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            max_prompt_tokens=settings.openai_max_prompt_tokens,
        )
    return None


def build_ai_config(settings: Settings, model: str = 'claude', no_ai: bool = False) -> AIConfig:
    """
    Build the AI configuration for a run.

    The provider named by `model` is primary; the other one becomes the
    fallback when its key is configured. When only the other key exists it
    is promoted to primary. With `no_ai` or no keys at all, AI is disabled.
    """
    if no_ai:
        return AIConfig.disabled()
    if model not in MODEL_CHOICES:
        raise UsageError(f"Unknown model '{model}'. Choose one of: {', '.join(MODEL_CHOICES)}")

    other = 'gpt4' if model == 'claude' else 'claude'
    primary = _build_provider(settings, model)
    fallback = _build_provider(settings, other)
    if primary is None:
        primary, fallback = fallback, None

    if primary is None:
        logger.info("No LLM API key configured; running without AI")

    return AIConfig(
        primary=primary,
        fallback=fallback,
        max_retries=settings.max_retries,
        retry_base_delay=settings.retry_base_delay,
        retry_max_delay=settings.retry_max_delay,
        chunk_size=settings.chunk_size,
        chunk_delay=settings.chunk_delay,
    )
