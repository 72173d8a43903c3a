"""Error types raised by figtell."""

from typing import Optional


class FigtellError(Exception):
    """Base class for every error figtell reports to the operator."""


class UsageError(FigtellError):
    """Missing URL argument or required credential."""


class InvalidUrlError(FigtellError):
    """Malformed or non-Figma URL."""


class FigmaApiError(FigtellError):
    """Non-successful response (or transport failure) from the Figma API."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ProviderError(FigtellError):
    """Failure while calling an LLM provider."""

    def __init__(self, message: str, provider: str = "unknown"):
        super().__init__(message)
        self.provider = provider


class RateLimitError(ProviderError):
    """Provider rejected the request with a rate limit (HTTP 429)."""


class PayloadTooLargeError(ProviderError):
    """Prompt exceeded what the provider accepts."""


class ProviderAuthError(ProviderError):
    """Invalid API key or authentication failure."""


class MalformedResponseError(ProviderError):
    """Provider answered without the expected structured function call."""


class WriteError(FigtellError):
    """Failure to persist an output file."""
