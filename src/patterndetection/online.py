"""
Online Pattern Detection for stream-diff

Asks a text-generation model for a regex describing a field's sample values.
The model sits behind a one-call provider interface so that providers can be
swapped without touching the detection logic.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Any, List, Sequence

import requests

from src.patterndetection.detector import (
    DetectionError,
    InvalidPatternError,
    PatternDetector,
    TransportError,
    type_fallback,
)
from src.schema.models import RegexMatcher
from src.utils.config import ConfigError, OnlineAPIConfig
from src.utils.values import to_text

logger = logging.getLogger(__name__)

NO_PATTERN = "NO_PATTERN"
MAX_SAMPLES = 10

DEFAULT_ENDPOINT = "https://api.anthropic.com/v1/messages"
DEFAULT_MODEL = "claude-3-haiku-20240307"
ANTHROPIC_VERSION = "2023-06-01"

PROMPT_TEMPLATE = """Analyze the following data field and generate appropriate regex patterns if applicable.

Field Name: {field_name}
Field Type: {field_type}
Sample Values:
{samples}

Please analyze these values and determine if they follow a specific pattern that can be captured with a regex.
If a clear pattern exists (like email addresses, phone numbers, URLs, UUIDs, etc.), provide ONLY the regex pattern.
If no clear pattern exists, respond with "NO_PATTERN".

Rules:
1. Only return a single regex pattern or "NO_PATTERN"
2. The pattern should match at least 80% of the provided samples
3. Focus on common data patterns: emails, phones, URLs, IDs, codes, etc.
4. Do not include explanations, just the regex or "NO_PATTERN"

Response:"""


class TextGenerationProvider(ABC):
    """A model that turns one prompt into one short text reply."""

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """
        Send a prompt and return the reply text.

        Raises:
            TransportError: If the call fails
        """


class AnthropicProvider(TextGenerationProvider):
    """Anthropic Messages API over HTTP."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: float = 30.0,
        max_tokens: int = 100
    ):
        if not api_key:
            raise ConfigError("API key is required for the Anthropic provider")

        self.endpoint = endpoint or DEFAULT_ENDPOINT
        self.model = model or DEFAULT_MODEL
        self.timeout = timeout
        self.max_tokens = max_tokens

        self.session = requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
            "x-api-key": api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        })

    def generate(self, prompt: str) -> str:
        payload = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }

        try:
            response = self.session.post(self.endpoint, json=payload, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except requests.HTTPError as e:
            raise TransportError(
                f"API returned status {e.response.status_code}: {e.response.text}"
            ) from e
        except requests.RequestException as e:
            raise TransportError(f"Failed to call {self.endpoint}: {e}") from e
        except ValueError as e:
            raise TransportError(f"Failed to decode response: {e}") from e

        content = body.get("content") if isinstance(body, dict) else None
        if not content:
            raise TransportError("Empty response from API")

        return str(content[0].get("text", "")).strip()


def create_provider(online_api: OnlineAPIConfig, api_key: str) -> TextGenerationProvider:
    """
    Build the provider named in the online API configuration.

    Raises:
        ConfigError: If the provider is unknown
    """
    provider = (online_api.provider or "claude").lower()

    if provider in ("claude", "anthropic"):
        return AnthropicProvider(
            api_key=api_key,
            model=online_api.model,
            endpoint=online_api.endpoint,
            timeout=online_api.timeout_seconds,
        )

    raise ConfigError(f"Unsupported provider: {online_api.provider}")


class OnlineDetector(PatternDetector):
    """AI-assisted pattern detection."""

    mode = "online"

    def __init__(self, provider: TextGenerationProvider):
        self.provider = provider

    def detect_patterns(self, field_name, field_type, values):
        samples = self.sample_values(values, MAX_SAMPLES)
        if not samples:
            return []

        prompt = self.build_prompt(field_name, field_type.value, samples)

        try:
            response = self.provider.generate(prompt)
        except DetectionError:
            raise
        except Exception as e:
            raise DetectionError(f"Failed to call AI API for field {field_name}: {e}") from e

        return self.parse_response(field_name, field_type, response)

    @staticmethod
    def sample_values(values: Sequence[Any], max_samples: int) -> List[str]:
        """Up to max_samples distinct canonical texts, in first-seen order."""
        samples: List[str] = []
        seen = set()

        for value in values:
            if len(samples) >= max_samples:
                break
            text = to_text(value)
            if text is None or text in seen:
                continue
            seen.add(text)
            samples.append(text)

        return samples

    @staticmethod
    def build_prompt(field_name: str, field_type: str, samples: List[str]) -> str:
        return PROMPT_TEMPLATE.format(
            field_name=field_name,
            field_type=field_type,
            samples="\n".join(samples),
        )

    @staticmethod
    def parse_response(field_name, field_type, response: str):
        """
        Turn a model reply into matchers.

        Raises:
            InvalidPatternError: If the reply is not a valid regex
        """
        response = (response or "").strip()

        if response == NO_PATTERN or response == "":
            return type_fallback(field_type)

        try:
            re.compile(response)
        except re.error as e:
            raise InvalidPatternError(field_name, response, str(e)) from e

        return [RegexMatcher(response)]
