"""
Claude API Client
=================
Anthropic Messages API access for environments without the claude CLI.

Provides:
- ClaudeClient: thin wrapper over anthropic.Anthropic with token tracking
- ClaudeApiBackend: GenerationBackend that inlines attachment files into
  the message, since the API cannot resolve '@path' references

The API backend cannot edit files, so it only supports TEXT and JSON modes.
Calls are not retried.

Author: Gia Tenica*
*Gia Tenica is an anagram for Agentic AI. Gia is a fully autonomous AI researcher,
for more information see: https://giatenica.com
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import anthropic
import httpx
from loguru import logger

from ralph.config import LLM, get_timeout
from ralph.errors import BackendError, UsageError
from ralph.llm.backend import GenerationResult, OutputMode, Prompt


JSON_MODE_SYSTEM = (
    "Respond with a single valid JSON value only. "
    "Do not wrap it in markdown fences and do not add prose."
)


@dataclass
class TokenUsage:
    """Track token usage across requests."""
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    def add(self, usage: dict):
        """Add usage from API response."""
        self.input_tokens += usage.get("input_tokens", 0) or 0
        self.output_tokens += usage.get("output_tokens", 0) or 0


class ClaudeClient:
    """
    Claude API client.

    Design Philosophy:
    - No artificial token limits: Let Claude use full context for best results
    - One request per call: failures surface to the caller unchanged
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = LLM.MODEL,
        max_tokens: int = LLM.MAX_TOKENS,
    ):
        """
        Initialize Claude client.

        Args:
            api_key: Anthropic API key (defaults to ANTHROPIC_API_KEY env var)
            model: Model ID used for every request
            max_tokens: Maximum tokens in each response
        """
        self.api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not self.api_key:
            raise ValueError("ANTHROPIC_API_KEY not found in environment")

        # Long total timeout for large context bundles, short connect timeout
        timeout_config = httpx.Timeout(float(get_timeout("llm")), connect=float(get_timeout("llm_connect")))

        self.client = anthropic.Anthropic(
            api_key=self.api_key,
            timeout=timeout_config,
        )
        self.model = model
        self.max_tokens = max_tokens
        self.usage = TokenUsage()

        logger.info(f"Claude client initialized with model: {self.model}")

    def chat(
        self,
        messages: list,
        system: Optional[str] = None,
        temperature: float = 1.0,
    ) -> str:
        """
        Send a chat message to Claude.

        Args:
            messages: List of message dicts with 'role' and 'content'
            system: Optional system prompt
            temperature: Sampling temperature (0-1)

        Returns:
            Response text from Claude (all text blocks joined)
        """
        kwargs = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": messages,
            "temperature": temperature,
        }
        if system:
            kwargs["system"] = system

        response = self.client.messages.create(**kwargs)

        self.usage.add(response.usage.model_dump())
        logger.debug(f"Chat response [{self.model}]: {response.usage}")

        return "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )

    def get_usage_summary(self) -> dict:
        return {
            "model": self.model,
            "input_tokens": self.usage.input_tokens,
            "output_tokens": self.usage.output_tokens,
            "total_tokens": self.usage.total_tokens,
        }


def render_inline_prompt(prompt: Prompt) -> str:
    """Inline every attachment as a tagged block ahead of the prompt body."""
    parts = []
    for path in prompt.attachments:
        try:
            content = Path(path).read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise BackendError(f"Cannot read prompt attachment {path}: {e}") from e
        parts.append(f'<file path="{path}">\n{content}\n</file>')
    parts.append(prompt.body)
    return "\n\n".join(parts)


class ClaudeApiBackend:
    """Generation backend that calls the Anthropic Messages API."""

    name = "api"

    def __init__(self, client: Optional[ClaudeClient] = None):
        self._client = client

    @property
    def client(self) -> ClaudeClient:
        if self._client is None:
            try:
                self._client = ClaudeClient()
            except ValueError as e:
                raise UsageError(str(e)) from e
        return self._client

    def check_available(self) -> None:
        if self._client is None and not os.getenv("ANTHROPIC_API_KEY"):
            raise UsageError("ANTHROPIC_API_KEY not found in environment")

    def generate(self, prompt: Prompt, mode: OutputMode = OutputMode.TEXT) -> GenerationResult:
        if mode is OutputMode.STREAM:
            raise UsageError("The API backend cannot run interactive edit sessions; use the claude CLI")

        content = render_inline_prompt(prompt)
        system = JSON_MODE_SYSTEM if mode is OutputMode.JSON else None

        try:
            text = self.client.chat(messages=[{"role": "user", "content": content}], system=system)
        except anthropic.APIError as e:
            raise BackendError(f"Anthropic API request failed: {e}") from e

        if not text.strip():
            raise BackendError("Anthropic API returned empty output")

        return GenerationResult(text=text, mode=mode, metadata=self.client.get_usage_summary())
