"""Wrapper around the Anthropic Claude API for claim scoring prompts."""

import json
import logging
import re
from typing import Any, Optional

import anthropic

from pap.utils.retry import with_retry

logger = logging.getLogger(__name__)

_API_KEY_RE = re.compile(r"^sk-ant-[A-Za-z0-9_\-]{10,}$")

RETRYABLE_ERRORS = (
    anthropic.APITimeoutError,
    anthropic.APIConnectionError,
    anthropic.RateLimitError,
    anthropic.InternalServerError,
)
FATAL_ERRORS = (
    anthropic.BadRequestError,  # invalid prompt
    anthropic.AuthenticationError,  # bad API key
    anthropic.PermissionDeniedError,
)


class LLMNotConfiguredError(RuntimeError):
    pass


class LLMClient:
    """Handles all LLM interactions.

    The async SDK client is created by :meth:`init` and closed by
    :meth:`dispose`. Calls made without a usable key raise
    :class:`LLMNotConfiguredError`; callers check :meth:`is_configured`
    first and fall back to the heuristic analyzer.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        retry_max_attempts: int = 2,
        retry_initial_delay: float = 1.0,
    ):
        self.api_key = (api_key or "").strip()
        self.model = model
        self.total_input_tokens: int = 0
        self.total_output_tokens: int = 0
        self._retry_max_attempts = retry_max_attempts
        self._retry_initial_delay = retry_initial_delay
        self._client: Optional[anthropic.AsyncAnthropic] = None

    def is_configured(self) -> bool:
        return bool(_API_KEY_RE.match(self.api_key))

    async def init(self) -> None:
        if not self.is_configured():
            logger.warning("Anthropic API key missing or invalid; AI analysis disabled")
            return
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(api_key=self.api_key, max_retries=0)

    async def dispose(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None

    async def complete(self, prompt: str, max_tokens: int = 1024) -> str:
        """Send one user prompt and return the concatenated text reply.

        Retries on timeouts, connection errors, rate limits and 5xx.
        Bad requests and auth failures raise immediately.
        """
        if self._client is None:
            raise LLMNotConfiguredError("LLM client is not initialized")
        client = self._client

        @with_retry(
            max_attempts=self._retry_max_attempts,
            initial_delay=self._retry_initial_delay,
            retry_on=RETRYABLE_ERRORS,
            reraise_on=FATAL_ERRORS,
        )
        async def _create():
            return await client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )

        message = await _create()
        self.total_input_tokens += message.usage.input_tokens
        self.total_output_tokens += message.usage.output_tokens

        return "".join(
            block.text for block in message.content if getattr(block, "type", None) == "text"
        ).strip()

    async def complete_json(self, prompt: str, max_tokens: int = 2048) -> Any:
        """Like :meth:`complete` but parse the reply as JSON (None if it isn't)."""
        return self.parse_json(await self.complete(prompt, max_tokens=max_tokens))

    # ── Response parsing ─────────────────────────────────────────────

    @staticmethod
    def parse_json(text: str) -> Any:
        """Extract a JSON object or array from potentially messy LLM output.

        Handles:
        • Raw JSON
        • JSON inside ```json … ``` fences
        • JSON buried in prose
        """
        md = re.search(r"```(?:json)?\s*([\[{][\s\S]*?[\]}])\s*```", text)
        if md:
            try:
                return json.loads(md.group(1))
            except json.JSONDecodeError:
                pass

        stripped = text.strip()
        if stripped[:1] in ("{", "["):
            try:
                return json.loads(stripped)
            except json.JSONDecodeError:
                pass

        for pattern in (r"\{[\s\S]*\}", r"\[[\s\S]*\]"):
            found = re.search(pattern, text)
            if found:
                try:
                    return json.loads(found.group(0))
                except json.JSONDecodeError:
                    continue

        logger.error("Could not parse JSON from LLM response (first 300 chars): %s", text[:300])
        return None
