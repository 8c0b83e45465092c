"""Classifier client - asks a generative-AI web search whether a profile exists."""

import json
import os
import re
from typing import Protocol

import anthropic
from pydantic import BaseModel, Field

from instacheck.config import CheckerConfig
from instacheck.core.prompts import SYSTEM_PROMPT, format_check_prompt
from instacheck.exceptions import MissingCredentialError
from instacheck.logging import get_logger
from instacheck.models.record import ClassificationResult, PageStatus

NO_RESPONSE_NOTE = "No response from AI"
CHECK_ERROR_NOTE = "Error during AI check"

_JSON_FENCE = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)
_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


class Classifier(Protocol):
    """Anything that can decide whether a profile page exists."""

    async def classify(self, username: str) -> ClassificationResult:
        ...


class ClassifierReply(BaseModel):
    """Structured reply requested from the model."""

    page_status: str | None = Field(default=None, alias="pageStatus")
    notes: str | None = None
    profile_url: str | None = Field(default=None, alias="profileUrl")

    def to_result(self) -> ClassificationResult:
        status = PageStatus.OPEN if self.page_status == "OPEN" else PageStatus.CLOSED
        return ClassificationResult(
            page_status=status,
            notes=self.notes or "",
            profile_url=self.profile_url or None,
        )


def parse_reply(text: str) -> ClassificationResult:
    """
    Parse the model's text into a ClassificationResult.

    Accepts a bare JSON object, a fenced ```json block, or an object
    embedded in surrounding prose.

    Raises:
        ValueError: If no JSON object can be decoded
    """
    fence = _JSON_FENCE.search(text)
    if fence:
        candidate = fence.group(1)
    else:
        match = _JSON_OBJECT.search(text)
        candidate = match.group(0) if match else text

    data = json.loads(candidate)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return ClassifierReply.model_validate(data).to_result()


class AnthropicClassifier:
    """
    Classifies usernames with Claude and its server-side web search tool.

    The client never raises for a failed or inconclusive check: those come
    back as ``PageStatus.UNKNOWN`` with an explanatory note. Only a missing
    credential raises, before any network attempt.

    Example:
        classifier = AnthropicClassifier(api_key="sk-...")
        result = await classifier.classify("instagram")
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "claude-sonnet-4-20250514",
        max_tokens: int = 1024,
        max_searches: int = 3,
        timeout: float = 120.0,
    ) -> None:
        """
        Initialize the classifier.

        Args:
            api_key: Anthropic API key, falls back to ANTHROPIC_API_KEY
            model: Claude model to use
            max_tokens: Upper bound on reply tokens
            max_searches: Web searches allowed per username
            timeout: HTTP timeout for one request in seconds
        """
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        self.model = model
        self.max_tokens = max_tokens
        self.max_searches = max_searches
        self.timeout = timeout
        self._client: anthropic.AsyncAnthropic | None = None
        self._log = get_logger("classifier")

    @classmethod
    def from_config(cls, config: CheckerConfig) -> "AnthropicClassifier":
        return cls(
            api_key=config.api_key,
            model=config.model,
            max_tokens=config.max_tokens,
            max_searches=config.max_searches,
            timeout=config.request_timeout_seconds,
        )

    def _get_client(self) -> anthropic.AsyncAnthropic:
        """Get or create the Anthropic client."""
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(
                api_key=self.api_key,
                timeout=self.timeout,
                max_retries=0,
            )
        return self._client

    async def classify(self, username: str) -> ClassificationResult:
        """
        Check whether an Instagram profile page exists for a username.

        Args:
            username: Normalized handle (no @, no URL)

        Returns:
            ClassificationResult; UNKNOWN when the check was inconclusive

        Raises:
            MissingCredentialError: If no API key is configured
        """
        if not self.api_key:
            raise MissingCredentialError(
                "API key is missing. Set INSTACHECK_API_KEY or ANTHROPIC_API_KEY."
            )

        try:
            client = self._get_client()
            response = await client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": format_check_prompt(username)}],
                tools=[{
                    "type": "web_search_20250305",
                    "name": "web_search",
                    "max_uses": self.max_searches,
                }],
            )

            text = "".join(
                block.text for block in response.content
                if getattr(block, "type", None) == "text"
            ).strip()
            if not text:
                self._log.warning("classify_empty_reply", username=username)
                return ClassificationResult(
                    page_status=PageStatus.UNKNOWN,
                    notes=NO_RESPONSE_NOTE,
                )

            result = parse_reply(text)

        except (anthropic.APIError, ValueError) as e:
            # JSONDecodeError and pydantic ValidationError are ValueErrors
            self._log.error("classify_failed", username=username, error=str(e))
            return ClassificationResult(
                page_status=PageStatus.UNKNOWN,
                notes=CHECK_ERROR_NOTE,
            )

        self._log.debug(
            "classify_complete",
            username=username,
            page_status=result.page_status.value,
        )
        return result
