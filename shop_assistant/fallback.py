from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Union

from .config import Settings
from .gemini_client import GeminiClient
from .prompt_loader import DEFAULT_FALLBACK_PROMPT, load_prompt

logger = logging.getLogger("shop_assistant.fallback")


@dataclass(frozen=True)
class FallbackUnavailable:
    """Returned instead of text when the generative service cannot answer."""
    reason: str


FallbackResult = Union[str, FallbackUnavailable]


class FallbackDelegate(ABC):
    """Capability consulted only for utterances no local rule understands."""

    available: bool = False

    @abstractmethod
    def delegate(self, utterance: str) -> FallbackResult:
        """Return reply text, or FallbackUnavailable; must never raise."""


class UnavailableFallback(FallbackDelegate):
    """No client configured; answers without any network attempt."""

    def __init__(self, reason: str = "fallback not configured") -> None:
        self._reason = reason

    def delegate(self, utterance: str) -> FallbackResult:
        return FallbackUnavailable(self._reason)


class AvailableFallback(FallbackDelegate):
    available = True

    def __init__(
        self,
        client: GeminiClient,
        prompt_template: str = DEFAULT_FALLBACK_PROMPT,
        timeout: Optional[float] = None,
    ) -> None:
        """Purpose: Wrap a Gemini client behind the fallback contract.
        Inputs/Outputs: Inputs are the client, the framing template with a {message}
            placeholder, and the per-request timeout; no return value.
        Side Effects / State: Stores references only.
        Dependencies: GeminiClient.generate_text.
        Failure Modes: None at init.
        If Removed: Unknown utterances always get the canned reply.
        Testing Notes: Use a Mock client and assert the framed prompt.
        """
        self._client = client
        self._template = prompt_template
        self._timeout = timeout

    def build_prompt(self, utterance: str) -> str:
        if "{message}" in self._template:
            return self._template.replace("{message}", utterance)
        return f"{self._template}{utterance}"

    def delegate(self, utterance: str) -> FallbackResult:
        """Purpose: Ask the generative service to answer an unrecognized utterance.
        Inputs/Outputs: Input is the normalized utterance; output is reply text or
            FallbackUnavailable.
        Side Effects / State: One outbound request bounded by the timeout; never
            touches cart or catalog.
        Dependencies: GeminiClient.generate_text.
        Failure Modes: Every exception and every empty reply is reported as
            FallbackUnavailable; nothing is raised.
        If Removed: Dispatcher cannot use the generative fallback.
        Testing Notes: Make the client raise and check a FallbackUnavailable comes back.
        """
        # Single attempt; the dispatcher supplies the canned reply on failure.
        try:
            text = self._client.generate_text(self.build_prompt(utterance), timeout=self._timeout)
        except Exception as exc:  # noqa: BLE001 - nothing may escape the delegate
            logger.warning("fallback request failed: %s", exc)
            return FallbackUnavailable(f"request failed: {exc}")
        if not text:
            logger.warning("fallback returned an empty reply")
            return FallbackUnavailable("empty reply")
        return text


def build_fallback(settings: Settings) -> FallbackDelegate:
    """Purpose: Select the fallback variant once at startup.
    Inputs/Outputs: Input is Settings; output is AvailableFallback or UnavailableFallback.
    Side Effects / State: Configures the Gemini SDK when a key is present.
    Dependencies: GeminiClient, load_prompt.
    Failure Modes: Missing key or client construction errors yield UnavailableFallback.
    If Removed: App wiring has no fallback to inject.
    Testing Notes: Empty GEMINI_API_KEY must not construct a client.
    """
    if not settings.gemini_api_key:
        logger.info("Gemini unavailable. Using manual conversation logic.")
        return UnavailableFallback("GEMINI_API_KEY not set")
    try:
        client = GeminiClient(settings)
    except Exception as exc:  # noqa: BLE001 - any SDK failure disables the capability
        logger.warning("Gemini unavailable (%s). Using manual conversation logic.", exc)
        return UnavailableFallback(f"client setup failed: {exc}")
    template = load_prompt(settings.prompts_dir / "fallback.txt", default=DEFAULT_FALLBACK_PROMPT)
    logger.info("Gemini fallback enabled model=%s timeout=%ss", settings.gemini_model, settings.fallback_timeout)
    return AvailableFallback(client, prompt_template=template, timeout=settings.fallback_timeout)
