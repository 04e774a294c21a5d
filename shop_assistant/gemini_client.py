from __future__ import annotations

from typing import Dict, Optional

import google.generativeai as genai

from .config import Settings


class GeminiClient:
    """Thin wrapper around the Gemini SDK with model caching and a request timeout."""

    def __init__(self, settings: Settings) -> None:
        """Purpose: Configure the Gemini SDK and initialize the model cache.
        Inputs/Outputs: Input is Settings; no return value.
        Side Effects / State: Configures the SDK global API key and caches model instances.
        Dependencies: Uses google.generativeai and Settings from config.
        Failure Modes: Raises ValueError if API key or model name is missing.
        If Removed: The fallback delegate has nothing to call and stays unavailable.
        Testing Notes: Validate missing key raises ValueError and models are cached.
        """
        # Configure API key and seed default model cache.
        if not settings.gemini_api_key:
            raise ValueError("GEMINI_API_KEY is required")
        self._default_model = _normalize_model_name(settings.gemini_model)
        if not self._default_model:
            raise ValueError("Gemini model name is required")
        genai.configure(api_key=settings.gemini_api_key)
        self._timeout = settings.fallback_timeout
        self._models: Dict[str, genai.GenerativeModel] = {
            self._default_model: genai.GenerativeModel(self._default_model)
        }

    def generate_text(
        self,
        prompt: str,
        model: Optional[str] = None,
        temperature: float = 0.4,
        max_output_tokens: int = 512,
        timeout: Optional[float] = None,
    ) -> str:
        """Purpose: Generate a single text response from a string prompt.
        Inputs/Outputs: Input is prompt string and optional model/config; returns text.
        Side Effects / State: May add a model to the internal cache; one network call.
        Dependencies: Uses genai.GenerativeModel.generate_content with request_options.
        Failure Modes: SDK and transport errors (including timeouts) propagate.
        If Removed: Unknown utterances can only get the canned reply.
        Testing Notes: Mock GenerativeModel and check the timeout is forwarded.
        """
        # Resolve model name and ensure cached model instance exists.
        model_name = _normalize_model_name(model) if model else self._default_model
        if model_name not in self._models:
            self._models[model_name] = genai.GenerativeModel(model_name)
        response = self._models[model_name].generate_content(
            prompt,
            generation_config={
                "temperature": temperature,
                "max_output_tokens": max_output_tokens,
            },
            request_options={"timeout": timeout if timeout is not None else self._timeout},
        )
        text: Optional[str] = getattr(response, "text", None)
        return (text or "").strip()


def _normalize_model_name(name: Optional[str]) -> str:
    # Strip "models/" prefix and whitespace.
    if not name:
        return ""
    cleaned = name.strip()
    if cleaned.startswith("models/"):
        return cleaned.split("/", 1)[1]
    return cleaned
