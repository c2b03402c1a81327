# recipebox/clients/factory.py
from __future__ import annotations

import logging

from recipebox.clients.base import AIClient
from recipebox.core import config

log = logging.getLogger(__name__)


def build_ai_client(backend: str | None = None) -> AIClient:
    """Build the process-wide AI client. Called once, at startup."""
    backend = (backend or config.AI_BACKEND).strip().lower()

    if backend == "ollama":
        from recipebox.clients.ollama import OllamaClient

        log.info("using ollama backend", extra={"model": config.OLLAMA_MODEL})
        return OllamaClient(
            base_url=config.OLLAMA_BASE_URL,
            model=config.OLLAMA_MODEL,
            vision_model=config.OLLAMA_VISION_MODEL,
        )

    if backend == "gemini":
        from recipebox.clients.gemini import GeminiClient

        return GeminiClient(api_key=config.GEMINI_API_KEY)

    raise ValueError(f"Unknown AI_BACKEND: {backend!r} (expected 'gemini' or 'ollama')")
