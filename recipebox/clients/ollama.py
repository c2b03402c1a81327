# recipebox/clients/ollama.py
from __future__ import annotations

import base64
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from recipebox.clients.base import ImageInput
from recipebox.core.errors import ErrorCode, ExtractionError

log = logging.getLogger(__name__)


class OllamaClient:
    """
    AIClient backed by a local Ollama server.

    Ollama has no web search, image or speech generation: search requests are
    answered by the model alone and the media methods return None.
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:11434",
        model: str = "qwen2.5:14b",
        vision_model: Optional[str] = None,
        timeout_s: float = 180,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.vision_model = vision_model or model
        self.timeout_s = timeout_s
        self._transport = transport

    async def chat(
        self,
        messages: List[Dict[str, Any]],
        temperature: float = 0.2,
        model: Optional[str] = None,
        fmt: Optional[Any] = None,
    ) -> str:
        payload: Dict[str, Any] = {
            "model": model or self.model,
            "messages": messages,
            "stream": False,
            "options": {"temperature": temperature},
        }
        if fmt is not None:
            payload["format"] = fmt

        try:
            async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
                r = await client.post(f"{self.base_url}/api/chat", json=payload)
                r.raise_for_status()
                data = r.json()
        except httpx.HTTPStatusError as e:
            code = ErrorCode.API_LIMIT if e.response.status_code == 429 else ErrorCode.NETWORK_ERROR
            raise ExtractionError(f"Ollama returned HTTP {e.response.status_code}", code, cause=e) from e
        except httpx.HTTPError as e:
            raise ExtractionError(f"Ollama request failed: {e}", ErrorCode.NETWORK_ERROR, cause=e) from e

        # Ollama returns: {"message": {"role": "...", "content": "..."}, ...}
        return (data.get("message") or {}).get("content") or ""

    async def generate_json(
        self,
        prompt: str,
        schema: Dict[str, Any],
        *,
        images: Optional[Sequence[ImageInput]] = None,
    ) -> str:
        message: Dict[str, Any] = {"role": "user", "content": prompt}
        model = self.model
        if images:
            message["images"] = [base64.b64encode(data).decode("ascii") for _, data in images]
            model = self.vision_model
        return await self.chat([message], temperature=0.0, model=model, fmt=schema)

    async def generate_text(self, prompt: str, *, search: bool = False) -> str:
        if search:
            log.debug("ollama has no search tool; answering from model knowledge")
        return await self.chat([{"role": "user", "content": prompt}], temperature=0.2)

    async def generate_image(self, prompt: str) -> Optional[bytes]:
        return None

    async def synthesize_speech(self, text: str) -> Optional[bytes]:
        return None
