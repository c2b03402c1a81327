# recipebox/clients/gemini.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from recipebox.clients.base import ImageInput
from recipebox.core import config
from recipebox.core.errors import ErrorCode, ExtractionError

log = logging.getLogger(__name__)


def _translate(e: genai_errors.APIError) -> ExtractionError:
    code = ErrorCode.API_LIMIT if e.code == 429 else ErrorCode.NETWORK_ERROR
    return ExtractionError(f"Gemini API error {e.code}: {e.message}", code, cause=e)


def _first_inline_data(response: types.GenerateContentResponse) -> Optional[bytes]:
    for candidate in response.candidates or []:
        content = candidate.content
        for part in (content.parts if content else None) or []:
            if part.inline_data and part.inline_data.data:
                return part.inline_data.data
    return None


class GeminiClient:
    """AIClient backed by the Google Gen AI SDK (async surface)."""

    def __init__(
        self,
        api_key: str,
        text_model: str = config.GEMINI_TEXT_MODEL,
        vision_model: str = config.GEMINI_VISION_MODEL,
        search_model: str = config.GEMINI_SEARCH_MODEL,
        image_model: str = config.GEMINI_IMAGE_MODEL,
        tts_model: str = config.GEMINI_TTS_MODEL,
        tts_voice: str = config.GEMINI_TTS_VOICE,
    ):
        if not api_key:
            raise ValueError("GEMINI_API_KEY is required for the gemini backend")
        self._client = genai.Client(api_key=api_key)
        self.text_model = text_model
        self.vision_model = vision_model
        self.search_model = search_model
        self.image_model = image_model
        self.tts_model = tts_model
        self.tts_voice = tts_voice
        log.info(
            "gemini client ready",
            extra={"text_model": text_model, "vision_model": vision_model},
        )

    async def _generate(self, model: str, contents: Any, cfg: types.GenerateContentConfig):
        try:
            return await self._client.aio.models.generate_content(model=model, contents=contents, config=cfg)
        except genai_errors.APIError as e:
            raise _translate(e) from e

    async def generate_json(
        self,
        prompt: str,
        schema: Dict[str, Any],
        *,
        images: Optional[Sequence[ImageInput]] = None,
    ) -> str:
        contents: List[Any] = []
        model = self.text_model
        if images:
            contents.extend(types.Part.from_bytes(data=data, mime_type=mime) for mime, data in images)
            model = self.vision_model
        contents.append(prompt)

        cfg = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_json_schema=schema,
        )
        response = await self._generate(model, contents, cfg)
        return response.text or ""

    async def generate_text(self, prompt: str, *, search: bool = False) -> str:
        # tools and a JSON response type cannot be combined, so search calls stay plain text
        if search:
            cfg = types.GenerateContentConfig(tools=[types.Tool(google_search=types.GoogleSearch())])
            model = self.search_model
        else:
            cfg = types.GenerateContentConfig()
            model = self.text_model
        response = await self._generate(model, prompt, cfg)
        return response.text or ""

    async def generate_image(self, prompt: str) -> Optional[bytes]:
        cfg = types.GenerateContentConfig(response_modalities=["IMAGE"])
        response = await self._generate(self.image_model, prompt, cfg)
        return _first_inline_data(response)

    async def synthesize_speech(self, text: str) -> Optional[bytes]:
        cfg = types.GenerateContentConfig(
            response_modalities=["AUDIO"],
            speech_config=types.SpeechConfig(
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=self.tts_voice),
                )
            ),
        )
        response = await self._generate(self.tts_model, text, cfg)
        return _first_inline_data(response)
