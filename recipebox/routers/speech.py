# recipebox/routers/speech.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from recipebox.clients.base import AIClient
from recipebox.core.deps import get_ai
from recipebox.models.speech import SpeechRequest, SpeechResponse
from recipebox.services.speech import text_to_speech

router = APIRouter(tags=["speech"])


@router.post("/tts", response_model=SpeechResponse)
async def tts(req: SpeechRequest, ai: AIClient = Depends(get_ai)) -> SpeechResponse:
    if not req.text.strip():
        raise HTTPException(status_code=400, detail="Text is required")

    audio = await text_to_speech(req.text, ai)
    if not audio:
        raise HTTPException(status_code=502, detail="Failed to generate audio")
    return SpeechResponse(audio=audio)
