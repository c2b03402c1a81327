# recipebox/models/speech.py
from __future__ import annotations

from pydantic import BaseModel


class SpeechRequest(BaseModel):
    text: str


class SpeechResponse(BaseModel):
    # base64-encoded PCM/WAV bytes as returned by the backend
    audio: str
