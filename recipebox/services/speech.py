# recipebox/services/speech.py
from __future__ import annotations

import base64
import logging
from typing import Optional

from recipebox.clients.base import AIClient
from recipebox.core import config
from recipebox.core.resilience import with_timeout

log = logging.getLogger(__name__)


async def text_to_speech(text: str, ai: AIClient) -> Optional[str]:
    """Base64 audio for ``text``; None when the backend has nothing to give."""
    try:
        audio = await with_timeout(ai.synthesize_speech(text), config.TIMEOUT_AI_S, "Speech synthesis timeout")
    except Exception as e:
        log.warning("speech synthesis failed: %s", e)
        return None
    if not audio:
        return None
    return base64.b64encode(audio).decode("ascii")
