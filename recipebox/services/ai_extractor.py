# recipebox/services/ai_extractor.py
from __future__ import annotations

import base64
import logging
import re
from typing import Optional

from recipebox.clients.base import AIClient
from recipebox.core import config
from recipebox.core.resilience import with_retry, with_timeout
from recipebox.core.urls import extract_domain

log = logging.getLogger(__name__)

# The model's own "nothing found" convention. Never let it leave this module.
SENTINEL = "ERROR"

_YOUTUBE_ID_RE = re.compile(
    r"(?:youtube\.com/(?:[^/]+/.+/|(?:v|e(?:mbed)?|shorts|live)/|.*[?&]v=)|youtu\.be/)([^\"&?/ ]{11})"
)

PAGE_TEXT_PROMPT = (
    "Please extract the main recipe content from the webpage at this URL: {url}. "
    "Include the title, description, ingredients, and instructions. "
    "Return only the text of the recipe. If you cannot access the URL or find a "
    'recipe on the page, return the single word "ERROR".'
)

PAGE_TEXT_FROM_CONTENT_PROMPT = (
    "Extract the recipe from this webpage text. Include the title, description, "
    "ingredients, and instructions and return only the text of the recipe. "
    'If the text does not contain a recipe, return the single word "ERROR".\n\n'
    'Text: "{text}"'
)

TRANSCRIPT_PROMPT = """You are a specialized AI assistant with expertise in processing YouTube video data. Your task is to find and return the full text transcript for a given YouTube video URL.
Video URL: {url}

Instructions:
1. Analyze the provided URL to identify the video.
2. Use your search capabilities to find the official or auto-generated captions/transcript for this specific video.
3. Extract the complete, verbatim text from the transcript.
4. Return ONLY the raw text of the transcript. Do not include timestamps, summaries, introductions, or any other conversational text.
5. If you successfully find the transcript, provide only the text.
6. If after a thorough search you cannot find any transcript or captions for this video, you MUST return the single word: "ERROR". Do not explain why or apologize."""

IMAGE_PROMPT = 'Generate a delicious-looking photo of "{title}". It is described as: "{description}"'


def _is_sentinel(text: Optional[str]) -> bool:
    return not text or not text.strip() or text.strip().upper() == SENTINEL


async def fetch_page_text(url: str, ai: AIClient, text_content: Optional[str] = None) -> Optional[str]:
    """
    Recipe text for ``url``, or None when the model reports there is none.

    With ``text_content`` the model works from already-fetched page text;
    without it, it is asked to look the page up itself (search-grounded).
    """
    if text_content:
        prompt = PAGE_TEXT_FROM_CONTENT_PROMPT.format(text=text_content[: config.MAX_PAGE_TEXT_CHARS])
        search = False
    else:
        prompt = PAGE_TEXT_PROMPT.format(url=url)
        search = True

    async def _call() -> Optional[str]:
        out = await with_timeout(
            ai.generate_text(prompt, search=search),
            config.TIMEOUT_AI_S,
            "AI extraction timeout",
        )
        if _is_sentinel(out):
            return None
        return out.strip()

    text = await with_retry(_call, config.RETRY_ATTEMPTS_AI, config.RETRY_INITIAL_DELAY_S)
    if text is None:
        log.info("AI found no recipe text for %s", extract_domain(url))
    return text


async def fetch_transcript(url: str, ai: AIClient) -> Optional[str]:
    """Caption text for a video, or None if there is none (or it is implausibly short)."""
    prompt = TRANSCRIPT_PROMPT.format(url=url)

    async def _call() -> Optional[str]:
        out = await with_timeout(
            ai.generate_text(prompt, search=True),
            config.TIMEOUT_AI_S,
            "YouTube transcript extraction timeout",
        )
        if _is_sentinel(out):
            return None
        text = out.strip()
        if len(text) < config.MIN_TRANSCRIPT_CHARS:
            log.info("discarding %d-char transcript as implausible", len(text))
            return None
        return text

    return await with_retry(_call, config.RETRY_ATTEMPTS_AI, config.RETRY_INITIAL_DELAY_S)


def youtube_video_id(url: str) -> Optional[str]:
    m = _YOUTUBE_ID_RE.search(url or "")
    return m.group(1) if m else None


def youtube_thumbnail_url(video_id: str, size: str = "maxresdefault") -> str:
    return f"https://img.youtube.com/vi/{video_id}/{size}.jpg"


def is_youtube_url(url: str) -> bool:
    host = extract_domain(url).lower()
    return host == "youtu.be" or host == "youtube.com" or host.endswith(".youtube.com")


async def generate_recipe_image(title: str, description: str, ai: AIClient) -> Optional[str]:
    """Best-effort dish photo as a data URL. Failures are logged, never raised."""
    prompt = IMAGE_PROMPT.format(title=title or "the dish", description=description or "")
    try:
        data = await with_timeout(ai.generate_image(prompt), config.TIMEOUT_AI_S, "Image generation timeout")
    except Exception as e:
        log.warning("image generation failed for %r: %s", title, e)
        return None

    if not data:
        return None
    return "data:image/png;base64," + base64.b64encode(data).decode("ascii")
