from __future__ import annotations

import base64

import pytest

from recipebox.core.errors import ErrorCode, ExtractionError
from recipebox.services.ai_extractor import (
    fetch_page_text,
    fetch_transcript,
    generate_recipe_image,
    is_youtube_url,
    youtube_thumbnail_url,
    youtube_video_id,
)

from conftest import FakeAI

URL = "https://example.com/recipe"
TRANSCRIPT = "Today we are making a simple tomato soup. " * 5


@pytest.mark.parametrize("reply", ["ERROR", "  error \n", "", "   "])
async def test_sentinel_means_no_text(reply: str):
    ai = FakeAI(text_responses=[reply])
    assert await fetch_page_text(URL, ai) is None
    assert len(ai.calls) == 1


async def test_page_lookup_uses_search():
    ai = FakeAI(text_responses=["  Tomato soup\n2 cups tomatoes  "])

    text = await fetch_page_text(URL, ai)

    assert text == "Tomato soup\n2 cups tomatoes"
    assert ai.calls[0]["search"] is True
    assert URL in ai.calls[0]["prompt"]


async def test_page_text_is_truncated_and_not_searched():
    ai = FakeAI(text_responses=["Soup recipe"])
    long_text = "a" * 9_990 + "b" * 20 + "TAIL"

    await fetch_page_text(URL, ai, text_content=long_text)

    call = ai.calls[0]
    assert call["search"] is False
    assert "a" * 9_990 + "b" * 10 in call["prompt"]
    assert "TAIL" not in call["prompt"]


async def test_page_text_retries_transient_failures():
    ai = FakeAI(text_responses=[ExtractionError("boom", ErrorCode.NETWORK_ERROR), "Soup recipe"])
    assert await fetch_page_text(URL, ai) == "Soup recipe"
    assert len(ai.calls) == 2


async def test_page_text_gives_up_after_budget():
    ai = FakeAI(text_responses=[ExtractionError("slow down", ErrorCode.API_LIMIT)] * 2)

    with pytest.raises(ExtractionError) as ei:
        await fetch_page_text(URL, ai)

    assert ei.value.code is ErrorCode.API_LIMIT
    assert len(ai.calls) == 2


async def test_transcript_returned_stripped():
    ai = FakeAI(text_responses=[f"\n{TRANSCRIPT}\n"])
    assert await fetch_transcript("https://youtu.be/dQw4w9WgXcQ", ai) == TRANSCRIPT.strip()
    assert ai.calls[0]["search"] is True


@pytest.mark.parametrize("reply", ["ERROR", "too short to be a transcript"])
async def test_missing_or_short_transcript(reply: str):
    ai = FakeAI(text_responses=[reply])
    assert await fetch_transcript("https://youtu.be/dQw4w9WgXcQ", ai) is None


@pytest.mark.parametrize(
    "url",
    [
        "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "https://youtube.com/watch?feature=share&v=dQw4w9WgXcQ",
        "https://youtu.be/dQw4w9WgXcQ",
        "https://www.youtube.com/embed/dQw4w9WgXcQ",
        "https://www.youtube.com/shorts/dQw4w9WgXcQ",
        "https://m.youtube.com/v/dQw4w9WgXcQ",
    ],
)
def test_youtube_video_id(url: str):
    assert youtube_video_id(url) == "dQw4w9WgXcQ"


@pytest.mark.parametrize(
    "url", ["https://example.com/video", "https://example.com/watch?v=short", "https://www.youtube.com/channel", ""]
)
def test_youtube_video_id_missing(url: str):
    assert youtube_video_id(url) is None


def test_thumbnail_url():
    assert youtube_thumbnail_url("dQw4w9WgXcQ") == "https://img.youtube.com/vi/dQw4w9WgXcQ/maxresdefault.jpg"


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://www.youtube.com/watch?v=dQw4w9WgXcQ", True),
        ("https://youtu.be/dQw4w9WgXcQ", True),
        ("https://m.youtube.com/shorts/dQw4w9WgXcQ", True),
        ("https://notyoutube.com/watch?v=dQw4w9WgXcQ", False),
        ("https://example.com/", False),
    ],
)
def test_is_youtube_url(url: str, expected: bool):
    assert is_youtube_url(url) is expected


async def test_generated_image_is_data_url():
    ai = FakeAI(image=b"\x89PNG")

    url = await generate_recipe_image("Soup", "Warm", ai)

    assert url == "data:image/png;base64," + base64.b64encode(b"\x89PNG").decode()
    assert '"Soup"' in ai.calls[0]["prompt"]


@pytest.mark.parametrize("image", [None, b"", RuntimeError("quota"), ExtractionError("x", ErrorCode.API_LIMIT)])
async def test_image_generation_failure_is_none(image):
    assert await generate_recipe_image("Soup", "Warm", FakeAI(image=image)) is None
