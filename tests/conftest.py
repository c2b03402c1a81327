from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from recipebox.core import config


class FakeAI:
    """
    In-memory AIClient. Each queue entry is returned in order; an exception
    instance is raised instead, and a coroutine function is awaited.
    """

    def __init__(
        self,
        json_responses: Optional[List[Any]] = None,
        text_responses: Optional[List[Any]] = None,
        image: Any = None,
        audio: Any = None,
    ):
        self.json_responses = list(json_responses or [])
        self.text_responses = list(text_responses or [])
        self.image = image
        self.audio = audio
        self.calls: List[Dict[str, Any]] = []

    async def _resolve(self, item: Any) -> Any:
        if isinstance(item, BaseException):
            raise item
        if callable(item):
            return await item()
        return item

    async def _next(self, queue: List[Any], kind: str) -> Any:
        if not queue:
            raise AssertionError(f"unexpected {kind} call")
        return await self._resolve(queue.pop(0))

    async def generate_json(self, prompt, schema, *, images=None):
        self.calls.append({"method": "json", "prompt": prompt, "images": images})
        return await self._next(self.json_responses, "generate_json")

    async def generate_text(self, prompt, *, search=False):
        self.calls.append({"method": "text", "prompt": prompt, "search": search})
        return await self._next(self.text_responses, "generate_text")

    async def generate_image(self, prompt):
        self.calls.append({"method": "image", "prompt": prompt})
        return await self._resolve(self.image)

    async def synthesize_speech(self, text):
        self.calls.append({"method": "speech", "prompt": text})
        return await self._resolve(self.audio)

    def methods(self) -> List[str]:
        return [c["method"] for c in self.calls]


def recipe_json(**overrides: Any) -> str:
    data = {
        "title": "Pancakes",
        "description": "Fluffy weekend pancakes.",
        "servings": 2,
        "ingredients": [
            {"name": "flour", "quantity": "1 cup"},
            {"name": "egg", "quantity": "1"},
            {"name": "milk", "quantity": "3/4 cup"},
        ],
        "instructions": ["Whisk everything together.", "Cook on a hot griddle."],
    }
    data.update(overrides)
    return json.dumps(data)


def html_client(pages: Dict[str, Any], seen: Optional[List[httpx.Request]] = None) -> httpx.AsyncClient:
    """AsyncClient answering from ``pages``: url -> html string or (status, body)."""

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        page = pages.get(str(request.url))
        if page is None:
            return httpx.Response(404, text="not found")
        if isinstance(page, tuple):
            status, body = page
            return httpx.Response(status, text=body)
        return httpx.Response(200, text=page, headers={"content-type": "text/html"})

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture(autouse=True)
def _fast_retries(monkeypatch: pytest.MonkeyPatch) -> None:
    # keep exponential backoff out of the test run
    monkeypatch.setattr(config, "RETRY_INITIAL_DELAY_S", 0.0)


@pytest.fixture
def fake_ai() -> FakeAI:
    return FakeAI()


@pytest.fixture
def make_client() -> Callable[..., httpx.AsyncClient]:
    return html_client
