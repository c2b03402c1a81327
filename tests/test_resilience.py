from __future__ import annotations

import asyncio

import httpx
import pytest

from recipebox.core.errors import ErrorCode, ExtractionError
from recipebox.core.resilience import with_retry, with_timeout
from recipebox.core.urls import extract_domain, is_url_accessible, normalize_url


class Flaky:
    def __init__(self, failures: list[BaseException], result: str = "ok"):
        self.failures = list(failures)
        self.result = result
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.failures:
            raise self.failures.pop(0)
        return self.result


async def test_no_recipe_found_is_not_retried():
    fn = Flaky([ExtractionError("nothing", ErrorCode.NO_RECIPE_FOUND)] * 5)

    with pytest.raises(ExtractionError) as ei:
        await with_retry(fn, max_retries=3, initial_delay=0)

    assert ei.value.code is ErrorCode.NO_RECIPE_FOUND
    assert fn.calls == 1


async def test_validation_error_is_not_retried():
    fn = Flaky([ExtractionError("bad", ErrorCode.VALIDATION_ERROR)] * 5)

    with pytest.raises(ExtractionError):
        await with_retry(fn, max_retries=3, initial_delay=0)

    assert fn.calls == 1


async def test_transient_errors_retried_until_success():
    fn = Flaky([RuntimeError("blip"), ConnectionError("blip again")])

    assert await with_retry(fn, max_retries=3, initial_delay=0) == "ok"
    assert fn.calls == 3


async def test_last_error_reraised_when_attempts_run_out():
    errors = [
        ExtractionError("first", ErrorCode.NETWORK_ERROR),
        ExtractionError("second", ErrorCode.TIMEOUT),
    ]
    fn = Flaky(errors)

    with pytest.raises(ExtractionError) as ei:
        await with_retry(fn, max_retries=2, initial_delay=0)

    assert ei.value.message == "second"
    assert fn.calls == 2


async def test_backoff_doubles_each_attempt(monkeypatch: pytest.MonkeyPatch):
    delays: list[float] = []

    async def fake_sleep(d: float) -> None:
        delays.append(d)

    monkeypatch.setattr(asyncio, "sleep", fake_sleep)
    fn = Flaky([RuntimeError("x")] * 3)

    with pytest.raises(RuntimeError):
        await with_retry(fn, max_retries=4, initial_delay=1.0)

    assert delays == [1.0, 2.0, 4.0]
    assert fn.calls == 4


async def test_timeout_raises_classified_error():
    with pytest.raises(ExtractionError) as ei:
        await with_timeout(asyncio.sleep(5, result="late"), 0.01, "Too slow")

    assert ei.value.code is ErrorCode.TIMEOUT
    assert ei.value.message == "Too slow"
    assert ei.value.retryable


async def test_timeout_passes_result_through():
    assert await with_timeout(asyncio.sleep(0, result=42), 1.0) == 42


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("example.com/recipes/soup", "https://example.com/recipes/soup"),
        ("  http://example.com/a  ", "http://example.com/a"),
        ("https://example.com/a?b=1", "https://example.com/a?b=1"),
    ],
)
def test_normalize_url(raw: str, expected: str):
    assert normalize_url(raw) == expected
    # idempotent
    assert normalize_url(normalize_url(raw)) == expected


@pytest.mark.parametrize("raw", ["", "   ", "https://", "http://[::1"])
def test_normalize_url_rejects_garbage(raw: str):
    with pytest.raises(ExtractionError) as ei:
        normalize_url(raw)
    assert ei.value.code is ErrorCode.VALIDATION_ERROR


def test_extract_domain():
    assert extract_domain("https://www.example.com/x") == "www.example.com"
    assert extract_domain("not a url") == "unknown"


async def test_is_url_accessible():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "HEAD"
        if request.url.path == "/boom":
            raise httpx.ConnectError("refused", request=request)
        return httpx.Response(200 if request.url.path == "/ok" else 404)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        assert await is_url_accessible("https://example.com/ok", client) is True
        assert await is_url_accessible("https://example.com/missing", client) is False
        assert await is_url_accessible("https://example.com/boom", client) is False


def test_error_http_status_mapping():
    assert ExtractionError("x", ErrorCode.NO_RECIPE_FOUND).http_status == 422
    assert ExtractionError("x", ErrorCode.API_LIMIT).http_status == 429
    assert ExtractionError("x", ErrorCode.TIMEOUT).http_status == 504
    assert not ExtractionError("x", ErrorCode.VALIDATION_ERROR).retryable
