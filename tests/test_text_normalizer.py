from __future__ import annotations

import asyncio

import pytest

from recipebox.core import config
from recipebox.core.errors import ErrorCode, ExtractionError
from recipebox.services.text_normalizer import parse_json_response, structure_text_to_recipe

from conftest import FakeAI, recipe_json


def test_parse_json_response_strips_fences():
    assert parse_json_response('```json\n{"title": "Soup"}\n```') == {"title": "Soup"}
    assert parse_json_response('```\n[1, 2]\n```') == [1, 2]


@pytest.mark.parametrize("text", [None, "", "```json\n```", "{not json"])
def test_parse_json_response_errors(text):
    with pytest.raises(ExtractionError) as ei:
        parse_json_response(text)
    assert ei.value.code is ErrorCode.PARSING_ERROR


async def test_structures_text():
    ai = FakeAI(json_responses=[f"```json\n{recipe_json()}\n```"])

    recipe = await structure_text_to_recipe("flour, egg, milk. whisk and cook.", ai)

    assert recipe["title"] == "Pancakes"
    assert len(recipe["ingredients"]) == 3
    assert "flour, egg, milk" in ai.calls[0]["prompt"]


async def test_bad_json_is_retried_then_parsing_error():
    ai = FakeAI(json_responses=["I am not JSON", "still not"])

    with pytest.raises(ExtractionError) as ei:
        await structure_text_to_recipe("some text", ai)

    assert ei.value.code is ErrorCode.PARSING_ERROR
    assert ei.value.message == "Failed to structure recipe data"
    assert len(ai.calls) == 2


async def test_recovers_on_second_attempt():
    ai = FakeAI(json_responses=["nope", recipe_json(title="Crepes")])
    assert (await structure_text_to_recipe("text", ai))["title"] == "Crepes"


async def test_array_payload_is_rejected():
    ai = FakeAI(json_responses=["[]", "[]"])
    with pytest.raises(ExtractionError) as ei:
        await structure_text_to_recipe("text", ai)
    assert ei.value.code is ErrorCode.PARSING_ERROR


async def test_timeout_keeps_its_code(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(config, "TIMEOUT_STRUCTURE_S", 0.01)

    async def slow() -> str:
        await asyncio.sleep(1)
        return recipe_json()

    ai = FakeAI(json_responses=[slow, slow])

    with pytest.raises(ExtractionError) as ei:
        await structure_text_to_recipe("text", ai)

    assert ei.value.code is ErrorCode.TIMEOUT
    assert len(ai.calls) == 2


async def test_api_limit_keeps_its_code():
    ai = FakeAI(json_responses=[ExtractionError("429", ErrorCode.API_LIMIT)] * 2)
    with pytest.raises(ExtractionError) as ei:
        await structure_text_to_recipe("text", ai)
    assert ei.value.code is ErrorCode.API_LIMIT
