from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from recipebox.core.errors import ErrorCode, ExtractionError
from recipebox.models.recipe import Ingredient, StoredRecipe
from recipebox.services.servings import adjust_ingredients, build_shopping_list

from conftest import FakeAI

INGREDIENTS = [Ingredient(name="flour", quantity="1 cup"), Ingredient(name="egg", quantity="1")]


async def test_adjust_doubles_quantities():
    reply = json.dumps([{"name": "flour", "quantity": "2 cups"}, {"name": "egg", "quantity": "2"}])
    ai = FakeAI(json_responses=[reply])

    out = await adjust_ingredients(INGREDIENTS, 2, 4, ai)

    assert out == [Ingredient(name="flour", quantity="2 cups"), Ingredient(name="egg", quantity="2")]
    prompt = ai.calls[0]["prompt"]
    assert "for 2 servings" in prompt and "for 4 servings" in prompt
    assert "1 cup flour" in prompt


async def test_adjust_accepts_wrapped_list():
    reply = json.dumps({"ingredients": [{"name": "flour", "quantity": "½ cup"}, {"name": " ", "quantity": "x"}]})
    out = await adjust_ingredients(INGREDIENTS, 2, 1, FakeAI(json_responses=[reply]))
    assert out == [Ingredient(name="flour", quantity="½ cup")]


async def test_same_servings_skips_the_model():
    ai = FakeAI()
    assert await adjust_ingredients(INGREDIENTS, 4, 4, ai) == INGREDIENTS
    assert await adjust_ingredients([], 4, 8, ai) == []
    assert ai.calls == []


@pytest.mark.parametrize("original, new", [(4, 0), (0, 4), (4, -2)])
async def test_non_positive_servings_rejected(original: int, new: int):
    with pytest.raises(ExtractionError) as ei:
        await adjust_ingredients(INGREDIENTS, original, new, FakeAI())
    assert ei.value.code is ErrorCode.VALIDATION_ERROR


async def test_unusable_reply_is_parsing_error():
    ai = FakeAI(json_responses=['"just a string"', '"still a string"'])
    with pytest.raises(ExtractionError) as ei:
        await adjust_ingredients(INGREDIENTS, 2, 4, ai)
    assert ei.value.code is ErrorCode.PARSING_ERROR
    assert len(ai.calls) == 2


def _stored(rid: str, title: str, ingredients):
    now = datetime.now(timezone.utc)
    return StoredRecipe(
        id=rid,
        title=title,
        description="d",
        ingredients=ingredients,
        instructions=["cook"],
        created_at=now,
        updated_at=now,
    )


def test_shopping_list_keeps_recipe_order():
    soup = _stored("a", "Soup", [Ingredient(name="tomato", quantity="4"), Ingredient(name="salt")])
    bread = _stored("b", "Bread", [Ingredient(name="flour", quantity="500 g")])

    out = build_shopping_list([bread, soup])

    assert [i.name for i in out.items] == ["flour", "tomato", "salt"]
    assert list(out.grouped) == ["Bread", "Soup"]
    assert [i.quantity for i in out.grouped["Soup"]] == ["4", ""]
    assert out.items[0].recipe_title == "Bread"
    assert out.model_dump(by_alias=True)["items"][0]["recipeTitle"] == "Bread"
