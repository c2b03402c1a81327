# recipebox/services/servings.py
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Sequence

from recipebox.clients.base import AIClient
from recipebox.core import config
from recipebox.core.errors import ErrorCode, ExtractionError
from recipebox.core.resilience import with_retry, with_timeout
from recipebox.models.recipe import Ingredient, StoredRecipe
from recipebox.models.shopping_list import ShoppingListItem, ShoppingListResponse
from recipebox.services.text_normalizer import parse_json_response

log = logging.getLogger(__name__)

INGREDIENT_LIST_SCHEMA: Dict[str, Any] = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "name": {"type": "string"},
            "quantity": {"type": "string"},
        },
        "required": ["name", "quantity"],
    },
}

ADJUST_PROMPT = (
    "This recipe is for {original} servings. Adjust the ingredient quantities for "
    "{new} servings. Original ingredients:\n{ingredients}\n\n"
    'Return ONLY the adjusted ingredients list as a JSON array of objects with "name" and "quantity" keys.'
)


def _to_ingredients(payload: Any) -> List[Ingredient]:
    if isinstance(payload, dict):
        payload = payload.get("ingredients")
    if not isinstance(payload, list):
        raise ExtractionError("AI response was not an ingredient list", ErrorCode.PARSING_ERROR)

    out: List[Ingredient] = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        name = str(item.get("name") or "").strip()
        if name:
            out.append(Ingredient(name=name, quantity=str(item.get("quantity") or "").strip()))
    return out


async def adjust_ingredients(
    ingredients: Sequence[Ingredient],
    original_servings: int,
    new_servings: int,
    ai: AIClient,
) -> List[Ingredient]:
    """Rescale quantities with the model; names and order are expected to survive."""
    if new_servings <= 0 or original_servings <= 0:
        raise ExtractionError("Servings must be a positive number", ErrorCode.VALIDATION_ERROR)
    if not ingredients:
        return []
    if new_servings == original_servings:
        return list(ingredients)

    listing = "\n".join(f"{i.quantity} {i.name}".strip() for i in ingredients)
    prompt = ADJUST_PROMPT.format(original=original_servings, new=new_servings, ingredients=listing)

    async def _call() -> List[Ingredient]:
        out = await with_timeout(
            ai.generate_json(prompt, INGREDIENT_LIST_SCHEMA),
            config.TIMEOUT_STRUCTURE_S,
            "Servings adjustment timeout",
        )
        return _to_ingredients(parse_json_response(out))

    adjusted = await with_retry(_call, config.RETRY_ATTEMPTS_AI, config.RETRY_INITIAL_DELAY_S)
    log.info("adjusted %d ingredients from %d to %d servings", len(adjusted), original_servings, new_servings)
    return adjusted


def build_shopping_list(recipes: Iterable[StoredRecipe]) -> ShoppingListResponse:
    items: List[ShoppingListItem] = []
    grouped: Dict[str, List[ShoppingListItem]] = {}

    for recipe in recipes:
        for ing in recipe.ingredients:
            item = ShoppingListItem(name=ing.name, quantity=ing.quantity, recipe_title=recipe.title)
            items.append(item)
            grouped.setdefault(recipe.title, []).append(item)

    return ShoppingListResponse(items=items, grouped=grouped)
