# recipebox/services/validation.py
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from recipebox.core.config import DEFAULT_SERVINGS
from recipebox.core.errors import ErrorCode, ExtractionError
from recipebox.models.recipe import RecipeDraft

# pydantic's default wording is fine for most fields; these read better
_MESSAGES = {
    ("title", "string_too_short"): "Recipe title is required",
    ("title", "string_too_long"): "Title too long",
    ("description", "string_too_short"): "Recipe description is required",
    ("servings", "greater_than"): "Servings must be a positive number",
    ("ingredients", "too_short"): "At least one ingredient is required",
    ("ingredients", "too_long"): "Too many ingredients",
    ("instructions", "too_short"): "At least one instruction step is required",
    ("instructions", "too_long"): "Too many instruction steps",
}


def _get(data: Mapping[str, Any], *keys: str) -> Any:
    for k in keys:
        if k in data:
            return data[k]
    return None


def _clean_str(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _clean_servings(value: Any) -> int:
    if isinstance(value, bool):
        return DEFAULT_SERVINGS
    try:
        n = int(str(value).strip())
    except (TypeError, ValueError):
        try:
            n = int(float(value))
        except (TypeError, ValueError):
            return DEFAULT_SERVINGS
    return n if n > 0 else DEFAULT_SERVINGS


def _clean_ingredients(value: Any) -> List[Dict[str, str]]:
    if not isinstance(value, list):
        return []
    out = []
    for ing in value:
        if not isinstance(ing, Mapping):
            continue
        name = _clean_str(ing.get("name"))
        if name:
            out.append({"name": name, "quantity": _clean_str(ing.get("quantity"))})
    return out


def _clean_instructions(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [s for s in (_clean_str(v) for v in value) if s]


def sanitize_recipe_data(data: Any) -> Dict[str, Any]:
    """
    Coerce a loosely-typed draft into canonical shapes. Never raises.

    Accepts snake_case or camelCase keys; emits camelCase for the URL fields.
    """
    if not isinstance(data, Mapping):
        data = {}

    image_urls = _get(data, "imageUrls", "image_urls")
    source_url = _clean_str(_get(data, "sourceUrl", "source_url"))

    return {
        "title": _clean_str(data.get("title")),
        "description": _clean_str(data.get("description")),
        "servings": _clean_servings(data.get("servings")),
        "ingredients": _clean_ingredients(data.get("ingredients")),
        "instructions": _clean_instructions(data.get("instructions")),
        "imageUrls": [u for u in image_urls if isinstance(u, str) and u.strip()] if isinstance(image_urls, list) else [],
        "sourceUrl": source_url or None,
    }


def _format_issue(err: Mapping[str, Any]) -> str:
    loc = [str(p) for p in err.get("loc", ())]
    field = loc[0] if loc else "recipe"
    msg = _MESSAGES.get((field, err.get("type", "")))
    if msg is None:
        msg = str(err.get("msg", "invalid")).removeprefix("Value error, ")
    # pydantic reports aliases; keep the path readable either way
    return f"{'.'.join(loc) or field}: {msg}"


def validate_recipe_data(data: Any) -> RecipeDraft:
    """
    Strict schema check. Raises VALIDATION_ERROR listing every failing field
    as "field: reason" pairs, not just the first.
    """
    try:
        return RecipeDraft.model_validate(data)
    except ValidationError as e:
        issues = ", ".join(_format_issue(err) for err in e.errors())
        raise ExtractionError(f"Recipe validation failed: {issues}", ErrorCode.VALIDATION_ERROR) from e


def safe_validate_recipe_data(data: Any) -> Tuple[Optional[RecipeDraft], Optional[str]]:
    try:
        return validate_recipe_data(data), None
    except ExtractionError as e:
        return None, e.message
