# recipebox/services/text_normalizer.py
from __future__ import annotations

import json
import logging
from typing import Any, Dict

from recipebox.clients.base import AIClient
from recipebox.core import config
from recipebox.core.errors import ErrorCode, ExtractionError
from recipebox.core.resilience import with_retry, with_timeout
from recipebox.core.text import extract_json, strip_code_fences

log = logging.getLogger(__name__)

RECIPE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "description": {"type": "string"},
        "servings": {"type": "integer"},
        "ingredients": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "quantity": {"type": "string"},
                },
                "required": ["name", "quantity"],
            },
        },
        "instructions": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["title", "description", "servings", "ingredients", "instructions"],
}

STRUCTURE_PROMPT = (
    "Take the following text and structure it as a recipe. "
    "Format the response as JSON using the provided schema.\n\n"
    'Text: "{text}"'
)

# Codes that keep their identity when structuring gives up
_PASSTHROUGH = {ErrorCode.TIMEOUT, ErrorCode.API_LIMIT}


def parse_json_response(text: str | None) -> Any:
    """Decode model output, tolerating ```json fences around it."""
    if not text:
        raise ExtractionError("AI response was empty", ErrorCode.PARSING_ERROR)

    cleaned = strip_code_fences(text)
    if not cleaned:
        raise ExtractionError("AI response was empty after removing markdown", ErrorCode.PARSING_ERROR)

    try:
        # local models sometimes wrap the object in prose
        return json.loads(extract_json(cleaned))
    except ValueError as e:
        log.warning("could not decode AI response: %.200s", cleaned)
        raise ExtractionError("AI response was not valid JSON", ErrorCode.PARSING_ERROR, cause=e) from e


async def structure_text_to_recipe(text: str, ai: AIClient) -> Dict[str, Any]:
    """
    Turn free text (recipe prose, a transcript, page text) into a loose recipe
    dict. Business rules are checked later by validation.
    """
    prompt = STRUCTURE_PROMPT.format(text=text)

    async def _call() -> Dict[str, Any]:
        out = await with_timeout(
            ai.generate_json(prompt, RECIPE_SCHEMA),
            config.TIMEOUT_STRUCTURE_S,
            "Recipe structuring timeout",
        )
        payload = parse_json_response(out)
        if not isinstance(payload, dict):
            raise ExtractionError("AI response was not a JSON object", ErrorCode.PARSING_ERROR)
        return payload

    try:
        return await with_retry(_call, config.RETRY_ATTEMPTS_AI, config.RETRY_INITIAL_DELAY_S)
    except ExtractionError as e:
        if e.code in _PASSTHROUGH:
            raise
        raise ExtractionError("Failed to structure recipe data", ErrorCode.PARSING_ERROR, cause=e) from e
    except Exception as e:
        log.error("recipe structuring failed: %s", e)
        raise ExtractionError("Failed to structure recipe data", ErrorCode.PARSING_ERROR, cause=e) from e
