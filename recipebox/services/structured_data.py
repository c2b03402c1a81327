# recipebox/services/structured_data.py
"""
AI-free recipe extraction from fetched HTML.

JSON-LD (schema.org ``Recipe``) is tried first; page-level metadata
(OpenGraph / ``<meta name="description">`` / ``<title>``) is only a hint that
the page is worth handing to the model.
"""
from __future__ import annotations

import html as _html
import json
import logging
import re
from typing import Any, Dict, List, Optional

import httpx
from bs4 import BeautifulSoup

from recipebox.core import config
from recipebox.core.errors import ErrorCode, ExtractionError
from recipebox.core.resilience import with_timeout
from recipebox.core.urls import extract_domain
from recipebox.models.recipe import PagePreview

log = logging.getLogger(__name__)

_FRACTIONS = "¼½¾⅐⅑⅒⅓⅔⅕⅖⅗⅘⅙⅚⅛⅜⅝⅞"
_UNITS = (
    r"cups?|tablespoons?|teaspoons?|tbsps?|tsps?|oz|ounces?|pounds?|lbs?|"
    r"grams?|g|kg|ml|milliliters?|millilitres?|l|liters?|litres?|"
    r"pinch(?:es)?|cloves?|cans?|inch(?:es)?"
)
_INGREDIENT_RE = re.compile(
    rf"^([\d{_FRACTIONS}][\d\s/.,\-{_FRACTIONS}]*(?:\s*(?:{_UNITS})\b\.?)?)\s+(.+)$",
    flags=re.IGNORECASE,
)


# ---------------------------------------------------------------------------
# Fetch
# ---------------------------------------------------------------------------


async def fetch_html(url: str, client: httpx.AsyncClient) -> str:
    """GET ``url`` with a descriptive User-Agent. No retries at this layer."""
    headers = {
        "User-Agent": config.USER_AGENT,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.5",
    }

    try:
        r = await with_timeout(
            client.get(url, headers=headers, follow_redirects=True),
            config.TIMEOUT_FETCH_S,
            "Timeout fetching webpage",
        )
    except httpx.HTTPError as e:
        raise ExtractionError(f"Failed to fetch URL: {e}", ErrorCode.NETWORK_ERROR, url, e) from e

    if not r.is_success:
        raise ExtractionError(f"HTTP {r.status_code}: {r.reason_phrase}", ErrorCode.NETWORK_ERROR, url)

    return r.text


# ---------------------------------------------------------------------------
# JSON-LD
# ---------------------------------------------------------------------------


def _find_jsonld_scripts(html: str) -> List[str]:
    pattern = r'<script[^>]+type=["\']application/ld\+json["\'][^>]*>(.*?)</script>'
    blocks = re.findall(pattern, html, flags=re.DOTALL | re.IGNORECASE)
    return [b.strip() for b in blocks if b and b.strip()]


def _load_block(block: str) -> Any:
    # script bodies are raw text; entity-decode only when the raw text is not JSON
    try:
        return json.loads(block)
    except ValueError:
        return json.loads(_html.unescape(block))


def _as_list(x: Any) -> list:
    if x is None:
        return []
    return x if isinstance(x, list) else [x]


def _is_recipe(obj: Any) -> bool:
    if not isinstance(obj, dict):
        return False
    types = [t.lower() for t in _as_list(obj.get("@type")) if isinstance(t, str)]
    return "recipe" in types


def _recipe_candidates(data: Any) -> List[Dict[str, Any]]:
    """Recipe objects in one parsed block: bare, listed, or inside @graph."""
    candidates: List[Dict[str, Any]] = []
    for item in _as_list(data):
        if _is_recipe(item):
            candidates.append(item)
        elif isinstance(item, dict) and "@graph" in item:
            candidates.extend(g for g in _as_list(item["@graph"]) if _is_recipe(g))
    return candidates


def parse_servings(value: Any) -> int:
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, bool):
        return config.DEFAULT_SERVINGS
    if isinstance(value, (int, float)):
        n = int(value)
        return n if n > 0 else config.DEFAULT_SERVINGS

    m = re.search(r"\d+", str(value or ""))
    if m and int(m.group(0)) > 0:
        return int(m.group(0))
    return config.DEFAULT_SERVINGS


def parse_ingredient_string(text: str) -> Dict[str, str]:
    """
    Split "2 cups flour" into quantity/name.

    Anything without a leading quantity ("Salt to taste") becomes the name
    with an empty quantity; an ingredient is never rejected for that.
    """
    trimmed = (text or "").strip()
    m = _INGREDIENT_RE.match(trimmed)
    if m:
        return {"quantity": m.group(1).strip(), "name": m.group(2).strip()}
    return {"quantity": "", "name": trimmed}


def parse_ingredients(items: Any) -> List[Dict[str, str]]:
    out: List[Dict[str, str]] = []
    for item in _as_list(items):
        if isinstance(item, dict):
            item = item.get("text") or item.get("name") or item.get("@value")
        if not isinstance(item, str):
            continue
        parsed = parse_ingredient_string(item)
        if parsed["name"]:
            out.append(parsed)
    return out


def parse_instructions(value: Any) -> List[str]:
    """
    Accepts a list of strings, a list of HowToStep / HowToSection objects,
    or one string (split on blank lines, then on single newlines).
    """
    if isinstance(value, str):
        chunks = re.split(r"\n\s*\n", value.strip())
        if len(chunks) == 1:
            chunks = value.split("\n")
        return [c.strip() for c in chunks if c.strip()]

    steps: List[str] = []
    for item in _as_list(value):
        if isinstance(item, str):
            text = item.strip()
        elif isinstance(item, dict):
            if "itemListElement" in item:
                steps.extend(parse_instructions(item["itemListElement"]))
                continue
            raw = item.get("text") or item.get("name") or item.get("@value") or ""
            text = raw.strip() if isinstance(raw, str) else ""
        else:
            text = ""
        if text:
            steps.append(text)
    return steps


def _image_urls(image: Any) -> List[str]:
    urls: List[str] = []
    for item in _as_list(image):
        if isinstance(item, dict):
            item = item.get("url") or item.get("contentUrl")
        if isinstance(item, str) and item.startswith(("http://", "https://")) and item not in urls:
            urls.append(item)
    return urls


def _transform_schema_org(recipe: Dict[str, Any], url: str) -> Optional[Dict[str, Any]]:
    title = recipe.get("name") or recipe.get("headline")
    if not isinstance(title, str) or not title.strip():
        return None

    ingredients = parse_ingredients(recipe.get("recipeIngredient") or recipe.get("ingredients"))
    if not ingredients:
        return None

    instructions = parse_instructions(recipe.get("recipeInstructions"))
    if not instructions:
        return None

    description = recipe.get("description")
    return {
        "title": title.strip(),
        "description": description.strip() if isinstance(description, str) else "",
        "servings": parse_servings(recipe.get("recipeYield")),
        "ingredients": ingredients,
        "instructions": instructions,
        "imageUrls": _image_urls(recipe.get("image")),
        "sourceUrl": url,
    }


def parse_json_ld_recipe(html: str, url: str) -> Optional[Dict[str, Any]]:
    """
    First complete schema.org Recipe in document order, or None.

    A block that fails to decode is skipped; it never stops the scan of the
    blocks after it.
    """
    for i, block in enumerate(_find_jsonld_scripts(html)):
        try:
            data = _load_block(block)
        except ValueError:
            log.debug("skipping malformed JSON-LD block %d on %s", i, extract_domain(url))
            continue

        for candidate in _recipe_candidates(data):
            parsed = _transform_schema_org(candidate, url)
            if parsed:
                log.info("parsed JSON-LD recipe from %s", extract_domain(url))
                return parsed

    return None


# ---------------------------------------------------------------------------
# Page metadata / text
# ---------------------------------------------------------------------------


def _meta_content(soup: BeautifulSoup, key: str) -> str:
    tag = soup.find("meta", attrs={"property": key}) or soup.find("meta", attrs={"name": key})
    content = tag.get("content") if tag else None
    return content.strip() if isinstance(content, str) else ""


def parse_page_metadata(html: str, url: str) -> Optional[PagePreview]:
    soup = BeautifulSoup(html, "html.parser")

    title = _meta_content(soup, "og:title")
    if not title and soup.title and soup.title.string:
        title = re.sub(r"\s+", " ", soup.title.string).strip()
    if not title:
        return None

    description = _meta_content(soup, "og:description") or _meta_content(soup, "description")
    log.info("extracted page metadata from %s", extract_domain(url))
    return PagePreview(title=title, description=description)


def extract_text_from_html(html: str) -> Optional[str]:
    """Visible page text, or None when there is too little to be a recipe."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript", "nav", "header", "footer"]):
        tag.decompose()

    text = re.sub(r"\s+", " ", soup.get_text(separator=" ")).strip()
    return text if len(text) > 100 else None
