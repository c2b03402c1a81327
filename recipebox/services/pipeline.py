# recipebox/services/pipeline.py
"""
Recipe extraction orchestration.

One entry point per input modality. URLs go through three tiers, cheapest
first:

1. JSON-LD structured data in the fetched HTML (no AI at all)
2. page metadata says there is a page worth reading -> the model extracts
   recipe text from the page's own visible text
3. the model looks the URL up itself (search-grounded)

A tier that finds nothing, or fails after its own retries, hands over to
the next one. Only the last tier's failure reaches the caller.
"""
from __future__ import annotations

import base64
import binascii
import logging
from typing import Any, Dict, Optional

import httpx

from recipebox.clients.base import AIClient
from recipebox.core import config
from recipebox.core.errors import ErrorCode, ExtractionError
from recipebox.core.resilience import with_retry, with_timeout
from recipebox.core.urls import extract_domain, is_url_accessible, normalize_url
from recipebox.models.recipe import RecipeDraft
from recipebox.services.ai_extractor import (
    fetch_page_text,
    fetch_transcript,
    generate_recipe_image,
    is_youtube_url,
    youtube_thumbnail_url,
    youtube_video_id,
)
from recipebox.services.structured_data import (
    extract_text_from_html,
    fetch_html,
    parse_json_ld_recipe,
    parse_page_metadata,
)
from recipebox.services.text_normalizer import RECIPE_SCHEMA, parse_json_response, structure_text_to_recipe
from recipebox.services.validation import safe_validate_recipe_data, sanitize_recipe_data, validate_recipe_data

log = logging.getLogger(__name__)

NO_RECIPE_MESSAGE = "No recipe found on this page. Please make sure the URL contains a recipe."
NO_TRANSCRIPT_MESSAGE = (
    "Failed to retrieve transcript from YouTube video. "
    "The video may not have captions or may not contain a recipe."
)
IMAGE_ANALYSIS_PROMPT = (
    "Analyze this image of a dish. Identify it and create a detailed recipe for it. "
    "If you can't identify a specific dish, make a recipe for what you see. "
    "Format the response as JSON using the provided schema."
)


class RecipePipeline:
    """
    Stateless composition of the extraction stages.

    The AI client and HTTP client are built once by the process and handed in;
    nothing here constructs its own.
    """

    def __init__(self, ai: AIClient, http_client: httpx.AsyncClient):
        self.ai = ai
        self.http = http_client

    # ------------------------------------------------------------------
    # URL tiers
    # ------------------------------------------------------------------

    async def _recipe_via_ai(self, url: str, text_content: Optional[str] = None) -> Optional[Dict[str, Any]]:
        text = await fetch_page_text(url, self.ai, text_content=text_content)
        if not text:
            return None
        recipe = await structure_text_to_recipe(text, self.ai)
        recipe["sourceUrl"] = url
        return recipe

    def _accept(self, recipe: Dict[str, Any], url: str, tier: str) -> Optional[RecipeDraft]:
        """Validated draft, or None so the caller moves on to the next tier."""
        draft, error = safe_validate_recipe_data(sanitize_recipe_data({**recipe, "sourceUrl": url}))
        if error:
            log.warning(
                "%s draft for %s rejected; falling back",
                tier,
                extract_domain(url),
                extra={"code": ErrorCode.VALIDATION_ERROR.value, "reason": error},
            )
        return draft

    async def _fetch(self, url: str) -> Optional[str]:
        try:
            return await with_retry(
                lambda: fetch_html(url, self.http),
                config.RETRY_ATTEMPTS_NETWORK,
                config.RETRY_INITIAL_DELAY_S,
            )
        except ExtractionError as e:
            log.warning(
                "could not fetch %s (%s: %s); skipping local extraction",
                extract_domain(url),
                e.code.value,
                e.message,
            )
            return None

    def _tier_from_markup(self, url: str, html: str) -> Optional[RecipeDraft]:
        log.info("tier 1: trying JSON-LD structured data", extra={"url": url})
        recipe = parse_json_ld_recipe(html, url)
        if not recipe:
            return None

        if not recipe["description"]:
            preview = parse_page_metadata(html, url)
            recipe["description"] = (preview.description if preview else "") or recipe["title"]
        return self._accept(recipe, url, "tier 1")

    async def _tier_from_html(self, url: str, html: str) -> Optional[RecipeDraft]:
        preview = parse_page_metadata(html, url)
        if not preview or not preview.title:
            return None

        text_content = extract_text_from_html(html)
        if not text_content:
            return None

        log.info("tier 2: page metadata found, asking AI to read page text", extra={"url": url})
        try:
            recipe = await self._recipe_via_ai(url, text_content)
        except ExtractionError as e:
            log.warning("tier 2 failed for %s (%s); falling back", extract_domain(url), e.code.value)
            return None
        except Exception:
            log.exception("tier 2 crashed for %s; falling back", extract_domain(url))
            return None
        return self._accept(recipe, url, "tier 2") if recipe else None

    async def extract_recipe_from_url(self, url: str) -> RecipeDraft:
        """
        Validated draft for ``url`` from the cheapest tier that yields one.

        A tier whose draft fails validation hands over to the next tier; only
        the last tier's errors reach the caller. Raises NO_RECIPE_FOUND when
        no tier finds anything.
        """
        normalized = normalize_url(url)
        domain = extract_domain(normalized)
        log.info("extracting recipe", extra={"url": normalized, "domain": domain})

        try:
            html = await self._fetch(normalized)
            if html:
                draft = self._tier_from_markup(normalized, html) or await self._tier_from_html(normalized, html)
                if draft:
                    return draft

            log.info("tier 3: asking AI to look the page up", extra={"url": normalized})
            recipe = await self._recipe_via_ai(normalized)
            if recipe:
                return validate_recipe_data(sanitize_recipe_data({**recipe, "sourceUrl": normalized}))
        except ExtractionError:
            raise
        except Exception as e:
            log.exception("recipe extraction failed for %s", domain)
            raise ExtractionError(
                f"Failed to extract recipe: {e}", ErrorCode.PARSING_ERROR, normalized, e
            ) from e

        raise ExtractionError(NO_RECIPE_MESSAGE, ErrorCode.NO_RECIPE_FOUND, normalized)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def _primary_image(self, draft: RecipeDraft) -> list[str]:
        image = await generate_recipe_image(draft.title, draft.description, self.ai)
        return [image] if image else []

    async def _video_thumbnail(self, video_id: str) -> str:
        url = youtube_thumbnail_url(video_id)
        if await is_url_accessible(url, self.http):
            return url
        # not every upload has a max-resolution thumbnail; hqdefault always exists
        return youtube_thumbnail_url(video_id, "hqdefault")

    async def generate_recipe_from_url(self, url: str) -> RecipeDraft:
        try:
            draft = await self.extract_recipe_from_url(url)

            # a photo from the page's own markup beats a generated one
            image_urls = draft.image_urls[:1] or await self._primary_image(draft)
            draft = draft.model_copy(update={"image_urls": image_urls})
        except ExtractionError as e:
            _log_failure("url", e)
            raise

        log.info("recipe extraction complete: %s", draft.title)
        return draft

    async def generate_recipe_from_youtube_url(self, url: str) -> RecipeDraft:
        try:
            normalized = normalize_url(url)
            log.info("extracting recipe from video", extra={"url": normalized})

            transcript = await fetch_transcript(normalized, self.ai)
            if not transcript:
                raise ExtractionError(NO_TRANSCRIPT_MESSAGE, ErrorCode.NO_RECIPE_FOUND, normalized)

            recipe = await structure_text_to_recipe(transcript, self.ai)
            draft = validate_recipe_data(sanitize_recipe_data({**recipe, "sourceUrl": normalized}))

            video_id = youtube_video_id(normalized)
            if video_id:
                image_urls = [await self._video_thumbnail(video_id)]
            else:
                image_urls = await self._primary_image(draft)
            draft = draft.model_copy(update={"image_urls": image_urls})
        except ExtractionError as e:
            _log_failure("youtube", e)
            raise

        log.info("video recipe extraction complete: %s", draft.title)
        return draft

    async def generate_recipe_from_image(self, mime_type: str, image: bytes) -> RecipeDraft:
        """Single vision call; there is no cheaper alternative to fall back to."""

        async def _call() -> Any:
            out = await with_timeout(
                self.ai.generate_json(IMAGE_ANALYSIS_PROMPT, RECIPE_SCHEMA, images=[(mime_type, image)]),
                config.TIMEOUT_AI_S,
                "Image analysis timeout",
            )
            return parse_json_response(out)

        try:
            recipe = await with_retry(_call, config.RETRY_ATTEMPTS_AI, config.RETRY_INITIAL_DELAY_S)
            draft = validate_recipe_data(sanitize_recipe_data(recipe))
        except ExtractionError as e:
            _log_failure("image", e)
            raise

        log.info("image recipe generation complete: %s", draft.title)
        return draft

    async def generate_recipe_from_text(self, text: str) -> RecipeDraft:
        if not text or not text.strip():
            raise ExtractionError("Recipe text is required", ErrorCode.VALIDATION_ERROR)
        try:
            recipe = await structure_text_to_recipe(text.strip(), self.ai)
            return validate_recipe_data(sanitize_recipe_data(recipe))
        except ExtractionError as e:
            _log_failure("text", e)
            raise

    async def generate(
        self,
        kind: str,
        content: Optional[str] = None,
        mime_type: Optional[str] = None,
        image_base64: Optional[str] = None,
    ) -> RecipeDraft:
        """Route a generate request to the entry point for its modality."""
        if kind == "text":
            return await self.generate_recipe_from_text(content or "")

        if kind == "url":
            if not content or not content.strip():
                raise ExtractionError("URL is required", ErrorCode.VALIDATION_ERROR)
            if is_youtube_url(normalize_url(content)):
                return await self.generate_recipe_from_youtube_url(content)
            return await self.generate_recipe_from_url(content)

        if kind == "image":
            if not mime_type or not mime_type.startswith("image/"):
                raise ExtractionError("An image mime type is required", ErrorCode.VALIDATION_ERROR)
            try:
                data = base64.b64decode(image_base64 or "", validate=True)
            except (binascii.Error, ValueError) as e:
                raise ExtractionError("Image data is not valid base64", ErrorCode.VALIDATION_ERROR, cause=e) from e
            if not data:
                raise ExtractionError("Image data is required", ErrorCode.VALIDATION_ERROR)
            return await self.generate_recipe_from_image(mime_type, data)

        raise ExtractionError(f"Invalid generation type: {kind!r}", ErrorCode.VALIDATION_ERROR)


def _log_failure(modality: str, e: ExtractionError) -> None:
    log.error(
        "%s extraction failed: %s",
        modality,
        e.message,
        extra={"code": e.code.value, "source_url": e.source_url, "cause": repr(e.cause) if e.cause else None},
    )
