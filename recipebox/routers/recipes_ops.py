# recipebox/routers/recipes_ops.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from recipebox.clients.base import AIClient
from recipebox.core.deps import get_ai
from recipebox.models.recipe import AdjustServingsRequest, AdjustServingsResponse, GenerateImageResponse
from recipebox.services import recipes_repo
from recipebox.services.ai_extractor import generate_recipe_image
from recipebox.services.servings import adjust_ingredients

log = logging.getLogger(__name__)

router = APIRouter(prefix="/recipes", tags=["recipes"])


@router.post("/{recipe_id}/adjust-servings", response_model=AdjustServingsResponse)
async def adjust_servings(
    recipe_id: str,
    req: AdjustServingsRequest,
    ai: AIClient = Depends(get_ai),
) -> AdjustServingsResponse:
    recipe = recipes_repo.get_recipe(recipe_id)
    if not recipe:
        raise HTTPException(status_code=404, detail="Recipe not found")

    # scaled copy for display; the stored recipe is left alone
    ingredients = await adjust_ingredients(recipe.ingredients, recipe.servings, req.new_servings, ai)
    return AdjustServingsResponse(ingredients=ingredients, servings=req.new_servings)


@router.post("/{recipe_id}/generate-image", response_model=GenerateImageResponse)
async def generate_image(recipe_id: str, ai: AIClient = Depends(get_ai)) -> GenerateImageResponse:
    recipe = recipes_repo.get_recipe(recipe_id)
    if not recipe:
        raise HTTPException(status_code=404, detail="Recipe not found")

    image_url = await generate_recipe_image(recipe.title, recipe.description, ai)
    if not image_url:
        raise HTTPException(status_code=502, detail="Failed to generate image")

    updated = recipes_repo.add_image(recipe_id, image_url)
    if not updated:
        # deleted while we were generating
        raise HTTPException(status_code=404, detail="Recipe not found")
    return GenerateImageResponse(image_url=image_url, recipe=updated)
