# recipebox/routers/recipes_generate.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from recipebox.core.deps import get_pipeline
from recipebox.models.recipe import RecipeDraft, RecipeGenerateRequest
from recipebox.services.pipeline import RecipePipeline

router = APIRouter(prefix="/recipes", tags=["recipes"])


@router.post("/generate", response_model=RecipeDraft)
async def recipe_generate(
    req: RecipeGenerateRequest,
    pipeline: RecipePipeline = Depends(get_pipeline),
) -> RecipeDraft:
    # ExtractionError is rendered by the app-level handler
    return await pipeline.generate(
        req.type,
        content=req.content,
        mime_type=req.mime_type,
        image_base64=req.base64_image,
    )
