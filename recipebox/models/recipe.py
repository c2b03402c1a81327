# recipebox/models/recipe.py
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from recipebox.core.config import DEFAULT_SERVINGS

_CAMEL = {"populate_by_name": True}


class Ingredient(BaseModel):
    name: str = Field(min_length=1)
    # may be empty, e.g. "salt to taste"
    quantity: str = ""


class RecipeDraft(BaseModel):
    """Recipe produced by the extraction pipeline, not yet persisted."""

    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    servings: int = Field(default=DEFAULT_SERVINGS, gt=0)
    ingredients: List[Ingredient] = Field(min_length=1, max_length=100)
    instructions: List[str] = Field(min_length=1, max_length=50)
    image_urls: List[str] = Field(default_factory=list, alias="imageUrls")
    source_url: Optional[str] = Field(default=None, alias="sourceUrl")

    model_config = _CAMEL

    @field_validator("instructions")
    @classmethod
    def _steps_not_blank(cls, steps: List[str]) -> List[str]:
        for s in steps:
            if not s.strip():
                raise ValueError("Instruction step cannot be empty")
        return steps

    @field_validator("image_urls")
    @classmethod
    def _image_urls_are_urls(cls, urls: List[str]) -> List[str]:
        for u in urls:
            if not u.startswith(("http://", "https://", "data:")):
                raise ValueError(f"Invalid image URL: {u[:60]}")
        return urls

    @field_validator("source_url")
    @classmethod
    def _source_url_is_url(cls, url: Optional[str]) -> Optional[str]:
        if url is not None and not url.startswith(("http://", "https://")):
            raise ValueError("Invalid source URL")
        return url


class PagePreview(BaseModel):
    """Title-level metadata from a page; never a complete recipe."""

    title: str
    description: str = ""
    servings: int = DEFAULT_SERVINGS


class StoredRecipe(RecipeDraft):
    id: str
    notes: Optional[str] = None
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")


class RecipeGenerateRequest(BaseModel):
    type: Literal["text", "url", "image"]
    content: Optional[str] = None
    mime_type: Optional[str] = Field(default=None, alias="mimeType")
    base64_image: Optional[str] = Field(default=None, alias="base64Image")

    model_config = _CAMEL


class RecipeUpdateRequest(BaseModel):
    recipe: RecipeDraft
    notes: Optional[str] = None


class AdjustServingsRequest(BaseModel):
    new_servings: int = Field(alias="newServings", gt=0)

    model_config = _CAMEL


class AdjustServingsResponse(BaseModel):
    ingredients: List[Ingredient]
    servings: int


class GenerateImageResponse(BaseModel):
    success: bool = True
    image_url: str = Field(alias="imageUrl")
    recipe: StoredRecipe

    model_config = _CAMEL


class RecipeListResponse(BaseModel):
    items: List[StoredRecipe]
