# recipebox/models/shopping_list.py
from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, Field


class ShoppingListRequest(BaseModel):
    recipe_ids: List[str] = Field(alias="recipeIds", min_length=1)

    model_config = {"populate_by_name": True}


class ShoppingListItem(BaseModel):
    name: str
    quantity: str
    recipe_title: str = Field(alias="recipeTitle")

    model_config = {"populate_by_name": True}


class ShoppingListResponse(BaseModel):
    items: List[ShoppingListItem]
    # recipe title -> items, in the order recipes were requested
    grouped: Dict[str, List[ShoppingListItem]]
