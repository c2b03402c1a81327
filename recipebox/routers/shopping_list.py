# recipebox/routers/shopping_list.py
from __future__ import annotations

from fastapi import APIRouter, HTTPException

from recipebox.models.shopping_list import ShoppingListRequest, ShoppingListResponse
from recipebox.services import recipes_repo
from recipebox.services.servings import build_shopping_list

router = APIRouter(prefix="/shopping-list", tags=["shopping-list"])


@router.post("", response_model=ShoppingListResponse)
def shopping_list(req: ShoppingListRequest) -> ShoppingListResponse:
    recipes = recipes_repo.get_recipes(req.recipe_ids)
    if not recipes:
        raise HTTPException(status_code=404, detail="None of the requested recipes exist")
    return build_shopping_list(recipes)
