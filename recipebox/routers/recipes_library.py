# recipebox/routers/recipes_library.py
from __future__ import annotations

from fastapi import APIRouter, HTTPException, Response, status

from recipebox.models.recipe import RecipeListResponse, RecipeUpdateRequest, StoredRecipe
from recipebox.services import recipes_repo

router = APIRouter(prefix="/recipes", tags=["recipes"])


@router.get("", response_model=RecipeListResponse)
def recipe_list(limit: int = 50) -> RecipeListResponse:
    return RecipeListResponse(items=recipes_repo.list_recipes(limit=limit))


@router.post("", response_model=StoredRecipe, status_code=status.HTTP_201_CREATED)
def recipe_create(req: RecipeUpdateRequest) -> StoredRecipe:
    # req.recipe is already a validated RecipeDraft
    return recipes_repo.save_recipe(req.recipe, notes=req.notes)


@router.get("/{recipe_id}", response_model=StoredRecipe)
def recipe_get(recipe_id: str) -> StoredRecipe:
    r = recipes_repo.get_recipe(recipe_id)
    if not r:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return r


@router.put("/{recipe_id}", response_model=StoredRecipe)
def recipe_update(recipe_id: str, req: RecipeUpdateRequest) -> StoredRecipe:
    r = recipes_repo.update_recipe(recipe_id, req.recipe, notes=req.notes)
    if not r:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return r


@router.delete("/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
def recipe_delete(recipe_id: str) -> Response:
    if not recipes_repo.delete_recipe(recipe_id):
        raise HTTPException(status_code=404, detail="Recipe not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
