# recipe_cost/api/routes_recipes.py
# 레시피 저장/검색/조회/수정/삭제
# 저장소는 Depends(get_store) 로 받는다 (Mongo 또는 인메모리)

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from recipe_cost.core.config import Settings
from recipe_cost.core.deps import get_settings_dep, get_store, require_api_key
from recipe_cost.core.errors import ConflictError, ValidationError
from recipe_cost.db.store import DEFAULT_LIMIT, DEFAULT_PAGE, RecipeStore
from recipe_cost.models.schemas import MessageOut, RecipeIn, RecipeOut, RecipePageOut

log = logging.getLogger(__name__)

router = APIRouter(tags=["recipes"], dependencies=[Depends(require_api_key)])


@router.post("/save-recipe", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
async def save_recipe(payload: RecipeIn, store: RecipeStore = Depends(get_store)):
    try:
        await store.insert(payload)
    except ConflictError:
        log.info("save rejected, duplicate recipe_name=%r", payload.recipe_name)
        raise
    log.info("recipe saved: %r", payload.recipe_name)
    return MessageOut(message="Recipe saved successfully.")


@router.get("/recipes", response_model=RecipePageOut)
async def list_recipes(
    name: Optional[str] = Query(None, description="레시피명 부분일치 (대소문자 무시)"),
    ingredient: Optional[str] = Query(None, description="재료명 부분일치 (대소문자 무시)"),
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1),
    store: RecipeStore = Depends(get_store),
    settings: Settings = Depends(get_settings_dep),
):
    if limit > settings.MAX_PAGE_LIMIT:
        raise ValidationError([f"limit: must be less than or equal to {settings.MAX_PAGE_LIMIT}"])
    return await store.find(name=name, ingredient=ingredient, page=page, limit=limit)


@router.get("/recipes/{name}", response_model=RecipeOut)
async def get_recipe(name: str, store: RecipeStore = Depends(get_store)):
    return await store.get(name)


@router.put("/recipes/{name}", response_model=RecipeOut)
async def update_recipe(name: str, payload: RecipeIn, store: RecipeStore = Depends(get_store)):
    # 전체 교체 (recipe_name 변경 가능, 다른 레시피와 겹치면 409)
    updated = await store.replace(name, payload)
    log.info("recipe updated: %r -> %r", name, updated.recipe_name)
    return updated


@router.delete("/recipes/{name}", response_model=MessageOut)
async def delete_recipe(name: str, store: RecipeStore = Depends(get_store)):
    await store.delete(name)
    log.info("recipe deleted: %r", name)
    return MessageOut(message="Recipe deleted successfully.")
