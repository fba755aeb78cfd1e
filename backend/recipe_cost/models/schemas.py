# API 경계의 요청/응답 DTO
# RecipeIn: calculate-cost / save-recipe / PUT 공용 바디
# RecipeOut: 저장 문서 응답 (_id → id 문자열)
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

UNIT_COST_PRECISION = 4

# 입력 상한 (계산 결과가 float 범위를 넘지 않도록)
MAX_SERVINGS = 100_000
MAX_AMOUNT = 1_000_000_000
MAX_MARKUP = 1_000


class Ingredient(BaseModel):
    name: str = Field(..., min_length=1)
    quantity: float = Field(..., gt=0, le=MAX_AMOUNT, allow_inf_nan=False)
    unit: str = Field(..., min_length=1)
    unit_cost: float = Field(..., ge=0, le=MAX_AMOUNT, allow_inf_nan=False)

    @field_validator("unit_cost")
    @classmethod
    def _v_round_unit_cost(cls, v: float) -> float:
        # 단가는 소수 4자리까지만 보관
        return round(v, UNIT_COST_PRECISION)


class Recipe(BaseModel):
    recipe_name: str = Field(..., min_length=1)
    servings: int = Field(..., ge=1, le=MAX_SERVINGS)
    ingredients: List[Ingredient] = Field(..., min_length=1)

    def to_document(self) -> dict:
        # 저장용: 레시피 필드만 (markup_multiplier 등은 저장 안 함)
        return self.model_dump(include=set(Recipe.model_fields))


class RecipeIn(Recipe):
    # 없거나 0 이하면 계산기에서 기본 3배 적용
    markup_multiplier: Optional[float] = Field(None, le=MAX_MARKUP, allow_inf_nan=False)


class RecipeOut(Recipe):
    id: str


class CostBreakdown(BaseModel):
    recipe_name: str
    total_cost: float
    cost_per_serving: float
    suggested_price_per_serving: float
    profit_margin_per_serving: float
    food_cost_percent: float


class RecipePageOut(BaseModel):
    data: List[RecipeOut] = Field(default_factory=list)
    total: int
    page: int
    pages: int


class MessageOut(BaseModel):
    message: str


class HealthOut(BaseModel):
    status: str = "ok"
    message: Optional[str] = None
    db: Optional[str] = None
