# 원가/판매가 계산 — 순수 함수 (DB 무관)
# total = Σ(수량 × 단가), 1인분 원가 = total / servings, 권장가 = 1인분 원가 × 배수
from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError as PydanticValidationError

from recipe_cost.core.errors import ValidationError, format_pydantic_errors
from recipe_cost.models.schemas import MAX_MARKUP, MAX_SERVINGS, CostBreakdown, Ingredient

DEFAULT_MARKUP = 3
TWO_PLACES = Decimal("0.01")

IngredientLike = Union[Ingredient, Mapping[str, Any]]


def round2(value: float) -> float:
    # float 실제 이진값 기준 반올림(half-up). round()의 banker's rounding 회피
    if not math.isfinite(value):
        raise ValueError(f"cannot round non-finite value {value!r}")
    d = Decimal(value)
    with localcontext() as ctx:
        # 기본 28자리로는 큰 값(1e27 이상)을 소수 2자리까지 못 담는다
        ctx.prec = max(ctx.prec, d.adjusted() + 4)
        return float(d.quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def resolve_markup(markup_multiplier: Optional[float]) -> float:
    if markup_multiplier is None or markup_multiplier <= 0:
        return DEFAULT_MARKUP
    return markup_multiplier


def _coerce_ingredients(ingredients: Any) -> List[Ingredient]:
    if not isinstance(ingredients, (list, tuple)):
        raise ValidationError(["ingredients: must be an array"])
    if not ingredients:
        raise ValidationError(["ingredients: must contain at least 1 item"])

    out: List[Ingredient] = []
    problems: List[str] = []
    for i, item in enumerate(ingredients):
        if isinstance(item, Ingredient):
            out.append(item)
            continue
        if not isinstance(item, Mapping):
            problems.append(f"ingredients.{i}: must be an object")
            continue
        try:
            out.append(Ingredient.model_validate(dict(item)))
        except PydanticValidationError as e:
            problems.extend(f"ingredients.{i}.{m}" for m in format_pydantic_errors(e.errors()))
    if problems:
        raise ValidationError(problems)
    return out


def calculate_cost(
    recipe_name: str,
    servings: int,
    ingredients: Sequence[IngredientLike],
    markup_multiplier: Optional[float] = None,
) -> CostBreakdown:
    """레시피 1건의 총원가/1인분 원가/권장 판매가/마진/원가율 계산.

    모든 결과는 소수 둘째 자리로 반올림한다. servings가 1 미만이거나
    재료 목록이 배열이 아니거나 재료 필드가 빠지면 ValidationError.
    """
    problems: List[str] = []
    if not isinstance(recipe_name, str) or not recipe_name:
        problems.append("recipe_name: is required")
    if isinstance(servings, bool) or not isinstance(servings, int):
        problems.append("servings: must be an integer")
    elif servings < 1:
        problems.append("servings: must be greater than or equal to 1")
    elif servings > MAX_SERVINGS:
        problems.append(f"servings: must be less than or equal to {MAX_SERVINGS}")
    if markup_multiplier is not None:
        if not math.isfinite(markup_multiplier):
            problems.append("markup_multiplier: must be a finite number")
        elif markup_multiplier > MAX_MARKUP:
            problems.append(f"markup_multiplier: must be less than or equal to {MAX_MARKUP}")
    if problems:
        raise ValidationError(problems)

    items = _coerce_ingredients(ingredients)

    total_cost = sum(i.quantity * i.unit_cost for i in items)
    cost_per_serving = total_cost / servings
    suggested_price = cost_per_serving * resolve_markup(markup_multiplier)
    profit_margin = suggested_price - cost_per_serving
    # 재료비 0원이면 원가율 0으로 처리
    food_cost_percent = (cost_per_serving / suggested_price) * 100 if suggested_price else 0.0

    figures = {
        "total_cost": total_cost,
        "cost_per_serving": cost_per_serving,
        "suggested_price_per_serving": suggested_price,
        "profit_margin_per_serving": profit_margin,
        "food_cost_percent": food_cost_percent,
    }
    overflow = [k for k, v in figures.items() if not math.isfinite(v)]
    if overflow:
        raise ValidationError([f"{k}: result is out of range" for k in overflow])

    return CostBreakdown(recipe_name=recipe_name, **{k: round2(v) for k, v in figures.items()})
