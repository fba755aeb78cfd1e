# recipe_cost/api/routes_costing.py
# 레시피 원가 계산 (저장 없이 계산만)

from fastapi import APIRouter, Depends

from recipe_cost.core.deps import require_api_key
from recipe_cost.models.schemas import CostBreakdown, RecipeIn
from recipe_cost.services.costing import calculate_cost

router = APIRouter(tags=["costing"], dependencies=[Depends(require_api_key)])


@router.post("/calculate-cost", response_model=CostBreakdown)
async def calculate(payload: RecipeIn):
    return calculate_cost(
        payload.recipe_name,
        payload.servings,
        payload.ingredients,
        payload.markup_multiplier,
    )
