# 레시피 컬렉션 인덱스 — 스타트업에서 한 번 await
from motor.motor_asyncio import AsyncIOMotorCollection


async def ensure_indexes(col: AsyncIOMotorCollection) -> None:
    # recipe_name 유일 키 (중복 저장 시 DuplicateKeyError → 409)
    await col.create_index("recipe_name", unique=True, name="recipe_name_1")
    # 재료명 검색용
    await col.create_index([("ingredients.name", 1)], name="ingredients_name_1")
