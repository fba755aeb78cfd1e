"""
레시피 저장소.

핸들러는 RecipeStore 프로토콜만 안다. 실제 구현은 앱 생성 시 주입한다.
- MongoRecipeStore: motor 컬렉션 (운영)
- InMemoryRecipeStore: dict 기반 (MONGODB_URI 없을 때, 테스트)

두 구현 모두 recipe_name 을 유일 키로 보고 같은 예외를 던진다.
"""

from __future__ import annotations

import copy
import logging
import math
import re
import uuid
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from recipe_cost.core.errors import ConflictError, NotFoundError
from recipe_cost.db.indexes import ensure_indexes
from recipe_cost.db.init import init_db_with_retry
from recipe_cost.models.schemas import Recipe, RecipeOut, RecipePageOut

log = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


@runtime_checkable
class RecipeStore(Protocol):
    async def insert(self, recipe: Recipe) -> RecipeOut: ...

    async def find(
        self,
        name: Optional[str] = None,
        ingredient: Optional[str] = None,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_LIMIT,
    ) -> RecipePageOut: ...

    async def get(self, name: str) -> RecipeOut: ...

    async def replace(self, name: str, recipe: Recipe) -> RecipeOut: ...

    async def delete(self, name: str) -> None: ...

    async def ping(self) -> None: ...

    async def close(self) -> None: ...


def build_filter(name: Optional[str] = None, ingredient: Optional[str] = None) -> Dict[str, Any]:
    """검색어 → Mongo 필터. 대소문자 무시 부분일치, 정규식 특수문자는 이스케이프."""
    q: Dict[str, Any] = {}
    if name:
        q["recipe_name"] = {"$regex": re.escape(name), "$options": "i"}
    if ingredient:
        q["ingredients.name"] = {"$regex": re.escape(ingredient), "$options": "i"}
    return q


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def _skip(page: int, limit: int) -> int:
    return (max(page, 1) - 1) * limit


def _to_out(doc: Dict[str, Any]) -> RecipeOut:
    # _id(ObjectId) → id 문자열
    d = dict(doc)
    rid = d.pop("_id", None)
    d.setdefault("id", str(rid) if rid is not None else "")
    return RecipeOut.model_validate(d)


# ------------------------------
# Mongo (motor)
# ------------------------------

class MongoRecipeStore:
    def __init__(self, collection, client=None):
        self.col = collection
        self._client = client

    @classmethod
    async def connect(
        cls,
        uri: str,
        db_name: str,
        collection: str = "recipes",
        retries: int = 20,
        delay: float = 1.0,
    ) -> "MongoRecipeStore":
        client, db = await init_db_with_retry(uri, db_name, retries=retries, delay=delay)
        log.info("db ready: %s/%s", db_name, collection)
        store = cls(db[collection], client=client)
        await ensure_indexes(store.col)
        log.info("indexes ensured on %s", collection)
        return store

    async def insert(self, recipe: Recipe) -> RecipeOut:
        doc = recipe.to_document()
        try:
            result = await self.col.insert_one(doc)
        except DuplicateKeyError:
            raise ConflictError()
        doc["_id"] = result.inserted_id
        return _to_out(doc)

    async def find(
        self,
        name: Optional[str] = None,
        ingredient: Optional[str] = None,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_LIMIT,
    ) -> RecipePageOut:
        q = build_filter(name, ingredient)
        cur = self.col.find(q).sort("_id", 1).skip(_skip(page, limit)).limit(limit)
        docs = await cur.to_list(length=limit)
        total = await self.col.count_documents(q)
        return RecipePageOut(
            data=[_to_out(d) for d in docs],
            total=total,
            page=page,
            pages=page_count(total, limit),
        )

    async def get(self, name: str) -> RecipeOut:
        doc = await self.col.find_one({"recipe_name": name})
        if not doc:
            raise NotFoundError()
        return _to_out(doc)

    async def replace(self, name: str, recipe: Recipe) -> RecipeOut:
        try:
            doc = await self.col.find_one_and_replace(
                {"recipe_name": name},
                recipe.to_document(),
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise ConflictError()
        if not doc:
            raise NotFoundError()
        return _to_out(doc)

    async def delete(self, name: str) -> None:
        result = await self.col.delete_one({"recipe_name": name})
        if result.deleted_count == 0:
            raise NotFoundError()

    async def ping(self) -> None:
        await self.col.database.command("ping")

    async def close(self) -> None:
        if self._client is not None:
            self._client.close()
        self._client = None


# ------------------------------
# 인메모리 (로컬/테스트)
# ------------------------------

class InMemoryRecipeStore:
    def __init__(self) -> None:
        # id → 문서. dict 삽입 순서 = 목록 순서
        self._docs: Dict[str, Dict[str, Any]] = {}

    def _find_id(self, name: str) -> Optional[str]:
        for rid, doc in self._docs.items():
            if doc["recipe_name"] == name:
                return rid
        return None

    @staticmethod
    def _matches(doc: Dict[str, Any], name: Optional[str], ingredient: Optional[str]) -> bool:
        if name and name.casefold() not in doc["recipe_name"].casefold():
            return False
        if ingredient:
            needle = ingredient.casefold()
            if not any(needle in i["name"].casefold() for i in doc["ingredients"]):
                return False
        return True

    async def insert(self, recipe: Recipe) -> RecipeOut:
        doc = recipe.to_document()
        if self._find_id(doc["recipe_name"]) is not None:
            raise ConflictError()
        rid = uuid.uuid4().hex
        self._docs[rid] = {"_id": rid, **doc}
        return _to_out(copy.deepcopy(self._docs[rid]))

    async def find(
        self,
        name: Optional[str] = None,
        ingredient: Optional[str] = None,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_LIMIT,
    ) -> RecipePageOut:
        hits: List[Dict[str, Any]] = [d for d in self._docs.values() if self._matches(d, name, ingredient)]
        start = _skip(page, limit)
        return RecipePageOut(
            data=[_to_out(copy.deepcopy(d)) for d in hits[start:start + limit]],
            total=len(hits),
            page=page,
            pages=page_count(len(hits), limit),
        )

    async def get(self, name: str) -> RecipeOut:
        rid = self._find_id(name)
        if rid is None:
            raise NotFoundError()
        return _to_out(copy.deepcopy(self._docs[rid]))

    async def replace(self, name: str, recipe: Recipe) -> RecipeOut:
        rid = self._find_id(name)
        if rid is None:
            raise NotFoundError()
        doc = recipe.to_document()
        other = self._find_id(doc["recipe_name"])
        if other is not None and other != rid:
            raise ConflictError()
        self._docs[rid] = {"_id": rid, **doc}
        return _to_out(copy.deepcopy(self._docs[rid]))

    async def delete(self, name: str) -> None:
        rid = self._find_id(name)
        if rid is None:
            raise NotFoundError()
        del self._docs[rid]

    async def ping(self) -> None:
        return None

    async def close(self) -> None:
        return None
