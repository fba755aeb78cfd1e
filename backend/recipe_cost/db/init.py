# Mongo 연결 유틸 — motor
# 전역 커넥션은 두지 않는다. 만든 쪽(store)이 client를 들고 있다가 close

from __future__ import annotations

import asyncio
import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

log = logging.getLogger(__name__)


async def init_db(uri: str, name: str) -> tuple[AsyncIOMotorClient, AsyncIOMotorDatabase]:
    client = AsyncIOMotorClient(uri)
    db = client[name]
    try:
        # 연결 확인 (준비 안 됐으면 예외)
        await db.command("ping")
    except Exception:
        client.close()
        raise
    return client, db


async def init_db_with_retry(
    uri: str, name: str, retries: int = 20, delay: float = 1.0
) -> tuple[AsyncIOMotorClient, AsyncIOMotorDatabase]:
    last_error: Exception | None = None
    for i in range(max(retries, 1)):
        try:
            return await init_db(uri, name)
        except Exception as e:
            last_error = e
            log.warning("db init retry %d/%d: %s", i + 1, retries, e)
            await asyncio.sleep(delay)
    raise RuntimeError(f"MongoDB init failed after {retries} retries") from last_error
