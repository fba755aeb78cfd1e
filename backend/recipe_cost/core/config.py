# 환경변수 로딩 (.env)
from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # 없으면 인메모리 저장소로 기동 (로컬 개발용)
    MONGODB_URI: Optional[str] = None
    MONGODB_DB: str = "recipe_cost"
    MONGODB_COLLECTION: str = "recipes"

    # x-api-key 헤더와 비교. 미설정이면 보호 경로는 전부 401
    API_KEY: Optional[str] = None

    CORS_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "INFO"

    # 스타트업 DB 연결 재시도 (최대 20회, 1초 간격)
    DB_INIT_RETRIES: int = 20
    DB_INIT_DELAY: float = 1.0

    MAX_PAGE_LIMIT: int = 100


@lru_cache
def get_settings() -> Settings:
    return Settings()
