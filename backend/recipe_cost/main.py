# recipe_cost/main.py
# FastAPI 앱 생성 및 라우터 설정
# 저장소는 create_app(store=...) 로 주입하거나, 없으면 스타트업에서 설정 보고 생성

from __future__ import annotations

import logging
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from recipe_cost.api.routes_costing import router as costing_router
from recipe_cost.api.routes_recipes import router as recipes_router
from recipe_cost.core.config import Settings, get_settings
from recipe_cost.core.errors import register_exception_handlers
from recipe_cost.core.logging_config import setup_logging
from recipe_cost.db.store import InMemoryRecipeStore, MongoRecipeStore, RecipeStore
from recipe_cost.models.schemas import HealthOut

log = logging.getLogger(__name__)


async def build_store(settings: Settings) -> RecipeStore:
    if not settings.MONGODB_URI:
        log.warning("MONGODB_URI not set, using in-memory recipe store (data is not persisted)")
        return InMemoryRecipeStore()
    return await MongoRecipeStore.connect(
        settings.MONGODB_URI,
        settings.MONGODB_DB,
        collection=settings.MONGODB_COLLECTION,
        retries=settings.DB_INIT_RETRIES,
        delay=settings.DB_INIT_DELAY,
    )


def create_app(settings: Optional[Settings] = None, store: Optional[RecipeStore] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="Recipe Cost API",
        version="1.0.0",
        description="Calculate food costs & manage recipes",
    )
    app.state.settings = settings
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        # 핸들러 밖으로 예외가 새도 요청 로그는 남긴다 (500)
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            log.info("%s %s %d %.1fms", request.method, request.url.path, status_code, elapsed_ms)

    register_exception_handlers(app)

    # 앱 시작/종료 이벤트 핸들러
    @app.on_event("startup")
    async def on_startup() -> None:
        if app.state.store is None:
            app.state.store = await build_store(settings)
        log.info("recipe store ready: %s", type(app.state.store).__name__)

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        if app.state.store is not None:
            await app.state.store.close()

    @app.get("/", response_model=HealthOut, response_model_exclude_none=True)
    async def root():
        return HealthOut(status="ok", message="Recipe Cost API is up!")

    @app.get("/health", response_model=HealthOut, response_model_exclude_none=True)
    async def health():
        ok = HealthOut(status="ok", db="skip")
        store = app.state.store
        if store is not None:
            try:
                await store.ping()
                ok.db = "ok"
            except Exception as e:
                log.warning("health ping failed: %s", e)
                ok.db = f"error: {e}"
        return ok

    # 보호 라우터 (x-api-key 필요)
    app.include_router(costing_router)
    app.include_router(recipes_router)

    return app


app = create_app()
