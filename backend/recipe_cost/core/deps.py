# 공용 의존성 (저장소 핸들, API 키 검사)
import secrets
from typing import Optional

from fastapi import Request, Security
from fastapi.security import APIKeyHeader

from recipe_cost.core.config import Settings
from recipe_cost.core.errors import AuthError, InternalError
from recipe_cost.db.store import RecipeStore


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> RecipeStore:
    # 스타트업에서 app.state.store 에 주입됨
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise InternalError("Recipe store is not initialized yet.")
    return store


# OpenAPI 에 ApiKeyAuth 스킴으로 노출. 검사는 아래에서 직접 (401 바디 통일)
api_key_header = APIKeyHeader(name="x-api-key", scheme_name="ApiKeyAuth", auto_error=False)


def require_api_key(request: Request, x_api_key: Optional[str] = Security(api_key_header)) -> None:
    expected = get_settings_dep(request).API_KEY
    # 서버 키 미설정이면 전부 거부
    if not expected or not x_api_key or not secrets.compare_digest(x_api_key.encode(), expected.encode()):
        raise AuthError()
