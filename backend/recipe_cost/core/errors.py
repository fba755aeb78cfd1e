# 공통 에러 타입 + 중앙 핸들러
# 응답 바디는 항상 {"error": str | [str]}
from __future__ import annotations

import logging
from typing import Any, Iterable, List, Sequence, Union

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

log = logging.getLogger(__name__)


class RecipeCostError(Exception):
    """앱 공통 예외. status_code로 HTTP 상태에 매핑된다."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Union[str, Sequence[str], None] = None):
        if message is None:
            message = self.default_message
        self.message = message if isinstance(message, str) else list(message)
        super().__init__(self.message)

    def as_body(self) -> dict:
        return {"error": self.message}


class ValidationError(RecipeCostError):
    """400 - 입력값 오류 (필드별 메시지 목록)"""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"

    def __init__(self, messages: Union[str, Iterable[str], None] = None):
        if messages is not None and not isinstance(messages, str):
            messages = list(messages)
        super().__init__(messages)


class AuthError(RecipeCostError):
    """401 - API 키 불일치"""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class NotFoundError(RecipeCostError):
    """404 - 레시피 없음"""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Recipe not found."


class ConflictError(RecipeCostError):
    """409 - recipe_name 중복"""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Recipe name already exists."


class InternalError(RecipeCostError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def format_pydantic_errors(errors: Iterable[dict]) -> List[str]:
    # loc 앞의 body/query/path 는 떼고 "ingredients.0.unit_cost: ..." 형태로
    out: List[str] = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path", "header")]
        msg = err.get("msg", "invalid value")
        out.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return out


async def _recipe_cost_error_handler(request: Request, exc: RecipeCostError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.as_body())


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": format_pydantic_errors(exc.errors())},
    )


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail: Any = exc.detail
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        detail = "Not found"
    return JSONResponse(status_code=exc.status_code, content={"error": detail}, headers=exc.headers)


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": InternalError.default_message},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RecipeCostError, _recipe_cost_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
