# app/api/dependencies.py
"""
Общие вещи для всех роутов API.

Хранилище создаётся в main.py и кладётся в app.state.storage,
роуты получают его через Depends(get_storage).
"""

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from infrastructure.storage.base import Storage


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def ok(data: Any = None, **extra: Any) -> dict:
    """Ответ в формате мини-приложения: {"success": true, "data": ...}"""
    body = {"success": True}
    if data is not None:
        body["data"] = data
    body.update(extra)
    return body


def fail(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})
