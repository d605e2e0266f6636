# app/api/v1/envelope.py
"""
Response envelope shared by the v1 endpoints:

    {"status": "ok" | "error", "data": ..., "message": ..., "errors": [...]}
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Generic, TypeVar

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    status: str = "ok"
    data: T | None = None
    message: str | None = None
    errors: list[dict[str, Any]] | None = None


def ok(data: Any = None, message: str | None = None) -> dict:
    """Build a success response dict."""
    return ApiResponse(status="ok", data=data, message=message).model_dump()


def error(message: str, errors: list[dict[str, Any]] | None = None, status: str = "error") -> dict:
    """Build an error response dict."""
    return ApiResponse(status=status, message=message, errors=errors).model_dump()


def money_json(data: Any) -> Any:
    """JSON-ready copy with Decimal amounts as strings, so paise survive."""
    return jsonable_encoder(data, custom_encoder={Decimal: str})
