# app/schemas/response.py
"""
Response envelope used by every endpoint.

Success: {"success": true, "message": ..., "data": ...}
Errors are rendered by the exception handlers in app.main as
{"success": false, "message": ..., "error": ...}.
"""
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: Optional[T] = None


def ok(data: Any = None, message: str = "OK") -> dict:
    return {"success": True, "message": message, "data": data}
