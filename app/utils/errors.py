"""Utility helpers for standardized error responses."""
from typing import Any

from fastapi import HTTPException


def error_response(code: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    """Return a standardized error payload."""

    payload: dict[str, Any] = {"error": {"code": code, "message": message}}
    if details:
        payload["error"]["details"] = details
    return payload


def api_error(
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> HTTPException:
    """Build an ``HTTPException`` carrying a standardized error payload."""

    return HTTPException(
        status_code=status_code,
        detail=error_response(code, message, details),
        headers=headers,
    )


__all__ = ["error_response", "api_error"]
