"""
schemas/errors.py — Structured error response model

Shared by the HTTPException and RequestValidationError handlers in main.py,
so every non-2xx response has the same body.
"""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    error: str
    status_code: int
    path: str = ""
    detail: list | None = None
