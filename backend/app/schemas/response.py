"""Uniform response envelope.

Built once, at the end of an operation, and never mutated afterwards.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class APIResponse(BaseModel):
    """Status + payload wrapper returned by every villa endpoint."""

    status_code: int
    is_success: bool = True
    error_messages: list[str] = Field(default_factory=list)
    result: Any = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def ok(cls, result: Any = None, status_code: int = 200) -> "APIResponse":
        return cls(status_code=status_code, is_success=True, result=result)

    @classmethod
    def failure(cls, status_code: int, errors: list[str]) -> "APIResponse":
        return cls(status_code=status_code, is_success=False, error_messages=list(errors))
