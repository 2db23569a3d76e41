"""Outcome types for upstream calls and the envelope returned downstream."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel


class ErrorKind(StrEnum):
    NETWORK = "network_error"
    UPSTREAM = "upstream_error"
    MALFORMED = "malformed_response"


@dataclass(frozen=True)
class Success:
    value: Any
    status_code: int

    ok: Literal[True] = True


@dataclass(frozen=True)
class Failure:
    error_kind: ErrorKind
    message: str
    status_code: int = 0  # 0 when no response was received

    ok: Literal[False] = False


CallResult = Success | Failure


class ApiEnvelope(BaseModel):
    """Shape every proxied call is rewrapped into."""

    success: bool
    data: Any = None
    error: str | None = None
    status: int

    @classmethod
    def from_result(cls, result: CallResult) -> ApiEnvelope:
        if isinstance(result, Success):
            return cls(success=True, data=result.value, status=result.status_code)
        return cls(success=False, error=result.message, status=result.status_code)

    @classmethod
    def failure(cls, message: str, status: int) -> ApiEnvelope:
        return cls(success=False, error=message, status=status)
