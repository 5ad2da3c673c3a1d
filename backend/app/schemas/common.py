"""Response envelope shared by every route."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, model_serializer

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """``{success, data?, error?, message?}``; absent keys are omitted, not null."""

    success: bool = True
    data: T | None = None
    error: str | None = None
    message: str | None = None

    @model_serializer(mode="wrap")
    def _drop_absent(self, handler) -> dict[str, Any]:
        out = handler(self)
        for key in ("data", "error", "message"):
            if out.get(key) is None:
                out.pop(key, None)
        return out


def ok(data: Any = None, message: str | None = None) -> Envelope:
    return Envelope(success=True, data=data, message=message)
