"""
Result envelope for remote library calls.
"""

from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class LibraryResult(BaseModel, Generic[T]):
    """Outcome of a remote library call.

    ``message`` is only meaningful when ``status`` is "ok". ``warning``
    carries a non-fatal problem worth showing to the user and may be set
    with either status.
    """

    status: Literal["ok", "error"] = Field(default="ok")
    message: T | None = Field(default=None)
    warning: str | None = Field(default=None)
    error: str | None = Field(default=None)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @classmethod
    def success(cls, message: T, warning: str | None = None) -> "LibraryResult[T]":
        return cls(status="ok", message=message, warning=warning)

    @classmethod
    def failure(cls, error: str, warning: str | None = None) -> "LibraryResult[T]":
        return cls(status="error", error=error, warning=warning)
