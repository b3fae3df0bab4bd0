"""
Typed failures raised by record models.

Two kinds cross the boundary to the HTTP layer:
- `NotFoundError`: a lookup by key (or key pair) matched no row.
- `RequestFailedError`: a write or request was rejected; carries a
  machine-readable `code` and never the driver's message.

`capture()` turns a model call into a tagged value (`Ok` or one of the two
errors) for callers that prefer to branch on results instead of `except`.
"""

from __future__ import annotations

from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")

ERR_INVALID_FIELD = "ERR_INVALID_FIELD"
ERR_EMPTY_RECORD = "ERR_EMPTY_RECORD"
ERR_MULT_NEW_REC_DBFAIL = "ERR_MULT_NEW_REC_DBFAIL"
ERR_UPDATE_REC_DBFAIL = "ERR_UPDATE_REC_DBFAIL"


class RecordError(Exception):
    pass


class NotFoundError(RecordError):
    def __init__(self, relation: str, key: Any) -> None:
        self.relation = relation
        self.key = key
        super().__init__(f"Cannot find {relation}: {key}")


class RequestFailedError(RecordError):
    def __init__(self, code: str, message: str | None = None) -> None:
        self.code = code
        super().__init__(message or code)


class InvalidFieldError(RequestFailedError):
    def __init__(self, relation: str, fields: list[str]) -> None:
        self.relation = relation
        self.fields = fields
        super().__init__(ERR_INVALID_FIELD, f"Unknown {relation} field(s): {', '.join(fields)}")


class EmptyRecordError(RequestFailedError):
    def __init__(self, relation: str) -> None:
        self.relation = relation
        super().__init__(ERR_EMPTY_RECORD, f"No {relation} fields given.")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


Result = Union[Ok[T], NotFoundError, RequestFailedError]


async def capture(call: Awaitable[T]) -> Result[T]:
    """
    Await a model call and return its outcome as a value.

    Only the two boundary error kinds are captured; anything else propagates.
    """
    try:
        return Ok(await call)
    except (NotFoundError, RequestFailedError) as exc:
        return exc
