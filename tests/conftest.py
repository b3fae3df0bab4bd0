"""
Pytest configuration.

Provides a recording fake of the database handle so record models can be
tested without PostgreSQL:
- every statement is captured with its bind values (whitespace collapsed)
- BEGIN/COMMIT/ROLLBACK are acknowledged with no rows
- other statements answer from a queue of canned result sets
"""

from __future__ import annotations

import time
from typing import Any, Sequence

import jwt
import pytest

from auth import security
from core.db import TRANSACTION_COMMANDS


class FakeHandle:
    def __init__(
        self,
        *results: list[dict[str, Any]],
        fail_on: str | tuple[str, ...] | None = None,
        error: Exception | None = None,
    ) -> None:
        self._results = list(results)
        self._fail_on = fail_on
        self._error = error or RuntimeError("statement failed")
        self.calls: list[tuple[str, list[Any]]] = []

    async def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        statement = " ".join(sql.split())
        self.calls.append((statement, list(params)))
        if self._fail_on and statement.startswith(self._fail_on):
            raise self._error
        if statement in TRANSACTION_COMMANDS:
            return []
        if not self._results:
            return []
        return [dict(row) for row in self._results.pop(0)]

    @property
    def statements(self) -> list[str]:
        return [statement for statement, _ in self.calls]


@pytest.fixture
def content_row() -> dict[str, Any]:
    return {
        "id": 1,
        "title": "Demo",
        "summary": "Short",
        "description": "A demo sketch.",
        "link": "demo_360p",
        "dateCreated": None,
        "dateStandby": None,
        "datePublished": None,
    }


@pytest.fixture
def make_handle():
    def _make(*results: list[dict[str, Any]], **kwargs: Any) -> FakeHandle:
        return FakeHandle(*results, **kwargs)

    return _make


@pytest.fixture
def issue_token():
    """
    Access tokens shaped like the user service's, signed with the local secret.
    """

    def _issue(username: str, *, elevated: bool = False, token_type: str = "access", secret: str | None = None) -> str:
        now = int(time.time())
        payload = {
            "sub": username,
            "elevated": elevated,
            "type": token_type,
            "iat": now,
            "exp": now + 15 * 60,
        }
        return jwt.encode(payload, secret or security.jwt_secret(), algorithm=security.jwt_algorithm())

    return _issue
