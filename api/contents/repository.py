"""
Content persistence (raw SQL).

`ContentModel` is the record model for the `contents` relation and its
`contents_users_join` association with users. It receives a database handle
bound to one connection; transactions are plain BEGIN/COMMIT/ROLLBACK
statements on that handle.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from core.db import DatabaseHandle
from core.errors import (
    ERR_MULT_NEW_REC_DBFAIL,
    ERR_UPDATE_REC_DBFAIL,
    NotFoundError,
    RequestFailedError,
)
from core.query import FieldMap, build_insert, build_update_set, build_where_filter

logger = logging.getLogger(__name__)

# Columns returned to every caller.
GENERAL_PROPERTIES = """
  id,
  title,
  summary,
  description,
  link,
  date_created AS "dateCreated",
  date_standby AS "dateStandby",
  date_published AS "datePublished"
"""

# Only for callers already authorized for the privileged projection.
PRIVATE_PROPERTIES = """
  status,
  owner,
  contract_type AS "contractType",
  contract_details AS "contractDetails",
  contract_signed AS "contractSigned"
"""

CONTENT_FIELDS = FieldMap(
    relation="contents",
    fields=frozenset(
        {
            "title",
            "summary",
            "description",
            "link",
            "dateCreated",
            "dateStandby",
            "datePublished",
            "status",
            "owner",
            "contractType",
            "contractDetails",
            "contractSigned",
        }
    ),
    columns={
        "dateCreated": "date_created",
        "dateStandby": "date_standby",
        "datePublished": "date_published",
        "contractType": "contract_type",
        "contractDetails": "contract_details",
        "contractSigned": "contract_signed",
    },
    comparisons={
        "title": "title ILIKE",
    },
)

# Stored as jsonb; asyncpg binds and returns json as text.
JSON_FIELDS = frozenset({"contractDetails", "contractSigned"})

# Wrapped in wildcards before filtering so they match partially.
FUZZY_FIELDS = frozenset({"title"})

JOIN_RELATION = "contents_users_join"


def _json_arg(value: Any) -> str | None:
    if value is None:
        return None
    return json.dumps(value, ensure_ascii=True)


def _encode(record: Mapping[str, Any]) -> dict[str, Any]:
    return {key: (_json_arg(value) if key in JSON_FIELDS else value) for key, value in record.items()}


def _decode(row: dict[str, Any]) -> dict[str, Any]:
    for key in JSON_FIELDS:
        value = row.get(key)
        if isinstance(value, str):
            row[key] = json.loads(value)
    return row


class ContentModel:
    relation_name = "contents"

    def __init__(self, db: DatabaseHandle) -> None:
        self.db = db

    async def create(
        self,
        record: Mapping[str, Any],
        associations: list[Mapping[str, Any]] | None = None,
    ) -> dict[str, Any]:
        """
        Insert a content row and its user associations in one transaction.

        `associations` defaults to the record's `contractSigned` entries; each
        entry needs a `username`. Any failure after BEGIN rolls everything back
        and raises `RequestFailedError(ERR_MULT_NEW_REC_DBFAIL)`.
        """
        columns, placeholders, params = build_insert(_encode(record), CONTENT_FIELDS)

        if associations is None:
            associations = record.get("contractSigned") or []
        joined = 0

        try:
            await self.db.query("BEGIN")

            rows = await self.db.query(
                f"""
                INSERT INTO {self.relation_name} {columns}
                VALUES {placeholders}
                RETURNING {GENERAL_PROPERTIES}
                """,
                params.values,
            )
            if not rows:
                raise RuntimeError("Failed to insert content.")
            content = rows[0]

            for entry in associations:
                await self.db.query(
                    f"""
                    INSERT INTO {JOIN_RELATION} (user_id, content_id)
                    VALUES ($1, $2)
                    RETURNING user_id, content_id
                    """,
                    [entry["username"], content["id"]],
                )
                joined += 1

            await self.db.query("COMMIT")
        except Exception as exc:
            await self._rollback()
            logger.warning(
                "content_create_failed relation=%s joined=%s",
                self.relation_name,
                joined,
                exc_info=True,
            )
            raise RequestFailedError(ERR_MULT_NEW_REC_DBFAIL) from exc

        return content

    async def _rollback(self) -> None:
        try:
            await self.db.query("ROLLBACK")
        except Exception:
            logger.exception("content_rollback_failed relation=%s", self.relation_name)

    async def get_all(self, filters: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        """
        All contents matching `filters` (none = every row), by publish date.
        """
        query = dict(filters or {})
        for key in FUZZY_FIELDS:
            if query.get(key):
                query[key] = f"%{query[key]}%"

        where, params = build_where_filter(query, CONTENT_FIELDS)
        return await self.db.query(
            f"""
            SELECT {GENERAL_PROPERTIES}
            FROM {self.relation_name}
            {where}
            ORDER BY date_published
            """,
            params.values,
        )

    async def get_by_key(self, pk: int) -> dict[str, Any]:
        rows = await self.db.query(
            f"""
            SELECT {GENERAL_PROPERTIES}
            FROM {self.relation_name}
            WHERE id = $1
            """,
            [pk],
        )
        if not rows:
            raise NotFoundError(self.relation_name, pk)
        return rows[0]

    async def get_by_key_private(self, pk: int) -> dict[str, Any]:
        rows = await self.db.query(
            f"""
            SELECT {GENERAL_PROPERTIES}, {PRIVATE_PROPERTIES}
            FROM {self.relation_name}
            WHERE id = $1
            """,
            [pk],
        )
        if not rows:
            raise NotFoundError(self.relation_name, pk)
        return _decode(rows[0])

    async def update(self, pk: int, record: Mapping[str, Any]) -> dict[str, Any]:
        """
        Overwrite only the fields present in `record`.

        Raises NotFoundError before any UPDATE when `pk` does not exist, and
        `RequestFailedError(ERR_UPDATE_REC_DBFAIL)` when the UPDATE itself fails.
        """
        await self.get_by_key(pk)

        set_clause, params = build_update_set(_encode(record), CONTENT_FIELDS)
        pk_placeholder = params.add(pk)

        try:
            rows = await self.db.query(
                f"""
                UPDATE {self.relation_name}
                SET {set_clause}
                WHERE id = {pk_placeholder}
                RETURNING {GENERAL_PROPERTIES}
                """,
                params.values,
            )
        except Exception as exc:
            logger.warning("content_update_failed relation=%s id=%s", self.relation_name, pk, exc_info=True)
            raise RequestFailedError(ERR_UPDATE_REC_DBFAIL) from exc

        # Deleted between the existence check and the UPDATE.
        if not rows:
            raise NotFoundError(self.relation_name, pk)
        return rows[0]

    async def delete(self, pk: int, username: str) -> None:
        """
        Remove the (username, content) association. The content row stays.
        """
        rows = await self.db.query(
            f"""
            DELETE FROM {JOIN_RELATION}
            WHERE content_id = $1
              AND user_id = $2
            RETURNING content_id, user_id
            """,
            [pk, username],
        )
        if not rows:
            raise NotFoundError(JOIN_RELATION, (pk, username))
