"""
Parameterized SQL fragments built from JSON-shaped records.

Records use application (camel-case) field names. A `FieldMap` per relation
holds the closed allow-list of those names and the few that are stored under a
different column name. Only names that pass the allow-list ever become SQL
identifiers; every value is bound through a `ParamList`.

`ParamList` owns placeholder numbering. Builders append to it and return it,
so a caller composing SET + WHERE keeps adding to the same list instead of
computing `$n` offsets by hand:

    params = ParamList()
    set_clause, params = build_update_set(record, field_map, params)
    id_placeholder = params.add(pk)
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from .errors import EmptyRecordError, InvalidFieldError

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class ParamList:
    """
    Ordered bind values; the n-th value answers placeholder `$n`.
    """

    def __init__(self) -> None:
        self._values: list[Any] = []

    def add(self, value: Any) -> str:
        self._values.append(value)
        return f"${len(self._values)}"

    @property
    def next_index(self) -> int:
        return len(self._values) + 1

    @property
    def values(self) -> list[Any]:
        return list(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._values)


@dataclass(frozen=True)
class FieldMap:
    """
    Allow-list and name mapping for one relation.

    - `fields`: every application field a record may carry.
    - `columns`: application field -> storage column, only where they differ.
    - `comparisons`: application field -> WHERE fragment (e.g. "title ILIKE");
      unlisted fields compare with "=".
    """

    relation: str
    fields: frozenset[str]
    columns: Mapping[str, str] = field(default_factory=dict)
    comparisons: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        unknown = sorted(set(self.columns) - self.fields)
        if unknown:
            raise ValueError(f"{self.relation}: mapped fields not in allow-list: {unknown}")
        for name in self.fields:
            column = self.columns.get(name, name)
            if not _IDENTIFIER.match(column):
                raise ValueError(f"{self.relation}: invalid column identifier {column!r}")

    def check(self, record: Mapping[str, Any]) -> None:
        rejected = [key for key in record if key not in self.fields]
        if rejected:
            raise InvalidFieldError(self.relation, rejected)

    def column(self, name: str) -> str:
        if name not in self.fields:
            raise InvalidFieldError(self.relation, [name])
        return self.columns.get(name, name)

    def comparison(self, name: str) -> str:
        return self.comparisons.get(name) or f"{self.column(name)} ="


def _require_fields(record: Mapping[str, Any] | None, field_map: FieldMap) -> Mapping[str, Any]:
    if not record:
        raise EmptyRecordError(field_map.relation)
    field_map.check(record)
    return record


def build_insert(
    record: Mapping[str, Any],
    field_map: FieldMap,
    params: ParamList | None = None,
) -> tuple[str, str, ParamList]:
    """
    Column list and VALUES list for an INSERT, in the record's key order.

    {"title": "Demo", "dateCreated": d} ->
        ("(title, date_created)", "($1, $2)", ["Demo", d])
    """
    record = _require_fields(record, field_map)
    params = params if params is not None else ParamList()

    columns: list[str] = []
    placeholders: list[str] = []
    for name, value in record.items():
        columns.append(field_map.column(name))
        placeholders.append(params.add(value))

    return f"({', '.join(columns)})", f"({', '.join(placeholders)})", params


def build_update_set(
    record: Mapping[str, Any],
    field_map: FieldMap,
    params: ParamList | None = None,
) -> tuple[str, ParamList]:
    """
    SET assignments for a partial update; only the given fields appear.

    The caller adds the key predicate to the returned `params` afterwards.
    """
    record = _require_fields(record, field_map)
    params = params if params is not None else ParamList()

    assignments = [f"{field_map.column(name)} = {params.add(value)}" for name, value in record.items()]
    return ", ".join(assignments), params


def build_where_filter(
    query: Mapping[str, Any] | None,
    field_map: FieldMap,
    params: ParamList | None = None,
) -> tuple[str, ParamList]:
    """
    `WHERE ...` with AND-joined predicates, or "" for an empty/absent filter.

    A None value filters on `IS NULL` and binds nothing.
    """
    params = params if params is not None else ParamList()
    if not query:
        return "", params
    field_map.check(query)

    predicates: list[str] = []
    for name, value in query.items():
        if value is None:
            predicates.append(f"{field_map.column(name)} IS NULL")
            continue
        predicates.append(f"{field_map.comparison(name)} {params.add(value)}")

    return "WHERE " + " AND ".join(predicates), params
