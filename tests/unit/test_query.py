from __future__ import annotations

from datetime import date

import pytest

from core.errors import ERR_EMPTY_RECORD, ERR_INVALID_FIELD, EmptyRecordError, InvalidFieldError
from core.query import FieldMap, ParamList, build_insert, build_update_set, build_where_filter

FIELDS = FieldMap(
    relation="contents",
    fields=frozenset({"title", "summary", "link", "dateCreated", "contractType"}),
    columns={"dateCreated": "date_created", "contractType": "contract_type"},
    comparisons={"title": "title ILIKE"},
)


def test_param_list_numbers_placeholders_from_one() -> None:
    params = ParamList()

    assert params.next_index == 1
    assert params.add("a") == "$1"
    assert params.add("b") == "$2"
    assert params.next_index == 3
    assert params.values == ["a", "b"]
    assert len(params) == 2


def test_build_insert_maps_columns_in_key_order() -> None:
    created = date(2022, 12, 12)

    columns, placeholders, params = build_insert(
        {"title": "Demo", "dateCreated": created, "contractType": "solo"},
        FIELDS,
    )

    assert columns == "(title, date_created, contract_type)"
    assert placeholders == "($1, $2, $3)"
    assert params.values == ["Demo", created, "solo"]


def test_build_insert_placeholder_i_binds_value_i() -> None:
    record = {"link": "x_360p", "summary": None, "title": "T"}

    _, placeholders, params = build_insert(record, FIELDS)

    markers = placeholders.strip("()").split(", ")
    assert len(markers) == len(params)
    for marker, (name, value) in zip(markers, record.items()):
        assert params.values[int(marker[1:]) - 1] == value


def test_build_insert_rejects_empty_record() -> None:
    with pytest.raises(EmptyRecordError) as excinfo:
        build_insert({}, FIELDS)

    assert excinfo.value.code == ERR_EMPTY_RECORD


def test_build_insert_rejects_keys_outside_allow_list() -> None:
    with pytest.raises(InvalidFieldError) as excinfo:
        build_insert({"title": "ok", "title) VALUES (1); DROP TABLE contents; --": "x"}, FIELDS)

    assert excinfo.value.code == ERR_INVALID_FIELD
    assert excinfo.value.fields == ["title) VALUES (1); DROP TABLE contents; --"]


def test_build_update_set_only_touches_given_fields() -> None:
    set_clause, params = build_update_set({"title": "New", "contractType": "byview"}, FIELDS)

    assert set_clause == "title = $1, contract_type = $2"
    assert params.values == ["New", "byview"]


def test_build_update_set_leaves_room_for_key_predicate() -> None:
    set_clause, params = build_update_set({"summary": "s"}, FIELDS)

    assert params.add(42) == "$2"
    assert set_clause == "summary = $1"
    assert params.values == ["s", 42]


def test_build_update_set_rejects_empty_and_unknown() -> None:
    with pytest.raises(EmptyRecordError):
        build_update_set({}, FIELDS)
    with pytest.raises(InvalidFieldError):
        build_update_set({"id": 3}, FIELDS)


@pytest.mark.parametrize("query", [None, {}])
def test_build_where_filter_empty_yields_no_clause(query) -> None:
    where, params = build_where_filter(query, FIELDS)

    assert where == ""
    assert params.values == []


def test_build_where_filter_uses_comparisons_then_equality() -> None:
    where, params = build_where_filter({"title": "%Dem%", "link": "demo_360p"}, FIELDS)

    assert where == "WHERE title ILIKE $1 AND link = $2"
    assert params.values == ["%Dem%", "demo_360p"]


def test_build_where_filter_none_value_is_null_without_binding() -> None:
    where, params = build_where_filter({"summary": None, "title": "x"}, FIELDS)

    assert where == "WHERE summary IS NULL AND title ILIKE $1"
    assert params.values == ["x"]


def test_build_where_filter_continues_existing_params() -> None:
    params = ParamList()
    params.add("already bound")

    where, params = build_where_filter({"dateCreated": date(2023, 1, 1)}, FIELDS, params)

    assert where == "WHERE date_created = $2"
    assert len(params) == 2


def test_build_where_filter_rejects_unknown_field() -> None:
    with pytest.raises(InvalidFieldError):
        build_where_filter({"1=1 OR title": "x"}, FIELDS)


def test_field_map_validates_its_own_configuration() -> None:
    with pytest.raises(ValueError):
        FieldMap(relation="r", fields=frozenset({"a"}), columns={"b": "b_col"})
    with pytest.raises(ValueError):
        FieldMap(relation="r", fields=frozenset({"a"}), columns={"a": "a col"})
