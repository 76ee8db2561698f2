"""Unit tests for compile_predicate."""

from __future__ import annotations

import pytest

from docstore_service.exceptions import QueryCompilationError
from docstore_service.mapper import membership_clause
from docstore_service.store.query_compiler import compile_predicate


def test_compile_empty() -> None:
    assert compile_predicate({}) == {}


def test_compile_literal_and_id_field() -> None:
    m = compile_predicate({"name": "Dave", "id": 5})
    assert m == {"$and": [{"name": "Dave"}, {"_id": "5"}]}


def test_compile_custom_id_field() -> None:
    m = compile_predicate({"customid": "a"}, id_field="customid")
    assert m == {"_id": "a"}


def test_compile_comparisons() -> None:
    m = compile_predicate({"age": {"$gte": 3, "$lt": 9}})
    assert m == {"$and": [{"age": {"$gte": 3}}, {"age": {"$lt": 9}}]}


def test_compile_neq() -> None:
    m = compile_predicate({"name": {"$neq": "Dave"}})
    assert m == {"name": {"$ne": "Dave"}}


def test_compile_structured_membership() -> None:
    m = compile_predicate({"$and": [membership_clause("age", [1, 2])]})
    assert m == {"$and": [{"age": {"$in": [1, 2]}}]}


def test_compile_negated_membership_on_id() -> None:
    m = compile_predicate({"$and": [{"$not": membership_clause("id", [1])}]})
    assert m == {"$and": [{"$nor": [{"_id": {"$in": ["1"]}}]}]}


def test_compile_or() -> None:
    m = compile_predicate({"$or": [{"name": "Alice"}, {"age": {"$lt": 5}}]})
    assert m == {"$or": [{"name": "Alice"}, {"age": {"$lt": 5}}]}


def test_compile_empty_combinator_skipped() -> None:
    assert compile_predicate({"$and": [], "name": "Dave"}) == {"name": "Dave"}


def test_compile_like() -> None:
    m = compile_predicate({"name": {"$like": "Da%"}})
    assert m == {"name": {"$regex": "^Da.*$"}}


def test_compile_not_like() -> None:
    m = compile_predicate({"name": {"$notLike": "Da_"}})
    assert m == {
        "$and": [
            {"name": {"$exists": True}},
            {"$nor": [{"name": {"$regex": "^Da.$"}}]},
        ]
    }


def test_compile_between() -> None:
    m = compile_predicate({"age": {"$btw": [3, 9]}})
    assert m == {"age": {"$gte": 3, "$lte": 9}}


def test_compile_not_between() -> None:
    m = compile_predicate({"age": {"$notBtw": [3, 9]}})
    assert m == {"$or": [{"age": {"$lt": 3}}, {"age": {"$gt": 9}}]}


def test_compile_presence() -> None:
    assert compile_predicate({"x": {"$isMissing": True}}) == {"x": {"$exists": False}}
    assert compile_predicate({"x": {"$isNotNull": True}}) == {
        "x": {"$exists": True, "$ne": None}
    }


def test_compile_ignore_case_flag_on_field() -> None:
    m = compile_predicate({"name": {"$eq": "dave", "$ignoreCase": True}})
    assert m == {"name": {"$regex": "^dave$", "$options": "i"}}


def test_compile_ignore_case_for_call() -> None:
    m = compile_predicate({"name": "dave"}, ignore_case=True)
    assert m == {"name": {"$regex": "^dave$", "$options": "i"}}


def test_compile_ignore_case_leaves_non_strings() -> None:
    assert compile_predicate({"age": 3}, ignore_case=True) == {"age": 3}


@pytest.mark.parametrize(
    "native",
    [
        {"$where": "1"},
        {"name": {"$regex": "x"}},
        {"age": {"$btw": [1]}},
        {"$in": {"search_expr": "age"}},
        {"$or": {"name": "x"}},
    ],
)
def test_compile_rejects_unsupported(native) -> None:
    with pytest.raises(QueryCompilationError):
        compile_predicate(native)
