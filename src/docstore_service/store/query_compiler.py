"""Native predicate -> MongoDB filter document."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from typing import Any

from ..exceptions import QueryCompilationError
from ..operators import COMBINATORS, SEARCH_EXPR, TARGET_EXPR, QueryOperator

Clause = dict[str, Any]


def compile_predicate(
    native: Mapping[str, Any], *, id_field: str = "id", ignore_case: bool = False
) -> Clause:
    """Compile a native predicate into a MongoDB filter.

    The identifier field is addressed as ``_id``; *ignore_case* makes every
    string equality and pattern match case-insensitive.
    """
    compiler = _Compiler(id_field, ignore_case)
    return compiler.compile(native)


class _Compiler:
    def __init__(self, id_field: str, ignore_case: bool) -> None:
        self._id_field = id_field
        self._ignore_case = ignore_case

    def compile(self, native: Mapping[str, Any]) -> Clause:
        if not isinstance(native, Mapping):
            raise QueryCompilationError("Predicate must be a mapping")
        clauses: list[Clause] = []
        for key, value in native.items():
            clauses.extend(self._compile_clause(key, value))
        if not clauses:
            return {}
        if len(clauses) == 1:
            return clauses[0]
        return {"$and": clauses}

    def _compile_clause(self, key: str, value: Any) -> list[Clause]:
        if key in COMBINATORS:
            if not isinstance(value, (list, tuple)):
                raise QueryCompilationError(f"{key} requires a list")
            if not value:
                return []
            return [{QueryOperator(key).value: [self.compile(b) for b in value]}]
        if key == QueryOperator.IN:
            return [self._membership(value)]
        if key == QueryOperator.NOT:
            return [{"$nor": [self.compile(value)]}]
        if key.startswith("$"):
            raise QueryCompilationError(f"Unsupported top-level operator {key}")

        field = "_id" if key == self._id_field else key
        if isinstance(value, Mapping) and any(
            isinstance(k, str) and k.startswith("$") for k in value
        ):
            return self._operators(field, value)
        return [_equality(field, self._coerce(field, value), self._ignore_case)]

    def _membership(self, value: Any) -> Clause:
        if (
            not isinstance(value, Mapping)
            or SEARCH_EXPR not in value
            or TARGET_EXPR not in value
        ):
            raise QueryCompilationError(
                f"$in requires {SEARCH_EXPR!r} and {TARGET_EXPR!r}"
            )
        name = value[SEARCH_EXPR]
        field = "_id" if name == self._id_field else name
        return {field: {"$in": self._coerce(field, _as_list(value[TARGET_EXPR]))}}

    def _operators(self, field: str, ops: Mapping[str, Any]) -> list[Clause]:
        ops = dict(ops)
        ignore_case = bool(ops.pop(QueryOperator.IGNORE_CASE.value, False))
        ignore_case = ignore_case or self._ignore_case
        clauses: list[Clause] = []
        for op, val in ops.items():
            compile_op = _OPERATORS.get(op)
            if compile_op is None:
                raise QueryCompilationError(
                    f"Unsupported operator {op} for field {field!r}"
                )
            clauses.append(compile_op(field, self._coerce(field, val), ignore_case))
        return clauses

    def _coerce(self, field: str, value: Any) -> Any:
        # Identifiers are stored as strings
        if field != "_id" or value is None or isinstance(value, (bool, Mapping)):
            return value
        if isinstance(value, (list, tuple)):
            return [str(v) for v in value]
        return str(value)


def _as_list(value: Any) -> list[Any]:
    return list(value) if isinstance(value, (list, tuple)) else [value]


def _exact(value: str) -> Clause:
    return {"$regex": f"^{re.escape(value)}$", "$options": "i"}


def _like_pattern(value: Any) -> str:
    if not isinstance(value, str):
        raise QueryCompilationError("Pattern operators require a string value")
    # SQL LIKE: % = any run, _ = single char
    return "^" + re.escape(value).replace("%", ".*").replace("_", ".") + "$"


def _regex(pattern: str, ignore_case: bool) -> Clause:
    if ignore_case:
        return {"$regex": pattern, "$options": "i"}
    return {"$regex": pattern}


def _range(val: Any, op: str) -> tuple[Any, Any]:
    if not isinstance(val, (list, tuple)) or len(val) != 2:
        raise QueryCompilationError(f"{op} requires a list of two values")
    return val[0], val[1]


def _equality(field: str, val: Any, ignore_case: bool) -> Clause:
    if ignore_case and isinstance(val, str):
        return {field: _exact(val)}
    return {field: val}


def _not_equal(field: str, val: Any, ignore_case: bool) -> Clause:
    if ignore_case and isinstance(val, str):
        return {"$nor": [{field: _exact(val)}]}
    return {field: {"$ne": val}}


def _comparison(mongo_op: str) -> Callable[[str, Any, bool], Clause]:
    def compile_comparison(field: str, val: Any, _ignore_case: bool) -> Clause:
        return {field: {mongo_op: val}}

    return compile_comparison


def _in(field: str, val: Any, _ignore_case: bool) -> Clause:
    return {field: {"$in": _as_list(val)}}


def _not_in(field: str, val: Any, _ignore_case: bool) -> Clause:
    return {field: {"$nin": _as_list(val)}}


def _like(field: str, val: Any, ignore_case: bool) -> Clause:
    return {field: _regex(_like_pattern(val), ignore_case)}


def _not_like(field: str, val: Any, ignore_case: bool) -> Clause:
    return {
        "$and": [
            {field: {"$exists": True}},
            {"$nor": [{field: _regex(_like_pattern(val), ignore_case)}]},
        ]
    }


def _between(field: str, val: Any, _ignore_case: bool) -> Clause:
    lo, hi = _range(val, QueryOperator.BETWEEN.value)
    return {field: {"$gte": lo, "$lte": hi}}


def _not_between(field: str, val: Any, _ignore_case: bool) -> Clause:
    lo, hi = _range(val, QueryOperator.NOT_BETWEEN.value)
    return {"$or": [{field: {"$lt": lo}}, {field: {"$gt": hi}}]}


# Presence checks: (clause when true, clause when false)
_PRESENCE: dict[str, tuple[Clause, Clause]] = {
    QueryOperator.IS_NULL.value: (
        {"$exists": True, "$eq": None},
        {"$exists": True, "$ne": None},
    ),
    QueryOperator.IS_NOT_NULL.value: (
        {"$exists": True, "$ne": None},
        {"$exists": True, "$eq": None},
    ),
    QueryOperator.IS_MISSING.value: ({"$exists": False}, {"$exists": True}),
    QueryOperator.IS_NOT_MISSING.value: ({"$exists": True}, {"$exists": False}),
    QueryOperator.IS_VALUED.value: ({"$exists": True, "$ne": None}, {"$eq": None}),
    QueryOperator.IS_NOT_VALUED.value: ({"$eq": None}, {"$exists": True, "$ne": None}),
}


def _presence(op: str) -> Callable[[str, Any, bool], Clause]:
    when_true, when_false = _PRESENCE[op]

    def compile_presence(field: str, val: Any, _ignore_case: bool) -> Clause:
        return {field: dict(when_true if val else when_false)}

    return compile_presence


_OPERATORS: dict[str, Callable[[str, Any, bool], Clause]] = {
    QueryOperator.EQ.value: _equality,
    QueryOperator.NEQ.value: _not_equal,
    QueryOperator.NE.value: _not_equal,
    QueryOperator.LT.value: _comparison("$lt"),
    QueryOperator.LE.value: _comparison("$lte"),
    QueryOperator.GT.value: _comparison("$gt"),
    QueryOperator.GE.value: _comparison("$gte"),
    QueryOperator.IN.value: _in,
    QueryOperator.NOT_IN.value: _not_in,
    QueryOperator.LIKE.value: _like,
    QueryOperator.NOT_LIKE.value: _not_like,
    QueryOperator.BETWEEN.value: _between,
    QueryOperator.NOT_BETWEEN.value: _not_between,
    **{op: _presence(op) for op in _PRESENCE},
}
