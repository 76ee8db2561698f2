"""
Predicate model — tagged variants for an incoming query.

A predicate is an ordered sequence of ``(key, node)`` clauses where each
node is one of:

- ``Literal`` — implicit equality against a plain value;
- ``Comparison`` — an operator object such as ``{"$gt": 18, "$lt": 30}``;
- ``Conjunction`` / ``Disjunction`` — the ``$and`` / ``$or`` combinators
  holding nested predicates.

Parsing validates every ``$``-prefixed key against the allowed operator set,
so downstream components can dispatch on the node type instead of probing
dictionaries.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Union

from .exceptions import BadRequest
from .operators import COMBINATORS, QueryOperator


@dataclass(frozen=True)
class Literal:
    value: Any


@dataclass(frozen=True)
class Comparison:
    operators: tuple[tuple[str, Any], ...]

    def as_dict(self) -> dict[str, Any]:
        return dict(self.operators)

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(op for op, _ in self.operators)


@dataclass(frozen=True)
class Conjunction:
    children: tuple[Predicate, ...]


@dataclass(frozen=True)
class Disjunction:
    children: tuple[Predicate, ...]


Node = Union[Literal, Comparison, Conjunction, Disjunction]


@dataclass(frozen=True)
class Predicate:
    """Immutable parsed query; see the module docstring."""

    clauses: tuple[tuple[str, Node], ...] = ()

    def __bool__(self) -> bool:
        return bool(self.clauses)

    def to_query(self) -> dict[str, Any]:
        """Render back to the plain dictionary form."""
        query: dict[str, Any] = {}
        for key, node in self.clauses:
            query[key] = _render(node)
        return query


def _render(node: Node) -> Any:
    if isinstance(node, Literal):
        return node.value
    if isinstance(node, Comparison):
        return node.as_dict()
    return [child.to_query() for child in node.children]


def parse_predicate(
    query: Mapping[str, Any] | None,
    allowed_operators: Iterable[str],
) -> Predicate:
    """Parse a query mapping into a :class:`Predicate`.

    Raises:
        BadRequest: if a ``$``-prefixed key is not an allowed operator, or a
            combinator does not hold a list of mappings.
    """
    if not query:
        return Predicate()
    allowed = frozenset(allowed_operators)
    return _parse(query, allowed)


def _parse(query: Mapping[str, Any], allowed: frozenset[str]) -> Predicate:
    clauses: list[tuple[str, Node]] = []
    for key, value in query.items():
        if key in COMBINATORS:
            _check_operator(key, allowed)
            children = _parse_branches(key, value, allowed)
            combinator: Node = (
                Conjunction(children)
                if key == QueryOperator.AND
                else Disjunction(children)
            )
            clauses.append((key, combinator))
        elif key.startswith("$"):
            # Already-native top-level clause, e.g. structured membership
            _check_operator(key, allowed)
            clauses.append((key, Literal(value)))
        elif _is_operator_object(value):
            for op in value:
                _check_operator(op, allowed)
            clauses.append((key, Comparison(tuple(value.items()))))
        else:
            clauses.append((key, Literal(value)))
    return Predicate(tuple(clauses))


def _parse_branches(
    key: str, value: Any, allowed: frozenset[str]
) -> tuple[Predicate, ...]:
    if not isinstance(value, (list, tuple)) or not all(
        isinstance(branch, Mapping) for branch in value
    ):
        raise BadRequest(f"{key} requires a list of query objects")
    return tuple(_parse(branch, allowed) for branch in value)


def _is_operator_object(value: Any) -> bool:
    return isinstance(value, Mapping) and any(
        isinstance(k, str) and k.startswith("$") for k in value
    )


def _check_operator(op: str, allowed: frozenset[str]) -> None:
    if op not in allowed:
        raise BadRequest(f"Invalid query parameter {op}", data={"operator": op})
