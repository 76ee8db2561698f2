"""Unit tests for store call option assembly."""

from __future__ import annotations

import pytest

from docstore_service.exceptions import ValidationFailure
from docstore_service.filters import Directives
from docstore_service.options import (
    CallOptions,
    SearchConsistency,
    StoreOptions,
    assemble_options,
)


class TestAssembleOptions:
    """Tests for assemble_options()."""

    def test_default_variant_carries_projection_only(self):
        """Single-record lookups ignore sort, limit and skip."""
        filters = Directives(select=("name",), sort={"name": 1}, limit=3, skip=1)

        options = assemble_options(filters, StoreOptions(), "id")

        assert options == CallOptions(select=("name", "id"))

    def test_default_variant_carries_ignore_case(self):
        """Predicate lookups and mutations keep case-insensitivity."""
        filters = Directives(ignore_case=True, limit=3)

        options = assemble_options(filters, StoreOptions(), "id")

        assert options == CallOptions(ignore_case=True)

    def test_find_variant(self):
        """The find variant carries every directive."""
        filters = Directives(
            select=("name",),
            sort={"name": 1, "age": -1},
            limit=3,
            skip=1,
            ignore_case=True,
        )

        options = assemble_options(filters, StoreOptions(), "id", "find")

        assert options.select == ("name", "id")
        assert options.sort == (("name", "ASC"), ("age", "DESC"))
        assert options.limit == 3
        assert options.skip == 1
        assert options.ignore_case is True

    def test_id_field_not_duplicated(self):
        """A select already naming the id is kept as is."""
        filters = Directives(select=("customid", "name"))

        options = assemble_options(filters, StoreOptions(), "customid")

        assert options.select == ("customid", "name")

    def test_no_select(self):
        """Without $select the whole record is requested."""
        options = assemble_options(Directives(), StoreOptions(), "id", "find")

        assert options.select is None
        assert options.sort is None

    def test_static_options_copied(self):
        """Lean and consistency come from the adapter defaults."""
        defaults = StoreOptions(lean=False, consistency=SearchConsistency.GLOBAL)

        options = assemble_options(Directives(), defaults, "id")

        assert options.lean is False
        assert options.consistency is SearchConsistency.GLOBAL

    @pytest.mark.parametrize("direction", [0, 2, "up", True, None])
    def test_invalid_sort_direction(self, direction):
        """Sort directions other than 1 / -1 are rejected."""
        filters = Directives(sort={"name": direction})

        with pytest.raises(ValidationFailure) as exc_info:
            assemble_options(filters, StoreOptions(), "id", "find")

        assert "$sort" in exc_info.value.errors


class TestCallOptions:
    """Tests for CallOptions helpers."""

    def test_with_limit_returns_copy(self):
        """with_limit() leaves the source options untouched."""
        options = CallOptions(limit=10)

        assert options.with_limit(1).limit == 1
        assert options.limit == 10

    def test_to_dict_omits_unset(self):
        """Only set values are serialised."""
        options = CallOptions(select=("id",), sort=(("name", "ASC"),), limit=1)

        assert options.to_dict() == {
            "lean": True,
            "consistency": "none",
            "select": ["id"],
            "sort": {"name": "ASC"},
            "limit": 1,
        }
