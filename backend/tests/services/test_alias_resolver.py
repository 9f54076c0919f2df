"""Tests for alias expansion."""
import logging

import pytest

from tagliatelle.services.alias_resolver import AliasTable, TagAliasGroup


@pytest.mark.parametrize("seed", ["red", "crimson", "scarlet"])
def test_expand_member_returns_whole_group_seed_first(aliases: AliasTable, seed: str) -> None:
    """Test that any member expands to its full group with itself first."""
    expanded = aliases.expand("color", seed)

    assert expanded[0] == seed
    assert set(expanded) == {"red", "crimson", "scarlet"}
    assert len(expanded) == 3


def test_expand_is_case_insensitive_but_keeps_seed(aliases: AliasTable) -> None:
    """Test that matching ignores case and the seed is not duplicated."""
    expanded = aliases.expand("color", "RED")

    assert expanded == ("RED", "crimson", "scarlet")


def test_expand_unknown_value_is_singleton(aliases: AliasTable) -> None:
    """Test that a value outside every group expands to itself."""
    assert aliases.expand("color", "green") == ("green",)


def test_expand_other_category_is_singleton(aliases: AliasTable) -> None:
    """Test that groups only apply to their own category."""
    assert aliases.expand("mood", "red") == ("red",)
    assert aliases.expand("Color", "red") == ("red",)


@pytest.mark.parametrize("value", ["unassigned", "previews"])
def test_reserved_values_never_expand(value: str) -> None:
    """Test that special filter values bypass alias groups."""
    table = AliasTable([TagAliasGroup(category="color", aliases=(value, "other"))])

    assert table.expand("color", value) == (value,)


def test_first_matching_group_wins(caplog) -> None:
    """Test that only the first group containing a value is used."""
    with caplog.at_level(logging.WARNING):
        table = AliasTable(
            [
                TagAliasGroup(category="color", aliases=("red", "crimson")),
                TagAliasGroup(category="color", aliases=("red", "ruby")),
            ]
        )

    assert table.expand("color", "red") == ("red", "crimson")
    assert table.expand("color", "ruby") == ("ruby", "red")
    assert "more than one group" in caplog.text


def test_empty_table() -> None:
    """Test that an empty table expands nothing."""
    table = AliasTable()

    assert len(table) == 0
    assert table.expand("color", "red") == ("red",)
