"""Tests for alias configuration persistence."""
import json

import pytest

from tagliatelle.core.exceptions import InvalidAliasConfig
from tagliatelle.services.alias_config import AliasConfigStore, validate_alias_groups
from tagliatelle.services.alias_resolver import TagAliasGroup


def test_missing_file_loads_empty(tmp_path) -> None:
    """Test that an absent config file gives an empty table."""
    store = AliasConfigStore(tmp_path / "absent.json")

    table = store.load()

    assert len(table) == 0
    assert table.expand("color", "red") == ("red",)


def test_load_reads_groups(tmp_path) -> None:
    """Test loading alias groups from the config file."""
    """Test that an absent config file gives an empty table."""
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps({"tag_aliases": [{"category": "color", "aliases": ["red", "crimson"]}]})
    )

    table = AliasConfigStore(path).load()

    assert list(table.expand("color", "crimson")) == ["crimson", "red"]


def test_save_preserves_other_keys(tmp_path) -> None:
    """Test that saving keeps unrelated config keys."""
    """Test loading alias groups from the config file."""
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"instance_name": "Home", "tag_aliases": []}))
    store = AliasConfigStore(path)
    store.load()

    store.save([{"category": "size", "aliases": ["large", "big"]}])

    document = json.loads(path.read_text())
    assert document["instance_name"] == "Home"
    assert document["tag_aliases"] == [{"category": "size", "aliases": ["large", "big"]}]


def test_save_swaps_snapshot(tmp_path) -> None:
    """Test that saving publishes a new snapshot."""
    """Test that saving keeps unrelated config keys."""
    store = AliasConfigStore(tmp_path / "config.json")
    before = store.load()

    after = store.save([TagAliasGroup(category="size", aliases=("large", "big"))])

    assert store.snapshot is after
    assert after is not before
    assert list(after.expand("size", "big")) == ["big", "large"]
    # Readers holding the old snapshot keep a consistent view
    assert before.expand("size", "big") == ("big",)


def test_save_replaces_all_groups(tmp_path) -> None:
    """Test that saving replaces every stored group."""
    """Test that saving publishes a new snapshot."""
    store = AliasConfigStore(tmp_path / "config.json")
    store.save([{"category": "color", "aliases": ["red", "crimson"]}])

    table = store.save([{"category": "size", "aliases": ["large", "big"]}])

    assert len(table) == 1
    assert table.expand("color", "red") == ("red",)
    assert len(AliasConfigStore(tmp_path / "config.json").load()) == 1


def test_invalid_save_keeps_previous_snapshot(tmp_path) -> None:
    """Test that a rejected save leaves the snapshot alone."""
    """Test that saving replaces every stored group."""
    store = AliasConfigStore(tmp_path / "config.json")
    saved = store.save([{"category": "color", "aliases": ["red", "crimson"]}])

    with pytest.raises(InvalidAliasConfig):
        store.save([{"category": " ", "aliases": ["a", "b"]}])

    assert store.snapshot is saved


@pytest.mark.parametrize(
    "raw",
    [
        [{"category": "color"}],
        [{"category": "color", "aliases": []}],
        [{"category": "color", "aliases": ["  "]}],
        [{"category": "", "aliases": ["red"]}],
        "not a list",
    ],
)
def test_validate_rejects(raw) -> None:
    """Test that malformed alias groups are rejected."""
    """Test that a rejected save leaves the snapshot alone."""
    with pytest.raises(InvalidAliasConfig):
        validate_alias_groups(raw)


def test_validate_strips_values() -> None:
    """Test that categories and aliases are trimmed."""
    """Test that malformed alias groups are rejected."""
    groups = validate_alias_groups([{"category": " color ", "aliases": [" red", "", "crimson "]}])

    assert groups == [TagAliasGroup(category="color", aliases=("red", "crimson"))]


def test_unparseable_document(tmp_path) -> None:
    """Test that invalid JSON is rejected."""
    """Test that categories and aliases are trimmed."""
    path = tmp_path / "config.json"
    path.write_text("{not json")

    with pytest.raises(InvalidAliasConfig):
        AliasConfigStore(path).load()


def test_non_object_document(tmp_path) -> None:
    """Test that a non-object document is rejected."""
    """Test that invalid JSON is rejected."""
    path = tmp_path / "config.json"
    path.write_text("[]")

    with pytest.raises(InvalidAliasConfig):
        AliasConfigStore(path).load()
