"""Tests for the Alembic migration."""
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

ALEMBIC_DIR = Path(__file__).resolve().parents[2] / "alembic"


def _config(url: str) -> Config:
    config = Config()
    config.set_main_option("script_location", str(ALEMBIC_DIR))
    config.set_main_option("sqlalchemy.url", url)
    return config


def test_upgrade_matches_models(tmp_path) -> None:
    """Test that migrating to head creates the same tables as the models."""
    url = f"sqlite:///{tmp_path / 'migrated.db'}"

    command.upgrade(_config(url), "head")

    engine = create_engine(url)
    inspector = inspect(engine)
    assert {"files", "categories", "tags", "file_tags"} <= set(inspector.get_table_names())
    assert [c["name"] for c in inspector.get_columns("file_tags")] == ["id", "file_id", "tag_id"]
    unique = {u["name"] for u in inspector.get_unique_constraints("tags")}
    assert "uq_tags_category_value" in unique
    engine.dispose()


def test_downgrade_drops_tables(tmp_path) -> None:
    """Test that downgrading to base removes the tag store."""
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    config = _config(url)

    command.upgrade(config, "head")
    command.downgrade(config, "base")

    engine = create_engine(url)
    assert set(inspect(engine).get_table_names()) <= {"alembic_version"}
    engine.dispose()
