"""Pytest configuration and fixtures."""
import os
import tempfile
from pathlib import Path
from typing import Callable, Generator, List

# Keep start-up hooks away from the working directory
_RUNTIME_DIR = tempfile.mkdtemp(prefix="tagliatelle-tests-")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CONFIG_PATH", os.path.join(_RUNTIME_DIR, "config.json"))
os.environ.setdefault("UPLOAD_DIR", os.path.join(_RUNTIME_DIR, "uploads"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from tagliatelle.api.deps import get_alias_store, get_per_page, get_upload_dir
from tagliatelle.core.database import Base, get_db
from tagliatelle.main import app
from tagliatelle.models import Category, File, FileTag, Tag
from tagliatelle.services.alias_config import AliasConfigStore
from tagliatelle.services.alias_resolver import AliasTable, TagAliasGroup

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite://")


@pytest.fixture(scope="function")
def engine():
    """Fresh in-memory database for each test."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(engine) -> Generator[Session, None, None]:
    """Database session bound to the test engine."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def alias_store(tmp_path) -> AliasConfigStore:
    """Alias store backed by a temporary config file."""
    store = AliasConfigStore(tmp_path / "config.json")
    store.load()
    return store


@pytest.fixture
def upload_dir(tmp_path) -> Path:
    """Empty upload directory with a thumbnails folder."""
    directory = tmp_path / "uploads"
    (directory / "thumbnails").mkdir(parents=True)
    return directory


@pytest.fixture
def aliases() -> AliasTable:
    """A small alias table used across tests."""
    return AliasTable(
        [
            TagAliasGroup(category="color", aliases=("red", "crimson", "scarlet")),
            TagAliasGroup(category="size", aliases=("large", "big")),
        ]
    )


@pytest.fixture
def make_file(db: Session) -> Callable[..., File]:
    """Factory inserting a file row."""

    def _make_file(filename: str, path: str = "", description: str = "") -> File:
        file = File(filename=filename, path=path or f"/uploads/{filename}", description=description)
        db.add(file)
        db.commit()
        db.refresh(file)
        return file

    return _make_file


@pytest.fixture
def tag_file(db: Session) -> Callable[..., None]:
    """Attach 'category: value' to a file, creating rows as needed."""

    def _tag_file(file: File, category: str, value: str) -> None:
        cat = db.query(Category).filter(Category.name == category).first()
        if cat is None:
            cat = Category(name=category)
            db.add(cat)
            db.flush()
        tag = db.query(Tag).filter(Tag.category_id == cat.id, Tag.value == value).first()
        if tag is None:
            tag = Tag(category_id=cat.id, value=value)
            db.add(tag)
            db.flush()
        db.add(FileTag(file_id=file.id, tag_id=tag.id))
        db.commit()

    return _tag_file


@pytest.fixture
def catalogue(make_file, tag_file) -> List[File]:
    """Five files with overlapping tags.

    1 a.jpg  color:red     size:large
    2 b.jpg  color:blue    size:large
    3 c.jpg  color:crimson
    4 d.jpg  size:small
    5 e.jpg  (untagged)
    """
    files = [make_file(name) for name in ("a.jpg", "b.jpg", "c.jpg", "d.jpg", "e.jpg")]
    tag_file(files[0], "color", "red")
    tag_file(files[0], "size", "large")
    tag_file(files[1], "color", "blue")
    tag_file(files[1], "size", "large")
    tag_file(files[2], "color", "crimson")
    tag_file(files[3], "size", "small")
    return files


@pytest.fixture
def memberships(db: Session) -> Callable[[], set]:
    """Snapshot of current (file_id, category, value) triples."""

    def _memberships() -> set:
        rows = (
            db.query(FileTag.file_id, Category.name, Tag.value)
            .join(Tag, FileTag.tag_id == Tag.id)
            .join(Category, Tag.category_id == Category.id)
            .all()
        )
        return {tuple(row) for row in rows}

    return _memberships


@pytest.fixture(scope="function")
def client(db, alias_store, upload_dir) -> Generator:
    """Create a test client with database, alias store and upload dir overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_alias_store] = lambda: alias_store
    app.dependency_overrides[get_per_page] = lambda: 2
    app.dependency_overrides[get_upload_dir] = lambda: str(upload_dir)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
