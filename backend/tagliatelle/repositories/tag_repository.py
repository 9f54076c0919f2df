"""Category, tag and membership repository."""
import logging
from typing import Dict, List, Optional

from pydantic import BaseModel
from sqlalchemy import delete, func, insert, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tagliatelle.models.category import Category
from tagliatelle.models.file_tag import FileTag
from tagliatelle.models.tag import Tag
from tagliatelle.repositories.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class TagCount(BaseModel):
    """A tag value with the number of files carrying it."""

    value: str
    count: int


def insert_ignore(session: Session, model, **values) -> int:
    """INSERT that is a no-op when a uniqueness constraint already holds the row.

    Foreign-key violations still raise.

    Returns:
        Number of rows inserted (0 or 1)
    """
    dialect = session.get_bind().dialect.name

    if dialect == "sqlite":
        return session.execute(sqlite_insert(model).values(**values).on_conflict_do_nothing()).rowcount
    if dialect == "postgresql":
        return session.execute(pg_insert(model).values(**values).on_conflict_do_nothing()).rowcount
    # Duplicate key means the row is already there, possibly from a concurrent writer
    try:
        with session.begin_nested():
            session.execute(insert(model).values(**values))
    except IntegrityError:
        logger.debug(f"Row already present in {model.__tablename__}: {values}")
        return 0
    return 1


class TagRepository(BaseRepository[Tag]):
    """Repository for categories, tags and file memberships."""

    def __init__(self, session: Session):
        """Initialize tag repository.

        Args:
            session: Database session
        """
        super().__init__(Tag, session)

    def get_category(self, name: str) -> Optional[Category]:
        """Get category by exact name."""
        result = self.session.execute(select(Category).filter(Category.name == name))
        return result.scalar_one_or_none()

    def get_tag(self, category_id: int, value: str) -> Optional[Tag]:
        """Get tag by category ID and exact value."""
        result = self.session.execute(
            select(Tag).filter(Tag.category_id == category_id, Tag.value == value)
        )
        return result.scalar_one_or_none()

    def find_tag(self, category: str, value: str) -> Optional[Tag]:
        """Get tag by category name and value."""
        result = self.session.execute(
            select(Tag)
            .join(Category, Tag.category_id == Category.id)
            .filter(Category.name == category, Tag.value == value)
        )
        return result.scalar_one_or_none()

    def get_or_create_category(self, name: str) -> Category:
        """Get existing category or create it.

        The insert is idempotent under the unique constraint on name, so
        two writers racing on the same new category both end up with
        the same row.
        """
        category = self.get_category(name)
        if category is None:
            insert_ignore(self.session, Category, name=name)
            category = self.get_category(name)
        return category

    def get_or_create_tag(self, category: Category, value: str) -> Tag:
        """Get existing tag under a category or create it."""
        tag = self.get_tag(category.id, value)
        if tag is None:
            insert_ignore(self.session, Tag, category_id=category.id, value=value)
            tag = self.get_tag(category.id, value)
        return tag

    def list_category_names(self) -> List[str]:
        """All category names, sorted."""
        result = self.session.execute(select(Category.name).order_by(Category.name))
        return list(result.scalars().all())

    def used_values(self, category: str) -> List[str]:
        """Distinct values of a category with at least one membership, sorted."""
        result = self.session.execute(
            select(Tag.value)
            .join(Category, Tag.category_id == Category.id)
            .join(FileTag, FileTag.tag_id == Tag.id)
            .filter(Category.name == category)
            .distinct()
            .order_by(Tag.value)
        )
        return list(result.scalars().all())

    def tag_counts(self) -> Dict[str, List[TagCount]]:
        """File counts per tag, grouped by category.

        Tags without memberships are left out.

        Returns:
            Dictionary ordered by category name, values ordered by value:
            {"color": [TagCount(value="blue", count=2), ...]}
        """
        result = self.session.execute(
            select(Category.name, Tag.value, func.count(FileTag.file_id))
            .select_from(Tag)
            .join(Category, Tag.category_id == Category.id)
            .join(FileTag, FileTag.tag_id == Tag.id)
            .group_by(Tag.id, Category.name, Tag.value)
            .order_by(Category.name, Tag.value)
        )

        counts: Dict[str, List[TagCount]] = {}
        for category, value, count in result.all():
            counts.setdefault(category, []).append(TagCount(value=value, count=count))
        return counts

    def add_membership(self, file_id: int, tag_id: int) -> int:
        """Attach a tag to a file; re-adding is a no-op.

        Returns:
            Number of memberships created (0 or 1)
        """
        return insert_ignore(self.session, FileTag, file_id=file_id, tag_id=tag_id)

    def remove_membership(self, file_id: int, tag_id: int) -> int:
        """Detach one tag from a file.

        Returns:
            Number of memberships removed (0 or 1)
        """
        result = self.session.execute(
            delete(FileTag).where(FileTag.file_id == file_id, FileTag.tag_id == tag_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def remove_category_memberships(self, file_id: int, category_id: int) -> int:
        """Detach every tag of a category from a file."""
        tag_ids = select(Tag.id).where(Tag.category_id == category_id)
        result = self.session.execute(
            delete(FileTag).where(FileTag.file_id == file_id, FileTag.tag_id.in_(tag_ids))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def previous_value(self, category: str, exclude_file_id: int) -> Optional[str]:
        """Most recently applied value of a category on any other file."""
        result = self.session.execute(
            select(Tag.value)
            .join(Category, Tag.category_id == Category.id)
            .join(FileTag, FileTag.tag_id == Tag.id)
            .filter(Category.name == category, FileTag.file_id != exclude_file_id)
            .order_by(FileTag.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()
