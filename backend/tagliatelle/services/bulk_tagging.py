"""Atomic add/remove of one tag across a set of files."""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Sequence, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tagliatelle.core.exceptions import (
    EmptyQuery,
    FileNotFound,
    InvalidOperation,
    MissingField,
    StoreFailure,
    TagliatelleError,
    UnknownCategory,
    UnknownTag,
)
from tagliatelle.repositories.file_repository import FileRepository
from tagliatelle.repositories.tag_repository import TagRepository
from tagliatelle.services.selection import SelectionResolver

logger = logging.getLogger(__name__)


class BulkOperation(str, Enum):
    """Mutation applied to every selected file."""

    ADD = "add"
    REMOVE = "remove"

    @classmethod
    def parse(cls, operation: Union[str, "BulkOperation"]) -> "BulkOperation":
        if isinstance(operation, cls):
            return operation
        try:
            return cls(operation)
        except ValueError:
            raise InvalidOperation(str(operation)) from None


@dataclass
class BulkTagResult:
    """Outcome of a committed bulk mutation."""

    operation: BulkOperation
    category: str
    value: str
    file_ids: List[int] = field(default_factory=list)
    memberships_changed: int = 0


class BulkTagService:
    """Applies tag mutations to many files in one transaction."""

    def __init__(self, session: Session):
        """Initialize bulk tag service.

        Args:
            session: Database session; committed or rolled back by apply()
        """
        self.session = session
        self.tags = TagRepository(session)

    def apply(
        self,
        file_ids: Sequence[int],
        category: str,
        value: str,
        operation: Union[str, BulkOperation],
    ) -> BulkTagResult:
        """Add or remove a tag on every file, all-or-nothing.

        For 'add' the category and tag are created if missing and
        existing memberships are left alone. For 'remove' an empty value
        strips every tag of the category from the files.

        Args:
            file_ids: Target files; callers validate existence beforehand
            category: Category name
            value: Tag value, may be empty for 'remove'
            operation: 'add' or 'remove'

        Returns:
            BulkTagResult describing the committed change

        Raises:
            MissingField: Empty category, or empty value for 'add'
            InvalidOperation: Operation is not 'add' or 'remove'
            UnknownCategory, UnknownTag: Removing something that does not exist
            StoreFailure: Any database error; nothing is applied
        """
        category = category.strip()
        value = value.strip()
        op = BulkOperation.parse(operation)

        if not category:
            raise MissingField("category cannot be empty")
        if op is BulkOperation.ADD and not value:
            raise MissingField("value cannot be empty when adding tags")

        result = BulkTagResult(operation=op, category=category, value=value, file_ids=list(file_ids))

        try:
            if op is BulkOperation.ADD:
                result.memberships_changed = self._add(file_ids, category, value)
            else:
                result.memberships_changed = self._remove(file_ids, category, value)
            self.session.commit()
        except TagliatelleError as e:
            self.session.rollback()
            logger.error(f"Bulk {op.value} of '{category}: {value}' rolled back: {e}")
            raise
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Bulk {op.value} of '{category}: {value}' rolled back: {e}")
            raise StoreFailure(f"failed to {op.value} tag: {e}") from e

        logger.info(
            f"Bulk {op.value} '{category}: {value}' on {len(result.file_ids)} files "
            f"({result.memberships_changed} memberships changed)"
        )
        return result

    def _add(self, file_ids: Sequence[int], category: str, value: str) -> int:
        cat = self.tags.get_or_create_category(category)
        tag = self.tags.get_or_create_tag(cat, value)

        added = 0
        for file_id in file_ids:
            try:
                added += self.tags.add_membership(file_id, tag.id)
            except SQLAlchemyError as e:
                raise StoreFailure(f"failed to add tag for file {file_id}: {e}") from e
        return added

    def _remove(self, file_ids: Sequence[int], category: str, value: str) -> int:
        cat = self.tags.get_category(category)
        if cat is None:
            raise UnknownCategory(category)

        tag = None
        if value:
            tag = self.tags.get_tag(cat.id, value)
            if tag is None:
                raise UnknownTag(category, value)

        removed = 0
        for file_id in file_ids:
            try:
                if tag is not None:
                    removed += self.tags.remove_membership(file_id, tag.id)
                else:
                    removed += self.tags.remove_category_memberships(file_id, cat.id)
            except SQLAlchemyError as e:
                raise StoreFailure(f"failed to remove tag for file {file_id}: {e}") from e
        return removed


class SelectionMode(str, Enum):
    """How a bulk request names its files."""

    RANGE = "range"
    TAGS = "tags"


@dataclass
class BulkTagOutcome:
    """A committed bulk request, with the IDs that could not be found."""

    result: BulkTagResult
    selection_desc: str
    filenames: List[str] = field(default_factory=list)
    missing_ids: List[int] = field(default_factory=list)

    @property
    def message(self) -> str:
        result = self.result
        count = len(self.filenames)
        if result.operation is BulkOperation.ADD:
            message = (
                f"Tag '{result.category}: {result.value}' added to {count} files "
                f"matching {self.selection_desc}"
            )
        elif result.value:
            message = (
                f"Tag '{result.category}: {result.value}' removed from {count} files "
                f"matching {self.selection_desc}"
            )
        else:
            message = (
                f"All '{result.category}' category tags removed from {count} files "
                f"matching {self.selection_desc}"
            )

        if len(self.filenames) <= 5:
            return f"{message}: {', '.join(self.filenames)}"
        return f"{message}: {', '.join(self.filenames[:5])} and {len(self.filenames) - 5} more"

    @property
    def warning(self) -> str:
        if not self.missing_ids:
            return ""
        return f"file IDs not found: {self.missing_ids}"


def run_bulk_request(
    session: Session,
    selection_mode: Union[str, SelectionMode],
    category: str,
    value: str,
    operation: Union[str, BulkOperation],
    file_range: str = "",
    tag_query: str = "",
) -> BulkTagOutcome:
    """Resolve a bulk selection, check the files exist and apply the mutation.

    Requested IDs that do not exist are reported on the outcome and
    skipped; the mutation still applies to the ones that do.

    Raises:
        MissingField: Empty selection input or category
        InvalidOperation: Unknown selection mode or operation
        InvalidRange, InvalidTagSyntax, EmptyQuery: Selection does not parse
        FileNotFound: None of the requested files exist
    """
    file_range = file_range.strip()
    tag_query = tag_query.strip()
    try:
        mode = SelectionMode(selection_mode or SelectionMode.RANGE)
    except ValueError:
        raise InvalidOperation(str(selection_mode), f"invalid selection mode: {selection_mode}") from None

    if mode is SelectionMode.RANGE and not file_range:
        raise MissingField("file range cannot be empty")
    if mode is SelectionMode.TAGS and not tag_query:
        raise MissingField("tag query cannot be empty")
    if not category.strip():
        raise MissingField("category cannot be empty")
    if BulkOperation.parse(operation) is BulkOperation.ADD and not value.strip():
        raise MissingField("value cannot be empty when adding tags")

    resolver = SelectionResolver(session)
    if mode is SelectionMode.RANGE:
        file_ids = resolver.by_range(file_range)
        selection_desc = f"file range '{file_range}'"
        if not file_ids:
            raise MissingField("no file IDs provided")
    else:
        file_ids = resolver.by_tag_query(tag_query)
        selection_desc = f"tag query '{tag_query}'"
        if not file_ids:
            raise EmptyQuery(tag_query, "no files match the tag query")

    files, missing = FileRepository(session).find_existing(file_ids)
    if missing:
        logger.warning(f"Bulk request for {selection_desc}: file IDs not found: {missing}")
    if not files:
        raise FileNotFound(missing[0])

    result = BulkTagService(session).apply([f.id for f in files], category, value, operation)
    return BulkTagOutcome(
        result=result,
        selection_desc=selection_desc,
        filenames=[f.filename for f in files],
        missing_ids=missing,
    )
