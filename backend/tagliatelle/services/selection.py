"""Resolution of filters, tag queries and ID ranges into file IDs.

Selection is read-only: nothing here creates categories or tags.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tagliatelle.core.exceptions import StoreFailure
from tagliatelle.models.file import File
from tagliatelle.repositories.tag_repository import TagRepository
from tagliatelle.services.filter_parser import (
    FilterCriterion,
    QueryMode,
    TagQuery,
    parse_file_id_range,
    parse_tag_query,
)
from tagliatelle.services.pagination import page_offset
from tagliatelle.services.predicate_builder import (
    build_clauses,
    clauses_for_pairs,
    compile_all,
    compile_any,
)

logger = logging.getLogger(__name__)


@dataclass
class Selection:
    """Ordered file IDs plus the size of the full match.

    IDs are distinct except in preview mode, where each entry stands for
    the value at the same index of `preview_values`.
    """

    file_ids: List[int] = field(default_factory=list)
    total: int = 0
    is_preview: bool = False
    preview_values: List[str] = field(default_factory=list)  # parallel to file_ids in preview mode


class SelectionResolver:
    """Executes predicates against the file set."""

    def __init__(self, session: Session):
        """Initialize selection resolver.

        Args:
            session: Database session
        """
        self.session = session
        self.tags = TagRepository(session)

    def select(
        self,
        criteria: Sequence[FilterCriterion],
        page: int = 1,
        per_page: Optional[int] = None,
    ) -> Selection:
        """Resolve filter criteria to a selection.

        Without a preview criterion this is the AND of all criteria,
        newest first, optionally limited to one page. With a preview
        criterion the result is one file per distinct value and is
        never paginated.
        """
        if any(criterion.is_preview for criterion in criteria):
            previews = self.previews(criteria)
            return Selection(
                file_ids=[file_id for _, file_id in previews],
                total=len(previews),
                is_preview=True,
                preview_values=[value for value, _ in previews],
            )

        predicate = compile_all(build_clauses(criteria))
        try:
            total = self.session.execute(
                select(func.count()).select_from(File).where(predicate)
            ).scalar_one()

            query = select(File.id).where(predicate).order_by(File.id.desc())
            if per_page is not None:
                query = query.limit(per_page).offset(page_offset(page, per_page))
            file_ids = list(self.session.execute(query).scalars().all())
        except SQLAlchemyError as e:
            raise StoreFailure(f"failed to fetch files: {e}") from e

        return Selection(file_ids=file_ids, total=total)

    def previews(self, criteria: Sequence[FilterCriterion]) -> List[Tuple[str, int]]:
        """One representative (newest) file per distinct value of the preview category.

        Values are visited in sorted order; values whose files are all
        excluded by the other criteria contribute nothing. A file carrying
        several values represents each of them, so it can appear more
        than once.

        Returns:
            List of (value, file_id) pairs
        """
        preview = next((c for c in criteria if c.is_preview), None)
        if preview is None:
            return []

        try:
            values = self.tags.used_values(preview.category)
            previews: List[Tuple[str, int]] = []
            for value in values:
                predicate = compile_all(build_clauses(criteria, preview_value=value))
                file_id = self.session.execute(
                    select(File.id).where(predicate).order_by(File.id.desc()).limit(1)
                ).scalar_one_or_none()
                if file_id is not None:
                    previews.append((value, file_id))
        except SQLAlchemyError as e:
            raise StoreFailure(f"failed to query preview files for '{preview.category}': {e}") from e

        logger.debug(f"Preview of '{preview.category}': {len(previews)} of {len(values)} values")
        return previews

    def by_tag_query(self, query: Union[str, TagQuery]) -> List[int]:
        """Files matching a bulk tag query, ascending by ID.

        Raises:
            InvalidTagSyntax, EmptyQuery: If the query does not parse
        """
        if isinstance(query, str):
            query = parse_tag_query(query)

        clauses = clauses_for_pairs(query.pairs)
        if query.mode is QueryMode.OR:
            predicate = compile_any(clauses)
        else:
            predicate = compile_all(clauses)

        try:
            result = self.session.execute(select(File.id).where(predicate).order_by(File.id))
        except SQLAlchemyError as e:
            raise StoreFailure(f"database query failed: {e}") from e
        return list(result.scalars().all())

    def by_range(self, range_str: str) -> List[int]:
        """IDs named by a range string; existence is not checked here."""
        return parse_file_id_range(range_str)
