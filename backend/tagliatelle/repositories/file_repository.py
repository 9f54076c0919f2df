"""File repository: lookups and display data for selections."""
from typing import Dict, Iterable, List, Sequence, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from tagliatelle.models.category import Category
from tagliatelle.models.file import File
from tagliatelle.models.file_tag import FileTag
from tagliatelle.models.tag import Tag
from tagliatelle.repositories.base_repository import BaseRepository
from tagliatelle.services.pagination import page_offset

# Keeps IN lists under SQLite's bound-parameter limit
ID_CHUNK_SIZE = 500

MAX_DESCRIPTION_LENGTH = 2048


def _chunks(ids: Sequence[int], size: int = ID_CHUNK_SIZE) -> Iterable[Sequence[int]]:
    for start in range(0, len(ids), size):
        yield ids[start:start + size]


class FileRepository(BaseRepository[File]):
    """Repository for File model."""

    def __init__(self, session: Session):
        """Initialize file repository.

        Args:
            session: Database session
        """
        super().__init__(File, session)

    def list_by_ids(self, file_ids: Sequence[int]) -> List[File]:
        """Load files keeping the order of `file_ids`.

        IDs that do not exist are skipped.
        """
        by_id: Dict[int, File] = {}
        for chunk in _chunks(list(file_ids)):
            result = self.session.execute(select(File).filter(File.id.in_(chunk)))
            for file in result.scalars().all():
                by_id[file.id] = file
        return [by_id[file_id] for file_id in file_ids if file_id in by_id]

    def find_existing(self, file_ids: Sequence[int]) -> Tuple[List[File], List[int]]:
        """Split requested IDs into existing files and missing IDs.

        Args:
            file_ids: Requested file IDs

        Returns:
            Tuple of (files ordered by ID, missing IDs in request order)
        """
        found: List[File] = []
        for chunk in _chunks(list(file_ids)):
            result = self.session.execute(select(File).filter(File.id.in_(chunk)))
            found.extend(result.scalars().all())

        found.sort(key=lambda f: f.id)
        found_ids = {f.id for f in found}
        missing = [file_id for file_id in file_ids if file_id not in found_ids]
        return found, missing

    def tag_map(self, file_ids: Sequence[int]) -> Dict[int, Dict[str, List[str]]]:
        """Resolve tags of files as {file_id: {category: [values]}}.

        Every requested ID gets an entry, empty for untagged files.
        """
        tags: Dict[int, Dict[str, List[str]]] = {file_id: {} for file_id in file_ids}
        for chunk in _chunks(list(file_ids)):
            result = self.session.execute(
                select(FileTag.file_id, Category.name, Tag.value)
                .select_from(FileTag)
                .join(Tag, FileTag.tag_id == Tag.id)
                .join(Category, Tag.category_id == Category.id)
                .filter(FileTag.file_id.in_(chunk))
                .order_by(Category.name, Tag.value)
            )
            for file_id, category, value in result.all():
                tags[file_id].setdefault(category, []).append(value)
        return tags

    def list_tagged(self, page: int, per_page: int) -> Tuple[List[File], int]:
        """Page of files with at least one tag, newest first."""
        tagged = select(FileTag.id).where(FileTag.file_id == File.id).exists()
        return self._page(tagged, page, per_page)

    def list_untagged(self, page: int, per_page: int) -> Tuple[List[File], int]:
        """Page of files without any tag, newest first."""
        tagged = select(FileTag.id).where(FileTag.file_id == File.id).exists()
        return self._page(~tagged, page, per_page)

    def _page(self, condition, page: int, per_page: int) -> Tuple[List[File], int]:
        total = self.session.execute(
            select(func.count()).select_from(File).where(condition)
        ).scalar_one()
        result = self.session.execute(
            select(File)
            .where(condition)
            .order_by(File.id.desc())
            .limit(per_page)
            .offset(page_offset(page, per_page))
        )
        return list(result.scalars().all()), total

    def recent(self, limit: int = 20) -> List[File]:
        """Most recently added files."""
        result = self.session.execute(select(File).order_by(File.id.desc()).limit(limit))
        return list(result.scalars().all())

    def rename(self, file: File, filename: str, path: str) -> File:
        """Point a file row at its new name and location."""
        file.filename = filename
        file.path = path
        self.session.flush()
        return file

    def update_description(self, file: File, description: str) -> File:
        """Set a file's description, truncated to MAX_DESCRIPTION_LENGTH."""
        file.description = description[:MAX_DESCRIPTION_LENGTH]
        self.session.flush()
        return file
