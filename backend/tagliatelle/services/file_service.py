"""Single-file operations: tagging, description edits, renaming and deletion."""
import logging
import os
from pathlib import Path
from typing import Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tagliatelle.core.exceptions import (
    FileConflict,
    FileNotFound,
    MissingField,
    StoreFailure,
    UnknownTag,
)
from tagliatelle.models.file import File
from tagliatelle.repositories.file_repository import FileRepository
from tagliatelle.repositories.tag_repository import TagRepository
from tagliatelle.services.bulk_tagging import BulkOperation, BulkTagService

logger = logging.getLogger(__name__)

# Tag value meaning "the value last used for this category on another file"
PREVIOUS_VALUE = "!"


def sanitize_filename(filename: str) -> str:
    """Neutralise path separators and parent references in a filename."""
    for unsafe in ("/", "\\", ".."):
        filename = filename.replace(unsafe, "_")
    return filename or "file"


class FileService:
    """Operations on one file at a time."""

    def __init__(self, session: Session, upload_dir: Optional[Union[str, Path]] = None):
        self.session = session
        self.files = FileRepository(session)
        self.tags = TagRepository(session)
        self.upload_dir = Path(upload_dir) if upload_dir else None

    def get(self, file_id: int) -> File:
        """Get file or raise FileNotFound."""
        file = self.files.get_by_id(file_id)
        if file is None:
            raise FileNotFound(file_id)
        return file

    def add_tag(self, file_id: int, category: str, value: str) -> str:
        """Attach 'category: value' to a file, creating it if needed.

        A value of '!' is replaced with the value most recently applied
        in that category to any other file.

        Returns:
            The value actually applied
        """
        category = category.strip()
        value = value.strip()
        if not category or not value:
            raise MissingField("category and value are required")

        file = self.get(file_id)
        if value == PREVIOUS_VALUE:
            previous = self.tags.previous_value(category, exclude_file_id=file.id)
            if previous is None:
                raise UnknownTag(
                    category, value, f"no previous tag found for category: {category}"
                )
            value = previous

        BulkTagService(self.session).apply([file.id], category, value, BulkOperation.ADD)
        return value

    def remove_tag(self, file_id: int, category: str, value: str) -> bool:
        """Detach one tag from a file; a tag that does not exist is a no-op.

        Returns:
            True if a membership was removed
        """
        file = self.get(file_id)
        tag = self.tags.find_tag(category, value)
        if tag is None:
            return False

        try:
            removed = self.tags.remove_membership(file.id, tag.id)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreFailure(f"failed to remove tag from file {file_id}: {e}") from e
        return removed > 0

    def update_description(self, file_id: int, description: str) -> File:
        """Replace a file's description."""
        file = self.get(file_id)
        try:
            self.files.update_description(file, description)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreFailure(f"failed to update description: {e}") from e
        return file

    def delete(self, file_id: int) -> str:
        """Delete a file record, its memberships and its stored bytes.

        The database row goes first; failing to remove bytes from disk
        afterwards is only logged.

        Returns:
            Filename of the deleted file
        """
        file = self.get(file_id)
        filename, path = file.filename, file.path

        try:
            self.files.delete(file)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreFailure(f"failed to delete file {file_id}: {e}") from e

        self._remove_from_disk(Path(path))
        if self.upload_dir is not None:
            thumbnail = self._thumbnail(self.upload_dir, filename)
            if thumbnail.exists():
                self._remove_from_disk(thumbnail)

        logger.info(f"Deleted file {file_id} ({filename})")
        return filename

    def _remove_from_disk(self, path: Path) -> None:
        try:
            os.remove(path)
        except OSError as e:
            logger.warning(f"Failed to delete physical file {path}: {e}")

    def _thumbnail(self, upload_dir: Path, filename: str) -> Path:
        return upload_dir / "thumbnails" / f"{filename}.jpg"

    def rename(self, file_id: int, new_filename: str) -> File:
        """Rename a file on disk and in the database.

        The stored bytes move first, then the thumbnail if there is one,
        then the row. A failure at any step moves what was already moved
        back to its old name.

        Args:
            file_id: File to rename
            new_filename: Requested name, sanitized before use

        Returns:
            The updated file

        Raises:
            MissingField: Empty new name
            FileConflict: The target name is already taken on disk
            StoreFailure: Moving bytes or updating the row failed
        """
        new_filename = new_filename.strip()
        if not new_filename:
            raise MissingField("new filename cannot be empty")
        new_filename = sanitize_filename(new_filename)

        file = self.get(file_id)
        if file.filename == new_filename:
            return file

        old_filename, old_path = file.filename, Path(file.path)
        upload_dir = self.upload_dir if self.upload_dir is not None else old_path.parent
        new_path = upload_dir / new_filename
        if new_path.exists():
            raise FileConflict(new_filename)

        try:
            os.rename(old_path, new_path)
        except OSError as e:
            raise StoreFailure(f"failed to rename physical file: {e}") from e

        old_thumbnail = self._thumbnail(upload_dir, old_filename)
        new_thumbnail = self._thumbnail(upload_dir, new_filename)
        thumbnail_moved = False
        if old_thumbnail.exists():
            try:
                os.rename(old_thumbnail, new_thumbnail)
                thumbnail_moved = True
            except OSError as e:
                self._move_back(new_path, old_path)
                raise StoreFailure(f"failed to rename thumbnail: {e}") from e

        try:
            self.files.rename(file, new_filename, str(new_path))
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            self._move_back(new_path, old_path)
            if thumbnail_moved:
                self._move_back(new_thumbnail, old_thumbnail)
            raise StoreFailure(f"failed to update database: {e}") from e

        logger.info(f"Renamed file {file_id}: {old_filename} -> {new_filename}")
        return file

    def _move_back(self, current: Path, original: Path) -> None:
        try:
            os.rename(current, original)
        except OSError as e:
            logger.error(f"Failed to restore {original} from {current}: {e}")
