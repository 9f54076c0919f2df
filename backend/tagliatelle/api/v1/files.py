"""File endpoints."""
import logging
from typing import Dict, List, Sequence

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from tagliatelle.api.deps import get_per_page, get_upload_dir, http_error
from tagliatelle.core.database import get_db
from tagliatelle.core.exceptions import TagliatelleError
from tagliatelle.models.file import File
from tagliatelle.repositories.file_repository import FileRepository
from tagliatelle.services.file_service import FileService
from tagliatelle.services.pagination import Pagination, paginate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/files")


class FileResponse(BaseModel):
    """File with its resolved tags."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    filename: str
    path: str
    description: str = ""
    tags: Dict[str, List[str]] = Field(default_factory=dict)


class FileListResponse(BaseModel):
    """One page of files."""

    files: List[FileResponse]
    pagination: Pagination


class BrowseResponse(BaseModel):
    """Tagged and untagged files side by side."""

    tagged: List[FileResponse]
    untagged: List[FileResponse]
    pagination: Pagination


class RenameRequest(BaseModel):
    """Request to rename a file."""

    filename: str


class DescriptionUpdate(BaseModel):
    """Request to replace a file's description."""

    description: str = ""


class TagRequest(BaseModel):
    """Request to attach one tag to a file."""

    category: str
    value: str
    """Tag value; '!' copies the last value used in this category"""


class TagActionResponse(BaseModel):
    """Result of a single-file tag change."""

    file: FileResponse
    message: str


def file_responses(session: Session, files: Sequence[File]) -> List[FileResponse]:
    """Attach tag maps to files, keeping their order."""
    tag_map = FileRepository(session).tag_map([f.id for f in files])
    return [
        FileResponse(
            id=f.id,
            filename=f.filename,
            path=f.path,
            description=f.description or "",
            tags=tag_map.get(f.id, {}),
        )
        for f in files
    ]


@router.get("", response_model=BrowseResponse)
def list_files(
    page: int = Query(default=1, ge=1),
    per_page: int = Depends(get_per_page),
    session: Session = Depends(get_db),
) -> BrowseResponse:
    """Tagged and untagged files, newest first, paginated by the longer list."""
    repo = FileRepository(session)
    tagged, tagged_total = repo.list_tagged(page, per_page)
    untagged, untagged_total = repo.list_untagged(page, per_page)

    return BrowseResponse(
        tagged=file_responses(session, tagged),
        untagged=file_responses(session, untagged),
        pagination=paginate(page, max(tagged_total, untagged_total), per_page),
    )


@router.get("/untagged", response_model=FileListResponse)
def list_untagged_files(
    page: int = Query(default=1, ge=1),
    per_page: int = Depends(get_per_page),
    session: Session = Depends(get_db),
) -> FileListResponse:
    """Files without any tag."""
    files, total = FileRepository(session).list_untagged(page, per_page)
    return FileListResponse(
        files=file_responses(session, files),
        pagination=paginate(page, total, per_page),
    )


@router.get("/{file_id}", response_model=FileResponse)
def get_file(file_id: int, session: Session = Depends(get_db)) -> FileResponse:
    """Single file with its tags."""
    try:
        file = FileService(session).get(file_id)
    except TagliatelleError as e:
        raise http_error(e)
    return file_responses(session, [file])[0]


@router.patch("/{file_id}", response_model=FileResponse)
def update_file_description(
    file_id: int,
    request: DescriptionUpdate,
    session: Session = Depends(get_db),
) -> FileResponse:
    """Replace a file's description (truncated to 2048 characters)."""
    try:
        file = FileService(session).update_description(file_id, request.description)
    except TagliatelleError as e:
        raise http_error(e)
    return file_responses(session, [file])[0]


@router.post("/{file_id}/rename", response_model=FileResponse)
def rename_file(
    file_id: int,
    request: RenameRequest,
    upload_dir: str = Depends(get_upload_dir),
    session: Session = Depends(get_db),
) -> FileResponse:
    """Rename a file's stored bytes, thumbnail and record.

    Path separators in the new name are replaced; a name already taken
    in the upload directory is a 409.
    """
    try:
        file = FileService(session, upload_dir=upload_dir).rename(file_id, request.filename)
    except TagliatelleError as e:
        raise http_error(e)
    return file_responses(session, [file])[0]


@router.delete("/{file_id}")
def delete_file(
    file_id: int,
    upload_dir: str = Depends(get_upload_dir),
    session: Session = Depends(get_db),
) -> Dict[str, str]:
    """Delete a file, its tags and its stored bytes."""
    try:
        filename = FileService(session, upload_dir=upload_dir).delete(file_id)
    except TagliatelleError as e:
        raise http_error(e)
    return {"deleted": filename}


@router.post("/{file_id}/tags", response_model=TagActionResponse)
def add_file_tag(
    file_id: int,
    request: TagRequest,
    session: Session = Depends(get_db),
) -> TagActionResponse:
    """Attach a tag to a file."""
    service = FileService(session)
    try:
        value = service.add_tag(file_id, request.category, request.value)
        file = service.get(file_id)
    except TagliatelleError as e:
        raise http_error(e)

    if request.value.strip() == "!":
        message = f"Tag '{request.category.strip()}: {value}' copied from previous file"
    else:
        message = f"Tag '{request.category.strip()}: {value}' added"
    return TagActionResponse(file=file_responses(session, [file])[0], message=message)


@router.delete("/{file_id}/tags/{category}/{value}", response_model=TagActionResponse)
def remove_file_tag(
    file_id: int,
    category: str,
    value: str,
    session: Session = Depends(get_db),
) -> TagActionResponse:
    """Detach a tag from a file; unknown tags are ignored."""
    service = FileService(session)
    try:
        removed = service.remove_tag(file_id, category, value)
        file = service.get(file_id)
    except TagliatelleError as e:
        raise http_error(e)

    message = f"Tag '{category}: {value}' removed" if removed else "Nothing to remove"
    return TagActionResponse(file=file_responses(session, [file])[0], message=message)
