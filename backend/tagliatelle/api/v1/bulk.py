"""Bulk tag editor endpoints."""
import logging
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from tagliatelle.api.deps import http_error
from tagliatelle.core.database import get_db
from tagliatelle.core.exceptions import TagliatelleError
from tagliatelle.repositories.file_repository import FileRepository
from tagliatelle.repositories.tag_repository import TagRepository
from tagliatelle.services.bulk_tagging import BulkOperation, SelectionMode, run_bulk_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bulk-tag")


class RecentFile(BaseModel):
    """Recently added file offered as a range hint."""

    id: int
    filename: str


class BulkTagFormResponse(BaseModel):
    """Data for the bulk tag editor."""

    categories: List[str]
    recent_files: List[RecentFile]


class BulkTagRequest(BaseModel):
    """Bulk tag mutation request."""

    selection_mode: SelectionMode = SelectionMode.RANGE
    """'range' uses file_range, 'tags' uses tag_query"""

    file_range: str = ""
    """e.g. '3,5-7'"""

    tag_query: str = ""
    """e.g. 'color:red,size:large' or 'color:red OR color:blue'"""

    category: str
    value: str = ""
    operation: BulkOperation = BulkOperation.ADD


class BulkTagResponse(BaseModel):
    """Outcome of a committed bulk mutation."""

    success: str
    warning: str = ""
    file_ids: List[int]
    missing_ids: List[int]
    memberships_changed: int


@router.get("", response_model=BulkTagFormResponse)
def get_bulk_tag_form(session: Session = Depends(get_db)) -> BulkTagFormResponse:
    """Category names and the 20 most recent files."""
    recent = FileRepository(session).recent(limit=20)
    return BulkTagFormResponse(
        categories=TagRepository(session).list_category_names(),
        recent_files=[RecentFile(id=f.id, filename=f.filename) for f in recent],
    )


@router.post("", response_model=BulkTagResponse)
def bulk_tag(request: BulkTagRequest, session: Session = Depends(get_db)) -> BulkTagResponse:
    """Add or remove one tag on every selected file, atomically."""
    logger.info(
        f"Bulk {request.operation.value} '{request.category}: {request.value}' "
        f"via {request.selection_mode.value}"
    )
    try:
        outcome = run_bulk_request(
            session,
            selection_mode=request.selection_mode,
            category=request.category,
            value=request.value,
            operation=request.operation,
            file_range=request.file_range,
            tag_query=request.tag_query,
        )
    except TagliatelleError as e:
        raise http_error(e)

    return BulkTagResponse(
        success=outcome.message,
        warning=outcome.warning,
        file_ids=outcome.result.file_ids,
        missing_ids=outcome.missing_ids,
        memberships_changed=outcome.result.memberships_changed,
    )
