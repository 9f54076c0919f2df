"""Tag overview and tag filter endpoints."""
import logging
from typing import Dict, List

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from tagliatelle.api.deps import get_alias_table, get_per_page, http_error
from tagliatelle.api.v1.files import FileResponse, file_responses
from tagliatelle.core.database import get_db
from tagliatelle.core.exceptions import TagliatelleError
from tagliatelle.repositories.file_repository import FileRepository
from tagliatelle.repositories.tag_repository import TagCount, TagRepository
from tagliatelle.services.alias_resolver import AliasTable
from tagliatelle.services.filter_parser import FilterCriterion, build_filter_path, parse_filter_path
from tagliatelle.services.pagination import Pagination, paginate
from tagliatelle.services.selection import SelectionResolver

logger = logging.getLogger(__name__)

router = APIRouter()


class Breadcrumb(BaseModel):
    """Navigation step."""

    name: str
    url: str


class TagFilterResponse(BaseModel):
    """Files matching a tag filter path."""

    title: str
    breadcrumbs: List[Breadcrumb]
    files: List[FileResponse]
    pagination: Pagination
    is_preview: bool = False
    preview_values: List[str] = Field(default_factory=list)


def build_breadcrumbs(criteria: List[FilterCriterion]) -> List[Breadcrumb]:
    """Home, Tags, then each category (first occurrence) and each value."""
    breadcrumbs = [
        Breadcrumb(name="Home", url="/"),
        Breadcrumb(name="Tags", url="/tags"),
    ]
    seen_categories = set()

    for i, criterion in enumerate(criteria):
        if criterion.category not in seen_categories:
            seen_categories.add(criterion.category)
            breadcrumbs.append(
                Breadcrumb(name=criterion.category.title(), url=f"/tags#tag-{criterion.category}")
            )
        breadcrumbs.append(
            Breadcrumb(name=criterion.value.title(), url=build_filter_path(criteria[: i + 1]))
        )

    return breadcrumbs


def filter_title(criteria: List[FilterCriterion], is_preview: bool) -> str:
    joiner = " + " if is_preview else ", "
    return "Tagged: " + joiner.join(f"{c.category}: {c.value}" for c in criteria)


@router.get("/tags", response_model=Dict[str, List[TagCount]])
def list_tags(session: Session = Depends(get_db)) -> Dict[str, List[TagCount]]:
    """Every tag in use with its file count, grouped by category."""
    return TagRepository(session).tag_counts()


@router.get("/tag/{filter_path:path}", response_model=TagFilterResponse)
def filter_by_tags(
    filter_path: str,
    page: int = Query(default=1, ge=1),
    per_page: int = Depends(get_per_page),
    aliases: AliasTable = Depends(get_alias_table),
    session: Session = Depends(get_db),
) -> TagFilterResponse:
    """Files matching all tag filters of the path.

    The path is 'category/value' segments joined by '/and/tag/'. The
    value 'unassigned' matches files without any tag in the category;
    'previews' returns one file per value of the category.
    """
    try:
        criteria = parse_filter_path(filter_path, aliases)
        selection = SelectionResolver(session).select(criteria, page=page, per_page=per_page)
    except TagliatelleError as e:
        raise http_error(e)

    files = FileRepository(session).list_by_ids(selection.file_ids)
    if selection.is_preview:
        pagination = paginate(1, selection.total, max(selection.total, 1))
    else:
        pagination = paginate(page, selection.total, per_page)

    return TagFilterResponse(
        title=filter_title(criteria, selection.is_preview),
        breadcrumbs=build_breadcrumbs(criteria),
        files=file_responses(session, files),
        pagination=pagination,
        is_preview=selection.is_preview,
        preview_values=selection.preview_values,
    )
