"""Shared API dependencies and error translation."""
import logging
from functools import lru_cache

from fastapi import Depends, HTTPException, status

from tagliatelle.core.config import settings
from tagliatelle.core.exceptions import (
    FileConflict,
    FileNotFound,
    StoreFailure,
    TagliatelleError,
    UnknownCategory,
    UnknownTag,
)
from tagliatelle.services.alias_config import AliasConfigStore
from tagliatelle.services.alias_resolver import AliasTable

logger = logging.getLogger(__name__)


@lru_cache
def get_alias_store() -> AliasConfigStore:
    """Process-wide alias configuration store, loaded on first use."""
    store = AliasConfigStore(settings.CONFIG_PATH)
    store.load()
    return store


def get_alias_table(store: AliasConfigStore = Depends(get_alias_store)) -> AliasTable:
    """Alias snapshot for the duration of one request."""
    return store.snapshot


def get_per_page() -> int:
    return settings.ITEMS_PER_PAGE


def get_upload_dir() -> str:
    return settings.UPLOAD_DIR


def http_error(error: TagliatelleError) -> HTTPException:
    """Map an engine error to an HTTP error response."""
    if isinstance(error, FileConflict):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    if isinstance(error, (FileNotFound, UnknownCategory, UnknownTag)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, StoreFailure):
        logger.error(f"Store failure: {error}")
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
