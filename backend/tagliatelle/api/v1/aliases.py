"""Tag alias configuration endpoints."""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from tagliatelle.api.deps import get_alias_store, http_error
from tagliatelle.core.exceptions import TagliatelleError
from tagliatelle.services.alias_config import AliasConfigStore
from tagliatelle.services.alias_resolver import TagAliasGroup

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/aliases")


@router.get("", response_model=List[TagAliasGroup])
def get_aliases(store: AliasConfigStore = Depends(get_alias_store)) -> List[TagAliasGroup]:
    """Currently active alias groups."""
    return list(store.snapshot.groups)


@router.put("", response_model=List[TagAliasGroup])
def save_aliases(
    groups: List[TagAliasGroup],
    store: AliasConfigStore = Depends(get_alias_store),
) -> List[TagAliasGroup]:
    """Replace all alias groups."""
    try:
        snapshot = store.save(groups)
    except TagliatelleError as e:
        raise http_error(e)
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save configuration: {e}",
        )
    return list(snapshot.groups)
