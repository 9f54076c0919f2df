"""API v1 router."""
from fastapi import APIRouter

from tagliatelle.api.v1 import aliases, bulk, files, tags

api_router: APIRouter = APIRouter()
api_router.include_router(files.router, tags=["files"])
api_router.include_router(tags.router, tags=["tags"])
api_router.include_router(bulk.router, tags=["bulk"])
api_router.include_router(aliases.router, tags=["aliases"])
