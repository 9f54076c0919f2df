"""Repository exports."""
from tagliatelle.repositories.file_repository import FileRepository
from tagliatelle.repositories.tag_repository import TagRepository

__all__ = [
    "FileRepository",
    "TagRepository",
]
