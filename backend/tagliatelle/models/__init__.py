"""Database models."""
from tagliatelle.models.file import File
from tagliatelle.models.category import Category
from tagliatelle.models.tag import Tag
from tagliatelle.models.file_tag import FileTag

__all__ = [
    "File",
    "Category",
    "Tag",
    "FileTag",
]
