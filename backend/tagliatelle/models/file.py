"""File model."""
from sqlalchemy import Column, Integer, String, Text
from sqlalchemy.orm import relationship

from tagliatelle.core.database import Base


class File(Base):
    """A stored media file."""

    __tablename__ = "files"

    id = Column(Integer, primary_key=True, autoincrement=True)
    filename = Column(String(1024), nullable=False, index=True)
    path = Column(String(4096), nullable=False)
    description = Column(Text, nullable=False, default="", server_default="")

    # Relationships
    tag_associations = relationship(
        "FileTag",
        back_populates="file",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
