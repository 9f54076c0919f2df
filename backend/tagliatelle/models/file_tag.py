"""FileTag association model."""
from sqlalchemy import Column, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from tagliatelle.core.database import Base


class FileTag(Base):
    """Many-to-many association between files and tags."""

    __tablename__ = "file_tags"

    # Insertion order, used to find the most recently applied value
    id = Column(Integer, primary_key=True, autoincrement=True)
    file_id = Column(
        Integer,
        ForeignKey("files.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tag_id = Column(
        Integer,
        ForeignKey("tags.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Relationships
    file = relationship("File", back_populates="tag_associations")
    tag = relationship("Tag", back_populates="file_associations")

    __table_args__ = (UniqueConstraint("file_id", "tag_id", name="uq_file_tags_file_tag"),)
