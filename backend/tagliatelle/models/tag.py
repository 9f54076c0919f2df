"""Tag model."""
from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from tagliatelle.core.database import Base


class Tag(Base):
    """A (category, value) pair attachable to files.

    Tags are created lazily and are not pruned when their last
    membership goes away.
    """

    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    category_id = Column(
        Integer,
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    value = Column(String(1024), nullable=False)

    # Relationships
    category = relationship("Category", back_populates="tags")
    file_associations = relationship(
        "FileTag",
        back_populates="tag",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (UniqueConstraint("category_id", "value", name="uq_tags_category_value"),)
