"""Category model."""
from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from tagliatelle.core.database import Base


class Category(Base):
    """Named grouping of tag values, e.g. 'color'."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), unique=True, nullable=False)  # case-sensitive exact match

    tags = relationship("Tag", back_populates="category", cascade="all, delete-orphan")
