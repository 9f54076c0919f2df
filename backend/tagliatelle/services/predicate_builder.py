"""Compilation of filter criteria into predicates over files.

Criteria are first lowered to a small intermediate representation of
typed clauses, which a separate stage compiles to SQLAlchemy
expressions. User data only ever reaches the database as bound
parameters; the shape of the query depends on the number and kind of
clauses, never on their contents.
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from sqlalchemy import and_, or_, select, true
from sqlalchemy.sql.elements import ColumnElement

from tagliatelle.models.category import Category
from tagliatelle.models.file import File
from tagliatelle.models.file_tag import FileTag
from tagliatelle.models.tag import Tag
from tagliatelle.services.filter_parser import FilterCriterion, FilterKind, TagPair


@dataclass(frozen=True)
class ValueInSet:
    """File has a tag in `category` whose value is one of `values`."""

    category: str
    values: Tuple[str, ...]


@dataclass(frozen=True)
class NotExists:
    """File has no tag at all in `category`."""

    category: str


@dataclass(frozen=True)
class Exists:
    """File has at least one tag in `category`."""

    category: str


Clause = Union[ValueInSet, NotExists, Exists]


def build_clauses(
    criteria: Iterable[FilterCriterion],
    preview_value: Optional[str] = None,
) -> List[Clause]:
    """Lower criteria to clauses.

    Preview criteria are left out unless `preview_value` is given, in
    which case the first preview criterion is pinned to that value and
    any further ones only require some tag in their category.
    """
    clauses: List[Clause] = []
    preview_pinned = False

    for criterion in criteria:
        if criterion.kind is FilterKind.UNASSIGNED:
            clauses.append(NotExists(criterion.category))
        elif criterion.kind is FilterKind.VALUE_MATCH:
            clauses.append(ValueInSet(criterion.category, tuple(criterion.values)))
        elif preview_value is not None:
            if not preview_pinned:
                clauses.append(ValueInSet(criterion.category, (preview_value,)))
                preview_pinned = True
            else:
                clauses.append(Exists(criterion.category))

    return clauses


def clauses_for_pairs(pairs: Sequence[TagPair]) -> List[Clause]:
    """One single-value clause per tag query pair, no alias expansion."""
    return [ValueInSet(pair.category, (pair.value,)) for pair in pairs]


def _membership_in_category(category: str):
    return (
        select(FileTag.id)
        .join(Tag, FileTag.tag_id == Tag.id)
        .join(Category, Tag.category_id == Category.id)
        .where(FileTag.file_id == File.id, Category.name == category)
    )


def compile_clause(clause: Clause) -> ColumnElement:
    """Compile one clause to a correlated EXISTS / NOT EXISTS test on File."""
    if isinstance(clause, ValueInSet):
        subquery = _membership_in_category(clause.category)
        if len(clause.values) == 1:
            subquery = subquery.where(Tag.value == clause.values[0])
        else:
            subquery = subquery.where(Tag.value.in_(clause.values))
        return subquery.exists()

    if isinstance(clause, NotExists):
        return ~_membership_in_category(clause.category).exists()

    if isinstance(clause, Exists):
        return _membership_in_category(clause.category).exists()

    raise TypeError(f"Unsupported clause: {clause!r}")


def compile_all(clauses: Sequence[Clause]) -> ColumnElement:
    """AND of all clauses; an empty list matches every file."""
    if not clauses:
        return true()
    return and_(*(compile_clause(clause) for clause in clauses))


def compile_any(clauses: Sequence[Clause]) -> ColumnElement:
    """OR of all clauses."""
    if not clauses:
        raise ValueError("compile_any needs at least one clause")
    return or_(*(compile_clause(clause) for clause in clauses))
