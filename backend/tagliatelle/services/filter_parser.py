"""Parsing of user-supplied filter expressions.

Three independent grammars are handled here:

* path-segment tag filters, ``color/red/and/tag/size/large``, which
  become ``FilterCriterion`` objects (alias-expanded where applicable);
* bulk tag queries, ``color:red,size:large`` (AND) or
  ``color:red OR color:blue`` (OR), which become a ``TagQuery``;
* ID range strings, ``3,5-7``, which become a list of file IDs.

Special values are decided once here, so nothing further down the
pipeline compares against the reserved strings again.
"""
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple

from tagliatelle.core.exceptions import (
    EmptyQuery,
    InvalidRange,
    InvalidTagSyntax,
    MalformedFilterPath,
)
from tagliatelle.services.alias_resolver import PREVIEW_MARKER, UNASSIGNED, AliasTable

FILTER_PREFIX = "/tag/"
FILTER_SEPARATOR = "/and/tag/"

_OR_KEYWORD = " OR "
_OR_SPLIT = re.compile(r" OR ", re.IGNORECASE)
_DIGITS = re.compile(r"[0-9]+")

# Upper bound on the IDs one range string may expand to
MAX_RANGE_IDS = 10000


class FilterKind(str, Enum):
    """Kind of a parsed filter criterion."""

    VALUE_MATCH = "value_match"
    UNASSIGNED = "unassigned"
    PREVIEW = "preview"


@dataclass(frozen=True)
class FilterCriterion:
    """One normalized unit of a selection query."""

    kind: FilterKind
    category: str
    value: str
    values: Tuple[str, ...] = ()  # alias-expanded, VALUE_MATCH only

    @classmethod
    def value_match(cls, category: str, value: str, values: Tuple[str, ...] = ()) -> "FilterCriterion":
        return cls(FilterKind.VALUE_MATCH, category, value, values or (value,))

    @classmethod
    def unassigned(cls, category: str) -> "FilterCriterion":
        return cls(FilterKind.UNASSIGNED, category, UNASSIGNED)

    @classmethod
    def preview(cls, category: str) -> "FilterCriterion":
        return cls(FilterKind.PREVIEW, category, PREVIEW_MARKER)

    @property
    def is_preview(self) -> bool:
        return self.kind is FilterKind.PREVIEW


class QueryMode(str, Enum):
    """How the pairs of a bulk tag query are combined."""

    AND = "and"
    OR = "or"


@dataclass(frozen=True)
class TagPair:
    """A (category, value) term of a bulk tag query, without alias expansion."""

    category: str
    value: str


@dataclass(frozen=True)
class TagQuery:
    """Parsed bulk tag query."""

    mode: QueryMode
    pairs: Tuple[TagPair, ...] = field(default_factory=tuple)


def split_filter_path(path: str) -> List[Tuple[str, str]]:
    """Split a filter path into (category, value) segments.

    Accepts the path with or without its leading ``/tag/``. Only a
    prefix that starts with the slash is stripped, so a first category
    literally named "tag" survives.

    Raises:
        MalformedFilterPath: If a segment is not exactly 'category/value'
    """
    if path.startswith(FILTER_PREFIX):
        path = path[len(FILTER_PREFIX):]

    segments = []
    for segment in path.split(FILTER_SEPARATOR):
        parts = segment.split("/")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise MalformedFilterPath(segment)
        segments.append((parts[0], parts[1]))
    return segments


def parse_filter_path(path: str, aliases: AliasTable) -> List[FilterCriterion]:
    """Parse a path-segment tag filter into criteria.

    Args:
        path: e.g. 'color/red/and/tag/size/unassigned'
        aliases: Alias snapshot for value expansion

    Returns:
        Criteria in path order
    """
    criteria = []
    for category, value in split_filter_path(path):
        if value == UNASSIGNED:
            criteria.append(FilterCriterion.unassigned(category))
        elif value == PREVIEW_MARKER:
            criteria.append(FilterCriterion.preview(category))
        else:
            criteria.append(
                FilterCriterion.value_match(category, value, aliases.expand(category, value))
            )
    return criteria


def build_filter_path(criteria: List[FilterCriterion]) -> str:
    """Inverse of parse_filter_path, using the requested values."""
    return FILTER_PREFIX + FILTER_SEPARATOR.join(f"{c.category}/{c.value}" for c in criteria)


def _parse_pairs(chunks: List[str]) -> Tuple[TagPair, ...]:
    pairs = []
    for chunk in chunks:
        chunk = chunk.strip()
        if not chunk:
            continue

        parts = chunk.split(":", 1)
        if len(parts) != 2:
            raise InvalidTagSyntax(chunk)

        pairs.append(TagPair(category=parts[0].strip(), value=parts[1].strip()))
    return tuple(pairs)


def parse_tag_query(query: str) -> TagQuery:
    """Parse a bulk tag query.

    Presence of the OR keyword anywhere (any case) switches the whole
    query to OR semantics; otherwise pairs are comma-separated and
    ANDed. Categories and values keep their original case.

    Raises:
        InvalidTagSyntax: If a pair lacks the ':' separator
        EmptyQuery: If no pairs remain after trimming
    """
    query = query.strip()
    if not query:
        raise EmptyQuery(query)

    if _OR_KEYWORD in query.upper():
        mode = QueryMode.OR
        chunks = _OR_SPLIT.split(query)
    else:
        mode = QueryMode.AND
        chunks = query.split(",")

    pairs = _parse_pairs(chunks)
    if not pairs:
        raise EmptyQuery(query)
    return TagQuery(mode=mode, pairs=pairs)


def _parse_id(text: str, token: str, what: str) -> int:
    text = text.strip()
    if not _DIGITS.fullmatch(text):
        raise InvalidRange(token, f"{what} '{text}' is not a non-negative integer")
    return int(text)


def parse_file_id_range(range_str: str, limit: int = MAX_RANGE_IDS) -> List[int]:
    """Parse an ID range string such as '3,5-7,5'.

    Args:
        range_str: Comma-separated IDs and 'start-end' ranges
        limit: Most distinct IDs one string may name

    Returns:
        Deduplicated IDs in order of first appearance

    Raises:
        InvalidRange: On a non-numeric token, a malformed or an inverted
            range, or when more than `limit` IDs are named
    """
    ids: List[int] = []
    seen = set()

    for token in range_str.split(","):
        token = token.strip()
        if not token:
            continue

        if "-" in token:
            bounds = token.split("-")
            if len(bounds) != 2:
                raise InvalidRange(token, "expected 'start-end'")
            start = _parse_id(bounds[0], token, "start ID")
            end = _parse_id(bounds[1], token, "end ID")
            if start > end:
                raise InvalidRange(token, "start must be <= end")
            if end - start + 1 > limit:
                raise InvalidRange(token, f"range covers more than {limit} IDs")
            candidates = range(start, end + 1)
        else:
            candidates = [_parse_id(token, token, "file ID")]

        for file_id in candidates:
            if file_id not in seen:
                seen.add(file_id)
                ids.append(file_id)
        if len(ids) > limit:
            raise InvalidRange(token, f"selection covers more than {limit} IDs")

    return ids
