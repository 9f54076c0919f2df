"""Alias expansion of tag values."""
import logging
from typing import Dict, Iterable, List, Tuple

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

UNASSIGNED = "unassigned"
PREVIEW_MARKER = "previews"
RESERVED_VALUES = frozenset({UNASSIGNED, PREVIEW_MARKER})


class TagAliasGroup(BaseModel):
    """Values of one category treated as interchangeable when filtering."""

    model_config = ConfigDict(frozen=True)

    category: str
    aliases: Tuple[str, ...] = Field(default_factory=tuple)


class AliasTable:
    """Immutable snapshot of the configured alias groups.

    A snapshot is never updated in place; saving aliases builds a new
    table and swaps it in.
    """

    def __init__(self, groups: Iterable[TagAliasGroup] = ()):
        self._groups: Tuple[TagAliasGroup, ...] = tuple(groups)
        self._warn_overlaps()

    @property
    def groups(self) -> Tuple[TagAliasGroup, ...]:
        return self._groups

    def __len__(self) -> int:
        return len(self._groups)

    def _warn_overlaps(self) -> None:
        seen: Dict[Tuple[str, str], int] = {}
        for index, group in enumerate(self._groups):
            for alias in {a.casefold() for a in group.aliases}:
                key = (group.category, alias)
                if key in seen and seen[key] != index:
                    logger.warning(
                        f"Alias '{alias}' in category '{group.category}' appears in more than "
                        f"one group; only group {seen[key]} is used"
                    )
                else:
                    seen.setdefault(key, index)

    def expand(self, category: str, value: str) -> Tuple[str, ...]:
        """Expand a value into its alias equivalence class.

        Only the first group of the category containing the value
        (case-insensitively) is used. The seed value is always first.

        Args:
            category: Category name, matched exactly
            value: Seed value

        Returns:
            Tuple of values, seed first
        """
        if value in RESERVED_VALUES:
            return (value,)

        folded = value.casefold()
        for group in self._groups:
            if group.category != category:
                continue
            if not any(alias.casefold() == folded for alias in group.aliases):
                continue

            values: List[str] = [value]
            for alias in group.aliases:
                if alias.casefold() != folded and alias not in values:
                    values.append(alias)
            return tuple(values)

        return (value,)

