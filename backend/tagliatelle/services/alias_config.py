"""Persistence of alias groups in the JSON configuration document."""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

from pydantic import TypeAdapter, ValidationError

from tagliatelle.core.exceptions import InvalidAliasConfig
from tagliatelle.services.alias_resolver import AliasTable, TagAliasGroup

logger = logging.getLogger(__name__)

ALIASES_KEY = "tag_aliases"

_groups_adapter = TypeAdapter(List[TagAliasGroup])


def validate_alias_groups(raw: Any) -> List[TagAliasGroup]:
    """Validate a list of {category, aliases} objects.

    Raises:
        InvalidAliasConfig: On wrong shape, empty category or empty alias list
    """
    try:
        groups = _groups_adapter.validate_python(raw or [])
    except ValidationError as e:
        raise InvalidAliasConfig(f"invalid aliases: {e}") from e

    cleaned = []
    for index, group in enumerate(groups):
        category = group.category.strip()
        aliases = tuple(alias.strip() for alias in group.aliases if alias.strip())
        if not category:
            raise InvalidAliasConfig(f"alias group {index} has an empty category")
        if not aliases:
            raise InvalidAliasConfig(f"alias group {index} ('{category}') has no aliases")
        cleaned.append(TagAliasGroup(category=category, aliases=aliases))
    return cleaned


class AliasConfigStore:
    """Holds the current alias snapshot and writes it back on save.

    Readers take ``snapshot`` once per request and use that object
    throughout; ``save`` replaces the whole list and swaps in a new
    snapshot only after the document is written.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._snapshot = AliasTable()

    @property
    def snapshot(self) -> AliasTable:
        return self._snapshot

    def _read_document(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            document = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError as e:
            raise InvalidAliasConfig(f"cannot parse {self.path}: {e}") from e
        if not isinstance(document, dict):
            raise InvalidAliasConfig(f"{self.path} must contain a JSON object")
        return document

    def load(self) -> AliasTable:
        """Read alias groups from disk and make them the current snapshot."""
        document = self._read_document()
        self._snapshot = AliasTable(validate_alias_groups(document.get(ALIASES_KEY)))
        logger.info(f"Loaded {len(self._snapshot)} alias groups from {self.path}")
        return self._snapshot

    def save(self, groups: Iterable[Any]) -> AliasTable:
        """Replace all alias groups.

        Other keys of the configuration document are preserved.

        Args:
            groups: TagAliasGroup instances or plain dicts

        Returns:
            The new snapshot
        """
        raw = [g.model_dump() if isinstance(g, TagAliasGroup) else g for g in groups]
        validated = validate_alias_groups(raw)

        document = self._read_document()
        document[ALIASES_KEY] = [
            {"category": g.category, "aliases": list(g.aliases)} for g in validated
        ]
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(document, indent=2), encoding="utf-8")

        self._snapshot = AliasTable(validated)
        logger.info(f"Saved {len(validated)} alias groups to {self.path}")
        return self._snapshot
