"""Icon catalog: the name -> search tags index behind the picker."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping, Optional, Union

from lucide_picker.log import get_logger

logger = get_logger(__name__)

CatalogSource = Union[Mapping[str, Iterable[str]], str, Path]


@dataclass(frozen=True)
class IconEntry:
    """A single selectable icon."""

    name: str
    tags: tuple[str, ...] = ()

    def searchable_text(self) -> str:
        """Name plus tags, lower-cased, as matched by the search box."""
        return f"{self.name} {' '.join(self.tags)}".lower()


def _normalize(raw: Mapping) -> dict[str, tuple[str, ...]]:
    icons = {}
    for name, tags in raw.items():
        if isinstance(tags, (list, tuple)):
            icons[str(name)] = tuple(str(t) for t in tags)
        else:
            icons[str(name)] = ()
    return icons


def load(source: CatalogSource) -> dict[str, tuple[str, ...]]:
    """Load the icon catalog.

    Args:
        source: A mapping of name -> tags, a path to a JSON file, or JSON text

    Returns:
        Ordered mapping of icon name -> tuple of tags. Empty if the source
        is missing or malformed.
    """
    if isinstance(source, Mapping):
        return _normalize(source)

    if isinstance(source, Path) or not str(source).lstrip().startswith("{"):
        path = Path(source)
        if not path.exists():
            logger.warning("catalog_missing", path=str(path))
            return {}
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning("catalog_unreadable", path=str(path), error=str(e))
            return {}
    else:
        text = str(source)

    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning("catalog_invalid_json", error=str(e))
        return {}

    if not isinstance(raw, dict):
        logger.warning("catalog_not_an_object", kind=type(raw).__name__)
        return {}
    return _normalize(raw)


def filter_names(
    all_names: list[str],
    query: str,
    icons: Mapping[str, Iterable[str]],
) -> list[str]:
    """Filter icon names by a case-insensitive substring query.

    A name matches when "<name> <tag> <tag> ..." contains the trimmed,
    lower-cased query. Catalog order is preserved; there is no ranking.
    An empty query returns every name.
    """
    normalized = query.strip().lower()
    if not normalized:
        return list(all_names)

    matches = []
    for name in all_names:
        tags = icons.get(name) or ()
        if normalized in f"{name} {' '.join(tags)}".lower():
            matches.append(name)
    return matches


class IconCatalog:
    """In-memory icon index with stable substring filtering."""

    def __init__(self, icons: Mapping[str, Iterable[str]]):
        self._icons = _normalize(icons)
        self.names: list[str] = list(self._icons)

    @classmethod
    def from_source(cls, source: CatalogSource) -> "IconCatalog":
        return cls(load(source))

    @classmethod
    def default(cls) -> "IconCatalog":
        """Load the catalog bundled with the package."""
        from lucide_picker.resources import get_default_catalog_json
        return cls(load(get_default_catalog_json()))

    def __len__(self) -> int:
        return len(self.names)

    def __contains__(self, name: object) -> bool:
        return name in self._icons

    def tags(self, name: str) -> tuple[str, ...]:
        return self._icons.get(name, ())

    def get(self, name: str) -> Optional[IconEntry]:
        if name not in self._icons:
            return None
        return IconEntry(name=name, tags=self._icons[name])

    def entries(self) -> list[IconEntry]:
        return [IconEntry(name=n, tags=t) for n, t in self._icons.items()]

    def filter(self, all_names: list[str], query: str) -> list[str]:
        return filter_names(all_names, query, self._icons)

    def search(self, query: str) -> list[str]:
        """Filter the whole catalog."""
        return self.filter(self.names, query)

    def to_dict(self) -> dict[str, list[str]]:
        return {name: list(tags) for name, tags in self._icons.items()}
