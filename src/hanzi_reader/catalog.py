from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Iterator

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from .config import AnnotatorConfig

logger = logging.getLogger(__name__)

DEFAULT_IDIOMS: tuple[str, ...] = (
    "一心一意",
    "不可思议",
    "入乡随俗",
    "自言自语",
    "四面八方",
    "千变万化",
    "无忧无虑",
    "不知不觉",
)


class IdiomCatalog:
    """Read-only, ordered collection of idiom strings.

    Declaration order is kept because the matcher uses it as the final
    tie-break. Blank entries are dropped and duplicates keep their first
    position.
    """

    __slots__ = ("_entries",)

    def __init__(self, idioms: Iterable[str] = DEFAULT_IDIOMS) -> None:
        cleaned = (idiom.strip() for idiom in idioms)
        self._entries: tuple[str, ...] = tuple(
            dict.fromkeys(idiom for idiom in cleaned if idiom)
        )

    @classmethod
    def from_file(cls, path: str | Path) -> IdiomCatalog:
        """Load one idiom per line; blank lines and ``#`` comments are skipped."""
        path = Path(path)
        idioms = []
        with path.open("r", encoding="utf-8") as handle:
            for line in handle:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                idioms.append(line)
        catalog = cls(idioms)
        logger.debug("Loaded %s idioms from %s", len(catalog), path)
        return catalog

    @property
    def entries(self) -> tuple[str, ...]:
        return self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, idiom: object) -> bool:
        return idiom in self._entries

    def __repr__(self) -> str:
        return f"IdiomCatalog({len(self._entries)} idioms)"


def build_catalog_from_config(config: "AnnotatorConfig") -> IdiomCatalog:
    """Use the catalog file when configured, otherwise the inline idiom list."""
    if config.idiom_catalog_path:
        return IdiomCatalog.from_file(config.idiom_catalog_path)
    return IdiomCatalog(config.idioms)
