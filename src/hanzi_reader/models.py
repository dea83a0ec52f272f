from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


@dataclass(slots=True, frozen=True)
class LexiconEntry:
    """Pronunciation and gloss for a character or span."""

    pinyin: str
    translation: str


@dataclass(slots=True, frozen=True)
class IdiomSpan:
    """An accepted idiom occurrence, as a character offset into a paragraph."""

    idiom: str
    start: int
    length: int

    @property
    def end(self) -> int:
        return self.start + self.length

    def overlaps(self, other: IdiomSpan) -> bool:
        return self.start < other.end and other.start < self.end


class IdiomPosition(str, Enum):
    FIRST = "first"
    MIDDLE = "middle"
    LAST = "last"


@dataclass(slots=True, frozen=True)
class IdiomGroup:
    """Marks a token as one character of an accepted idiom span.

    ``group_id`` is the span's index within its paragraph and ``offset`` the
    character's index inside the idiom, so every group can be rebuilt from the
    token sequence alone.
    """

    group_id: int
    idiom: str
    position: IdiomPosition
    offset: int

    @property
    def is_complete(self) -> bool:
        return self.position is IdiomPosition.LAST


@dataclass(slots=True, frozen=True)
class Token:
    """A single annotated character."""

    text: str
    pinyin: str
    translation: str
    idiom_group: IdiomGroup | None = None

    @property
    def is_idiom(self) -> bool:
        return self.idiom_group is not None

    def to_dict(self) -> dict[str, Any]:
        group = self.idiom_group
        return {
            "text": self.text,
            "pinyin": self.pinyin,
            "translation": self.translation,
            "isChengyu": group is not None,
            "chengyuComplete": group.idiom if group and group.is_complete else None,
            "idiomGroup": (
                {
                    "id": group.group_id,
                    "idiom": group.idiom,
                    "position": group.position.value,
                    "offset": group.offset,
                }
                if group
                else None
            ),
        }


@dataclass(slots=True, frozen=True)
class IdiomAnnotation:
    """Whole-idiom gloss, attached when the lexicon can look up spans."""

    group_id: int
    idiom: str
    start: int
    length: int
    pinyin: str
    translation: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.group_id,
            "idiom": self.idiom,
            "start": self.start,
            "length": self.length,
            "pinyin": self.pinyin,
            "translation": self.translation,
        }


@dataclass(slots=True, frozen=True)
class Paragraph:
    """A trimmed paragraph and its tokens in original character order."""

    text: str
    tokens: tuple[Token, ...]
    idioms: tuple[IdiomAnnotation, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "segments": [token.to_dict() for token in self.tokens],
            "idioms": [idiom.to_dict() for idiom in self.idioms],
        }


@dataclass(slots=True, frozen=True)
class AnnotatedDocument:
    """Result of annotating one input document."""

    original: str
    paragraphs: tuple[Paragraph, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "original": self.original,
            "paragraphs": [paragraph.to_dict() for paragraph in self.paragraphs],
        }
