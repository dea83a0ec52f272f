from __future__ import annotations

from typing import Mapping

from ..models import LexiconEntry
from .base import LexiconProvider

REFERENCE_PINYIN: Mapping[str, str] = {
    "我": "wǒ",
    "你": "nǐ",
    "他": "tā",
    "她": "tā",
    "们": "men",
    "好": "hǎo",
    "一": "yī",
    "二": "èr",
    "三": "sān",
    "中": "zhōng",
    "国": "guó",
    "人": "rén",
    "大": "dà",
    "小": "xiǎo",
    "上": "shàng",
    "下": "xià",
    "不": "bù",
    "是": "shì",
    "了": "le",
}

REFERENCE_TRANSLATIONS: Mapping[str, str] = {
    "我": "I/me",
    "你": "you",
    "他": "he",
    "她": "she",
    "们": "plural marker",
    "好": "good",
    "一": "one",
    "二": "two",
    "三": "three",
    "中": "middle",
    "国": "country",
    "人": "person",
    "大": "big",
    "小": "small",
    "上": "up/above",
    "下": "down/below",
    "不": "no/not",
    "是": "is/am/are",
    "了": "past tense marker",
}


class MockLexicon(LexiconProvider):
    """
    In-memory lexicon backed by lookup tables owned by the instance.
    Unknown characters resolve to fixed default strings, so the engine stays
    runnable without dictionary data.
    """

    def __init__(
        self,
        pinyin: Mapping[str, str] | None = None,
        translations: Mapping[str, str] | None = None,
        *,
        default_pinyin: str = "pinyin",
        default_translation: str = "translation",
    ) -> None:
        self._pinyin = dict(REFERENCE_PINYIN if pinyin is None else pinyin)
        self._translations = dict(
            REFERENCE_TRANSLATIONS if translations is None else translations
        )
        self._default_pinyin = default_pinyin
        self._default_translation = default_translation

    def lookup(self, unit: str) -> LexiconEntry:
        return LexiconEntry(
            pinyin=self._pinyin.get(unit, self._default_pinyin),
            translation=self._translations.get(unit, self._default_translation),
        )
