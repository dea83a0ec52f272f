import pytest

from hanzi_reader.assembly import assemble, build_idiom_annotations, build_tokens
from hanzi_reader.errors import LookupFailedError
from hanzi_reader.lexicon import MockLexicon
from hanzi_reader.matching import find_idiom_spans
from hanzi_reader.models import IdiomPosition, IdiomSpan, LexiconEntry
from tests.utils import EchoLexicon

PLACEHOLDER = LexiconEntry(pinyin="?", translation="?")


def test_repeated_characters_keep_original_order():
    tokens = assemble("人不是人", [], MockLexicon())

    assert [token.text for token in tokens] == ["人", "不", "是", "人"]
    assert [token.pinyin for token in tokens] == ["rén", "bù", "shì", "rén"]
    assert not any(token.is_idiom for token in tokens)


def test_idiom_characters_get_one_token_each_with_positions():
    text = "我一心一意"
    spans = find_idiom_spans(text, ["一心一意"])
    tokens = assemble(text, spans, EchoLexicon())

    assert [token.text for token in tokens] == list(text)
    assert tokens[0].idiom_group is None
    groups = [token.idiom_group for token in tokens[1:]]
    assert all(group is not None and group.group_id == 0 for group in groups)
    assert [group.position for group in groups] == [
        IdiomPosition.FIRST,
        IdiomPosition.MIDDLE,
        IdiomPosition.MIDDLE,
        IdiomPosition.LAST,
    ]
    assert [group.offset for group in groups] == [0, 1, 2, 3]
    assert groups[-1].is_complete
    assert tokens[2].pinyin == "py:心"


def test_repeat_inside_and_outside_idiom_are_distinct_tokens():
    """The 一 before the idiom stays plain even though 一 also occurs inside it."""
    text = "一一心一意一"
    spans = find_idiom_spans(text, ["一心一意"])
    tokens = assemble(text, spans, EchoLexicon())

    assert "".join(token.text for token in tokens) == text
    assert [token.is_idiom for token in tokens] == [False, True, True, True, True, False]


def test_failed_lookup_uses_placeholder_for_that_token_only():
    text = "你是人"
    entries = [
        LexiconEntry("nǐ", "you"),
        LookupFailedError("是"),
        LexiconEntry("rén", "person"),
    ]
    tokens = build_tokens(text, [], entries, PLACEHOLDER)

    assert (tokens[0].pinyin, tokens[0].translation) == ("nǐ", "you")
    assert (tokens[1].pinyin, tokens[1].translation) == ("?", "?")
    assert (tokens[2].pinyin, tokens[2].translation) == ("rén", "person")


def test_build_tokens_rejects_inconsistent_input():
    entries = [LexiconEntry("a", "a")] * 4
    with pytest.raises(ValueError):
        build_tokens("一心一意", [], entries[:3], PLACEHOLDER)
    with pytest.raises(ValueError):
        build_tokens(
            "一心一意",
            [IdiomSpan("一心一意", 0, 4), IdiomSpan("一意", 2, 2)],
            entries,
            PLACEHOLDER,
        )
    with pytest.raises(ValueError):
        build_tokens("一心一意", [IdiomSpan("不可思议", 0, 4)], entries, PLACEHOLDER)


def test_idiom_annotations_skip_failed_spans():
    spans = [IdiomSpan("一心一意", 0, 4), IdiomSpan("不可思议", 4, 4)]
    annotations = build_idiom_annotations(
        spans,
        {
            "一心一意": LexiconEntry("yī xīn yī yì", "wholeheartedly"),
            "不可思议": LookupFailedError("不可思议"),
        },
    )

    assert len(annotations) == 1
    assert annotations[0].group_id == 0
    assert annotations[0].translation == "wholeheartedly"
