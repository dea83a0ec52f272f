import asyncio
import time

import pytest

from hanzi_reader.catalog import IdiomCatalog
from hanzi_reader.config import AnnotatorConfig
from hanzi_reader.engine import AnnotationEngine, annotate_text, reconstruct_idioms
from hanzi_reader.errors import AnnotationError, LexiconUnavailableError
from hanzi_reader.lexicon import AsyncLexiconProvider, CallableLexicon, MockLexicon
from hanzi_reader.models import LexiconEntry
from tests.utils import EchoLexicon, SlowAsyncLexicon, joined


def test_annotate_reconstructs_every_paragraph():
    raw = "我们一心一意\n\n  他是人，人不是他  \n不可思议不知不觉"
    document = AnnotationEngine(MockLexicon()).annotate(raw)

    assert document.original == raw
    assert [paragraph.text for paragraph in document.paragraphs] == [
        "我们一心一意",
        "他是人，人不是他",
        "不可思议不知不觉",
    ]
    for paragraph in document.paragraphs:
        assert joined(paragraph) == paragraph.text


def test_adjacent_idioms_produce_two_groups_and_no_plain_tokens():
    document = AnnotationEngine(MockLexicon()).annotate("一心一意不可思议")
    paragraph = document.paragraphs[0]

    assert all(token.is_idiom for token in paragraph.tokens)
    assert reconstruct_idioms(paragraph) == {0: "一心一意", 1: "不可思议"}


def test_tie_break_accepts_single_span():
    engine = AnnotationEngine(EchoLexicon(), catalog=IdiomCatalog(["一心一意", "心一意不"]))
    paragraph = engine.annotate("一心一意不").paragraphs[0]

    assert reconstruct_idioms(paragraph) == {0: "一心一意"}
    assert paragraph.tokens[-1].text == "不"
    assert not paragraph.tokens[-1].is_idiom


def test_annotate_is_idempotent():
    engine = AnnotationEngine(MockLexicon())
    raw = "人不是人\n一心一意"
    assert engine.annotate(raw) == engine.annotate(raw)


def test_blank_input_yields_no_paragraphs():
    document = AnnotationEngine(MockLexicon()).annotate("\n \n\t\n")
    assert document.paragraphs == ()


def test_provider_failure_is_isolated_to_one_token():
    lexicon = EchoLexicon(failing={"是"})
    paragraph = AnnotationEngine(lexicon).annotate("他是人").paragraphs[0]

    assert [token.pinyin for token in paragraph.tokens] == ["py:他", "?", "py:人"]
    assert paragraph.tokens[1].translation == "?"


def test_custom_placeholder_from_config():
    config = AnnotatorConfig(placeholder_pinyin="error", placeholder_translation="")
    lexicon = EchoLexicon(failing={"好"})
    paragraph = AnnotationEngine(lexicon, config=config).annotate("你好").paragraphs[0]

    assert paragraph.tokens[1].pinyin == "error"
    assert paragraph.tokens[1].translation == ""


def test_total_lookup_failure_raises():
    def always_fail(unit: str) -> LexiconEntry:
        raise RuntimeError("dictionary offline")

    with pytest.raises(AnnotationError):
        annotate_text("你好\n我们", CallableLexicon(always_fail))


def test_total_lookup_failure_can_degrade_instead():
    def always_fail(unit: str) -> LexiconEntry:
        raise RuntimeError("dictionary offline")

    config = AnnotatorConfig(fail_on_total_lookup_failure=False)
    document = annotate_text("你好", CallableLexicon(always_fail), config=config)
    assert [token.pinyin for token in document.paragraphs[0].tokens] == ["?", "?"]


def test_unavailable_lexicon_propagates():
    def unavailable(unit: str) -> LexiconEntry:
        raise LexiconUnavailableError("no credentials")

    with pytest.raises(LexiconUnavailableError):
        annotate_text("你好", CallableLexicon(unavailable))


def test_each_paragraph_uses_one_bulk_lookup_of_distinct_units():
    lexicon = EchoLexicon()
    AnnotationEngine(lexicon).annotate("人不是人")
    assert lexicon.calls == ["人", "不", "是"]


def test_async_lexicon_keeps_document_order():
    """The first paragraph finishes last but is still listed first."""
    lexicon = SlowAsyncLexicon(delays={"慢": 0.05})
    document = AnnotationEngine(lexicon).annotate("慢慢来\n快\n好")

    assert [paragraph.text for paragraph in document.paragraphs] == ["慢慢来", "快", "好"]
    assert document.paragraphs[0].tokens[0].pinyin == "py:慢"


def test_span_lookups_attach_idiom_glosses():
    lexicon = EchoLexicon(supports_spans=True)
    paragraph = AnnotationEngine(lexicon).annotate("我无忧无虑").paragraphs[0]

    assert len(paragraph.idioms) == 1
    idiom = paragraph.idioms[0]
    assert (idiom.idiom, idiom.start, idiom.length) == ("无忧无虑", 1, 4)
    assert idiom.translation == "tr:无忧无虑"
    assert joined(paragraph) == "我无忧无虑"


def test_lookup_timeout_degrades_to_placeholders():
    config = AnnotatorConfig(lookup_timeout=0.01, fail_on_total_lookup_failure=False)
    lexicon = SlowAsyncLexicon(delays={"慢": 1.0})
    document = AnnotationEngine(lexicon, config=config).annotate("慢\n快")

    assert document.paragraphs[0].tokens[0].pinyin == "?"
    assert document.paragraphs[1].tokens[0].pinyin == "py:快"


def test_lookup_timeout_bounds_blocking_annotate_with_sync_lexicon():
    """A timed-out synchronous lookup does not keep annotate() waiting for its thread."""

    def slow(unit: str) -> LexiconEntry:
        if unit == "慢":
            time.sleep(1.5)
        return LexiconEntry(pinyin=f"py:{unit}", translation=f"tr:{unit}")

    config = AnnotatorConfig(lookup_timeout=0.05, fail_on_total_lookup_failure=False)
    engine = AnnotationEngine(CallableLexicon(slow), config=config)

    started = time.monotonic()
    document = engine.annotate("慢\n快")
    elapsed = time.monotonic() - started

    assert elapsed < 1.0
    assert document.paragraphs[0].tokens[0].pinyin == "?"
    assert document.paragraphs[1].tokens[0].pinyin == "py:快"


def test_annotate_async_can_be_cancelled():
    async def scenario() -> None:
        started = asyncio.Event()

        class BlockingLexicon(AsyncLexiconProvider):
            async def lookup(self, unit: str) -> LexiconEntry:
                started.set()
                await asyncio.Event().wait()
                raise AssertionError("unreachable")

        engine = AnnotationEngine(BlockingLexicon())
        task = asyncio.create_task(engine.annotate_async("你好\n我们"))
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())


def test_empty_catalog_disables_idiom_detection():
    engine = AnnotationEngine(MockLexicon(), catalog=IdiomCatalog([]))
    paragraph = engine.annotate("一心一意").paragraphs[0]
    assert not any(token.is_idiom for token in paragraph.tokens)


def test_wire_format_marks_completed_idiom_on_last_token():
    payload = AnnotationEngine(MockLexicon()).annotate("好一心一意").to_dict()
    segments = payload["paragraphs"][0]["segments"]

    assert [segment["isChengyu"] for segment in segments] == [False, True, True, True, True]
    assert [segment["chengyuComplete"] for segment in segments] == [
        None,
        None,
        None,
        None,
        "一心一意",
    ]
    assert segments[1]["idiomGroup"] == {
        "id": 0,
        "idiom": "一心一意",
        "position": "first",
        "offset": 0,
    }
    assert segments[0]["pinyin"] == "hǎo"
