"""
hanzi_reader package exports convenience helpers for library consumers.
"""

from __future__ import annotations

from .catalog import DEFAULT_IDIOMS, IdiomCatalog
from .config import AnnotatorConfig, config_from_dict, config_from_yaml, load_config
from .engine import AnnotationEngine, annotate_text
from .lexicon import (
    AsyncLexiconProvider,
    LexiconProvider,
    build_lexicon_from_config,
    create_lexicon,
)
from .matching import find_idiom_spans
from .models import AnnotatedDocument, LexiconEntry, Paragraph, Token
from .segmentation import segment_paragraphs

__all__ = [
    "AnnotatedDocument",
    "AnnotationEngine",
    "AnnotatorConfig",
    "AsyncLexiconProvider",
    "DEFAULT_IDIOMS",
    "IdiomCatalog",
    "LexiconEntry",
    "LexiconProvider",
    "Paragraph",
    "Token",
    "annotate_text",
    "build_lexicon_from_config",
    "config_from_dict",
    "config_from_yaml",
    "create_lexicon",
    "find_idiom_spans",
    "load_config",
    "segment_paragraphs",
]

__version__ = "0.1.0"
