from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import typer
import yaml

from .catalog import IdiomCatalog, build_catalog_from_config
from .config import AnnotatorConfig, load_config
from .engine import AnnotationEngine
from .errors import AnnotatorError
from .lexicon import build_lexicon_from_config

app = typer.Typer(help="Hanzi Reader CLI.", no_args_is_help=True)

# File types the CLI knows how to read as plain text.
SUPPORTED_INPUT_EXTENSIONS = {".txt", ".md"}


@app.command()
def annotate(
    input_path: Path | None = typer.Option(
        None,
        "--input-path",
        "-i",
        exists=True,
        readable=True,
        dir_okay=False,
        help="UTF-8 text file to annotate (reads stdin when omitted).",
    ),
    text: str | None = typer.Option(
        None, "--text", "-t", help="Annotate this text instead of a file."
    ),
    config: Path | None = typer.Option(None, "--config", "-c"),
    lexicon_name: str | None = typer.Option(
        None,
        "--lexicon",
        "-l",
        help="Lexicon to use ('mock', 'dictionary' or 'openai').",
    ),
    catalog_path: Path | None = typer.Option(
        None, "--catalog", help="Idiom catalog file, one idiom per line."
    ),
    cedict_path: Path | None = typer.Option(
        None, "--cedict-path", help="CC-CEDICT file for the dictionary lexicon."
    ),
    openai_model: str | None = typer.Option(
        None, "--openai-model", help="OpenAI model identifier (e.g., gpt-4.1-mini)."
    ),
    max_concurrent_paragraphs: int | None = typer.Option(
        None,
        "--max-concurrent-paragraphs",
        help="Paragraphs annotated at the same time.",
    ),
    log_level: str = typer.Option("WARNING", "--log-level", help="Python log level."),
) -> None:
    """Annotate Chinese text and emit the paragraphs/segments JSON."""
    logging.basicConfig(
        level=_parse_log_level(log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )
    cfg = load_config(config)
    _apply_overrides(
        cfg,
        lexicon_name,
        catalog_path,
        cedict_path,
        openai_model,
        max_concurrent_paragraphs,
    )
    raw = _read_input(input_path, text)

    try:
        lexicon = build_lexicon_from_config(cfg)
        catalog: IdiomCatalog = build_catalog_from_config(cfg)
        document = AnnotationEngine(lexicon, catalog=catalog, config=cfg).annotate(raw)
    except AnnotatorError as exc:
        typer.echo(f"Annotation failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(json.dumps(document.to_dict(), ensure_ascii=False, indent=2))


@app.command("print-config")
def print_config() -> None:
    """Print the default configuration as YAML."""
    cfg = AnnotatorConfig()
    typer.echo(yaml.safe_dump(cfg.to_dict(), sort_keys=False, allow_unicode=True))


def main() -> None:
    app()


def _apply_overrides(
    config: AnnotatorConfig,
    lexicon_name: str | None,
    catalog_path: Path | None,
    cedict_path: Path | None,
    openai_model: str | None,
    max_concurrent_paragraphs: int | None,
) -> None:
    """Apply CLI overrides to config fields when provided."""
    if lexicon_name:
        config.lexicon_name = lexicon_name
    if catalog_path:
        config.idiom_catalog_path = str(catalog_path)
    if cedict_path:
        config.cedict_path = str(cedict_path)
    if openai_model:
        config.openai.model = openai_model
    if max_concurrent_paragraphs is not None:
        config.max_concurrent_paragraphs = max_concurrent_paragraphs


def _parse_log_level(value: str) -> int:
    level = logging.getLevelName(value.strip().upper())
    if not isinstance(level, int):
        raise typer.BadParameter(
            f"Unknown log level '{value}' (use DEBUG, INFO, WARNING or ERROR).",
            param_hint="--log-level",
        )
    return level


def _read_input(input_path: Path | None, text: str | None) -> str:
    if input_path is not None and text is not None:
        raise typer.BadParameter("Use either --input-path or --text, not both.")
    if text is not None:
        return text
    if input_path is None:
        return sys.stdin.read()
    if input_path.suffix.lower() not in SUPPORTED_INPUT_EXTENSIONS:
        raise typer.BadParameter(
            f"Unsupported input type '{input_path.suffix}'; plain text files only."
        )
    return input_path.read_text(encoding="utf-8")


if __name__ == "__main__":
    main()
