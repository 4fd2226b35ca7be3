from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable, Iterator, Mapping
from pathlib import Path
from typing import Any, List, Optional

import typer

from tex_fragmenter.config import PipelineSpec, load_spec
from tex_fragmenter.core import DEFAULT_CODE_LANGUAGE_ID, run_fragmentize, run_inspect
from tex_fragmenter.fragment import IGNORE, Settings
from tex_fragmenter.language import BABEL_LANGUAGE_MAP


def _spec_path_candidates(path: str | Path) -> Iterator[Path]:
    """Yield potential spec locations without hitting the filesystem."""
    candidate = Path(path)
    pkg_dir = Path(__file__).resolve().parent
    yield from (
        candidate,
        pkg_dir.parent / candidate,
        pkg_dir / candidate,
    )


def _resolve_spec_path(path: str | Path) -> Path:
    """Pick the first existing pipeline spec from candidate locations."""
    return next((p for p in _spec_path_candidates(path) if p.exists()), Path(path))


def _format_timings(timings: Mapping[str, float]) -> str:
    """Return ``timings`` as newline-delimited ``name: seconds`` strings."""
    return "\n".join(f"{n}: {t:.4f}s" for n, t in timings.items())


def _exit_with_error(exc: Exception) -> None:
    """Print ``exc`` to stderr and exit with status 1."""
    print(f"error: {exc}", file=sys.stderr)
    raise typer.Exit(1)


def _safe(func: Callable[[], None]) -> None:
    """Invoke ``func`` and exit non-zero on any exception."""
    try:
        func()
    except Exception as exc:  # pragma: no cover - exercised in CLI tests
        _exit_with_error(exc)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _document_settings(
    spec: PipelineSpec, language: str | None, ignore: List[str]
) -> Settings:
    """Settings from the spec's ``settings`` section plus command-line overrides."""
    base: dict[str, Any] = dict(spec.settings)
    commands = {**base.get("latex_commands", {}), **{p: IGNORE for p in ignore}}
    overrides: dict[str, Any] = {"latex_commands": commands}
    if language:
        overrides["language_short_code"] = language
    return Settings.model_validate({**base, **overrides})


def _run_fragment(
    input_path: Path,
    language: str | None,
    ignore: List[str],
    code_language_id: str,
    spec: str,
    verbose: bool,
) -> None:
    _configure_logging(verbose)
    s = load_spec(_resolve_spec_path(spec))
    code = input_path.read_text(encoding="utf-8")
    result, timings = run_fragmentize(
        code,
        _document_settings(s, language, ignore),
        code_language_id=code_language_id,
        spec=s,
    )
    for fragment in result.payload:
        print(json.dumps(fragment.to_dict(), ensure_ascii=False))
    if verbose:
        print(_format_timings(timings), file=sys.stderr)


def _run_inspect() -> None:
    print(json.dumps({"passes": run_inspect(), "languages": dict(BABEL_LANGUAGE_MAP)}, indent=2))


app = typer.Typer(add_completion=False, no_args_is_help=True)


@app.command()
def fragment(
    input_path: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
    ),
    language: Optional[str] = typer.Option(None, "--language"),
    ignore: Optional[List[str]] = typer.Option(None, "--ignore"),
    code_language_id: str = typer.Option(DEFAULT_CODE_LANGUAGE_ID, "--code-language-id"),
    spec: str = typer.Option("pipeline.yaml", "--spec"),
    verbose: bool = typer.Option(False, "--verbose"),
) -> None:
    """Print one JSON object per fragment of INPUT_PATH."""
    _safe(
        lambda: _run_fragment(
            input_path,
            language,
            list(ignore or []),
            code_language_id,
            spec,
            verbose,
        )
    )


@app.command()
def inspect() -> None:
    """Show registered passes and known babel languages."""
    _run_inspect()


if __name__ == "__main__":
    app()
