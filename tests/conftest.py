from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Sequence

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from tex_fragmenter.fragment import CodeFragment, Settings  # noqa: E402
from tex_fragmenter.framework import Artifact, Pass  # noqa: E402


@pytest.fixture
def settings() -> Settings:
    return Settings(language_short_code="en-US")


@pytest.fixture
def fragment_of(settings: Settings) -> Callable[..., CodeFragment]:
    def build(code: str, from_pos: int = 0, base: Settings | None = None) -> CodeFragment:
        return CodeFragment("latex", code, from_pos, base or settings)

    return build


@pytest.fixture
def run_pass() -> Callable[[Pass, Sequence[CodeFragment]], list[CodeFragment]]:
    return lambda p, fragments: list(p(Artifact(payload=list(fragments), meta={})).payload)

