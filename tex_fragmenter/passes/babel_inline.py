"""Inline language commands: ``\\foreignlanguage{<language>}{<text>}``, ``\\text<language>{<text>}``.

The wrapped text is emitted as an extra fragment in the requested language.
The language carries over to later commands in the same fragment, and the
input fragment itself is kept as well.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator

from tex_fragmenter.fragment import CodeFragment
from tex_fragmenter.framework import Artifact, register, with_metrics
from tex_fragmenter.language import (
    INLINE_COMMAND_SIGNATURES,
    LANGUAGE_FROM_ARGUMENT,
    short_code,
)
from tex_fragmenter.passes.common import INVALID_DIRECTIVE, UNKNOWN_LANGUAGE
from tex_fragmenter.signatures import SignatureMatcher

logger = logging.getLogger(__name__)

_MATCHER = SignatureMatcher(INLINE_COMMAND_SIGNATURES)


def _inline_fragments(fragment: CodeFragment) -> Iterator[CodeFragment]:
    settings = fragment.settings
    scan = _MATCHER.start_matching(
        fragment.code, fragment.settings.ignore_command_prototypes()
    )
    for match in scan:
        code = INLINE_COMMAND_SIGNATURES.get(match.signature)
        if code is None:
            logger.warning(INVALID_DIRECTIVE, match.command_prototype)
            continue
        if code == LANGUAGE_FROM_ARGUMENT:
            language = match.argument_contents(-2)
            code = short_code(language)
            if code is None:
                logger.warning(UNKNOWN_LANGUAGE, language)
        if code is not None:
            settings = settings.with_language(code)
        yield fragment.derive(
            match.argument_contents(-1),
            fragment.from_pos + match.argument_contents_from_pos(-1),
            settings,
        )
    yield fragment


@dataclass(frozen=True)
class _BabelInlinePass:
    name: str = field(default="babel_inline", init=False)
    partitions: bool = field(default=False, init=False)

    def __call__(self, a: Artifact) -> Artifact:
        fragments = [piece for fragment in a.payload for piece in _inline_fragments(fragment)]
        meta = with_metrics(
            a.meta,
            self.name,
            fragments=len(fragments),
            extracted=len(fragments) - len(a.payload),
        )
        return Artifact(payload=fragments, meta=meta)


babel_inline = register(_BabelInlinePass())
