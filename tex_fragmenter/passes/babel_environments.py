"""Language environments: ``\\begin{otherlanguage}{<language>} ... \\end{otherlanguage}``.

Environments nest, so the pass keeps a stack of ``(settings, body start)``
entries seeded with the fragment's own settings. Closing an environment
emits its body (inner environments included) in the environment's
language. Malformed nesting is tolerated:

* an ``\\end`` with nothing open stops the scan of that fragment;
* environments still open at the end run to the end of the fragment.

The input fragment is always kept in addition to the emitted bodies.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Tuple

from tex_fragmenter.fragment import CodeFragment, Settings
from tex_fragmenter.framework import Artifact, register, with_metrics
from tex_fragmenter.language import (
    ENVIRONMENT_COMMAND_SIGNATURES,
    LANGUAGE_FROM_ARGUMENT,
    short_code,
)
from tex_fragmenter.passes.common import INVALID_DIRECTIVE, UNKNOWN_LANGUAGE
from tex_fragmenter.signatures import SignatureMatch, SignatureMatcher

logger = logging.getLogger(__name__)

_MATCHER = SignatureMatcher(ENVIRONMENT_COMMAND_SIGNATURES)


def _begin_settings(match: SignatureMatch, current: Settings) -> Settings | None:
    """Settings for the body of the environment opened by ``match``."""
    code = ENVIRONMENT_COMMAND_SIGNATURES.get(match.signature)
    if code is None:
        logger.warning(INVALID_DIRECTIVE, match.command_prototype)
        return None
    if code == LANGUAGE_FROM_ARGUMENT:
        language = match.argument_contents(-1)
        code = short_code(language)
        if code is None:
            logger.warning(UNKNOWN_LANGUAGE, language)
            return current
    return current.with_language(code)


def _environment_fragments(fragment: CodeFragment) -> Iterator[CodeFragment]:
    code = fragment.code
    stack: List[Tuple[Settings, int]] = [(fragment.settings, 0)]
    scan = _MATCHER.start_matching(code, fragment.settings.ignore_command_prototypes())
    for match in scan:
        if match.signature.is_environment_begin:
            settings = _begin_settings(match, stack[-1][0])
            if settings is not None:
                stack.append((settings, match.to_pos))
            continue
        if len(stack) <= 1:
            logger.debug(
                "unmatched %s at %d; skipping rest of fragment",
                match.command_prototype,
                fragment.from_pos + match.from_pos,
            )
            break
        settings, start = stack.pop()
        yield fragment.derive(code[start : match.from_pos], fragment.from_pos + start, settings)

    while len(stack) > 1:
        settings, start = stack.pop()
        logger.debug("unclosed environment at %d", fragment.from_pos + start)
        yield fragment.derive(code[start:], fragment.from_pos + start, settings)
    yield fragment


@dataclass(frozen=True)
class _BabelEnvironmentsPass:
    name: str = field(default="babel_environments", init=False)
    partitions: bool = field(default=False, init=False)

    def __call__(self, a: Artifact) -> Artifact:
        fragments = [
            piece for fragment in a.payload for piece in _environment_fragments(fragment)
        ]
        meta = with_metrics(
            a.meta,
            self.name,
            fragments=len(fragments),
            extracted=len(fragments) - len(a.payload),
        )
        return Artifact(payload=fragments, meta=meta)


babel_environments = register(_BabelEnvironmentsPass())
