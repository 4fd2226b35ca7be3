"""``\\selectlanguage{<language>}`` pass.

An unknown language is reported and skipped without cutting the fragment,
so the text before it joins whichever piece follows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator

from tex_fragmenter.fragment import CodeFragment
from tex_fragmenter.framework import Artifact, register, with_metrics
from tex_fragmenter.language import short_code
from tex_fragmenter.passes.common import UNKNOWN_LANGUAGE, Switch, language_switch, partition
from tex_fragmenter.signatures import CommandSignature, SignatureMatcher

logger = logging.getLogger(__name__)

SWITCH_SIGNATURE = CommandSignature("\\selectlanguage{}")
_MATCHER = SignatureMatcher([SWITCH_SIGNATURE])


def _switches(fragment: CodeFragment) -> Iterator[Switch]:
    scan = _MATCHER.start_matching(
        fragment.code, fragment.settings.ignore_command_prototypes()
    )
    for match in scan:
        language = match.argument_contents(0)
        code = short_code(language)
        if code is None:
            logger.warning(UNKNOWN_LANGUAGE, language)
            continue
        yield language_switch(match.from_pos, code)


@dataclass(frozen=True)
class _BabelSwitchPass:
    name: str = field(default="babel_switch", init=False)
    partitions: bool = field(default=True, init=False)

    def __call__(self, a: Artifact) -> Artifact:
        fragments = [
            piece for fragment in a.payload for piece in partition(fragment, _switches(fragment))
        ]
        meta = with_metrics(
            a.meta,
            self.name,
            fragments=len(fragments),
            boundaries=len(fragments) - len(a.payload),
        )
        return Artifact(payload=fragments, meta=meta)


babel_switch = register(_BabelSwitchPass())
