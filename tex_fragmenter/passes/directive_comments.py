"""Magic comments that override settings for the rest of a fragment.

A line such as ``% ltex: language=de-DE`` switches the settings from the
start of that line onwards. The marker is case-insensitive. Entries are
whitespace-separated ``key=value`` pairs; only ``language`` is understood.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Pattern

from tex_fragmenter.fragment import CodeFragment
from tex_fragmenter.framework import Artifact, register, with_metrics
from tex_fragmenter.passes.common import Switch, partition

logger = logging.getLogger(__name__)

DEFAULT_MARKER = "ltex"

_SETTING_FIELDS = {"language": "language_short_code"}


def parse_inline_settings(text: str) -> Dict[str, Any]:
    """Translate ``key=value`` entries into :class:`Settings` field updates."""
    update: Dict[str, Any] = {}
    for entry in text.split():
        key, sep, value = entry.partition("=")
        if not sep or not key or not value:
            logger.warning("ignoring malformed inline setting %r", entry)
        elif key.lower() not in _SETTING_FIELDS:
            logger.warning("ignoring unknown inline setting %r", key)
        else:
            update[_SETTING_FIELDS[key.lower()]] = value
    return update


def _switches(fragment: CodeFragment, pattern: Pattern[str]) -> Iterator[Switch]:
    for found in pattern.finditer(fragment.code):
        update = parse_inline_settings(found.group(1))
        if update:
            yield found.start(), update


@dataclass(frozen=True)
class _DirectiveCommentsPass:
    name: str = field(default="directive_comments", init=False)
    partitions: bool = field(default=True, init=False)
    marker: str = DEFAULT_MARKER
    pattern: Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "pattern",
            re.compile(rf"^[ \t]*%[ \t]*(?i:{re.escape(self.marker)}):(.*?)$", re.MULTILINE),
        )

    def __call__(self, a: Artifact) -> Artifact:
        fragments = [
            piece
            for fragment in a.payload
            for piece in partition(fragment, _switches(fragment, self.pattern))
        ]
        meta = with_metrics(
            a.meta,
            self.name,
            fragments=len(fragments),
            boundaries=len(fragments) - len(a.payload),
        )
        return Artifact(payload=fragments, meta=meta)


directive_comments = register(_DirectiveCommentsPass())
