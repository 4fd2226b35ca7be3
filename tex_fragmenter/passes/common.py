"""Helpers shared by the fragmentation passes."""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Tuple

from tex_fragmenter.fragment import CodeFragment

UNKNOWN_LANGUAGE = "unknown language %r"
INVALID_DIRECTIVE = "invalid or unsupported directive %r"

# Offset (relative to the fragment) where new settings start, and the
# settings fields that change there.
Switch = Tuple[int, Mapping[str, Any]]


def partition(fragment: CodeFragment, switches: Iterable[Switch]) -> List[CodeFragment]:
    """Cut ``fragment`` at every switch position.

    Each piece keeps the settings active before its end; the pieces
    concatenate back to ``fragment.code``. Empty pieces (a switch at the very
    start, or two adjacent switches) are dropped, so offsets strictly
    increase. An empty input fragment is returned as is. Switch positions
    must be non-decreasing.
    """
    code = fragment.code
    pieces: List[CodeFragment] = []
    prev_pos, prev_settings = 0, fragment.settings
    for pos, update in switches:
        if pos > prev_pos:
            pieces.append(
                fragment.derive(code[prev_pos:pos], fragment.from_pos + prev_pos, prev_settings)
            )
        prev_pos, prev_settings = pos, prev_settings.model_copy(update=dict(update))
    if prev_pos < len(code) or not pieces:
        pieces.append(
            fragment.derive(code[prev_pos:], fragment.from_pos + prev_pos, prev_settings)
        )
    return pieces


def language_switch(pos: int, language_short_code: str) -> Switch:
    return pos, {"language_short_code": language_short_code}
