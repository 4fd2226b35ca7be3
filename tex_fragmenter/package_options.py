"""Parse the ``key[=value]`` list found in ``\\usepackage[...]``.

Splitting only happens on top-level commas and equals signs; braced values
keep their commas. Offsets are relative to the start of the parsed string.
``%`` starts a comment running to the end of the line and counts as
whitespace, so option lists spread over several lines parse as written.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

_WHITESPACE = " \t\r\n"


@dataclass(frozen=True)
class OptionText:
    text: str
    from_pos: int


@dataclass(frozen=True)
class PackageOption:
    key_info: OptionText
    value_info: Optional[OptionText] = None


def _blank_comments(text: str) -> str:
    """Replace ``%`` comments with spaces, keeping every offset intact."""
    chars = list(text)
    pos = 0
    while pos < len(chars):
        char = chars[pos]
        if char == "\\":
            pos += 2
            continue
        if char == "%":
            while pos < len(chars) and chars[pos] != "\n":
                chars[pos] = " "
                pos += 1
            continue
        pos += 1
    return "".join(chars)


def _top_level_spans(text: str) -> Iterator[Tuple[int, int]]:
    """Yield ``(start, end)`` of each comma-separated item outside braces."""
    depth = 0
    start = 0
    pos = 0
    while pos < len(text):
        char = text[pos]
        if char == "\\":
            pos += 2
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth = max(depth - 1, 0)
        elif char == "," and depth == 0:
            yield start, pos
            start = pos + 1
        pos += 1
    yield start, len(text)


def _top_level_equals(text: str, start: int, end: int) -> Optional[int]:
    depth = 0
    pos = start
    while pos < end:
        char = text[pos]
        if char == "\\":
            pos += 2
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth = max(depth - 1, 0)
        elif char == "=" and depth == 0:
            return pos
        pos += 1
    return None


def _strip(text: str, start: int, end: int) -> OptionText:
    while start < end and text[start] in _WHITESPACE:
        start += 1
    while end > start and text[end - 1] in _WHITESPACE:
        end -= 1
    return OptionText(text[start:end], start)


def _unwrap_group(info: OptionText) -> OptionText:
    """``{english}`` -> ``english`` when the braces enclose the whole value."""
    text = info.text
    if len(text) < 2 or text[0] != "{" or text[-1] != "}":
        return info
    depth = 0
    for index, char in enumerate(text):
        depth += {"{": 1, "}": -1}.get(char, 0)
        if depth == 0 and index < len(text) - 1:
            return info
    return OptionText(text[1:-1], info.from_pos + 1)


def _option(text: str, start: int, end: int) -> Optional[PackageOption]:
    equals = _top_level_equals(text, start, end)
    if equals is None:
        key = _strip(text, start, end)
        return PackageOption(key) if key.text else None
    key = _strip(text, start, equals)
    value = _unwrap_group(_strip(text, equals + 1, end))
    return PackageOption(key, value)


def parse_package_options(text: str) -> List[PackageOption]:
    """Parse ``text`` into options in source order; empty items are dropped."""
    blanked = _blank_comments(text)
    options = (_option(blanked, start, end) for start, end in _top_level_spans(blanked))
    return [option for option in options if option is not None]
