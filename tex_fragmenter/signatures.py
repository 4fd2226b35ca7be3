"""Command signatures and the matcher that finds them in LaTeX source.

A signature is written as a prototype: the literal command text followed by
one empty delimiter pair per argument slot, e.g. ``\\usepackage[]{}`` or
``\\begin{otherlanguage*}[]{}``. ``[]`` marks an optional argument, ``{}`` a
mandatory one. Braced groups with content directly after the command name
(``{otherlanguage*}``) belong to the literal prefix.

Matching works on literal text only. Argument boundaries come from a
stack-based delimiter table built once per scan, so nesting depth is
unbounded and failed candidates cost no rescanning. A candidate that does
not parse is skipped without affecting the rest of the scan.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import AbstractSet, Dict, Iterable, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)

_PREFIX_RE = re.compile(
    r"\\(?:[A-Za-z@]+(?:-[A-Za-z@]+)*\*?|[^A-Za-z@\s])"  # control word or control symbol
    r"(?:\{[^{}\[\]]+\})*"
)
_SLOTS_RE = re.compile(r"(?:\[\]|\{\})*")
_LINE_BREAK = "\n"


class ArgumentType(Enum):
    OPTIONAL = ("[", "]")
    MANDATORY = ("{", "}")

    @property
    def opening(self) -> str:
        return self.value[0]

    @property
    def closing(self) -> str:
        return self.value[1]


def _parse_prototype(prototype: str) -> Tuple[str, Tuple[ArgumentType, ...]]:
    prefix_match = _PREFIX_RE.match(prototype)
    if prefix_match is None:
        raise ValueError(f"invalid command prototype: {prototype!r}")
    prefix = prefix_match.group(0)
    rest = prototype[len(prefix) :]
    if not _SLOTS_RE.fullmatch(rest):
        raise ValueError(f"invalid argument slots in command prototype: {prototype!r}")
    slots = tuple(
        ArgumentType.OPTIONAL if rest[i] == "[" else ArgumentType.MANDATORY
        for i in range(0, len(rest), 2)
    )
    return prefix, slots


@dataclass(frozen=True)
class CommandSignature:
    """Parsed command prototype; compares and hashes by ``prototype``."""

    prototype: str
    prefix: str = field(init=False, compare=False, repr=False)
    slots: Tuple[ArgumentType, ...] = field(init=False, compare=False, repr=False)

    def __post_init__(self) -> None:
        prefix, slots = _parse_prototype(self.prototype)
        object.__setattr__(self, "prefix", prefix)
        object.__setattr__(self, "slots", slots)

    @property
    def is_environment_begin(self) -> bool:
        return self.prefix.startswith("\\begin{")


@dataclass(frozen=True)
class ArgumentMatch:
    contents: str
    from_pos: int


@dataclass(frozen=True)
class SignatureMatch:
    """A matched command: whole span plus contents of every argument slot."""

    signature: CommandSignature
    from_pos: int
    to_pos: int
    arguments: Tuple[ArgumentMatch, ...]

    @property
    def arguments_size(self) -> int:
        return len(self.arguments)

    def argument_contents(self, index: int) -> str:
        return self.arguments[index].contents

    def argument_contents_from_pos(self, index: int) -> int:
        return self.arguments[index].from_pos

    @property
    def command_prototype(self) -> str:
        return self.signature.prototype


# ----------------------------------------------------------------------
# Argument scanning
# ----------------------------------------------------------------------


def _skip_separator(text: str, pos: int) -> int:
    """Skip blanks between arguments, allowing at most one line break."""
    seen_break = False
    while pos < len(text) and text[pos] in " \t\r\n":
        if text[pos] == _LINE_BREAK:
            if seen_break:
                break
            seen_break = True
        pos += 1
    return pos


class DelimiterTable:
    """Closing position of every balanced ``{...}`` and ``[...]`` group in a text.

    Built with one left-to-right pass keeping a stack of open brace groups,
    each with its own stack of open brackets. A backslash escapes the next
    character. Braced groups hide brackets from the enclosing optional
    argument, so a ``[`` whose brace group closes first is unterminated.
    Lookups are constant time, which keeps a whole matcher scan linear in
    ``len(text)`` however many candidates fail.
    """

    def __init__(self, text: str) -> None:
        braces: Dict[int, int] = {}
        brackets: Dict[int, int] = {}
        # (position of the opening brace, open brackets inside that group)
        groups: List[Tuple[int, List[int]]] = [(-1, [])]
        pos = 0
        end = len(text)
        while pos < end:
            char = text[pos]
            if char == "\\":
                pos += 2
                continue
            if char == "{":
                groups.append((pos, []))
            elif char == "}":
                if len(groups) > 1:
                    braces[groups.pop()[0]] = pos
                else:
                    groups[0][1].clear()
            elif char == "[":
                groups[-1][1].append(pos)
            elif char == "]" and groups[-1][1]:
                brackets[groups[-1][1].pop()] = pos
            pos += 1
        self._closing = {ArgumentType.MANDATORY: braces, ArgumentType.OPTIONAL: brackets}

    def closing(self, start: int, kind: ArgumentType) -> Optional[int]:
        return self._closing[kind].get(start)


def scan_balanced(text: str, start: int, kind: ArgumentType) -> Optional[int]:
    """Return the index of the delimiter closing the group opened at ``start``.

    ``text[start]`` must be ``kind.opening``. Returns ``None`` for an
    unterminated group.
    """
    return DelimiterTable(text).closing(start, kind)


def _match_arguments(
    text: str, pos: int, slots: Iterable[ArgumentType], table: DelimiterTable
) -> Optional[Tuple[int, Tuple[ArgumentMatch, ...]]]:
    arguments: List[ArgumentMatch] = []
    for kind in slots:
        candidate = _skip_separator(text, pos)
        if candidate < len(text) and text[candidate] == kind.opening:
            closing = table.closing(candidate, kind)
            if closing is None:
                return None
            arguments.append(ArgumentMatch(text[candidate + 1 : closing], candidate + 1))
            pos = closing + 1
        elif kind is ArgumentType.OPTIONAL:
            arguments.append(ArgumentMatch("", pos))
        else:
            return None
    return pos, tuple(arguments)


def _is_escaped(text: str, pos: int) -> bool:
    backslashes = 0
    while pos - backslashes - 1 >= 0 and text[pos - backslashes - 1] == "\\":
        backslashes += 1
    return backslashes % 2 == 1


def _prefix_ends_cleanly(text: str, prefix: str, end: int) -> bool:
    return not (
        prefix[-1].isalpha()
        and end < len(text)
        and (text[end].isalpha() or text[end] == "@")
    )


def match_at(
    text: str,
    pos: int,
    signature: CommandSignature,
    table: Optional[DelimiterTable] = None,
) -> Optional[SignatureMatch]:
    """Match ``signature`` at exactly ``pos`` or return ``None``."""
    prefix = signature.prefix
    if not text.startswith(prefix, pos):
        return None
    prefix_end = pos + len(prefix)
    if not _prefix_ends_cleanly(text, prefix, prefix_end):
        return None
    matched = _match_arguments(
        text, prefix_end, signature.slots, table or DelimiterTable(text)
    )
    if matched is None:
        return None
    to_pos, arguments = matched
    return SignatureMatch(signature, pos, to_pos, arguments)


# ----------------------------------------------------------------------
# Matcher
# ----------------------------------------------------------------------


def _rank(match: SignatureMatch) -> Tuple[int, int]:
    return match.to_pos, len(match.signature.prototype)


class SignatureScan:
    """Forward-only scan over one text; exhausted once it returns ``None``."""

    def __init__(
        self,
        matcher: SignatureMatcher,
        text: str,
        ignored_prototypes: AbstractSet[str],
    ) -> None:
        self._matcher = matcher
        self._text = text
        self._ignored = ignored_prototypes
        self._pos = 0
        self._exhausted = False
        self._table: Optional[DelimiterTable] = None

    def __iter__(self) -> Iterator[SignatureMatch]:
        return iter(self.find_next_match, None)

    def _delimiters(self) -> DelimiterTable:
        if self._table is None:
            self._table = DelimiterTable(self._text)
        return self._table

    def _best_match_at(self, pos: int) -> Optional[SignatureMatch]:
        table = self._delimiters()
        candidates = (
            match_at(self._text, pos, signature, table)
            for signature in self._matcher.signatures_at(self._text, pos)
            if signature.prototype not in self._ignored
        )
        return max((m for m in candidates if m is not None), key=_rank, default=None)

    def find_next_match(self) -> Optional[SignatureMatch]:
        while not self._exhausted:
            found = self._matcher.pattern.search(self._text, self._pos)
            if found is None:
                self._exhausted = True
                break
            start = found.start()
            match = None if _is_escaped(self._text, start) else self._best_match_at(start)
            if match is None:
                logger.debug("skipping unparsable %r at %d", found.group(0), start)
                self._pos = start + 1
                continue
            self._pos = max(match.to_pos, start + 1)
            logger.debug(
                "matched %s at [%d, %d)", match.command_prototype, match.from_pos, match.to_pos
            )
            return match
        return None


class SignatureMatcher:
    """Finds occurrences of a fixed set of command signatures.

    The matcher itself is immutable; ``start_matching`` returns a fresh
    :class:`SignatureScan` holding the scan position.
    """

    def __init__(self, signatures: Iterable[CommandSignature]) -> None:
        self.signatures: Tuple[CommandSignature, ...] = tuple(dict.fromkeys(signatures))
        if not self.signatures:
            raise ValueError("SignatureMatcher requires at least one signature")
        by_prefix: Dict[str, List[CommandSignature]] = {}
        for signature in self.signatures:
            by_prefix.setdefault(signature.prefix, []).append(signature)
        self._by_prefix = {k: tuple(v) for k, v in by_prefix.items()}
        prefixes = sorted(self._by_prefix, key=len, reverse=True)
        self.pattern = re.compile("|".join(re.escape(p) for p in prefixes))

    def signatures_at(self, text: str, pos: int) -> Iterator[CommandSignature]:
        """Yield every signature whose literal prefix occurs at ``pos``."""
        return (
            signature
            for prefix, signatures in self._by_prefix.items()
            if text.startswith(prefix, pos)
            for signature in signatures
        )

    def start_matching(
        self, text: str, ignored_prototypes: AbstractSet[str] = frozenset()
    ) -> SignatureScan:
        return SignatureScan(self, text, ignored_prototypes)

    def find_all(
        self, text: str, ignored_prototypes: AbstractSet[str] = frozenset()
    ) -> List[SignatureMatch]:
        """Eagerly collect every match in ``text``."""
        return list(self.start_matching(text, ignored_prototypes))


def signatures(*prototypes: str) -> Tuple[CommandSignature, ...]:
    return tuple(CommandSignature(p) for p in prototypes)
