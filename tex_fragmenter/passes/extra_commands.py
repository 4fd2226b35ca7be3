from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Tuple

from tex_fragmenter.fragment import CodeFragment
from tex_fragmenter.framework import Artifact, register, with_metrics
from tex_fragmenter.signatures import CommandSignature, SignatureMatcher

DEFAULT_PROTOTYPES: Tuple[str, ...] = (
    "\\footnote{}",
    "\\footnote[]{}",
    "\\todo{}",
    "\\todo[]{}",
)


def _extra_fragments(fragment: CodeFragment, matcher: SignatureMatcher) -> Iterator[CodeFragment]:
    """Emit the last argument of every match in the fragment's own settings."""
    scan = matcher.start_matching(fragment.code, fragment.settings.ignore_command_prototypes())
    for match in scan:
        yield fragment.derive(
            match.argument_contents(-1),
            fragment.from_pos + match.argument_contents_from_pos(-1),
            fragment.settings,
        )
    yield fragment


@dataclass(frozen=True)
class _ExtraCommandsPass:
    """Check the text of footnotes and to-do notes on its own."""

    name: str = field(default="extra_commands", init=False)
    partitions: bool = field(default=False, init=False)
    prototypes: Tuple[str, ...] = DEFAULT_PROTOTYPES
    matcher: SignatureMatcher = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "prototypes", tuple(self.prototypes))
        signatures = tuple(CommandSignature(p) for p in self.prototypes)
        if any(not s.slots for s in signatures):
            raise ValueError("extra command prototypes need at least one argument")
        object.__setattr__(self, "matcher", SignatureMatcher(signatures))

    def __call__(self, a: Artifact) -> Artifact:
        fragments = [
            piece for fragment in a.payload for piece in _extra_fragments(fragment, self.matcher)
        ]
        meta = with_metrics(
            a.meta,
            self.name,
            fragments=len(fragments),
            extracted=len(fragments) - len(a.payload),
        )
        return Artifact(payload=fragments, meta=meta)


extra_commands = register(_ExtraCommandsPass())
