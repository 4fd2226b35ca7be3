"""``\\usepackage[<languages>]{babel}`` pass.

Partitions each fragment at every package declaration that names a known
language; text after the declaration is checked in that language.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional, Tuple

from tex_fragmenter.fragment import CodeFragment
from tex_fragmenter.framework import Artifact, register, with_metrics
from tex_fragmenter.language import BABEL_LANGUAGE_MAP, MULTILINGUAL_PACKAGES, short_code
from tex_fragmenter.package_options import PackageOption, parse_package_options
from tex_fragmenter.passes.common import UNKNOWN_LANGUAGE, Switch, language_switch, partition
from tex_fragmenter.signatures import CommandSignature, SignatureMatcher

logger = logging.getLogger(__name__)

USE_PACKAGE_SIGNATURE = CommandSignature("\\usepackage[]{}")
_MATCHER = SignatureMatcher([USE_PACKAGE_SIGNATURE])


def resolve_package_language(options: Iterable[PackageOption]) -> Optional[str]:
    """Pick the language a package option list activates.

    The last option that is itself a language name wins, unless a
    ``main=<language>`` option appears, which wins immediately.
    """
    language: Optional[str] = None
    for option in options:
        key = option.key_info.text
        if key in BABEL_LANGUAGE_MAP:
            language = key
        elif (
            key == "main"
            and option.value_info is not None
            and option.value_info.text in BABEL_LANGUAGE_MAP
        ):
            return option.value_info.text
    return language


def _switches(fragment: CodeFragment, packages: Tuple[str, ...]) -> Iterator[Switch]:
    scan = _MATCHER.start_matching(
        fragment.code, fragment.settings.ignore_command_prototypes()
    )
    for match in scan:
        if match.argument_contents(1) not in packages:
            continue
        language = resolve_package_language(parse_package_options(match.argument_contents(0)))
        if language is None:
            continue
        code = short_code(language)
        if code is None:
            logger.warning(UNKNOWN_LANGUAGE, language)
            continue
        yield language_switch(match.from_pos, code)


@dataclass(frozen=True)
class _BabelPackagesPass:
    name: str = field(default="babel_packages", init=False)
    partitions: bool = field(default=True, init=False)
    packages: Tuple[str, ...] = MULTILINGUAL_PACKAGES

    def __post_init__(self) -> None:
        object.__setattr__(self, "packages", tuple(self.packages))

    def __call__(self, a: Artifact) -> Artifact:
        fragments = [
            piece
            for fragment in a.payload
            for piece in partition(fragment, _switches(fragment, self.packages))
        ]
        meta = with_metrics(
            a.meta,
            self.name,
            fragments=len(fragments),
            boundaries=len(fragments) - len(a.payload),
        )
        return Artifact(payload=fragments, meta=meta)


babel_packages = register(_BabelPackagesPass())
