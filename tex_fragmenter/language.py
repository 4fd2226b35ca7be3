"""Babel language names, their short codes, and the signatures derived from them.

Everything here is computed once at import time and exposed through
read-only mappings.
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Dict, Final, Iterator, Mapping, Tuple

from tex_fragmenter.signatures import CommandSignature

# Value stored in the derived maps for generic forms whose language is
# taken from an argument of the match.
LANGUAGE_FROM_ARGUMENT: Final = ""

MULTILINGUAL_PACKAGES: Final[Tuple[str, ...]] = ("babel", "multilingual")
GENERIC_ENVIRONMENTS: Final[Tuple[str, ...]] = ("otherlanguage", "foreignblock")

_NON_LETTERS_RE = re.compile(r"[^A-Za-z]+")

_BABEL_LANGUAGES: Dict[str, str] = {
    "afrikaans": "af-ZA",
    "american": "en-US",
    "arabic": "ar",
    "asturian": "ast-ES",
    "australian": "en-AU",
    "austrian": "de-AT",
    "belarusian": "be-BY",
    "brazil": "pt-BR",
    "brazilian": "pt-BR",
    "breton": "br-FR",
    "british": "en-GB",
    "canadian": "en-CA",
    "catalan": "ca-ES",
    "catalan-valencia": "ca-ES-valencia",
    "chinese": "zh-CN",
    "danish": "da-DK",
    "dutch": "nl",
    "english": "en-US",
    "english-australia": "en-AU",
    "english-canada": "en-CA",
    "english-newzealand": "en-NZ",
    "english-southafrica": "en-ZA",
    "english-unitedkingdom": "en-GB",
    "english-unitedstates": "en-US",
    "esperanto": "eo",
    "french": "fr",
    "galician": "gl-ES",
    "german": "de-DE",
    "german-austria": "de-AT",
    "german-switzerland": "de-CH",
    "greek": "el-GR",
    "irish": "ga-IE",
    "italian": "it",
    "japanese": "ja-JP",
    "khmer": "km-KH",
    "naustrian": "de-AT",
    "newzealand": "en-NZ",
    "ngerman": "de-DE",
    "nswissgerman": "de-CH",
    "persian": "fa",
    "polish": "pl-PL",
    "portuges": "pt-PT",
    "portuguese": "pt",
    "portuguese-brazil": "pt-BR",
    "portuguese-portugal": "pt-PT",
    "romanian": "ro-RO",
    "russian": "ru-RU",
    "slovak": "sk-SK",
    "slovene": "sl-SI",
    "slovenian": "sl-SI",
    "spanish": "es",
    "swedish": "sv",
    "swissgerman": "de-CH",
    "tagalog": "tl-PH",
    "tamil": "ta-IN",
    "UKenglish": "en-GB",
    "ukrainian": "uk-UA",
    "USenglish": "en-US",
}

BABEL_LANGUAGE_MAP: Final[Mapping[str, str]] = MappingProxyType(dict(_BABEL_LANGUAGES))


def default_language() -> str:
    """Return the deterministic default language code."""
    return "en-US"


def language_tag(language: str) -> str:
    """Strip every non-letter from a babel language name (``ngerman`` stays)."""
    return _NON_LETTERS_RE.sub("", language)


def _spellings(language: str) -> Iterator[str]:
    yield language
    tag = language_tag(language)
    if len(tag) != len(language):
        yield tag


def _inline_signatures() -> Dict[CommandSignature, str]:
    generic = {
        CommandSignature("\\foreignlanguage{}{}"): LANGUAGE_FROM_ARGUMENT,
        CommandSignature("\\foreignlanguage[]{}{}"): LANGUAGE_FROM_ARGUMENT,
    }
    specific = {
        CommandSignature(f"\\text{spelling}{{}}"): code
        for name, code in BABEL_LANGUAGE_MAP.items()
        for spelling in _spellings(name)
    }
    return {**generic, **specific}


def _environment_signatures() -> Dict[CommandSignature, str]:
    generic = {
        CommandSignature(prototype): LANGUAGE_FROM_ARGUMENT
        for env in GENERIC_ENVIRONMENTS
        for prototype in (
            f"\\begin{{{env}}}{{}}",
            f"\\begin{{{env}*}}{{}}",
            f"\\begin{{{env}*}}[]{{}}",
            f"\\end{{{env}}}",
            f"\\end{{{env}*}}",
        )
    }
    specific = {
        CommandSignature(prototype): code
        for name, code in BABEL_LANGUAGE_MAP.items()
        for env in _spellings(name)
        for prototype in (f"\\begin{{{env}}}", f"\\begin{{{env}}}[]", f"\\end{{{env}}}")
    }
    return {**generic, **specific}


INLINE_COMMAND_SIGNATURES: Final[Mapping[CommandSignature, str]] = MappingProxyType(
    _inline_signatures()
)
ENVIRONMENT_COMMAND_SIGNATURES: Final[Mapping[CommandSignature, str]] = MappingProxyType(
    _environment_signatures()
)


def short_code(language: str) -> str | None:
    """Short code for a babel language name, or ``None`` if unknown."""
    return BABEL_LANGUAGE_MAP.get(language)
