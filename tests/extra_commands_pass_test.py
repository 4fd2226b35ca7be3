import pytest

from tex_fragmenter.core import configure_pass
from tex_fragmenter.fragment import Settings
from tex_fragmenter.passes.extra_commands import (
    DEFAULT_PROTOTYPES,
    _ExtraCommandsPass,
    extra_commands,
)
from tests.utils.fragments import languages, offsets, texts


def test_footnote_text_is_extracted(fragment_of, run_pass) -> None:
    code = "See\\footnote{hello} and \\todo[inline]{fix this}."
    french = Settings(language_short_code="fr")
    original = fragment_of(code, 30, french)
    out = run_pass(extra_commands, [original])
    assert texts(out) == ["hello", "fix this", code]
    assert languages(out) == ["fr", "fr", "fr"]
    assert offsets(out) == [30 + code.index("hello"), 30 + code.index("fix this"), 30]
    assert out[-1] is original


def test_single_footnote(fragment_of, run_pass) -> None:
    out = run_pass(extra_commands, [fragment_of("\\footnote{hello}")])
    assert texts(out) == ["hello", "\\footnote{hello}"]
    assert offsets(out) == [len("\\footnote{"), 0]


def test_prototypes_are_configurable(fragment_of, run_pass) -> None:
    margin = configure_pass(extra_commands, {"prototypes": ["\\marginpar{}"]})
    out = run_pass(margin, [fragment_of("\\marginpar{side} \\footnote{foot}")])
    assert texts(out) == ["side", "\\marginpar{side} \\footnote{foot}"]
    assert margin.prototypes == ("\\marginpar{}",)
    assert extra_commands.prototypes == DEFAULT_PROTOTYPES


def test_prototypes_need_an_argument() -> None:
    with pytest.raises(ValueError):
        _ExtraCommandsPass(prototypes=("\\newpage",))
