import logging

from tex_fragmenter.fragment import Settings
from tex_fragmenter.framework import Artifact
from tex_fragmenter.package_options import parse_package_options
from tex_fragmenter.passes.babel_packages import (
    _BabelPackagesPass,
    babel_packages,
    resolve_package_language,
)
from tests.utils.fragments import languages, offsets, texts


def test_package_without_options_changes_nothing(fragment_of, run_pass) -> None:
    code = "\\documentclass{article}\\usepackage{multilingual}Text"
    out = run_pass(babel_packages, [fragment_of(code)])
    assert texts(out) == [code]
    assert languages(out) == ["en-US"]


def test_language_option_switches_from_declaration(fragment_of, run_pass) -> None:
    german = Settings(language_short_code="de-DE")
    fragment = fragment_of("pre\\usepackage[english]{multilingual}post", 100, german)
    out = run_pass(babel_packages, [fragment])
    assert texts(out) == ["pre", "\\usepackage[english]{multilingual}post"]
    assert languages(out) == ["de-DE", "en-US"]
    assert offsets(out) == [100, 103]


def test_babel_package_is_recognized(fragment_of, run_pass) -> None:
    out = run_pass(babel_packages, [fragment_of("A\\usepackage[ngerman]{babel}B")])
    assert languages(out) == ["en-US", "de-DE"]


def test_other_packages_are_ignored(fragment_of, run_pass) -> None:
    out = run_pass(babel_packages, [fragment_of("A\\usepackage[german]{inputenc}B")])
    assert texts(out) == ["A\\usepackage[german]{inputenc}B"]


def test_options_without_language_are_ignored_silently(fragment_of, run_pass, caplog) -> None:
    with caplog.at_level(logging.WARNING):
        out = run_pass(babel_packages, [fragment_of("A\\usepackage[draft]{babel}B")])
    assert len(out) == 1
    assert not caplog.records


def test_last_language_option_wins() -> None:
    options = parse_package_options("german, french")
    assert resolve_package_language(options) == "french"


def test_main_option_overrides_and_stops() -> None:
    options = parse_package_options("german, main=british, french")
    assert resolve_package_language(options) == "british"
    assert resolve_package_language(parse_package_options("main=klingon, french")) == "french"


def test_ignored_declaration_does_not_split(fragment_of, run_pass) -> None:
    ignoring = Settings(latex_commands={"\\usepackage[]{}": "ignore"})
    out = run_pass(babel_packages, [fragment_of("A\\usepackage[german]{babel}B", 0, ignoring)])
    assert len(out) == 1


def test_declaration_at_start_yields_single_fragment(fragment_of, run_pass) -> None:
    code = "\\usepackage[french]{babel}Texte"
    out = run_pass(babel_packages, [fragment_of(code)])
    assert texts(out) == [code]
    assert languages(out) == ["fr"]


def test_package_list_is_configurable(fragment_of, run_pass) -> None:
    only_babel = _BabelPackagesPass(packages=("babel",))
    out = run_pass(only_babel, [fragment_of("A\\usepackage[german]{multilingual}B")])
    assert len(out) == 1


def test_metrics_count_boundaries(fragment_of) -> None:
    result = babel_packages(
        Artifact(payload=[fragment_of("A\\usepackage[german]{babel}B")], meta={})
    )
    assert result.meta["metrics"]["babel_packages"] == {"fragments": 2, "boundaries": 1}
