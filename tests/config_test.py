import textwrap
import warnings

import pytest

from tex_fragmenter.config import DEFAULT_PIPELINE, PipelineSpec, load_spec


def test_missing_file_yields_default_spec(tmp_path):
    spec = load_spec(tmp_path / "absent.yaml")
    assert spec == PipelineSpec()
    assert spec.pipeline == DEFAULT_PIPELINE
    assert spec.pipeline is not DEFAULT_PIPELINE


def test_options_for_pass_outside_pipeline_emit_warning(tmp_path):
    cfg = tmp_path / "pipeline.yaml"
    cfg.write_text(
        textwrap.dedent(
            """
            pipeline: [babel_switch]
            options:
              babel_switch: {}
              extra_commands:
                prototypes: ["\\\\marginpar{}"]
            """
        )
    )
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        load_spec(cfg)

    assert [w.message.args[0] for w in caught] == ["Unknown pipeline options: extra_commands"]


def test_known_options_do_not_warn(tmp_path):
    cfg = tmp_path / "pipeline.yaml"
    cfg.write_text("options:\n  babel_packages:\n    packages: [babel]\n")
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        spec = load_spec(cfg)
    assert not caught
    assert spec.options == {"babel_packages": {"packages": ["babel"]}}


def test_load_spec_merges_env_and_cli_overrides(tmp_path, monkeypatch):
    cfg = tmp_path / "pipeline.yaml"
    cfg.write_text(
        textwrap.dedent(
            """
            pipeline: [babel_packages, directive_comments]
            options:
              babel_packages:
                packages: [babel]
              directive_comments:
                marker: ltex
            settings:
              language_short_code: de-DE
            """
        )
    )
    monkeypatch.setenv("BABEL_PACKAGES__PACKAGES", "[babel, multilingual]")
    monkeypatch.setenv("UNRELATED__FLAG", "true")
    overrides = {"directive_comments": {"marker": "lint"}}

    spec = load_spec(cfg, overrides=overrides)

    assert spec.pipeline == ["babel_packages", "directive_comments"]
    assert spec.options["babel_packages"] == {"packages": ["babel", "multilingual"]}
    assert spec.options["directive_comments"] == {"marker": "lint"}
    assert spec.settings == {"language_short_code": "de-DE"}


def test_non_mapping_yaml_raises(tmp_path):
    cfg = tmp_path / "pipeline.yaml"
    cfg.write_text("- not-a-mapping\n- still-not-a-mapping\n")

    with pytest.raises(TypeError, match="top-level mapping"):
        load_spec(cfg)
