from collections.abc import Callable
from functools import reduce

import pytest

from tex_fragmenter.config import DEFAULT_PIPELINE, PipelineSpec
from tex_fragmenter.core import _enforce_invariants


def _add(step: str) -> Callable[[PipelineSpec], PipelineSpec]:
    return lambda spec: PipelineSpec(pipeline=[*spec.pipeline, step])


def _build_pipeline(*steps: str) -> PipelineSpec:
    return reduce(lambda spec, s: _add(s)(spec), steps, PipelineSpec(pipeline=[]))


def test_default_pipeline_is_valid() -> None:
    assert _enforce_invariants(_build_pipeline(*DEFAULT_PIPELINE)) == DEFAULT_PIPELINE


def test_empty_pipeline_is_valid() -> None:
    assert _enforce_invariants(_build_pipeline()) == []


def test_overlays_may_run_in_any_order() -> None:
    spec = _build_pipeline("extra_commands", "babel_environments", "babel_inline")
    _enforce_invariants(spec)


def test_partition_after_overlay_rejected() -> None:
    spec = _build_pipeline("babel_packages", "extra_commands", "directive_comments")
    with pytest.raises(ValueError):
        _enforce_invariants(spec)


def test_unregistered_step_rejected() -> None:
    with pytest.raises(KeyError):
        _enforce_invariants(_build_pipeline("babel_switch", "pdf_parse"))
