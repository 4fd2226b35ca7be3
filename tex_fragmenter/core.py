from __future__ import annotations

import logging
import time
from collections.abc import Mapping, Sequence
from dataclasses import fields, is_dataclass, replace
from functools import reduce
from typing import Any

from tex_fragmenter.config import PipelineSpec
from tex_fragmenter.fragment import CodeFragment, Settings
from tex_fragmenter.framework import Artifact, Pass, registry

logger = logging.getLogger(__name__)

DEFAULT_CODE_LANGUAGE_ID = "latex"


def _pass_steps(spec: PipelineSpec) -> list[str]:
    """Return pipeline steps; error on unregistered ones."""
    regs = registry()
    unknown = [s for s in spec.pipeline if s not in regs]
    if unknown:
        raise KeyError(f"unknown steps: {unknown}")
    return list(spec.pipeline)


def _ensure_partitions_precede_overlays(steps: Sequence[str]) -> None:
    """Raise when a partitioning pass is scheduled after an overlay pass.

    Overlay passes keep their input next to the derived fragments, so cutting
    afterwards would split text that is already covered twice.
    """
    regs = registry()
    first_overlay = next((s for s in steps if not regs[s].partitions), None)
    if first_overlay is None:
        return
    tail = steps[steps.index(first_overlay) :]
    late = [s for s in tail if regs[s].partitions]
    if late:
        raise ValueError(f"{late[0]} must run before {first_overlay}")


def _enforce_invariants(spec: PipelineSpec) -> list[str]:
    """Return validated steps while enforcing pass ordering."""
    steps = _pass_steps(spec)
    _ensure_partitions_precede_overlays(steps)
    return steps


def _prepare_pass(pass_obj: Pass, overrides: Mapping[str, Any]) -> Pass:
    """Return ``pass_obj`` with the option fields it declares replaced."""
    if not overrides or not is_dataclass(pass_obj):
        return pass_obj
    names = {f.name for f in fields(pass_obj) if f.init}
    unknown = sorted(set(overrides) - names)
    if unknown:
        logger.warning("ignoring unknown options for %s: %s", pass_obj.name, unknown)
    updates = {k: v for k, v in overrides.items() if k in names}
    return replace(pass_obj, **updates) if updates else pass_obj


def configure_pass(pass_obj: Pass, opts: Mapping[str, Any]) -> Pass:
    """Return a new pass with ``opts`` merged without mutating ``pass_obj``."""
    return _prepare_pass(pass_obj, opts)


def _time_step(
    acc: tuple[Artifact, dict[str, float]],
    p: Pass,
) -> tuple[Artifact, dict[str, float]]:
    """Apply ``p`` to ``acc`` while recording its execution time."""
    a, timings = acc
    t0 = time.perf_counter()
    a = p(a)
    return a, {**timings, p.name: time.perf_counter() - t0}


def _run_passes(spec: PipelineSpec, a: Artifact) -> tuple[Artifact, dict[str, float]]:
    """Run the passes declared in ``spec`` capturing per-pass timings."""
    steps = _enforce_invariants(spec)
    configured = [_prepare_pass(registry()[name], spec.options.get(name, {})) for name in steps]
    return reduce(_time_step, configured, (a, {}))


def _initial_artifact(code: str, settings: Settings, code_language_id: str) -> Artifact:
    fragment = CodeFragment(code_language_id, code, 0, settings)
    return Artifact(payload=[fragment], meta={"metrics": {}})


def run_fragmentize(
    code: str,
    settings: Settings | None = None,
    *,
    code_language_id: str = DEFAULT_CODE_LANGUAGE_ID,
    spec: PipelineSpec | None = None,
) -> tuple[Artifact, dict[str, float]]:
    """Fragmentize ``code`` and return the final artifact plus per-pass timings."""
    spec = spec or PipelineSpec()
    settings = settings or Settings()
    artifact = _initial_artifact(code, settings, code_language_id)
    result, timings = _run_passes(spec, artifact)
    logger.debug("fragmentized %d chars into %d fragments", len(code), len(result.payload))
    return result, timings


def fragmentize(
    code: str,
    settings: Settings | None = None,
    *,
    code_language_id: str = DEFAULT_CODE_LANGUAGE_ID,
    spec: PipelineSpec | None = None,
) -> list[CodeFragment]:
    """Split ``code`` into fragments, each tagged with the settings it is checked with."""
    result, _ = run_fragmentize(code, settings, code_language_id=code_language_id, spec=spec)
    return list(result.payload)


def run_inspect() -> dict[str, Any]:
    """Describe the registered passes and their option fields."""
    return {
        name: {
            "partitions": p.partitions,
            "options": sorted(f.name for f in fields(p) if f.init) if is_dataclass(p) else [],
        }
        for name, p in registry().items()
    }
