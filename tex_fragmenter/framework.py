from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Protocol, Sequence, runtime_checkable

from tex_fragmenter.fragment import CodeFragment


@dataclass(frozen=True)
class Artifact:
    """Immutable carrier of the fragment list + run metadata between passes."""

    payload: Sequence[CodeFragment]
    meta: Dict[str, Any] | None = field(default=None)


@runtime_checkable
class Pass(Protocol):
    name: str
    partitions: bool

    def __call__(self, a: Artifact) -> Artifact:
        """Execute the pass."""
        ...


_REGISTRY: Mapping[str, Pass] = MappingProxyType({})


def register(p: Pass) -> Pass:
    """Register a pass by name; re-registering a name replaces it."""
    global _REGISTRY
    _REGISTRY = MappingProxyType({**dict(_REGISTRY), p.name: p})
    return p


def registry() -> Dict[str, Pass]:
    """Shallow copy of the registry for inspection/testing."""
    return dict(_REGISTRY)


def with_metrics(meta: Mapping[str, Any] | None, name: str, **counts: int) -> Dict[str, Any]:
    """Return a copy of ``meta`` with ``counts`` recorded under ``metrics[name]``."""
    base = dict(meta or {})
    metrics = dict(base.get("metrics") or {})
    metrics[name] = {**metrics.get(name, {}), **counts}
    return {**base, "metrics": metrics}
