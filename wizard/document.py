"""Assembled Agent document and its YAML serialization."""

import copy
from dataclasses import dataclass, field
from typing import Any

import yaml


class _NoAliasDumper(yaml.SafeDumper):
    """SafeDumper that never emits anchors/aliases for repeated objects."""

    def ignore_aliases(self, data: Any) -> bool:
        return True


def dump_yaml(data: dict[str, Any]) -> str:
    """Stable key order, no anchors, unbounded line width."""
    return yaml.dump(
        data,
        Dumper=_NoAliasDumper,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        indent=2,
        width=float("inf"),
    )


@dataclass(frozen=True)
class AgentDocument:
    """Immutable Agent custom resource. Access content through copies only."""

    _data: dict[str, Any] = field(repr=False)

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)

    def to_yaml(self) -> str:
        return dump_yaml(self._data)

    def get(self, path: str, default: Any = None) -> Any:
        """Nested lookup by dot path (e.g. 'spec.role'). Returns a copy."""
        current: Any = self._data
        for part in path.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return copy.deepcopy(current)

    def has(self, path: str) -> bool:
        sentinel = object()
        return self.get(path, sentinel) is not sentinel

    @property
    def name(self) -> str:
        return str(self._data.get("metadata", {}).get("name", ""))
