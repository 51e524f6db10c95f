"""Policy configuration management utilities."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from ..errors import PolicyMisconfigured
from ..schemas import BUILTIN_POLICIES, DEFAULT_POLICY, PromotionPolicy


def load_policy_file(path: str | Path) -> PromotionPolicy:
    """Load a policy from a YAML file.

    A document with a ``base`` key is merged over that built-in version;
    otherwise it is merged over the default policy.
    """
    with Path(path).open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    return policy_from_mapping(data, source=str(path))


def policy_from_mapping(data: Any, *, source: str = "<mapping>") -> PromotionPolicy:
    if not isinstance(data, dict):
        raise PolicyMisconfigured("policy", source, "policy document must be a mapping")
    overrides = dict(data)
    base_name = overrides.pop("base", None)
    if base_name is None:
        base = DEFAULT_POLICY
    elif base_name in BUILTIN_POLICIES:
        base = BUILTIN_POLICIES[base_name]
    else:
        raise PolicyMisconfigured("base", base_name, f"unknown base policy in {source}")
    return base.with_overrides(overrides)


class PolicyStore:
    """YAML-backed store of named policy versions."""

    def __init__(self, base_path: str | Path | None = None):
        self._base_path = Path(base_path) if base_path else None

    def load(self, name: str) -> PromotionPolicy:
        """Load a policy version by name without file extension."""
        if self._base_path is not None:
            path = self._base_path / f"{name}.yaml"
            if path.exists():
                policy = load_policy_file(path)
                if policy.version != name:
                    raise PolicyMisconfigured("version", policy.version, f"{path.name} declares a different version")
                return policy
        try:
            return BUILTIN_POLICIES[name]
        except KeyError as exc:
            raise KeyError(f"Unknown policy version: {name!r}") from exc

    def available(self) -> list[str]:
        names = set(BUILTIN_POLICIES)
        if self._base_path is not None and self._base_path.is_dir():
            names.update(path.stem for path in self._base_path.glob("*.yaml"))
        return sorted(names)


__all__ = ["PolicyStore", "load_policy_file", "policy_from_mapping"]
