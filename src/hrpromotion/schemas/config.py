"""Pydantic configuration schema for CLI YAML input."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, ValidationError


class EngineConfig(BaseModel):
    max_workers: int | None = Field(default=None, ge=1)


class HarnessConfig(BaseModel):
    seed: int | None = None
    baseline: str = "legacy"


class AppConfig(BaseModel):
    policy: dict[str, Any] | None = None
    policy_dir: str | None = None
    policy_version: str | None = None
    engine: EngineConfig = Field(default_factory=EngineConfig)
    harness: HarnessConfig = Field(default_factory=HarnessConfig)

    def to_settings(self) -> dict[str, Any]:
        settings: dict[str, Any] = {}
        if self.policy:
            settings["policy"] = dict(self.policy)
        if self.policy_dir:
            settings["policy_dir"] = self.policy_dir
        if self.policy_version:
            settings["policy_version"] = self.policy_version
        engine_settings = self.engine.model_dump(exclude_none=True)
        if engine_settings:
            settings["engine"] = engine_settings
        settings["harness"] = self.harness.model_dump(exclude_none=True)
        return settings


def load_config(raw: Any) -> AppConfig:
    if not isinstance(raw, dict):
        raise ValidationError.from_exception_data(
            "AppConfig",
            [{"type": "dict_type", "loc": ("config",), "input": raw}],
        )
    return AppConfig.model_validate(raw)
