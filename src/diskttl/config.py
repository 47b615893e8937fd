from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

DEFAULT_CACHE_DIR = "~/.cache/diskttl"


class StoreConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    directory: str = DEFAULT_CACHE_DIR
    # Bounded by the longest duration Go can represent (2**63 ns).
    default_ttl_seconds: int = Field(
        default=60 * 60, ge=-9_223_372_036, le=9_223_372_036
    )
    clean_workers: int = Field(default=8, ge=1)

    @field_validator("directory")
    @classmethod
    def validate_directory(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("directory must not be empty")
        return normalized

    @property
    def directory_path(self) -> Path:
        return Path(self.directory).expanduser()


def load_config(path: str | Path) -> StoreConfig:
    raw = Path(path).read_text(encoding="utf-8")
    payload = _parse_yaml_or_json(raw)
    try:
        return StoreConfig.model_validate(payload)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc


def _parse_yaml_or_json(raw: str) -> dict[str, Any]:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        try:
            parsed = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise ValueError(f"Configuration is neither JSON nor YAML: {exc}") from exc
    if parsed is None:
        parsed = {}
    if not isinstance(parsed, dict):
        raise ValueError("Configuration root must be an object.")
    return parsed
