"""flagsnap 設定（pydantic BaseModel）と YAML 読み込み"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from .backoff import BackoffPolicy
from .exceptions import ConfigError, ConfigErrorCodes


class FlagSnapConfig(BaseModel):
    """フラグ同期設定。キーは snake_case と camelCase の両方を受け付ける。"""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    base_url: str = Field(alias="baseUrl")
    path: str = "/api/v1/flags"
    api_key: str = Field(default="", alias="apiKey")
    poll_interval_ms: int = Field(default=30_000, gt=0, alias="pollIntervalMs")
    fetch_timeout_ms: int = Field(default=5_000, gt=0, alias="fetchTimeoutMs")
    staleness_ceiling_ms: int = Field(default=300_000, gt=0, alias="stalenessCeilingMs")
    initial_backoff_ms: int = Field(default=500, gt=0, alias="initialBackoffMs")
    max_backoff_ms: int = Field(default=60_000, gt=0, alias="maxBackoffMs")
    backoff_multiplier: float = Field(default=2.0, ge=1.0, alias="backoffMultiplier")
    log_level: str = Field(default="INFO", alias="logLevel")
    log_format: Literal["json", "text"] = Field(default="json", alias="logFormat")

    @model_validator(mode="after")
    def _check_backoff_bounds(self) -> FlagSnapConfig:
        if self.max_backoff_ms < self.initial_backoff_ms:
            raise ValueError("maxBackoffMs must be greater than or equal to initialBackoffMs")
        return self

    @property
    def poll_interval(self) -> float:
        return self.poll_interval_ms / 1000

    @property
    def fetch_timeout(self) -> float:
        return self.fetch_timeout_ms / 1000

    @property
    def staleness_ceiling(self) -> float:
        return self.staleness_ceiling_ms / 1000

    def backoff_policy(self) -> BackoffPolicy:
        return BackoffPolicy(
            initial_delay=self.initial_backoff_ms / 1000,
            max_delay=self.max_backoff_ms / 1000,
            multiplier=self.backoff_multiplier,
        )


def _read_yaml(path: Path) -> dict[str, Any]:
    """YAML ファイルを読み込む。"""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(
            code=ConfigErrorCodes.READ_FILE,
            message=f"Failed to read config file: {path}",
            cause=e,
        ) from e
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigError(
            code=ConfigErrorCodes.PARSE_YAML,
            message=f"Failed to parse YAML: {path}",
            cause=e,
        ) from e
    if not isinstance(data, dict):
        raise ConfigError(
            code=ConfigErrorCodes.PARSE_YAML,
            message=f"Config root must be a mapping: {path}",
        )
    return data


def parse_config(data: dict[str, Any]) -> FlagSnapConfig:
    """辞書から FlagSnapConfig を生成する。トップレベルの flagsnap セクションにも対応。"""
    section = data.get("flagsnap", data)
    try:
        return FlagSnapConfig.model_validate(section)
    except PydanticValidationError as e:
        raise ConfigError(
            code=ConfigErrorCodes.VALIDATION,
            message=f"Config validation failed: {e}",
            cause=e,
        ) from e


def load_config(path: Path) -> FlagSnapConfig:
    """YAML 設定ファイルを読み込んで FlagSnapConfig を返す。"""
    return parse_config(_read_yaml(path))
