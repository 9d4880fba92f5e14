"""設定ファイル読み込み（pydantic BaseModel）"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigError, PwvErrorCodes
from .models import VaultClientConfig

DEFAULT_BASE_URL = "https://pwv.europe.intranet"
DEFAULT_CONFIRM_REASON = "Automatically accepted! You're welcome."


class VaultSection(BaseModel):
    """Vault 接続設定。"""

    model_config = ConfigDict(validate_assignment=True)

    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = Field(default=30.0, gt=0)
    # 証明書を差し替えるプロキシ経由の環境向け。明示的に有効化した場合のみ検証を省略する。
    insecure_skip_verify: bool = False

    def to_client_config(self) -> VaultClientConfig:
        return VaultClientConfig(
            base_url=self.base_url.rstrip("/"),
            timeout_seconds=self.timeout_seconds,
            verify_tls=not self.insecure_skip_verify,
        )


class LogSection(BaseModel):
    """ログ設定。"""

    model_config = ConfigDict(validate_assignment=True)

    level: str = "WARNING"
    format: Literal["json", "text"] = "text"


class ApproveSection(BaseModel):
    """承認フロー設定。"""

    model_config = ConfigDict(validate_assignment=True)

    allowed_users: list[str] = Field(default_factory=list)
    reason: str = DEFAULT_CONFIRM_REASON

    @field_validator("allowed_users", mode="before")
    @classmethod
    def _split_csv(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [v.strip() for v in value.split(",") if v.strip()]
        return value


class PwvConfig(BaseModel):
    """pwv 設定全体。"""

    vault: VaultSection = Field(default_factory=VaultSection)
    log: LogSection = Field(default_factory=LogSection)
    approve: ApproveSection = Field(default_factory=ApproveSection)


def _read_yaml(path: Path) -> dict[str, Any]:
    """YAML ファイルを読み込む。"""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(
            code=PwvErrorCodes.READ_FILE,
            message=f"Failed to read config file: {path}",
            cause=e,
        ) from e
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigError(
            code=PwvErrorCodes.PARSE_YAML,
            message=f"Failed to parse YAML: {path}",
            cause=e,
        ) from e
    if not isinstance(data, dict):
        raise ConfigError(
            code=PwvErrorCodes.PARSE_YAML,
            message=f"Config root must be a mapping: {path}",
        )
    return data


def load(path: Path | None = None) -> PwvConfig:
    """設定ファイルを読み込んで PwvConfig を返す。path が None ならデフォルト値。"""
    data = _read_yaml(path) if path is not None else {}
    try:
        return PwvConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(
            code=PwvErrorCodes.VALIDATION,
            message=f"Config validation failed: {e}",
            cause=e,
        ) from e
