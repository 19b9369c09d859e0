"""Load configuration from YAML and environment variables. No hardcoded secrets."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Default config lives next to this module
_DEFAULT_CONFIG_PATH = Path(__file__).parent / "default.yaml"

DEFAULT_GENTA_URL = "https://api.genta.tech/v1/chat/completions"


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


class GentaSettings(BaseSettings):
    """Upstream chat-completions API. The key is only ever read from env or an explicit file."""

    model_config = SettingsConfigDict(env_prefix="GENTA_", extra="ignore", populate_by_name=True)
    api_key: str = Field(default="", alias="GENTA_API_KEY")
    url: str = Field(default=DEFAULT_GENTA_URL, alias="GENTA_URL")
    default_model: Optional[str] = Field(default=None, alias="GENTA_MODEL")
    # None: no timeout, the stream stays open as long as the upstream sends
    timeout: Optional[float] = Field(default=None, alias="GENTA_TIMEOUT")


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="LOG_", extra="ignore", populate_by_name=True)
    level: str = Field(default="INFO", alias="LOG_LEVEL")
    use_json: bool = Field(default=True, alias="LOG_JSON")


class Config(BaseSettings):
    """Application config: YAML + env. Secrets from env only."""

    model_config = SettingsConfigDict(env_nested_delimiter="__", extra="ignore")

    genta: GentaSettings = Field(default_factory=GentaSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> "Config":
        path = Path(config_path) if config_path else _DEFAULT_CONFIG_PATH
        yaml_data = _load_yaml(path)
        env_prefix = os.getenv("CHAT_ENDPOINTS_ENV_PREFIX", "")
        if env_prefix:
            yaml_data = _deep_merge(yaml_data, _load_yaml(Path(f"config/{env_prefix}.yaml")))
        api_key = os.getenv("GENTA_API_KEY")
        if api_key:
            yaml_data.setdefault("genta", {})["api_key"] = api_key
        url = os.getenv("GENTA_URL")
        if url:
            yaml_data.setdefault("genta", {})["url"] = url
        model = os.getenv("GENTA_MODEL")
        if model:
            yaml_data.setdefault("genta", {})["default_model"] = model
        timeout = os.getenv("GENTA_TIMEOUT")
        if timeout:
            yaml_data.setdefault("genta", {})["timeout"] = float(timeout)
        level = os.getenv("LOG_LEVEL")
        if level:
            yaml_data.setdefault("logging", {})["level"] = level
        use_json = os.getenv("LOG_JSON")
        if use_json:
            yaml_data.setdefault("logging", {})["use_json"] = use_json.lower() in ("1", "true", "yes")
        return cls(**yaml_data)


def get_config(config_path: str | Path | None = None) -> Config:
    return Config.load(config_path)
