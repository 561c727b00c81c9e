"""Configuration models and YAML loader.

The Telegram bot token can be provided via the ``TELEGRAM_BOT_TOKEN``
environment variable. The YAML value is used as fallback — the env var
always takes precedence.
"""

import os
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


class TelegramConfig(BaseModel):
    bot_token: str = ""

    @model_validator(mode="before")
    @classmethod
    def _resolve_env_vars(cls, values: dict) -> dict:  # type: ignore[override]
        """Override the token from env if set."""
        env_token = os.environ.get("TELEGRAM_BOT_TOKEN")
        if env_token and isinstance(values, dict):
            values["bot_token"] = env_token
        return values

    @model_validator(mode="after")
    def _check_required(self) -> "TelegramConfig":
        if not self.bot_token:
            raise ValueError(
                "bot_token is required — set TELEGRAM_BOT_TOKEN env var "
                "or provide it in the YAML config"
            )
        return self


class DisplayName(BaseModel):
    sid: str  # e.g. "onebot:123456"
    name: str

    @field_validator("sid")
    @classmethod
    def _check_sid(cls, v: str) -> str:
        v = v.strip()
        if ":" not in v:
            raise ValueError(f"sid must look like 'platform:selfId', got {v!r}")
        return v


class PluginConfig(BaseModel):
    # background and mask_opacity only apply to the HTML themes
    background: list[str] = Field(default_factory=list)
    display_name: list[DisplayName] = Field(default_factory=list)
    # None picks "default" when the host can render HTML, "card" otherwise
    theme: Optional[Literal["default", "nightdream", "yenai", "card"]] = None
    dark_mode: bool = False
    mask_opacity: float = Field(default=0.5, ge=0.0, le=1.0)
    cpu_sample_interval_seconds: float = Field(default=5.0, gt=0)

    @field_validator("background")
    @classmethod
    def _check_background(cls, v: list[str]) -> list[str]:
        return [b.strip() for b in v if b.strip()]

    def display_names(self) -> dict[str, str]:
        """Overrides keyed by sid; the first entry for a sid wins."""
        names: dict[str, str] = {}
        for entry in self.display_name:
            names.setdefault(entry.sid, entry.name)
        return names


class DaemonConfig(BaseModel):
    telegram: TelegramConfig
    plugin: PluginConfig = PluginConfig()
    message_log_path: str = "status_image.db"
    log_level: str = "INFO"


def load_config(path: str | Path) -> DaemonConfig:
    """Load and validate daemon configuration from a YAML file."""
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    return DaemonConfig(**raw)
