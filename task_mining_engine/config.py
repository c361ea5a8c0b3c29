"""Configuration loader.

Settings come from a YAML file (``config/settings.yaml`` by default, or the
path in ``TASK_MINING_CONFIG``) and are validated with Pydantic. A few
environment variables override the file so deployments can point the engine
at another API or model without editing it:

    TASK_MINING_API_URL    -> api.base_url
    TASK_MINING_LLM_MODEL  -> assistant.model
    TASK_MINING_LOG_LEVEL  -> log_level

Usage:
    from task_mining_engine.config import load_settings, configure_logging
    settings = load_settings()
    configure_logging(settings.log_level)
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "settings.yaml"

_ENV_OVERRIDES = {
    "TASK_MINING_API_URL": ("api", "base_url"),
    "TASK_MINING_LLM_MODEL": ("assistant", "model"),
    "TASK_MINING_LOG_LEVEL": ("log_level",),
}


class StrictModel(BaseModel):
    """Base model that rejects unknown fields (catches typos)."""

    model_config = ConfigDict(extra="forbid")


class DataConfig(StrictModel):
    amadeus_path: Optional[str] = Field(default=None, description="Amadeus CSV/JSON export")
    salesforce_path: Optional[str] = Field(default=None, description="Salesforce CSV/JSON export")


class ApiConfig(StrictModel):
    base_url: str = "http://localhost:8080"
    timeout: float = Field(default=20.0, gt=0)


class AssistantConfig(StrictModel):
    enabled: bool = False
    model: str = "gpt-4o-mini"
    timeout: float = Field(default=30.0, gt=0)


class LimitsConfig(StrictModel):
    top_cases: int = Field(default=15, ge=1)
    top_activities: int = Field(default=10, ge=1)
    top_agents: int = Field(default=10, ge=1)
    top_windows: int = Field(default=10, ge=1)
    cases_table: int = Field(default=20, ge=1)


class Settings(StrictModel):
    data: DataConfig = Field(default_factory=DataConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    assistant: AssistantConfig = Field(default_factory=AssistantConfig)
    limits: LimitsConfig = Field(default_factory=LimitsConfig)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    for variable, path in _ENV_OVERRIDES.items():
        value = os.environ.get(variable)
        if not value:
            continue
        target = raw
        for part in path[:-1]:
            target = target.setdefault(part, {})
        target[path[-1]] = value
    return raw


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load, override and validate settings.

    A missing default file yields the built-in defaults; an explicitly given
    path that does not exist raises ``FileNotFoundError``. Invalid values
    raise ``pydantic.ValidationError``.
    """

    load_dotenv()
    explicit = config_path or os.environ.get("TASK_MINING_CONFIG")
    path = Path(explicit) if explicit else DEFAULT_CONFIG_PATH

    raw: dict[str, Any] = {}
    if path.exists():
        with open(path, encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle)
        if isinstance(loaded, dict):
            raw = loaded
    elif explicit:
        raise FileNotFoundError(f"Config file not found: {path}")

    return Settings.model_validate(_apply_env_overrides(raw))


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
