"""autonomous configuration: Pydantic model, TOML load, and environment overlays."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from autonomous.core.constants import (
    CONFIG_FILENAME,
    LOGS_DIR_NAME,
    PROMPT_DELAY_S,
    READINESS_BUFFER_CHARS,
    SETTLE_DELAY_S,
    SUBMIT_DELAY_S,
    _default_data_dir,
)
from autonomous.core.exceptions import ConfigError, ConfigNotFoundError


def autonomous_dir() -> Path:
    """Return the autonomous data directory (not created)."""
    return _default_data_dir()


# ---------------------------------------------------------------------------
# Project board fields
# ---------------------------------------------------------------------------


class StatusFieldConfig(BaseModel):
    field_name: str = "Status"
    ready_values: list[str] = Field(default_factory=lambda: ["Ready", "Todo"])
    in_progress_value: str = "In Progress"
    review_value: str = "In Review"
    done_value: str = "Done"
    blocked_value: str = "Blocked"


class PriorityValue(BaseModel):
    weight: float = Field(ge=0, le=10)


def _default_priority_values() -> dict[str, PriorityValue]:
    return {
        "critical": PriorityValue(weight=10),
        "high": PriorityValue(weight=7),
        "medium": PriorityValue(weight=5),
        "low": PriorityValue(weight=2),
    }


class PriorityFieldConfig(BaseModel):
    field_name: str = "Priority"
    values: dict[str, PriorityValue] = Field(default_factory=_default_priority_values)

    @field_validator("values", mode="before")
    @classmethod
    def normalise_keys(cls, v: Any) -> Any:
        """Lower-case option names and accept bare numbers as weights."""
        if not isinstance(v, dict):
            return v
        out: dict[str, Any] = {}
        for key, value in v.items():
            if isinstance(value, (int, float)):
                value = {"weight": value}
            out[str(key).lower()] = value
        return out


class SizeFieldConfig(BaseModel):
    field_name: str = "Size"
    preferred_sizes: list[str] = Field(default_factory=list)


class SprintFieldConfig(BaseModel):
    field_name: str = "Sprint"
    current_sprint: str | None = None


class ProjectFieldsConfig(BaseModel):
    status: StatusFieldConfig = Field(default_factory=StatusFieldConfig)
    priority: PriorityFieldConfig | None = Field(default_factory=PriorityFieldConfig)
    size: SizeFieldConfig | None = Field(default_factory=SizeFieldConfig)
    sprint: SprintFieldConfig | None = Field(default_factory=SprintFieldConfig)


# ---------------------------------------------------------------------------
# Prioritization
# ---------------------------------------------------------------------------


class PriorityWeights(BaseModel):
    """Independent multipliers for each score component; need not sum to 1."""

    model_config = {"frozen": True}

    ai_evaluation: float = Field(default=0.3, ge=0)
    project_priority: float = Field(default=0.5, ge=0)
    sprint_boost: float = Field(default=0.1, ge=0)
    size_preference: float = Field(default=0.1, ge=0)


DEFAULT_WEIGHTS = PriorityWeights()


class PrioritizationConfig(BaseModel):
    weights: PriorityWeights | None = None


class ProjectConfig(BaseModel):
    enabled: bool = False
    project_number: int | None = None
    organization_project: bool = False
    fields: ProjectFieldsConfig = Field(default_factory=ProjectFieldsConfig)
    prioritization: PrioritizationConfig = Field(default_factory=PrioritizationConfig)


# ---------------------------------------------------------------------------
# Agents and sessions
# ---------------------------------------------------------------------------


class LLMConfig(BaseModel):
    enabled: bool = True
    max_concurrent_issues: int = Field(default=1, ge=1)
    cli_path: str = ""  # empty → adapter default
    cli_args: list[str] = Field(default_factory=list)  # empty → adapter default
    strip_env: list[str] | None = None  # None → adapter default


class SessionSettings(BaseModel):
    settle_delay_s: float = Field(default=SETTLE_DELAY_S, ge=0)
    submit_delay_s: float = Field(default=SUBMIT_DELAY_S, ge=0)
    prompt_delay_s: float = Field(default=PROMPT_DELAY_S, ge=0)
    readiness_buffer_chars: int = Field(default=READINESS_BUFFER_CHARS, ge=256)
    logs_dir: str = ""  # empty → <data dir>/logs


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "text"  # "text" | "json"

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v not in ("text", "json"):
            raise ValueError("Log format must be 'text' or 'json'")
        return v


# ---------------------------------------------------------------------------
# Root config
# ---------------------------------------------------------------------------


class AutonomousConfig(BaseModel):
    """Root autonomous configuration model."""

    config_version: int = 1
    llms: dict[str, LLMConfig] = Field(default_factory=lambda: {"claude": LLMConfig()})
    project: ProjectConfig = Field(default_factory=ProjectConfig)
    session: SessionSettings = Field(default_factory=SessionSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    _config_path: Path | None = None

    @property
    def logs_dir(self) -> Path:
        if self.session.logs_dir:
            return Path(self.session.logs_dir).expanduser()
        return autonomous_dir() / LOGS_DIR_NAME

    def llm(self, provider: str) -> LLMConfig:
        """Return the config block for *provider*, or defaults if it has none."""
        return self.llms.get(provider) or LLMConfig()


# ---------------------------------------------------------------------------
# Load
# ---------------------------------------------------------------------------


def _config_file_path() -> Path:
    if env_path := os.environ.get("AUTONOMOUS_CONFIG"):
        return Path(env_path)
    return autonomous_dir() / CONFIG_FILENAME


def load_config(path: Path | str | None = None) -> AutonomousConfig:
    """
    Load AutonomousConfig from a TOML file, overlaid with environment variables.

    Priority (highest to lowest):
      1. Environment variables (AUTONOMOUS_*)
      2. Config file (explicit *path*, $AUTONOMOUS_CONFIG, or ~/.autonomous/config.toml)
      3. Built-in defaults

    An explicit *path* that does not exist raises ConfigNotFoundError.  A
    missing default file is not an error: ranking and sessions run on
    defaults.
    """
    import tomllib

    explicit = path is not None or bool(os.environ.get("AUTONOMOUS_CONFIG"))
    cfg_path = Path(path) if path is not None else _config_file_path()

    data: dict[str, Any] = {}
    if cfg_path.exists():
        try:
            with open(cfg_path, "rb") as f:
                data = tomllib.load(f)
        except Exception as exc:
            raise ConfigError(f"Cannot read config file {cfg_path}: {exc}") from exc
    elif explicit:
        raise ConfigNotFoundError(f"Config file not found: {cfg_path}")

    _apply_env_overrides(data)

    try:
        config = AutonomousConfig.model_validate(data)
    except Exception as exc:
        raise ConfigError(f"Invalid config at {cfg_path}: {exc}") from exc

    config._config_path = cfg_path if cfg_path.exists() else None
    return config


def _apply_env_overrides(data: dict[str, Any]) -> None:
    """Overlay AUTONOMOUS_* environment variables onto parsed TOML."""
    if level := os.environ.get("AUTONOMOUS_LOG_LEVEL", ""):
        data.setdefault("logging", {})["level"] = level
    if fmt := os.environ.get("AUTONOMOUS_LOG_FORMAT", ""):
        data.setdefault("logging", {})["format"] = fmt
    if logs_dir := os.environ.get("AUTONOMOUS_LOGS_DIR", ""):
        data.setdefault("session", {})["logs_dir"] = logs_dir
    if sprint := os.environ.get("AUTONOMOUS_CURRENT_SPRINT", ""):
        fields = data.setdefault("project", {}).setdefault("fields", {})
        fields.setdefault("sprint", {})["current_sprint"] = sprint
