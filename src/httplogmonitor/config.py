from __future__ import annotations

import math
import os
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

# ----------------------------
# Defaults (overridable through HLM_* env vars and CLI flags)
# ----------------------------
DEFAULT_LOG_FILE = "/tmp/access.log"
DEFAULT_SUMMARY_INTERVAL_S = 10
DEFAULT_POLL_INTERVAL_S = 1
DEFAULT_MONITOR_WINDOW_S = 120
DEFAULT_ALERT_THRESHOLD = 10
DEFAULT_TOP_SECTIONS = 10
DEFAULT_LINE_BUFFER = 10
DEFAULT_METRIC_BUFFER = 5

_ENV_FIELDS = {
    "log_file": "HLM_LOG_FILE",
    "summary_interval_s": "HLM_SUMMARY_INTERVAL_S",
    "poll_interval_s": "HLM_POLL_INTERVAL_S",
    "monitor_window_s": "HLM_MONITOR_WINDOW_S",
    "alert_threshold": "HLM_ALERT_THRESHOLD",
    "top_sections": "HLM_TOP_SECTIONS",
    "line_buffer": "HLM_LINE_BUFFER",
    "metric_buffer": "HLM_METRIC_BUFFER",
    "verbose": "HLM_VERBOSE",
    "log_level": "HLM_LOG_LEVEL",
}


class ConfigValidationError(ValueError):
    pass


class MonitorConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    log_file: str = DEFAULT_LOG_FILE
    summary_interval_s: float = DEFAULT_SUMMARY_INTERVAL_S
    poll_interval_s: float = DEFAULT_POLL_INTERVAL_S
    monitor_window_s: float = DEFAULT_MONITOR_WINDOW_S
    alert_threshold: int = DEFAULT_ALERT_THRESHOLD
    top_sections: int = DEFAULT_TOP_SECTIONS
    line_buffer: int = DEFAULT_LINE_BUFFER
    metric_buffer: int = DEFAULT_METRIC_BUFFER
    verbose: bool = False
    log_level: str = "WARNING"

    @field_validator("log_file")
    @classmethod
    def _log_file_set(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("no log file provided")
        return v

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level {v!r}")
        return level

    @model_validator(mode="after")
    def _check_intervals(self) -> "MonitorConfig":
        if self.poll_interval_s <= 0:
            raise ValueError("polling interval must be positive")
        if self.summary_interval_s <= 0:
            raise ValueError("interval between summary displays must be positive")
        if self.poll_interval_s >= self.summary_interval_s:
            raise ValueError("summary interval must be greater than polling interval")
        if self.monitor_window_s <= 0:
            raise ValueError("monitoring window must be positive")
        ratio = self.monitor_window_s / self.poll_interval_s
        if ratio < 1 or not math.isclose(ratio, round(ratio)):
            raise ValueError("polling interval must be a divisor of the monitoring window")
        if self.alert_threshold < 1:
            raise ValueError("alert threshold cannot be less than 1 hit per second")
        if self.top_sections < 1:
            raise ValueError("number of most hit sections cannot be less than 1")
        if self.line_buffer < 1 or self.metric_buffer < 1:
            raise ValueError("buffer sizes must be at least 1")
        return self

    @property
    def window_size(self) -> int:
        """Number of poll ticks in the monitoring window."""
        return int(round(self.monitor_window_s / self.poll_interval_s))


def load_config(**values: Any) -> MonitorConfig:
    try:
        return MonitorConfig(**values)
    except ValidationError as e:
        reasons = "; ".join(err["msg"].removeprefix("Value error, ") for err in e.errors())
        raise ConfigValidationError(reasons) from e


def env_overrides(environ: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    env = os.environ if environ is None else environ
    out: Dict[str, str] = {}
    for field, var in _ENV_FIELDS.items():
        val = env.get(var, "").strip()
        if val:
            out[field] = val
    return out


def config_from_env(environ: Optional[Dict[str, str]] = None) -> MonitorConfig:
    return load_config(**env_overrides(environ))
