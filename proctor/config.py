"""Configuration for proctor, loaded from environment variables."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass

# Seconds allowed for one harness run, per deployment profile.
TIMEOUT_PROFILES: dict[str, float] = {
    "default": 30.0,
    "development": 60.0,
    "production": 20.0,
}


@dataclass
class Config:
    execution_timeout: float = TIMEOUT_PROFILES["default"]  # seconds
    max_output_bytes: int = 1024 * 1024  # per stream
    default_function_name: str = "solution"
    python_command: str = sys.executable
    node_command: str = "node"
    go_command: str = "go"
    executor_type: str = "local"  # "local" or "judge0"
    judge0_url: str = ""
    judge0_api_key: str = ""
    log_level: str = "INFO"
    log_json: bool = False

    def __post_init__(self) -> None:
        if self.execution_timeout <= 0:
            raise ValueError(f"execution_timeout must be positive, got {self.execution_timeout}")
        if self.max_output_bytes <= 0:
            raise ValueError(f"max_output_bytes must be positive, got {self.max_output_bytes}")
        if self.executor_type not in ("local", "judge0"):
            raise ValueError(f"unknown executor type: {self.executor_type}")
        if self.executor_type == "judge0" and not self.judge0_url:
            raise ValueError("JUDGE0_URL is required when the judge0 executor is selected")

    @classmethod
    def from_env(cls, **overrides) -> Config:
        kwargs: dict = {}
        # precedence: explicit overrides, then a profile override, then env vars, then PROCTOR_TIMEOUT_PROFILE
        profile_override = overrides.pop("timeout_profile", None)
        env_profile = os.environ.get("PROCTOR_TIMEOUT_PROFILE")
        if env_profile is not None:
            kwargs["execution_timeout"] = _profile_timeout(env_profile)
        env_map: dict[str, tuple[str, type]] = {
            "PROCTOR_EXECUTION_TIMEOUT": ("execution_timeout", float),
            "PROCTOR_MAX_OUTPUT_BYTES": ("max_output_bytes", int),
            "PROCTOR_DEFAULT_FUNCTION": ("default_function_name", str),
            "PROCTOR_PYTHON": ("python_command", str),
            "PROCTOR_NODE": ("node_command", str),
            "PROCTOR_GO": ("go_command", str),
            "PROCTOR_EXECUTOR": ("executor_type", str),
            "JUDGE0_URL": ("judge0_url", str),
            "JUDGE0_API_KEY": ("judge0_api_key", str),
            "PROCTOR_LOG_LEVEL": ("log_level", str),
        }
        for env_var, (field_name, conv) in env_map.items():
            val = os.environ.get(env_var)
            if val is not None:
                try:
                    kwargs[field_name] = conv(val)
                except ValueError:
                    raise ValueError(f"{env_var} has invalid value {val!r}") from None
        # PROCTOR_LOG_JSON: "1", "true" or "yes" enables
        json_val = os.environ.get("PROCTOR_LOG_JSON")
        if json_val is not None:
            kwargs["log_json"] = json_val.lower() in ("1", "true", "yes")
        if profile_override is not None:
            kwargs["execution_timeout"] = _profile_timeout(profile_override)
        kwargs.update(overrides)
        return cls(**kwargs)


def _profile_timeout(profile: str) -> float:
    if profile not in TIMEOUT_PROFILES:
        raise ValueError(f"unknown timeout profile {profile!r}, expected one of {sorted(TIMEOUT_PROFILES)}")
    return TIMEOUT_PROFILES[profile]
