from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Dict

import yaml
from django.conf import settings
from pydantic import BaseModel, Field, NonNegativeFloat, NonNegativeInt, PositiveInt, model_validator


class GatewayConfigLoadError(RuntimeError):
    """Raised when the gateway configuration cannot be loaded or validated."""


class SubmissionDefaults(BaseModel):
    """Resource limits applied when a submission leaves them out."""
    number_of_runs: PositiveInt = 1
    cpu_time_limit: NonNegativeFloat = 5.0
    cpu_extra_time: NonNegativeFloat = 1.0
    wall_time_limit: NonNegativeFloat = 10.0
    memory_limit: NonNegativeInt = 128000
    stack_limit: NonNegativeInt = 64000
    max_processes_and_or_threads: NonNegativeInt = 60
    enable_per_process_and_thread_time_limit: bool = False
    enable_per_process_and_thread_memory_limit: bool = False
    max_file_size: NonNegativeInt = 1024
    redirect_stderr_to_stdout: bool = False


class SubmissionLimits(BaseModel):
    """Maximum value a submission may request for each resource limit."""
    number_of_runs: PositiveInt = 20
    cpu_time_limit: NonNegativeFloat = 15.0
    cpu_extra_time: NonNegativeFloat = 5.0
    wall_time_limit: NonNegativeFloat = 20.0
    memory_limit: NonNegativeInt = 512000
    stack_limit: NonNegativeInt = 128000
    max_processes_and_or_threads: NonNegativeInt = 120
    max_file_size: NonNegativeInt = 4096


class PaginationConfig(BaseModel):
    default_per_page: PositiveInt = Field(default=20, description="Page size used when per_page is 0 or missing")


class GatewayConfig(BaseModel):
    languages: Dict[int, str] = Field(default_factory=dict)
    submission_defaults: SubmissionDefaults = SubmissionDefaults()
    submission_limits: SubmissionLimits = SubmissionLimits()
    pagination: PaginationConfig = PaginationConfig()

    @model_validator(mode="after")
    def _defaults_within_limits(self) -> "GatewayConfig":
        for name, maximum in self.submission_limits.model_dump().items():
            default = getattr(self.submission_defaults, name)
            if default > maximum:
                raise ValueError(f"Default {name}={default} exceeds its limit {maximum}")
        return self


@lru_cache(maxsize=1)
def load_gateway_config() -> GatewayConfig:
    """Load and validate the gateway configuration from YAML (cached)."""
    path = Path(settings.GATEWAY_CONFIGS)
    if not path.is_file():
        raise GatewayConfigLoadError(f"Gateway config file not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except Exception as e:
        raise GatewayConfigLoadError(f"Failed to read gateway config: {e}") from e

    if not isinstance(data, dict):
        raise GatewayConfigLoadError("Root YAML must be a mapping.")

    try:
        return GatewayConfig(**data)
    except Exception as e:
        raise GatewayConfigLoadError(f"Invalid gateway config: {e}") from e


def reload_gateway_config() -> None:
    load_gateway_config.cache_clear()


def get_gateway_config() -> GatewayConfig:
    return load_gateway_config()


def get_language_name(language_id: int) -> str | None:
    return load_gateway_config().languages.get(language_id)
