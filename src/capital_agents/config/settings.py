"""
Runtime settings for the Capital Agents pipeline.

Values come from the process environment (the CLI calls load_dotenv()
first, so a local .env file is honoured). Everything that is not an
environment concern lives in config/constants.py.
"""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, field_validator

from capital_agents.config.constants import DEFAULT_TOTAL_CAPITAL
from capital_agents.exceptions import EnvConfigError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

ENV_TOTAL_CAPITAL = "CAPITAL_TOTAL_CAPITAL"
ENV_SYNERGY_SEED = "CAPITAL_SYNERGY_SEED"
ENV_LOG_LEVEL = "CAPITAL_LOG_LEVEL"
ENV_OUTPUT_DIR = "CAPITAL_OUTPUT_DIR"

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------

class Settings(BaseModel):
    """Resolved runtime settings."""

    total_capital: float = Field(DEFAULT_TOTAL_CAPITAL, gt=0)
    synergy_seed: Optional[int] = Field(
        None, description="Seed for the synergy draw; None means unseeded"
    )
    log_level: str = Field("INFO")
    output_dir: str = Field("output", min_length=1)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {VALID_LOG_LEVELS}, got '{v}'"
            )
        return level


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def _read_number(env: Mapping[str, str], key: str, cast):
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return None
    try:
        return cast(raw.strip().replace("_", ""))
    except ValueError as e:
        raise EnvConfigError(f"{key} must be a number, got '{raw}'") from e


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        env: Mapping to read from; defaults to os.environ.

    Raises:
        EnvConfigError: a variable is present but unusable.
    """
    env = os.environ if env is None else env

    values: dict = {}
    total = _read_number(env, ENV_TOTAL_CAPITAL, float)
    if total is not None:
        values["total_capital"] = total
    seed = _read_number(env, ENV_SYNERGY_SEED, int)
    if seed is not None:
        values["synergy_seed"] = seed
    if env.get(ENV_LOG_LEVEL):
        values["log_level"] = env[ENV_LOG_LEVEL]
    if env.get(ENV_OUTPUT_DIR):
        values["output_dir"] = env[ENV_OUTPUT_DIR]

    try:
        settings = Settings(**values)
    except ValueError as e:
        raise EnvConfigError(f"Invalid environment configuration: {e}") from e

    logger.debug(f"Loaded settings: {settings.model_dump()}")
    return settings
