"""
Engine configuration.

Defaults live on EngineSettings; a .env file next to the package and the
LEASE_ENGINE_* environment variables override them.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

load_dotenv(Path(__file__).resolve().parent / ".env")

DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


class EngineSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    payment_timing: Literal["advance", "arrears"] = "advance"
    rounding: Literal["none", "cents"] = "none"
    irr_guess: float = 0.1
    irr_tolerance: float = Field(default=1e-6, gt=0.0)
    irr_max_iterations: int = Field(default=100, ge=1)
    irr_min_rate: float = -0.99
    irr_max_rate: float = 10.0
    reconcile_tolerance: float = Field(default=1.0, ge=0.0)
    log_level: str = "INFO"
    allowed_origins: List[str] = Field(default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS))


def _env(name: str) -> str:
    return (os.environ.get(f"LEASE_ENGINE_{name}") or "").strip()


def settings_from_env() -> EngineSettings:
    """Build settings from the environment; unset variables keep the model defaults."""
    values = {}
    for key in ("payment_timing", "rounding", "log_level"):
        raw = _env(key.upper())
        if raw:
            values[key] = raw.lower() if key != "log_level" else raw.upper()
    for key in ("irr_guess", "irr_tolerance", "irr_min_rate", "irr_max_rate", "reconcile_tolerance"):
        raw = _env(key.upper())
        if raw:
            values[key] = float(raw)
    raw = _env("IRR_MAX_ITERATIONS")
    if raw:
        values["irr_max_iterations"] = int(raw)
    origins = _env("ALLOWED_ORIGINS")
    if origins:
        values["allowed_origins"] = [o.strip() for o in origins.split(",") if o.strip()]
    return EngineSettings(**values)


@lru_cache(maxsize=1)
def get_settings() -> EngineSettings:
    return settings_from_env()


def configure_logging(level: Optional[str] = None) -> None:
    """Basic stderr logging for scripts; the API inherits uvicorn's handlers."""
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
