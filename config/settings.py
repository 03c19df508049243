# ═══════════════════════════════════════════════════════════════════════════════
# Trajectory Engine — Runtime Settings
# © 2026 Aparajita Parihar. All rights reserved.
#
# Rules:
#   • get_setting() is the sole environment access point for the package.
#   • A project-root .env is loaded once at import; real environment
#     variables always win over .env values.
#   • Malformed numeric settings fall back to the constants registry.
# ═══════════════════════════════════════════════════════════════════════════════

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from config.constants import (
    DEFAULT_DECARB_PATH,
    DEFAULT_HORIZON_YEARS,
    DEFAULT_REGION_CODE,
)

logger = logging.getLogger(__name__)

_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

REGION_ENV = "TRAJECTORY_DEFAULT_REGION"
HORIZON_ENV = "TRAJECTORY_DEFAULT_HORIZON_YEARS"
DECARB_PATH_ENV = "TRAJECTORY_DEFAULT_DECARB_PATH"
LOG_LEVEL_ENV = "TRAJECTORY_LOG_LEVEL"


def get_setting(key: str, default: str = "") -> str:
    """Read a setting from the environment, returning ``default`` when unset or blank."""
    value = os.getenv(key, "").strip()
    return value if value else default


def default_region() -> str:
    return get_setting(REGION_ENV, DEFAULT_REGION_CODE)


def default_horizon_years() -> int:
    raw = get_setting(HORIZON_ENV, str(DEFAULT_HORIZON_YEARS))
    try:
        years = int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r", HORIZON_ENV, raw)
        return DEFAULT_HORIZON_YEARS
    return years if years > 0 else DEFAULT_HORIZON_YEARS


def default_decarb_path() -> str:
    return get_setting(DECARB_PATH_ENV, DEFAULT_DECARB_PATH)


def configure_logging(level: str | None = None) -> None:
    """Apply the configured log level to the root logger.

    Intended for scripts and service entry points; library code only ever
    obtains module loggers.
    """
    name = (level or get_setting(LOG_LEVEL_ENV, "INFO")).upper()
    numeric = getattr(logging, name, None)
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
