"""Grid decarbonisation paths.

Each path maps ``(year, start_year)`` to a multiplier applied to the
snapshot's grid carbon intensity. Multipliers fall linearly from 1.0 and are
clamped at a per-path floor. Gas intensity is never decarbonised.
"""

from __future__ import annotations

import logging
from typing import Callable

from config.constants import DECARB_PATHS, DEFAULT_DECARB_PATH

logger = logging.getLogger(__name__)

DecarbPath = Callable[[int, int], float]


def _linear_path(annual_step: float, floor: float) -> DecarbPath:
    def path(year: int, start_year: int) -> float:
        return max(floor, 1.0 - annual_step * (year - start_year))

    return path


GRID_DECARB_PATHS: dict[str, DecarbPath] = {
    path_id: _linear_path(step, floor) for path_id, (step, floor) in DECARB_PATHS.items()
}


def normalise_path_id(path_id: str | None) -> str:
    """Return ``path_id`` if it names a known path, otherwise the central path."""
    key = str(path_id or "").strip().lower()
    if key in GRID_DECARB_PATHS:
        return key
    if path_id:
        logger.warning("Unknown grid decarb path %r; using %r", path_id, DEFAULT_DECARB_PATH)
    return DEFAULT_DECARB_PATH


def get_decarb_path(path_id: str | None) -> DecarbPath:
    return GRID_DECARB_PATHS[normalise_path_id(path_id)]


def grid_multiplier(path_id: str | None, year: int, start_year: int) -> float:
    """Grid-intensity multiplier for ``year`` on the named path."""
    return get_decarb_path(path_id)(year, start_year)
