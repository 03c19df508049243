# ═══════════════════════════════════════════════════════════════════════════════
# Trajectory Engine — Projection Service
# © 2026 Aparajita Parihar. All rights reserved.
#
# Request-shaped entry points mirroring:
#   POST /projections/scenario  : one scenario over the horizon
#   POST /projections/journey   : a journey's first step, flat over the horizon
#
# Resolves the referenced records, applies request defaults, runs the engine
# and stamps reproducibility metadata onto the response.
#
# Journey staging: only the first step's scenario is projected, for the whole
# horizon. Date-based switching between steps is not modelled.
# ═══════════════════════════════════════════════════════════════════════════════

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from config.constants import ENGINE_VERSION
from config.settings import default_decarb_path, default_horizon_years
from core.decarb import normalise_path_id
from core.projection import project
from services.assumptions import SNAPSHOT_KIND, resolve_snapshot
from services.store import RecordNotFoundError, RecordStore

logger = logging.getLogger(__name__)

_PROFILE_FIELDS = ("property_model_id", "occupancy_profile_id", "dhw_profile_id")


class InvalidProjectionRequest(ValueError):
    """The request is malformed (missing ids, empty journey, bad horizon)."""


def _require(request: dict, fields: tuple[str, ...]) -> None:
    missing = [f for f in fields if not request.get(f)]
    if missing:
        raise InvalidProjectionRequest(f"{', '.join(fields)} are required (missing: {', '.join(missing)})")


def _horizon(request: dict) -> int:
    raw = request.get("horizon_years")
    if not raw:
        return default_horizon_years()
    if isinstance(raw, bool):
        raise InvalidProjectionRequest(f"horizon_years must be an integer, got {raw!r}")
    try:
        years = int(raw)
        whole = float(raw) == years
    except (TypeError, ValueError, OverflowError):
        raise InvalidProjectionRequest(f"horizon_years must be an integer, got {raw!r}")
    if not whole:
        raise InvalidProjectionRequest(f"horizon_years must be a whole number, got {raw!r}")
    if years < 1:
        raise InvalidProjectionRequest("horizon_years must be >= 1")
    return years


def _fetch_profiles(request: dict, store: RecordStore) -> tuple[dict, dict, dict]:
    return (
        store.get("property_models", request["property_model_id"]),
        store.get("occupancy_profiles", request["occupancy_profile_id"]),
        store.get("dhw_profiles", request["dhw_profile_id"]),
    )


def _run(
    request: dict,
    store: RecordStore,
    scenario: dict,
    *,
    scenario_id: Any,
    journey_id: Any,
    start_year: Optional[int],
    now: Optional[datetime],
) -> dict:
    property_model, occupancy_profile, dhw_profile = _fetch_profiles(request, store)
    snapshot = resolve_snapshot(
        store.all(SNAPSHOT_KIND),
        snapshot_id=request.get("assumptions_snapshot_id"),
        region_code=request.get("region_code"),
    )

    horizon_years = _horizon(request)
    path_id = normalise_path_id(request.get("grid_decarb_path") or default_decarb_path())
    generated = now or datetime.now(timezone.utc)
    year = start_year if start_year is not None else generated.year

    logger.info(
        "Projecting scenario=%s journey=%s snapshot=%s path=%s horizon=%d start=%d",
        scenario_id, journey_id, snapshot.get("id"), path_id, horizon_years, year,
    )
    projection = project(
        property_model,
        occupancy_profile,
        dhw_profile,
        scenario,
        snapshot,
        decarb_path_id=path_id,
        horizon_years=horizon_years,
        start_year=year,
    )

    metadata = {
        "lead_id": request.get("lead_id") or None,
        "property_model_id": request["property_model_id"],
        "occupancy_profile_id": request["occupancy_profile_id"],
        "dhw_profile_id": request["dhw_profile_id"],
        "scenario_id": scenario_id,
        "journey_id": journey_id,
        "assumptions_snapshot_id": snapshot.get("id"),
        "region_code": snapshot.get("region_code"),
        "grid_decarb_path": path_id,
        "engine_version": ENGINE_VERSION,
        "generated_at": generated.isoformat(),
    }
    return {"metadata": metadata, **projection}


def run_scenario_projection(
    request: dict,
    store: RecordStore,
    *,
    start_year: Optional[int] = None,
    now: Optional[datetime] = None,
) -> dict:
    """
    Project a single scenario.

    Parameters
    ----------
    request : dict
        ``property_model_id``, ``occupancy_profile_id``, ``dhw_profile_id``
        and ``scenario_id`` are required; ``horizon_years``,
        ``assumptions_snapshot_id``, ``grid_decarb_path``, ``region_code``
        and ``lead_id`` are optional.
    store : RecordStore
        Source of the referenced records.
    start_year, now : optional
        Pin the first projected year and the metadata timestamp; both default
        to the current UTC clock.

    Returns
    -------
    dict with ``metadata``, ``monthly``, ``yearly`` and ``summary``.

    Raises
    ------
    InvalidProjectionRequest
        Missing required ids or an invalid horizon.
    RecordNotFoundError
        Any referenced record (or a usable assumptions snapshot) is missing.
    """
    _require(request, _PROFILE_FIELDS + ("scenario_id",))
    try:
        scenario = store.get("scenarios", request["scenario_id"])
        return _run(
            request, store, scenario,
            scenario_id=request["scenario_id"], journey_id=None,
            start_year=start_year, now=now,
        )
    except RecordNotFoundError as exc:
        logger.warning("Scenario projection aborted: %s", exc)
        raise


def run_journey_projection(
    request: dict,
    store: RecordStore,
    *,
    start_year: Optional[int] = None,
    now: Optional[datetime] = None,
) -> dict:
    """Project a journey using its first step's scenario for the whole horizon."""
    _require(request, _PROFILE_FIELDS + ("journey_id",))
    try:
        journey = store.get("journeys", request["journey_id"])
        steps = journey.get("steps") or []
        if not steps:
            raise InvalidProjectionRequest("Journey has no steps")

        first_step = steps[0] if isinstance(steps[0], dict) else {}
        scenario = store.get("scenarios", first_step.get("scenario_id"))
        return _run(
            request, store, scenario,
            scenario_id=None, journey_id=request["journey_id"],
            start_year=start_year, now=now,
        )
    except RecordNotFoundError as exc:
        logger.warning("Journey projection aborted: %s", exc)
        raise
