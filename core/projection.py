# ═══════════════════════════════════════════════════════════════════════════════
# Trajectory Engine — Cost & Carbon Projection Engine
# © 2026 Aparajita Parihar. All rights reserved.
#
# Monthly space-heat + hot-water demand → fuel by technology → cost & carbon,
# aggregated per year over a multi-year horizon under a grid decarbonisation
# path. Deterministic, side-effect free, memoised by input value.
#
# DISCLAIMER: Simplified steady-state model. Results are indicative only.
# ═══════════════════════════════════════════════════════════════════════════════

from __future__ import annotations

import copy
import functools
import json
import logging
import math
from collections.abc import Mapping
from datetime import date
from typing import Any

import numpy as np
import pandas as pd

from config.constants import (
    COLD_INLET_TEMP_C,
    COMFORT_SCORES,
    CONFIDENCE_ESTIMATED,
    CONFIDENCE_ZONE_DATA,
    DAYS_PER_BILLING_MONTH,
    DAYS_PER_YEAR,
    DEFAULT_ANNUAL_SPACE_HEAT_KWH,
    DEFAULT_BOILER_EFFICIENCY,
    DEFAULT_COMFORT_SCORE,
    DEFAULT_DHW_COP,
    DEFAULT_DHW_TARGET_TEMP_C,
    DEFAULT_DISRUPTION_SCORE,
    DEFAULT_OCCUPANCY_MULTIPLIER,
    DEFAULT_OCCUPANTS,
    DEFAULT_SPACE_HEAT_SCOP,
    ELECTRIC_DHW_TYPES,
    ENERGY_DP,
    CARBON_DP,
    FLOOR_AREA_KWH_PER_M2,
    GAS_BOILER_TYPES,
    GAS_DHW_EFFICIENCY,
    GRAMS_PER_KG,
    HEAT_PUMP_SPACE_TYPES,
    LITRES_PER_BATH,
    LITRES_PER_OCCUPANT_PER_DAY,
    LITRES_PER_SHOWER,
    MIN_BOILER_EFFICIENCY,
    MIN_DHW_COP,
    MIN_SPACE_HEAT_SCOP,
    MONEY_DP,
    OCCUPANCY_MULTIPLIERS,
    OCCUPANCY_PRESET_ALIASES,
    PENCE_PER_POUND,
    PREHEAT_ELEC_FRACTION,
    PREHEAT_GAS_EFFICIENCY,
    PREHEAT_TANK_TYPES,
    UK_MONTHLY_SEASONALITY,
    WATER_SPECIFIC_HEAT_KJ_PER_KG_K,
    YEARLY_CARBON_DP,
    YEARLY_ENERGY_DP,
    ZONE_HEAT_LOSS_KWH_PER_W_K,
)
from core.decarb import get_decarb_path, normalise_path_id

logger = logging.getLogger(__name__)

ELEC = "elec"
GAS = "gas"

# (label, fuel, fraction of demand served, divisor applied to that fraction)
AllocationPlan = list[tuple[str, str, float, float]]


# ─────────────────────────────────────────────────────────────────────────────
# NUMERIC HELPERS
# ─────────────────────────────────────────────────────────────────────────────

def _to_float(value: Any, default: float) -> float:
    """Coerce numbers and numeric strings; anything unusable becomes ``default``."""
    if value is None or isinstance(value, bool):
        return default
    try:
        out = float(value)
    except (TypeError, ValueError):
        return default
    return out if math.isfinite(out) else default


def round_half_up(value: float, decimals: int) -> float:
    """Round half away from zero, independent of binary tie-breaking."""
    m = 10 ** decimals
    x = float(value)
    return float(np.sign(x) * (np.floor(abs(x) * m + 0.5) / m))


def _as_list(value: Any) -> list:
    return list(value) if isinstance(value, (list, tuple)) else []


# ─────────────────────────────────────────────────────────────────────────────
# DEMAND BASELINES
# ─────────────────────────────────────────────────────────────────────────────

def _zones(property_model: Mapping) -> list:
    return [z for z in _as_list(property_model.get("zones")) if isinstance(z, Mapping)]


def baseline_space_heat_kwh(property_model: Mapping) -> tuple[float, bool]:
    """
    Annual space-heat demand before occupancy, and whether zone data was used.

    Only zones with a positive heat-loss coefficient count; when none do, the
    floor area estimate (then the flat default) applies instead.
    """
    coefficients = [_to_float(z.get("heat_loss_w_per_k"), 0.0) for z in _zones(property_model)]
    coefficients = [c for c in coefficients if c > 0]
    if coefficients:
        return sum(coefficients) * ZONE_HEAT_LOSS_KWH_PER_W_K, True

    floor_area_m2 = _to_float(property_model.get("floor_area_m2"), 0.0)
    if floor_area_m2 > 0:
        return floor_area_m2 * FLOOR_AREA_KWH_PER_M2, False

    return DEFAULT_ANNUAL_SPACE_HEAT_KWH, False


def normalise_preset(preset: Any) -> str:
    key = str(preset or "").strip().lower().replace("_", "-").replace(" ", "-")
    return OCCUPANCY_PRESET_ALIASES.get(key, key)


def occupancy_multiplier(preset: Any) -> float:
    key = normalise_preset(preset)
    if key in OCCUPANCY_MULTIPLIERS:
        return OCCUPANCY_MULTIPLIERS[key]
    if preset:
        logger.warning("Unknown occupancy preset %r; using multiplier %.2f",
                       preset, DEFAULT_OCCUPANCY_MULTIPLIER)
    return DEFAULT_OCCUPANCY_MULTIPLIER


def annual_dhw_kwh(dhw_profile: Mapping) -> float:
    """
    Annual domestic hot-water demand.

    litres/day = showers × 45 + baths/week × 80 / 7 + occupants × 10
    kWh/day    = litres × 4.186 × (target − 10 °C) / 3600
    """
    showers = _to_float(dhw_profile.get("showers_per_day"), 0.0)
    baths = _to_float(dhw_profile.get("baths_per_week"), 0.0)
    occupants = _to_float(dhw_profile.get("occupants"), DEFAULT_OCCUPANTS) or DEFAULT_OCCUPANTS
    target_c = (
        _to_float(dhw_profile.get("target_temp_c"), DEFAULT_DHW_TARGET_TEMP_C)
        or DEFAULT_DHW_TARGET_TEMP_C
    )

    litres_per_day = (
        showers * LITRES_PER_SHOWER
        + (baths * LITRES_PER_BATH) / 7.0
        + occupants * LITRES_PER_OCCUPANT_PER_DAY
    )
    delta_t = max(0.0, target_c - COLD_INLET_TEMP_C)
    kwh_per_day = litres_per_day * WATER_SPECIFIC_HEAT_KJ_PER_KG_K * delta_t / 3600.0
    return kwh_per_day * DAYS_PER_YEAR


def confidence_band(used_zone_data: bool) -> dict:
    low, high = CONFIDENCE_ZONE_DATA if used_zone_data else CONFIDENCE_ESTIMATED
    return {"low_factor": low, "high_factor": high}


# ─────────────────────────────────────────────────────────────────────────────
# TECHNOLOGY ALLOCATION
# Plans are resolved once per projection; every month applies the same plan.
# ─────────────────────────────────────────────────────────────────────────────

def _tech_type(tech: Any) -> str:
    if isinstance(tech, Mapping):
        return str(tech.get("type") or "").strip().lower()
    return str(tech or "").strip().lower()


def _first_positive(tech: Any, keys: tuple[str, ...], default: float) -> float:
    if not isinstance(tech, Mapping):
        return default
    for key in keys:
        value = _to_float(tech.get(key), 0.0)
        if value > 0:
            return value
    return default


def _tech_lists(scenario: Mapping) -> tuple[list, list]:
    stack = scenario.get("tech_stack")
    if not isinstance(stack, Mapping):
        return [], []
    return _as_list(stack.get("space_heat")), _as_list(stack.get("dhw"))


def space_heat_plan(techs: list) -> AllocationPlan:
    """Equal split across listed technologies; none listed means an 0.85 gas boiler."""
    if not techs:
        return [("gas_boiler", GAS, 1.0, DEFAULT_BOILER_EFFICIENCY)]

    served_fraction = 1.0 / len(techs)
    plan: AllocationPlan = []
    for tech in techs:
        tech_type = _tech_type(tech)
        if tech_type in HEAT_PUMP_SPACE_TYPES:
            scop = _first_positive(tech, ("scop", "seasonal_cop"), DEFAULT_SPACE_HEAT_SCOP)
            plan.append((tech_type, ELEC, served_fraction, max(MIN_SPACE_HEAT_SCOP, scop)))
        elif tech_type in GAS_BOILER_TYPES:
            eff = _first_positive(tech, ("seasonal_eff",), DEFAULT_BOILER_EFFICIENCY)
            plan.append((tech_type, GAS, served_fraction, max(MIN_BOILER_EFFICIENCY, eff)))
        else:
            logger.warning("Unknown space-heat technology %r; treating as gas boiler", tech_type)
            plan.append((tech_type or "gas_boiler", GAS, served_fraction, DEFAULT_BOILER_EFFICIENCY))
    return plan


def dhw_plan(techs: list, preheat_enabled: bool) -> AllocationPlan:
    """Every listed entry serves the month's hot-water demand in full."""
    if not techs:
        return [("gas", GAS, 1.0, GAS_DHW_EFFICIENCY)]

    plan: AllocationPlan = []
    for tech in techs:
        tech_type = _tech_type(tech)
        if tech_type in PREHEAT_TANK_TYPES and preheat_enabled:
            plan.append(("preheat_elec", ELEC, PREHEAT_ELEC_FRACTION, 1.0))
            plan.append(("gas", GAS, 1.0 - PREHEAT_ELEC_FRACTION, PREHEAT_GAS_EFFICIENCY))
        elif tech_type in ELECTRIC_DHW_TYPES:
            cop = _first_positive(tech, ("cop",), DEFAULT_DHW_COP)
            plan.append((tech_type, ELEC, 1.0, max(MIN_DHW_COP, cop)))
        else:
            if tech_type not in PREHEAT_TANK_TYPES:
                logger.debug("Hot-water technology %r served by gas", tech_type)
            plan.append(("gas", GAS, 1.0, GAS_DHW_EFFICIENCY))
    return plan


def apply_plan(demand_kwh: float, plan: AllocationPlan) -> tuple[dict, float, float]:
    """Return (kwh_by_tech, elec_kwh, gas_kwh) for one month's delivered demand."""
    by_tech: dict[str, float] = {}
    elec = 0.0
    gas = 0.0
    for label, fuel, fraction, divisor in plan:
        kwh = demand_kwh * fraction / divisor
        by_tech[label] = by_tech.get(label, 0.0) + kwh
        if fuel == ELEC:
            elec += kwh
        else:
            gas += kwh
    return by_tech, elec, gas


def _end_use_block(by_tech: dict, elec: float, gas: float) -> dict:
    return {
        "kwh_by_tech": {k: round_half_up(v, ENERGY_DP) for k, v in by_tech.items()},
        "elec_kwh": round_half_up(elec, ENERGY_DP),
        "gas_kwh": round_half_up(gas, ENERGY_DP),
    }


# ─────────────────────────────────────────────────────────────────────────────
# TARIFF RESOLUTION
# ─────────────────────────────────────────────────────────────────────────────

def _tariffs(assumptions: Mapping) -> dict:
    """Snapshot prices in pounds and intensities in g/kWh."""
    standing_p_per_day = (
        _to_float(assumptions.get("elec_standing_charge_p_per_day"), 0.0)
        + _to_float(assumptions.get("gas_standing_charge_p_per_day"), 0.0)
    )
    return {
        "elec_rate": _to_float(assumptions.get("electricity_unit_p_per_kwh"), 0.0) / PENCE_PER_POUND,
        "gas_rate": _to_float(assumptions.get("gas_unit_p_per_kwh"), 0.0) / PENCE_PER_POUND,
        "standing_gbp_per_month": standing_p_per_day * DAYS_PER_BILLING_MONTH / PENCE_PER_POUND,
        "grid_intensity": _to_float(assumptions.get("grid_intensity_gco2e_per_kwh"), 0.0),
        "gas_intensity": _to_float(assumptions.get("gas_intensity_gco2e_per_kwh"), 0.0),
    }


# ─────────────────────────────────────────────────────────────────────────────
# AGGREGATION & SUMMARY
# ─────────────────────────────────────────────────────────────────────────────

_TOTAL_COLUMNS = ["elec_kwh", "gas_kwh", "cost_gbp", "carbon_kgco2e"]


def aggregate_yearly(monthly: list[dict]) -> list[dict]:
    """Sum each calendar year's monthly totals in chronological order."""
    if not monthly:
        return []
    frame = pd.DataFrame(
        [{"year": int(m["period_start"][:4]), **m["totals"]} for m in monthly]
    )
    sums = frame.groupby("year", sort=True)[_TOTAL_COLUMNS].sum()

    yearly = []
    for year, row in sums.iterrows():
        yearly.append({
            "year": int(year),
            "elec_kwh": round_half_up(row["elec_kwh"], YEARLY_ENERGY_DP),
            "gas_kwh": round_half_up(row["gas_kwh"], YEARLY_ENERGY_DP),
            "cost_gbp": round_half_up(row["cost_gbp"], MONEY_DP),
            "carbon_kgco2e": round_half_up(row["carbon_kgco2e"], YEARLY_CARBON_DP),
        })
    return yearly


def comfort_score(comfort_priority: Any) -> int:
    return COMFORT_SCORES.get(str(comfort_priority or "").strip().lower(), DEFAULT_COMFORT_SCORE)


def summarise(yearly: list[dict], scenario: Mapping, occupancy_profile: Mapping) -> dict:
    year_1 = yearly[0]
    year_10 = yearly[min(9, len(yearly) - 1)]
    disruption = _to_float(scenario.get("disruption_score"), 0.0)
    return {
        "year_1": {"cost_gbp": year_1["cost_gbp"], "carbon_kgco2e": year_1["carbon_kgco2e"]},
        "year_10": {"cost_gbp": year_10["cost_gbp"], "carbon_kgco2e": year_10["carbon_kgco2e"]},
        "disruption_score": int(disruption) if disruption else DEFAULT_DISRUPTION_SCORE,
        "comfort_score": comfort_score(occupancy_profile.get("comfort_priority")),
    }


# ─────────────────────────────────────────────────────────────────────────────
# ENGINE
# ─────────────────────────────────────────────────────────────────────────────

def _validate_projection_inputs(records: dict, horizon_years: Any, start_year: Any) -> None:
    """Structural checks only; missing optional fields are never an error."""
    for name, record in records.items():
        if not isinstance(record, Mapping):
            raise ValueError(f"{name} must be a mapping, got {type(record).__name__}.")
    for name, value in (("horizon_years", horizon_years), ("start_year", start_year)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{name} must be an integer.")
    if horizon_years < 1:
        raise ValueError("horizon_years must be >= 1.")


def _project_impl(
    property_model: Mapping,
    occupancy_profile: Mapping,
    dhw_profile: Mapping,
    scenario: Mapping,
    assumptions: Mapping,
    decarb_path_id: str,
    horizon_years: int,
    start_year: int,
) -> dict:
    baseline_kwh, used_zone_data = baseline_space_heat_kwh(property_model)
    annual_space_heat = baseline_kwh * occupancy_multiplier(occupancy_profile.get("preset"))
    monthly_dhw = annual_dhw_kwh(dhw_profile) / 12.0
    confidence = confidence_band(used_zone_data)

    space_techs, dhw_techs = _tech_lists(scenario)
    sh_plan = space_heat_plan(space_techs)
    hw_plan = dhw_plan(dhw_techs, bool(dhw_profile.get("preheat_enabled")))

    tariffs = _tariffs(assumptions)
    decarb = get_decarb_path(decarb_path_id)

    monthly: list[dict] = []
    for year in range(start_year, start_year + horizon_years):
        grid_intensity = tariffs["grid_intensity"] * decarb(year, start_year)
        gas_intensity = tariffs["gas_intensity"]

        for month_index, weight in enumerate(UK_MONTHLY_SEASONALITY):
            sh_by_tech, sh_elec, sh_gas = apply_plan(annual_space_heat * weight, sh_plan)
            hw_by_tech, hw_elec, hw_gas = apply_plan(monthly_dhw, hw_plan)

            total_elec = sh_elec + hw_elec
            total_gas = sh_gas + hw_gas
            total_cost = (
                total_elec * tariffs["elec_rate"]
                + total_gas * tariffs["gas_rate"]
                + tariffs["standing_gbp_per_month"]
            )
            total_carbon = (total_elec * grid_intensity + total_gas * gas_intensity) / GRAMS_PER_KG

            monthly.append({
                "period_start": date(year, month_index + 1, 1).isoformat(),
                "space_heat": _end_use_block(sh_by_tech, sh_elec, sh_gas),
                "dhw": _end_use_block(hw_by_tech, hw_elec, hw_gas),
                "totals": {
                    "elec_kwh": round_half_up(total_elec, ENERGY_DP),
                    "gas_kwh": round_half_up(total_gas, ENERGY_DP),
                    "cost_gbp": round_half_up(total_cost, MONEY_DP),
                    "carbon_kgco2e": round_half_up(total_carbon, CARBON_DP),
                },
                "confidence": dict(confidence),
            })

    yearly = aggregate_yearly(monthly)
    return {
        "monthly": monthly,
        "yearly": yearly,
        "summary": summarise(yearly, scenario, occupancy_profile),
    }


def _plain(value: Any) -> Any:
    """Convert nested mappings and sequences to dicts and lists for JSON encoding."""
    if isinstance(value, Mapping):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def _make_cache_key(*records: Mapping) -> tuple:
    """Hashable canonical form of the mapping inputs for LRU caching."""
    return tuple(json.dumps(_plain(r), sort_keys=True, default=str) for r in records)


@functools.lru_cache(maxsize=256)
def _project_cached(
    property_json: str,
    occupancy_json: str,
    dhw_json: str,
    scenario_json: str,
    assumptions_json: str,
    decarb_path_id: str,
    horizon_years: int,
    start_year: int,
) -> dict:
    logger.debug("Projection cache miss: path=%s horizon=%d start=%d",
                 decarb_path_id, horizon_years, start_year)
    return _project_impl(
        json.loads(property_json),
        json.loads(occupancy_json),
        json.loads(dhw_json),
        json.loads(scenario_json),
        json.loads(assumptions_json),
        decarb_path_id,
        horizon_years,
        start_year,
    )


def project(
    property_model: Mapping,
    occupancy_profile: Mapping,
    dhw_profile: Mapping,
    scenario: Mapping,
    assumptions: Mapping,
    decarb_path_id: str | None = None,
    horizon_years: int = 10,
    start_year: int | None = None,
) -> dict:
    """
    Public entry point for the projection engine with LRU caching.

    Returns ``{"monthly": [...], "yearly": [...], "summary": {...}}`` where
    each monthly record carries the space-heat and hot-water breakdowns,
    totals (kWh, £, kgCO₂e) and the confidence band. Identical inputs always
    produce identical output; unknown presets, technology types and path ids
    fall back to their defaults instead of failing.

    ``start_year`` defaults to the current calendar year.
    """
    if start_year is None:
        start_year = date.today().year
    _validate_projection_inputs(
        {
            "property_model": property_model,
            "occupancy_profile": occupancy_profile,
            "dhw_profile": dhw_profile,
            "scenario": scenario,
            "assumptions": assumptions,
        },
        horizon_years,
        start_year,
    )

    key = _make_cache_key(property_model, occupancy_profile, dhw_profile, scenario, assumptions)
    result = _project_cached(*key, normalise_path_id(decarb_path_id), horizon_years, start_year)
    # Deep copy so callers can never mutate the cached result
    return copy.deepcopy(result)


def projection_frame(result: Mapping) -> pd.DataFrame:
    """Flatten a projection's monthly series into one DataFrame row per month."""
    rows = []
    for m in result.get("monthly", []):
        rows.append({
            "period_start": pd.Timestamp(m["period_start"]),
            "space_heat_elec_kwh": m["space_heat"]["elec_kwh"],
            "space_heat_gas_kwh": m["space_heat"]["gas_kwh"],
            "dhw_elec_kwh": m["dhw"]["elec_kwh"],
            "dhw_gas_kwh": m["dhw"]["gas_kwh"],
            **m["totals"],
            **m["confidence"],
        })
    return pd.DataFrame(rows, columns=[
        "period_start",
        "space_heat_elec_kwh", "space_heat_gas_kwh",
        "dhw_elec_kwh", "dhw_gas_kwh",
        *_TOTAL_COLUMNS,
        "low_factor", "high_factor",
    ])
