# ═══════════════════════════════════════════════════════════════════════════════
# Trajectory Engine — Canonical Constants Registry
# © 2026 Aparajita Parihar. All rights reserved.
#
# Single source of truth for all physical, financial and modelling constants
# used by the projection engine. All modules MUST import from here and never
# redefine constants locally.
#
# Sources:
#   UK monthly degree-day shape (winter-weighted, normalised to 1.0)
#   Specific heat of water 4.186 kJ/kg·K
#   SAP 10.2 default cold-water inlet temperature (10 °C)
#
# This file has ZERO network and ZERO side-effect imports.
# It is safe to import in any context, including unit tests.
# ═══════════════════════════════════════════════════════════════════════════════

from __future__ import annotations

# ─────────────────────────────────────────────────────────────────────────────
# ENGINE IDENTITY
# Stamped into every projection response for reproducibility auditing.
# ─────────────────────────────────────────────────────────────────────────────

ENGINE_VERSION: str = "0.1"

DEFAULT_REGION_CODE: str = "UK-GB"
DEFAULT_HORIZON_YEARS: int = 10
DEFAULT_DECARB_PATH: str = "central"


# ─────────────────────────────────────────────────────────────────────────────
# SPACE-HEAT DEMAND BASELINE
# ─────────────────────────────────────────────────────────────────────────────

# Annual kWh per W/K of zone heat-loss coefficient
ZONE_HEAT_LOSS_KWH_PER_W_K: float = 35.0

# Annual space-heat intensity when only floor area is known
FLOOR_AREA_KWH_PER_M2: float = 90.0  # kWh / m² / year

# Fallback when neither zones nor floor area are usable
DEFAULT_ANNUAL_SPACE_HEAT_KWH: float = 12000.0  # kWh / year

# UK seasonality weights, January → December (sum = 1.0)
UK_MONTHLY_SEASONALITY: tuple[float, ...] = (
    0.14,  # Jan
    0.13,  # Feb
    0.11,  # Mar
    0.08,  # Apr
    0.05,  # May
    0.03,  # Jun
    0.02,  # Jul
    0.03,  # Aug
    0.05,  # Sep
    0.09,  # Oct
    0.12,  # Nov
    0.15,  # Dec
)


# ─────────────────────────────────────────────────────────────────────────────
# OCCUPANCY
# Canonical preset ids and the spellings stored by older profile records.
# ─────────────────────────────────────────────────────────────────────────────

OCCUPANCY_MULTIPLIERS: dict[str, float] = {
    "work-from-home": 1.15,
    "always-home":    1.25,
    "out-9-to-5":     0.90,
    "shift":          1.00,
}

OCCUPANCY_PRESET_ALIASES: dict[str, str] = {
    "wfh":         "work-from-home",
    "9to5-out":    "out-9-to-5",
    "out-9to5":    "out-9-to-5",
    "shift-work":  "shift",
}

DEFAULT_OCCUPANCY_MULTIPLIER: float = 1.0

# comfort_priority → summary comfort score
COMFORT_SCORES: dict[str, int] = {
    "comfort": 5,
    "saver":   3,
}
DEFAULT_COMFORT_SCORE: int = 4

DEFAULT_DISRUPTION_SCORE: int = 3


# ─────────────────────────────────────────────────────────────────────────────
# DOMESTIC HOT WATER
# ─────────────────────────────────────────────────────────────────────────────

LITRES_PER_SHOWER: float = 45.0
LITRES_PER_BATH: float = 80.0
LITRES_PER_OCCUPANT_PER_DAY: float = 10.0  # basins, sinks, cleaning

WATER_SPECIFIC_HEAT_KJ_PER_KG_K: float = 4.186
COLD_INLET_TEMP_C: float = 10.0
DEFAULT_DHW_TARGET_TEMP_C: float = 50.0
DEFAULT_OCCUPANTS: int = 1

DAYS_PER_YEAR: int = 365


# ─────────────────────────────────────────────────────────────────────────────
# TECHNOLOGY EFFICIENCIES
# Divisors applied to delivered heat to obtain metered fuel.
# ─────────────────────────────────────────────────────────────────────────────

HEAT_PUMP_SPACE_TYPES: frozenset[str] = frozenset({"heat_pump", "air_to_air"})
GAS_BOILER_TYPES: frozenset[str] = frozenset({"gas_boiler"})
ELECTRIC_DHW_TYPES: frozenset[str] = frozenset({"electric", "heat_pump"})
PREHEAT_TANK_TYPES: frozenset[str] = frozenset({"preheat_tank", "mixergy"})

DEFAULT_SPACE_HEAT_SCOP: float = 3.0
MIN_SPACE_HEAT_SCOP: float = 1.0

DEFAULT_BOILER_EFFICIENCY: float = 0.85
MIN_BOILER_EFFICIENCY: float = 0.65

DEFAULT_DHW_COP: float = 2.5
MIN_DHW_COP: float = 1.0

GAS_DHW_EFFICIENCY: float = 0.80

# Preheat tank: share of hot-water energy met electrically (top slice)
PREHEAT_ELEC_FRACTION: float = 0.70
PREHEAT_GAS_EFFICIENCY: float = 0.85


# ─────────────────────────────────────────────────────────────────────────────
# TARIFF & CARBON CONVERSION
# ─────────────────────────────────────────────────────────────────────────────

PENCE_PER_POUND: float = 100.0
DAYS_PER_BILLING_MONTH: int = 30  # standing-charge month proxy
GRAMS_PER_KG: float = 1000.0


# ─────────────────────────────────────────────────────────────────────────────
# CONFIDENCE BANDS
# Each tuple: (low_factor, high_factor)
# ─────────────────────────────────────────────────────────────────────────────

CONFIDENCE_ZONE_DATA: tuple[float, float] = (0.88, 1.12)
CONFIDENCE_ESTIMATED: tuple[float, float] = (0.75, 1.25)


# ─────────────────────────────────────────────────────────────────────────────
# GRID DECARBONISATION PATHS
# Each tuple: (annual reduction in grid-intensity multiplier, floor)
# ─────────────────────────────────────────────────────────────────────────────

DECARB_PATHS: dict[str, tuple[float, float]] = {
    "central": (0.04, 0.40),
    "fast":    (0.06, 0.20),
    "slow":    (0.02, 0.60),
}


# ─────────────────────────────────────────────────────────────────────────────
# OUTPUT ROUNDING (decimal places)
# ─────────────────────────────────────────────────────────────────────────────

ENERGY_DP: int = 1
MONEY_DP: int = 2
CARBON_DP: int = 2
YEARLY_ENERGY_DP: int = 0
YEARLY_CARBON_DP: int = 0
