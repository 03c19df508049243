# ═══════════════════════════════════════════════════════════════════════════════
# Trajectory Engine — Technology Scenario & Occupancy Registry
# © 2026 Aparajita Parihar. All rights reserved.
#
# Single source of truth for:
#   • SCENARIOS          : ready-made heating / hot-water technology mixes
#   • OCCUPANCY_PRESETS  : display labels for the occupancy presets
#   • COMFORT_PRIORITIES : display labels for the comfort priority tags
#
# Scenario records use the same shape as stored scenario records, so any of
# them can be passed straight to core.projection.project().
#
# This file has ZERO network imports.
# It is safe to import in unit tests and CLI contexts.
# ═══════════════════════════════════════════════════════════════════════════════

from __future__ import annotations

from config.constants import (
    ELECTRIC_DHW_TYPES,
    GAS_BOILER_TYPES,
    HEAT_PUMP_SPACE_TYPES,
    OCCUPANCY_MULTIPLIERS,
    PREHEAT_TANK_TYPES,
)

# ─────────────────────────────────────────────────────────────────────────────
# TECHNOLOGY SCENARIOS
# Keys must be stable: they are used as scenario ids in comparison views.
# ─────────────────────────────────────────────────────────────────────────────

SCENARIOS: dict[str, dict] = {
    "gas_baseline": {
        "id":               "gas_baseline",
        "name":             "Existing Gas Boiler (No Intervention)",
        "tech_stack": {
            "space_heat": [{"type": "gas_boiler", "seasonal_eff": 0.85}],
            "dhw":        [{"type": "gas"}],
        },
        "disruption_score": 1,
    },
    "ashp": {
        "id":               "ashp",
        "name":             "Air-Source Heat Pump",
        "tech_stack": {
            "space_heat": [{"type": "heat_pump", "scop": 3.2}],
            "dhw":        [{"type": "heat_pump", "cop": 2.6}],
        },
        "disruption_score": 4,
    },
    "hybrid": {
        "id":               "hybrid",
        "name":             "Hybrid Heat Pump + Boiler",
        "tech_stack": {
            "space_heat": [
                {"type": "heat_pump", "scop": 3.0},
                {"type": "gas_boiler", "seasonal_eff": 0.88},
            ],
            "dhw":        [{"type": "gas"}],
        },
        "disruption_score": 3,
    },
    "air_to_air": {
        "id":               "air_to_air",
        "name":             "Air-to-Air Heat Pump + Electric Hot Water",
        "tech_stack": {
            "space_heat": [{"type": "air_to_air", "scop": 3.8}],
            "dhw":        [{"type": "electric", "cop": 1.0}],
        },
        "disruption_score": 2,
    },
    "boiler_preheat": {
        "id":               "boiler_preheat",
        "name":             "Gas Boiler + Preheat Tank",
        "tech_stack": {
            "space_heat": [{"type": "gas_boiler", "seasonal_eff": 0.89}],
            "dhw":        [{"type": "preheat_tank"}],
        },
        "disruption_score": 2,
    },
}


# ─────────────────────────────────────────────────────────────────────────────
# OCCUPANCY PRESET & COMFORT LABELS
# Every preset key must exist in config.constants.OCCUPANCY_MULTIPLIERS.
# ─────────────────────────────────────────────────────────────────────────────

OCCUPANCY_PRESETS: dict[str, str] = {
    "always-home":    "Always home",
    "out-9-to-5":     "Out 9-to-5",
    "shift":          "Shift work",
    "work-from-home": "Work from home",
}

COMFORT_PRIORITIES: dict[str, str] = {
    "comfort":  "Comfort first",
    "balanced": "Balanced",
    "saver":    "Cost saver",
}


# ─────────────────────────────────────────────────────────────────────────────
# INTEGRITY ASSERTION (runs at import time)
# Raises AssertionError immediately if a registry entry would silently hit an
# engine fallback.
# ─────────────────────────────────────────────────────────────────────────────

_KNOWN_SPACE_HEAT = HEAT_PUMP_SPACE_TYPES | GAS_BOILER_TYPES
_KNOWN_DHW = ELECTRIC_DHW_TYPES | PREHEAT_TANK_TYPES | {"gas"}


def _assert_registry_integrity() -> None:
    for key, scenario in SCENARIOS.items():
        assert scenario["id"] == key, (
            f"config/scenarios.py integrity error: scenario '{key}' has id '{scenario['id']}'"
        )
        assert 1 <= scenario["disruption_score"] <= 5, (
            f"config/scenarios.py integrity error: scenario '{key}' disruption_score out of range"
        )
        for tech in scenario["tech_stack"]["space_heat"]:
            assert tech["type"] in _KNOWN_SPACE_HEAT, (
                f"config/scenarios.py integrity error: "
                f"scenario '{key}' references unknown space-heat type '{tech['type']}'"
            )
        for tech in scenario["tech_stack"]["dhw"]:
            assert tech["type"] in _KNOWN_DHW, (
                f"config/scenarios.py integrity error: "
                f"scenario '{key}' references unknown hot-water type '{tech['type']}'"
            )
    for preset in OCCUPANCY_PRESETS:
        assert preset in OCCUPANCY_MULTIPLIERS, (
            f"config/scenarios.py integrity error: preset '{preset}' has no multiplier"
        )


_assert_registry_integrity()
