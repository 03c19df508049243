"""
QA Test Suite — services/projections.py
=======================================
Request resolution, defaults, not-found / invalid-request paths, journey
first-step behaviour and response metadata.
"""
from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone

import pytest

_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _root not in sys.path:
    sys.path.insert(0, _root)

from config.constants import ENGINE_VERSION
from config.scenarios import SCENARIOS
from services.projections import (
    InvalidProjectionRequest,
    run_journey_projection,
    run_scenario_projection,
)
from services.store import RecordNotFoundError, RecordStore

START_YEAR = 2026
NOW = datetime(2026, 3, 14, 9, 30, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in ("TRAJECTORY_DEFAULT_REGION", "TRAJECTORY_DEFAULT_HORIZON_YEARS",
                "TRAJECTORY_DEFAULT_DECARB_PATH"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def store():
    return RecordStore({
        "property_models": [{"id": "pm-1", "floor_area_m2": 100}],
        "occupancy_profiles": [{"id": "occ-1", "preset": "out-9-to-5", "comfort_priority": "comfort"}],
        "dhw_profiles": [{"id": "dhw-1", "occupants": 2, "showers_per_day": 1,
                          "baths_per_week": 2, "target_temp_c": 50}],
        "scenarios": [SCENARIOS["gas_baseline"], SCENARIOS["ashp"]],
        "journeys": [
            {"id": "j-1", "name": "Boiler now, heat pump later", "steps": [
                {"scenario_id": "gas_baseline", "effective_date": "2026-01-01"},
                {"scenario_id": "ashp", "effective_date": "2030-01-01"},
            ]},
            {"id": "j-empty", "name": "Empty", "steps": []},
            {"id": "j-dangling", "name": "Dangling", "steps": [{"scenario_id": "gone"}]},
        ],
        "assumptions_snapshots": [
            {"id": "as-old", "region_code": "UK-GB", "period_start": "2025-01-01",
             "electricity_unit_p_per_kwh": 30, "gas_unit_p_per_kwh": 8,
             "grid_intensity_gco2e_per_kwh": 180, "gas_intensity_gco2e_per_kwh": 183},
            {"id": "as-new", "region_code": "UK-GB", "period_start": "2026-01-01",
             "electricity_unit_p_per_kwh": 28, "gas_unit_p_per_kwh": 7,
             "grid_intensity_gco2e_per_kwh": 150, "gas_intensity_gco2e_per_kwh": 180},
            {"id": "as-ni", "region_code": "UK-NI", "period_start": "2026-02-01",
             "electricity_unit_p_per_kwh": 32, "gas_unit_p_per_kwh": 9,
             "grid_intensity_gco2e_per_kwh": 250, "gas_intensity_gco2e_per_kwh": 180},
        ],
    })


def scenario_request(**overrides):
    body = {
        "property_model_id": "pm-1",
        "occupancy_profile_id": "occ-1",
        "dhw_profile_id": "dhw-1",
        "scenario_id": "ashp",
    }
    body.update(overrides)
    return body


def journey_request(**overrides):
    body = scenario_request(**overrides)
    body.pop("scenario_id")
    body.setdefault("journey_id", "j-1")
    return body


# ─────────────────────────────────────────────────────────────────────────────
# Scenario projections
# ─────────────────────────────────────────────────────────────────────────────

class TestScenarioProjection:
    def test_defaults(self, store):
        result = run_scenario_projection(scenario_request(), store, start_year=START_YEAR, now=NOW)
        assert len(result["yearly"]) == 10
        assert len(result["monthly"]) == 120
        meta = result["metadata"]
        assert meta["grid_decarb_path"] == "central"
        assert meta["assumptions_snapshot_id"] == "as-new"
        assert meta["region_code"] == "UK-GB"

    def test_metadata_is_complete(self, store):
        meta = run_scenario_projection(
            scenario_request(lead_id=42), store, start_year=START_YEAR, now=NOW
        )["metadata"]
        assert meta == {
            "lead_id": 42,
            "property_model_id": "pm-1",
            "occupancy_profile_id": "occ-1",
            "dhw_profile_id": "dhw-1",
            "scenario_id": "ashp",
            "journey_id": None,
            "assumptions_snapshot_id": "as-new",
            "region_code": "UK-GB",
            "grid_decarb_path": "central",
            "engine_version": ENGINE_VERSION,
            "generated_at": NOW.isoformat(),
        }

    def test_explicit_options(self, store):
        result = run_scenario_projection(
            scenario_request(horizon_years=3, assumptions_snapshot_id="as-old", grid_decarb_path="fast"),
            store, start_year=START_YEAR, now=NOW,
        )
        assert [y["year"] for y in result["yearly"]] == [2026, 2027, 2028]
        assert result["metadata"]["assumptions_snapshot_id"] == "as-old"
        assert result["metadata"]["grid_decarb_path"] == "fast"

    def test_region_selects_latest_for_region(self, store):
        result = run_scenario_projection(
            scenario_request(region_code="UK-NI"), store, start_year=START_YEAR, now=NOW
        )
        assert result["metadata"]["assumptions_snapshot_id"] == "as-ni"
        assert result["metadata"]["region_code"] == "UK-NI"

    def test_unknown_path_reported_as_central(self, store):
        result = run_scenario_projection(
            scenario_request(grid_decarb_path="hyperdrive"), store, start_year=START_YEAR, now=NOW
        )
        assert result["metadata"]["grid_decarb_path"] == "central"

    def test_configured_defaults(self, store, monkeypatch):
        monkeypatch.setenv("TRAJECTORY_DEFAULT_HORIZON_YEARS", "4")
        monkeypatch.setenv("TRAJECTORY_DEFAULT_DECARB_PATH", "slow")
        result = run_scenario_projection(scenario_request(), store, start_year=START_YEAR, now=NOW)
        assert len(result["yearly"]) == 4
        assert result["metadata"]["grid_decarb_path"] == "slow"

    def test_start_year_defaults_to_clock(self, store):
        result = run_scenario_projection(scenario_request(horizon_years=1), store, now=NOW)
        assert result["yearly"][0]["year"] == NOW.year
        assert result["monthly"][0]["period_start"] == f"{NOW.year}-01-01"

    def test_summary_scores(self, store):
        summary = run_scenario_projection(scenario_request(), store, start_year=START_YEAR, now=NOW)["summary"]
        assert summary["comfort_score"] == 5
        assert summary["disruption_score"] == SCENARIOS["ashp"]["disruption_score"]

    def test_logs_projection_run(self, store, caplog):
        with caplog.at_level(logging.INFO, logger="services.projections"):
            run_scenario_projection(scenario_request(), store, start_year=START_YEAR, now=NOW)
        assert "scenario=ashp" in caplog.text


class TestScenarioErrors:
    @pytest.mark.parametrize("field", [
        "property_model_id", "occupancy_profile_id", "dhw_profile_id", "scenario_id",
    ])
    def test_missing_required_field(self, store, field):
        body = scenario_request()
        body.pop(field)
        with pytest.raises(InvalidProjectionRequest, match=field):
            run_scenario_projection(body, store)

    @pytest.mark.parametrize("field,kind", [
        ("property_model_id", "property_models"),
        ("occupancy_profile_id", "occupancy_profiles"),
        ("dhw_profile_id", "dhw_profiles"),
        ("scenario_id", "scenarios"),
        ("assumptions_snapshot_id", "assumptions_snapshots"),
    ])
    def test_unknown_record_is_not_found(self, store, field, kind):
        with pytest.raises(RecordNotFoundError) as excinfo:
            run_scenario_projection(scenario_request(**{field: "missing"}), store)
        assert excinfo.value.kind == kind
        assert excinfo.value.record_id == "missing"

    def test_region_without_snapshot_is_not_found(self, store):
        with pytest.raises(RecordNotFoundError):
            run_scenario_projection(scenario_request(region_code="FR"), store)

    @pytest.mark.parametrize("horizon", [-2, "ten", 2.5, True, "2.5"])
    def test_bad_horizon(self, store, horizon):
        with pytest.raises(InvalidProjectionRequest):
            run_scenario_projection(scenario_request(horizon_years=horizon), store)

    def test_zero_horizon_uses_default(self, store):
        result = run_scenario_projection(scenario_request(horizon_years=0), store, start_year=START_YEAR, now=NOW)
        assert len(result["yearly"]) == 10

    @pytest.mark.parametrize("horizon", [3, 3.0, "3"])
    def test_whole_number_horizon_accepted(self, store, horizon):
        result = run_scenario_projection(scenario_request(horizon_years=horizon), store,
                                         start_year=START_YEAR, now=NOW)
        assert len(result["yearly"]) == 3

    def test_not_found_is_logged(self, store, caplog):
        with caplog.at_level(logging.WARNING, logger="services.projections"):
            with pytest.raises(RecordNotFoundError):
                run_scenario_projection(scenario_request(scenario_id="missing"), store)
        assert "missing" in caplog.text


# ─────────────────────────────────────────────────────────────────────────────
# Journey projections (first step only)
# ─────────────────────────────────────────────────────────────────────────────

class TestJourneyProjection:
    def test_uses_first_step_for_whole_horizon(self, store):
        journey = run_journey_projection(journey_request(), store, start_year=START_YEAR, now=NOW)
        flat = run_scenario_projection(
            scenario_request(scenario_id="gas_baseline"), store, start_year=START_YEAR, now=NOW
        )
        assert journey["monthly"] == flat["monthly"]
        assert journey["yearly"] == flat["yearly"]
        assert journey["summary"] == flat["summary"]

    def test_metadata_identifies_journey(self, store):
        meta = run_journey_projection(journey_request(), store, start_year=START_YEAR, now=NOW)["metadata"]
        assert meta["journey_id"] == "j-1"
        assert meta["scenario_id"] is None
        assert meta["engine_version"] == ENGINE_VERSION

    def test_missing_journey_id(self, store):
        body = journey_request()
        body.pop("journey_id")
        with pytest.raises(InvalidProjectionRequest, match="journey_id"):
            run_journey_projection(body, store)

    def test_unknown_journey(self, store):
        with pytest.raises(RecordNotFoundError) as excinfo:
            run_journey_projection(journey_request(journey_id="nope"), store)
        assert excinfo.value.kind == "journeys"

    def test_journey_without_steps(self, store):
        with pytest.raises(InvalidProjectionRequest, match="no steps"):
            run_journey_projection(journey_request(journey_id="j-empty"), store)

    def test_first_step_scenario_missing(self, store):
        with pytest.raises(RecordNotFoundError) as excinfo:
            run_journey_projection(journey_request(journey_id="j-dangling"), store)
        assert excinfo.value.kind == "scenarios"


# ─────────────────────────────────────────────────────────────────────────────
# Record store
# ─────────────────────────────────────────────────────────────────────────────

class TestRecordStore:
    def test_ids_are_matched_as_strings(self):
        s = RecordStore({"scenarios": [{"id": 7, "name": "numeric id"}]})
        assert s.get("scenarios", "7")["name"] == "numeric id"

    def test_record_without_id_rejected(self):
        with pytest.raises(ValueError):
            RecordStore({"scenarios": [{"name": "anonymous"}]})

    def test_unknown_kind(self):
        with pytest.raises(KeyError, match="Available kinds"):
            RecordStore().get("leads", 1)
