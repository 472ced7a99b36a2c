"""
test_mock_data.py — Risk table and the synthetic zone / forecast generators.
"""

from datetime import date

import pytest

from heatwave.services.mock_data import (
    RISK_LEVELS,
    generate_mock_forecast,
    generate_mock_zones,
    risk_level_for,
    severity_for,
)


# ── risk_level_for ────────────────────────────────────────────────────────────

class TestRiskLevelFor:

    @pytest.mark.parametrize("p,expected", [
        (0.0, "low"), (0.39, "low"),
        (0.4, "medium"), (0.59, "medium"),
        (0.6, "high"), (0.79, "high"),
        (0.8, "critical"), (1.0, "critical"),
    ])
    def test_band_boundaries(self, p, expected):
        assert severity_for(p) == expected

    def test_clamps_out_of_range(self):
        assert risk_level_for(-0.5).level == "LOW"
        assert risk_level_for(7.0).level == "CRITICAL"

    def test_bands_are_contiguous(self):
        for lower, upper in zip(RISK_LEVELS, RISK_LEVELS[1:]):
            assert lower.max_probability == upper.min_probability

    def test_every_level_has_recommendations(self):
        for level in RISK_LEVELS:
            assert level.recommendations


# ── generate_mock_zones ───────────────────────────────────────────────────────

class TestMockZones:

    def test_nine_zones_in_two_regions(self):
        zones = generate_mock_zones()
        assert len(zones) == 9
        prefixes = {z.id.split("-")[0] for z in zones}
        assert prefixes == {"bkk", "cm"}

    def test_ids_unique(self):
        ids = [z.id for z in generate_mock_zones()]
        assert len(ids) == len(set(ids))

    @pytest.mark.parametrize("day_offset", range(0, 8))
    def test_severity_matches_probability(self, day_offset):
        for zone in generate_mock_zones(day_offset):
            assert zone.properties.severity == severity_for(zone.properties.probability)

    @pytest.mark.parametrize("day_offset", [0, 3, 7, 30])
    def test_probability_in_unit_interval(self, day_offset):
        for zone in generate_mock_zones(day_offset):
            assert 0.0 <= zone.properties.probability <= 1.0

    def test_rings_are_closed(self):
        for zone in generate_mock_zones():
            ring = zone.geometry.outer_ring
            assert len(ring) >= 4
            assert ring[0] == ring[-1]

    def test_later_days_are_hotter(self):
        today = {z.id: z.properties for z in generate_mock_zones(0)}
        later = {z.id: z.properties for z in generate_mock_zones(3)}
        for zone_id, props in later.items():
            assert props.probability >= today[zone_id].probability
            assert props.temperature > today[zone_id].temperature

    def test_deterministic_for_same_offset(self):
        a = [(z.id, z.properties.probability) for z in generate_mock_zones(2)]
        b = [(z.id, z.properties.probability) for z in generate_mock_zones(2)]
        assert a == b

    def test_bangkok_central_is_critical_today(self):
        zone = next(z for z in generate_mock_zones(0) if z.id == "bkk-central")
        assert zone.properties.name == "Bangkok Central"
        assert zone.properties.severity == "critical"


# ── generate_mock_forecast ────────────────────────────────────────────────────

class TestMockForecast:

    def test_day_count(self):
        forecast = generate_mock_forecast(5, start=date(2026, 4, 20))
        assert forecast.days == 5
        assert len(forecast.forecasts) == 5
        assert forecast.model_type == "mock"

    def test_dates_are_sequential_from_tomorrow(self):
        forecast = generate_mock_forecast(3, start=date(2026, 4, 20))
        assert [f.date for f in forecast.forecasts] == ["2026-04-21", "2026-04-22", "2026-04-23"]
        assert [f.day for f in forecast.forecasts] == [1, 2, 3]
        assert forecast.forecasts[0].day_name == "Tuesday"

    def test_probability_never_decreases(self):
        probs = [f.probability for f in generate_mock_forecast(14).forecasts]
        assert probs == sorted(probs)
        assert probs[-1] > probs[0]
        assert all(0.0 <= p <= 1.0 for p in probs)

    def test_labels_follow_probability(self):
        for f in generate_mock_forecast(10).forecasts:
            level = risk_level_for(f.probability)
            assert f.risk_label == level.level
            assert f.risk_level == level.severity
