"""Tests for the mitigation rule engine."""

import pytest

from models.mitigation import (
    TACTICS,
    MitigationTactic,
    TacticKind,
    apply_mitigation,
    get_tactic,
)


class TestCatalog:
    def test_has_twelve_tactics(self):
        assert len(TACTICS) == 12
        assert "none" in TACTICS

    def test_expected_rates(self):
        assert TACTICS["globalban"].rate == 0.50
        assert TACTICS["globalban"].kind is TacticKind.ONE_TIME
        assert TACTICS["coastal"].rate == 0.20
        assert TACTICS["coastal"].kind is TacticKind.PER_YEAR
        assert TACTICS["river"].rate == 0.40

    def test_unknown_id_raises(self):
        with pytest.raises(KeyError, match="Unknown mitigation tactic"):
            get_tactic("plant-more-trees")

    def test_tactic_instance_passes_through(self):
        tactic = TACTICS["awareness"]
        assert get_tactic(tactic) is tactic

    def test_rate_validated(self):
        with pytest.raises(ValueError):
            MitigationTactic("bad", "Bad", TacticKind.ONE_TIME, 1.5)


class TestApplyMitigation:
    def test_none_is_identity(self):
        assert apply_mitigation(123.4, "none", 0.0, 0.0, 10.0) == 123.4

    def test_one_time_independent_of_time(self):
        now = apply_mitigation(100.0, "globalban", 50.0, 50.0, 0.0)
        later = apply_mitigation(100.0, "globalban", 50.0, 50.0, 10.0)
        assert now == pytest.approx(50.0)
        assert later == pytest.approx(50.0)

    def test_per_year_compounds_whole_years(self):
        # coastal applies where |lat| < 15
        assert apply_mitigation(100.0, "coastal", 5.0, 100.0, 1.0) == pytest.approx(80.0)
        assert apply_mitigation(100.0, "coastal", 5.0, 100.0, 2.0) == pytest.approx(64.0)

    def test_per_year_truncates_partial_years(self):
        for months in (1, 3, 6):
            value = apply_mitigation(100.0, "coastal", 5.0, 100.0, months / 12)
            assert value == pytest.approx(100.0)
        assert apply_mitigation(100.0, "coastal", 5.0, 100.0, 2.5) == pytest.approx(64.0)

    def test_negative_elapsed_counts_as_zero(self):
        assert apply_mitigation(100.0, "coastal", 5.0, 100.0, -3.0) == pytest.approx(100.0)

    def test_region_predicate_respected(self):
        # river applies only for -10 <= lat <= 10
        assert apply_mitigation(100.0, "river", 10.0, 0.0, 1.0) == pytest.approx(60.0)
        assert apply_mitigation(100.0, "river", 10.5, 0.0, 1.0) == pytest.approx(100.0)

    def test_open_ocean_is_complement_of_coastal(self):
        assert apply_mitigation(100.0, "openocean", 20.0, 20.0, 1.0) == pytest.approx(70.0)
        assert apply_mitigation(100.0, "openocean", 20.0, 10.0, 1.0) == pytest.approx(100.0)

    def test_non_positive_input_maps_to_zero(self):
        assert apply_mitigation(0.0, "none", 0.0, 0.0, 0.0) == 0.0
        assert apply_mitigation(-5.0, "globalban", 0.0, 0.0, 0.0) == 0.0

    def test_never_exceeds_raw_and_never_negative(self):
        for tactic_id in TACTICS:
            for years in (0, 1 / 12, 1, 5, 10):
                value = apply_mitigation(1000.0, tactic_id, 5.0, 5.0, years)
                assert 0.0 <= value <= 1000.0

    def test_unknown_tactic_raises(self):
        with pytest.raises(KeyError):
            apply_mitigation(1.0, "nope", 0.0, 0.0, 1.0)


class TestWorkedExamples:
    def test_globalban_halves(self):
        assert apply_mitigation(100.0, "globalban", 0.0, 0.0, 5.0) == pytest.approx(50.0)

    def test_river_three_years(self):
        assert apply_mitigation(100.0, "river", 0.0, 0.0, 3.0) == pytest.approx(21.6)

    def test_river_outside_band(self):
        assert apply_mitigation(100.0, "river", 50.0, 0.0, 3.0) == pytest.approx(100.0)

    def test_per_year_monotonic(self):
        for tactic_id, tactic in TACTICS.items():
            if tactic.kind is not TacticKind.PER_YEAR:
                continue
            values = [apply_mitigation(100.0, tactic_id, 0.0, 0.0, y) for y in (0, 0.5, 1, 1.5, 2, 5, 10)]
            assert values == sorted(values, reverse=True), tactic_id

    def test_one_time_time_invariant(self):
        for tactic_id, tactic in TACTICS.items():
            if tactic.kind is TacticKind.ONE_TIME:
                assert apply_mitigation(80.0, tactic_id, 1.0, 1.0, 1) == apply_mitigation(80.0, tactic_id, 1.0, 1.0, 100)
