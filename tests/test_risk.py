"""
Tests for the AMU risk score.

These verify:
- each banded factor on its own, including the band edges,
- the worked herd scenarios,
- clamping, rounding and purity of the final score.
"""

import pytest
from datetime import timedelta

from livestock_amu import risk
from livestock_amu.assessment import AMULevel


@pytest.mark.parametrize(
    "age, points",
    [(0, 25), (1.9, 25), (2, 20), (5.9, 20), (6, 15), (11, 15), (12, 10), (23, 10), (24, 5), (47, 5), (48, 8), (120, 8)],
)
def test_age_points_bands(age, points):
    assert risk.age_points(age) == points


def test_six_month_old_falls_in_juvenile_band():
    """Exactly 6 months is not 'young' for scoring purposes."""
    assert risk.age_points(6) == 15
    assert risk.age_points(6) != risk.age_points(5.99)


@pytest.mark.parametrize(
    "ratio, points",
    [(0.1, 20), (0.3, 16), (0.49, 16), (0.5, 12), (0.7, 8), (0.84, 8), (0.85, 0), (1.0, 0), (1.3, 0), (1.31, 5), (1.5, 5), (1.51, 10)],
)
def test_weight_points_bands(ratio, points):
    assert risk.weight_points(ratio) == points


@pytest.mark.parametrize(
    "days, points",
    [(0, 0), (7, 0), (8, 5), (14, 5), (15, 8), (21, 8), (22, 12), (30, 12), (31, 15), (90, 15)],
)
def test_withdrawal_points_bands(days, points):
    assert risk.withdrawal_points(days) == points


@pytest.mark.parametrize(
    "status, points, bump",
    [
        ("poor", 15, 0.2),
        ("CRITICAL", 15, 0.2),
        ("Fair", 10, 0.0),
        ("moderate", 10, 0.0),
        ("good", 5, 0.0),
        ("Excellent", 0, 0.0),
        ("sick-ish", 7, 0.0),
        ("", 7, 0.0),
    ],
)
def test_health_points_and_bump(status, points, bump):
    assert risk.health_points(status) == points
    assert risk.health_bump(status) == bump


def test_antibiotic_name_tiers():
    assert risk.antibiotic_name_points("Oxytetracycline LA") == 20
    assert risk.antibiotic_name_points("ENROFLOXACIN") == 20
    assert risk.antibiotic_name_points("Tylosin") == 10
    assert risk.antibiotic_name_points("") == 0
    assert risk.antibiotic_name_points(None) == 0


def test_untreated_animal_gets_no_antibiotic_terms(make_record, now):
    """Antibiotic details are ignored entirely when antibiotic_used is false."""
    record = make_record(
        antibiotic_used=False,
        antibiotic_name="Colistin",
        withdrawal_days=40,
        last_dose_date=(now - timedelta(days=1)).date(),
    )
    assert risk.antibiotic_points(record) == 0
    assert risk.recency_bump(record, now) == 0.0


@pytest.mark.parametrize(
    "days_ago, bump",
    [(0, 0.3), (6, 0.3), (7, 0.2), (13, 0.2), (14, 0.1), (29, 0.1), (30, 0.0), (200, 0.0)],
)
def test_recency_bump_bands(make_record, now, days_ago, bump):
    record = make_record(
        antibiotic_used=True,
        withdrawal_days=10,
        last_dose_date=(now - timedelta(days=days_ago)).date().isoformat(),
    )
    assert risk.recency_bump(record, now) == bump


def test_recency_bump_ignores_missing_and_invalid_dates(make_record, now):
    assert risk.recency_bump(make_record(antibiotic_used=True, last_dose_date=None), now) == 0.0
    assert risk.recency_bump(make_record(antibiotic_used=True, last_dose_date="soon"), now) == 0.0


def test_scenario_healthy_adult_cow(make_record, now):
    """
    24 months sits in the <48 band (+5); optimal weight, excellent health and
    vaccinated add nothing, and the multiplier stays at 1.0.
    """
    record = make_record(age_months=24, weight_kg=300, health_status="Excellent")
    score = risk.compute_amu_risk(record, now)
    assert score == 5
    assert risk.level_of(score) is AMULevel.LOW


def test_scenario_treated_sick_calf_is_clamped(make_record, now):
    """
    base 75 (antibiotic) + 25 (age) + 20 (weight) + 15 (health) + 10 (no vaccine) = 145
    multiplier 1.0 + 0.3 + 0.2 + 0.15 + 0.3 + 0.25 = 2.2 → 319 → clamped to 100
    """
    record = make_record(
        antibiotic_used=True,
        antibiotic_name="Colistin",
        withdrawal_days=35,
        last_dose_date=(now - timedelta(days=3)).date().isoformat(),
        age_months=1,
        weight_kg=20,
        health_status="poor",
        vaccination_status=False,
    )
    assert risk.base_score(record) == 145
    assert risk.risk_multiplier(record, now) == pytest.approx(2.2)
    assert risk.compute_amu_risk(record, now) == 100
    assert risk.level_of(100) is AMULevel.CRITICAL


def test_treated_goat_unclamped_score(make_record, now):
    """
    base 40 + 10 (non-critical name) + 5 (14 day withdrawal) + 8 (senior) = 63, plus 5 (good) = 68
    multiplier 1.2 (dose 10 days ago) → 81.6 → 82
    """
    record = make_record(
        species="Goat",
        age_months=60,
        weight_kg=35,
        health_status="good",
        antibiotic_used=True,
        antibiotic_name="Tylosin",
        withdrawal_days=14,
        last_dose_date=(now - timedelta(days=10)).date().isoformat(),
    )
    assert risk.compute_amu_risk(record, now) == 82


def test_unvaccinated_sheep_multiplier(make_record, now):
    """(5 + 0 + 10 + 10) * 1.15 = 28.75 → 29."""
    record = make_record(species="Sheep", age_months=30, weight_kg=45, health_status="fair", vaccination_status=False)
    assert risk.compute_amu_risk(record, now) == 29


def test_treated_in_critical_health_gets_both_bumps(make_record, now):
    record = make_record(antibiotic_used=True, health_status="critical")
    assert risk.treated_while_sick_bump(record) == 0.25
    assert risk.risk_multiplier(record, now) == pytest.approx(1.45)


def test_vulnerable_young_bump_needs_all_three(make_record):
    young_light_unvaccinated = make_record(age_months=3, weight_kg=100, vaccination_status=False)
    assert risk.vulnerable_young_bump(young_light_unvaccinated) == 0.3
    assert risk.vulnerable_young_bump(make_record(age_months=3, weight_kg=100, vaccination_status=True)) == 0.0
    assert risk.vulnerable_young_bump(make_record(age_months=6, weight_kg=100, vaccination_status=False)) == 0.0
    assert risk.vulnerable_young_bump(make_record(age_months=3, weight_kg=210, vaccination_status=False)) == 0.0


def test_unrecognized_species_uses_default_baseline(make_record, now):
    """Camels are scored against the 100 kg default optimum."""
    record = make_record(species="Camel", weight_kg=100)
    assert record.weight_ratio == 1.0
    assert risk.weight_points(record.weight_ratio) == 0


def test_species_lookup_is_case_insensitive(make_record):
    assert make_record(species="chicken", weight_kg=2.5).weight_ratio == 1.0
    assert make_record(species=" BUFFALO ", weight_kg=350).weight_ratio == 1.0


def test_half_up_rounding():
    assert risk._round_half_up(2.5) == 3
    assert risk._round_half_up(3.5) == 4
    assert risk._round_half_up(4.49) == 4


def test_negative_inputs_flow_through_without_errors(make_record, now):
    """The engine does not validate ranges; scores are still clamped."""
    record = make_record(age_months=-5, weight_kg=-10)
    score = risk.compute_amu_risk(record, now)
    assert 0 <= score <= 100


def test_score_is_pure(make_record, now):
    record = make_record(
        antibiotic_used=True,
        antibiotic_name="Amoxicillin",
        withdrawal_days=21,
        last_dose_date="2025-03-01",
        health_status="moderate",
        vaccination_status=False,
    )
    assert risk.compute_amu_risk(record, now) == risk.compute_amu_risk(record, now)


@pytest.mark.parametrize(
    "score, level",
    [
        (0, AMULevel.LOW),
        (29, AMULevel.LOW),
        (30, AMULevel.MODERATE),
        (49, AMULevel.MODERATE),
        (50, AMULevel.HIGH),
        (69, AMULevel.HIGH),
        (70, AMULevel.CRITICAL),
        (100, AMULevel.CRITICAL),
    ],
)
def test_level_thresholds(score, level):
    assert risk.level_of(score) is level


def test_level_is_monotonic():
    order = list(AMULevel)
    levels = [order.index(risk.level_of(score)) for score in range(101)]
    assert levels == sorted(levels)


@pytest.mark.parametrize(
    "overrides",
    [
        # every factor at its maximum with a fresh dose
        dict(
            species="Cow", age_months=0, weight_kg=0.5, health_status="critical", vaccination_status=False,
            antibiotic_used=True, antibiotic_name="Colistin", withdrawal_days=365, last_dose_date="2025-03-15",
        ),
        dict(age_months=-5, weight_kg=-10),
        dict(age_months=-1, weight_kg=-300, antibiotic_used=True, antibiotic_name="Meropenem", withdrawal_days=60),
        dict(age_months=1, weight_kg=10_000, health_status="poor", vaccination_status=False),
        dict(species="Chicken", age_months=0.5, weight_kg=0.1, health_status="unknown", vaccination_status=False,
             antibiotic_used=True, antibiotic_name="Enrofloxacin", withdrawal_days=40, last_dose_date="2025-04-01"),
        dict(age_months=1_000, weight_kg=0, health_status="", withdrawal_days=-30, antibiotic_used=True),
        dict(species="Duck", age_months=0, weight_kg=0, antibiotic_used=True, antibiotic_name="Vancomycin",
             withdrawal_days=0, last_dose_date="not-a-date"),
    ],
)
def test_score_stays_within_bounds_for_extremes(make_record, now, overrides):
    score = risk.compute_amu_risk(make_record(**overrides), now)
    assert isinstance(score, int)
    assert 0 <= score <= 100
