"""
AMU risk scoring and MRL compliance engine.

Every public function here is pure: the only clock is the `now` argument, so a
record assessed twice against the same `now` gets the same result.

Scoring is a weighted sum of independent banded factors, amplified by a
multiplier:

    score = clamp(round_half_up(base * multiplier), 0, 100)

Bands are tiered, not continuous. Each helper below returns the points (or the
multiplier increment) of a single factor so it can be checked on its own.
"""

import logging
import math
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, Optional, Union

from .animal import AnimalRecord, DoseDate, weight_baseline_for
from .antibiotics import is_critical_antibiotic
from .assessment import AMULevel, MRLStatus, RiskAssessment

logger = logging.getLogger(__name__)

Now = Union[date, datetime]

_ONE_DAY = timedelta(days=1)

_POOR_HEALTH = {"poor", "critical"}
_HEALTH_POINTS = {
    "poor": 15,
    "critical": 15,
    "fair": 10,
    "moderate": 10,
    "good": 5,
    "excellent": 0,
}
UNRECOGNIZED_HEALTH_POINTS = 7

# (exclusive lower bound on withdrawal days, points), checked in order
_WITHDRAWAL_BANDS = ((30, 15), (21, 12), (14, 8), (7, 5))
# (exclusive upper bound on days since dose, multiplier increment)
_RECENCY_BANDS = ((7, 0.3), (14, 0.2), (30, 0.1))
# (exclusive upper bound on age in months, points); older animals get AGE_SENIOR_POINTS
_AGE_BANDS = ((2, 25), (6, 20), (12, 15), (24, 10), (48, 5))
AGE_SENIOR_POINTS = 8
# (exclusive upper bound on weight ratio, points) for underweight animals
_UNDERWEIGHT_BANDS = ((0.3, 20), (0.5, 16), (0.7, 12), (0.85, 8))
# (exclusive lower bound on weight ratio, points) for overweight animals
_OVERWEIGHT_BANDS = ((1.5, 10), (1.3, 5))

CRITICAL_SCORE = 70
HIGH_SCORE = 50
MODERATE_SCORE = 30

UNDERWEIGHT_RATIO = 0.7
YOUNG_AGE_MONTHS = 6


# -------------
# Date handling
# -------------


def _as_datetime(value: Union[date, datetime]) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _dose_is_absent(last_dose_date: DoseDate) -> bool:
    return last_dose_date is None or (
        isinstance(last_dose_date, str) and not last_dose_date.strip()
    )


def parse_dose_date(last_dose_date: DoseDate) -> Optional[datetime]:
    """
    Interpret a last-dose value as a datetime.
    Returns None when the value is absent or is not a valid calendar date.
    """
    if _dose_is_absent(last_dose_date):
        return None
    if isinstance(last_dose_date, date):
        return _as_datetime(last_dose_date)
    try:
        return datetime.fromisoformat(str(last_dose_date).strip())
    except ValueError:
        return None


def days_since_dose(last_dose_date: DoseDate, now: Now) -> Optional[int]:
    """
    Whole days elapsed since the last dose, floored. Negative for future dates.
    None when the date is absent or unparseable.
    """
    dose = parse_dose_date(last_dose_date)
    if dose is None:
        return None
    current = _as_datetime(now)
    if (dose.tzinfo is None) != (current.tzinfo is None):
        dose, current = _naive_utc(dose), _naive_utc(current)
    return (current - dose) // _ONE_DAY


# ----------------
# Factor helpers
# ----------------


def antibiotic_name_points(antibiotic_name: Optional[str]) -> int:
    if is_critical_antibiotic(antibiotic_name):
        return 20
    if antibiotic_name:
        return 10
    return 0


def withdrawal_points(withdrawal_days: float) -> int:
    for lower_bound, points in _WITHDRAWAL_BANDS:
        if withdrawal_days > lower_bound:
            return points
    return 0


def antibiotic_points(record: AnimalRecord) -> int:
    """Base points for antibiotic exposure; 0 when no antibiotic was used."""
    if not record.antibiotic_used:
        return 0
    return 40 + antibiotic_name_points(record.antibiotic_name) + withdrawal_points(
        record.withdrawal_days
    )


def recency_bump(record: AnimalRecord, now: Now) -> float:
    if not record.antibiotic_used:
        return 0.0
    elapsed = days_since_dose(record.last_dose_date, now)
    if elapsed is None:
        return 0.0
    for upper_bound, bump in _RECENCY_BANDS:
        if elapsed < upper_bound:
            return bump
    return 0.0


def age_points(age_months: float) -> int:
    for upper_bound, points in _AGE_BANDS:
        if age_months < upper_bound:
            return points
    return AGE_SENIOR_POINTS


def weight_points(weight_ratio: float) -> int:
    for upper_bound, points in _UNDERWEIGHT_BANDS:
        if weight_ratio < upper_bound:
            return points
    for lower_bound, points in _OVERWEIGHT_BANDS:
        if weight_ratio > lower_bound:
            return points
    return 0


def _normalize_health(health_status: Optional[str]) -> str:
    return (health_status or "").strip().lower()


def is_poor_health(health_status: Optional[str]) -> bool:
    return _normalize_health(health_status) in _POOR_HEALTH


def is_known_health_status(health_status: Optional[str]) -> bool:
    return _normalize_health(health_status) in _HEALTH_POINTS


def health_points(health_status: Optional[str]) -> int:
    return _HEALTH_POINTS.get(_normalize_health(health_status), UNRECOGNIZED_HEALTH_POINTS)


def health_bump(health_status: Optional[str]) -> float:
    return 0.2 if is_poor_health(health_status) else 0.0


def vaccination_points(vaccination_status: bool) -> int:
    return 0 if vaccination_status else 10


def vaccination_bump(vaccination_status: bool) -> float:
    return 0.0 if vaccination_status else 0.15


def vulnerable_young_bump(record: AnimalRecord) -> float:
    """Young, underweight and unvaccinated together."""
    if (
        record.age_months < YOUNG_AGE_MONTHS
        and record.weight_ratio < UNDERWEIGHT_RATIO
        and not record.vaccination_status
    ):
        return 0.3
    return 0.0


def treated_while_sick_bump(record: AnimalRecord) -> float:
    if record.antibiotic_used and is_poor_health(record.health_status):
        return 0.25
    return 0.0


def base_score(record: AnimalRecord) -> int:
    return (
        antibiotic_points(record)
        + age_points(record.age_months)
        + weight_points(record.weight_ratio)
        + health_points(record.health_status)
        + vaccination_points(record.vaccination_status)
    )


def risk_multiplier(record: AnimalRecord, now: Now) -> float:
    bumps = (
        recency_bump(record, now),
        health_bump(record.health_status),
        vaccination_bump(record.vaccination_status),
        vulnerable_young_bump(record),
        treated_while_sick_bump(record),
    )
    # accumulate left to right from 1.0
    return sum(bumps, 1.0)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


# ----------
# Operations
# ----------


def compute_amu_risk(record: AnimalRecord, now: Now) -> int:
    """
    Antimicrobial-usage risk score of an animal, an integer in [0, 100].
    Higher means a higher risk of contributing to antimicrobial resistance.
    """
    raw = _round_half_up(base_score(record) * risk_multiplier(record, now))
    return min(100, max(0, raw))


def level_of(score: int) -> AMULevel:
    if score >= CRITICAL_SCORE:
        return AMULevel.CRITICAL
    if score >= HIGH_SCORE:
        return AMULevel.HIGH
    if score >= MODERATE_SCORE:
        return AMULevel.MODERATE
    return AMULevel.LOW


def mrl_status(last_dose_date: DoseDate, withdrawal_days: int, now: Now) -> MRLStatus:
    """
    Withdrawal-period compliance.

    - no dose date, or no withdrawal period -> SAFE
    - dose date that is not a calendar date, or lies in the future -> PENDING
    - withdrawal period fully elapsed -> COMPLIANT, otherwise NOT_COMPLIANT

    A treated animal with withdrawal_days == 0 is SAFE, not COMPLIANT.
    """
    if _dose_is_absent(last_dose_date) or withdrawal_days == 0:
        return MRLStatus.SAFE
    elapsed = days_since_dose(last_dose_date, now)
    if elapsed is None or elapsed < 0:
        return MRLStatus.PENDING
    if elapsed >= withdrawal_days:
        return MRLStatus.COMPLIANT
    return MRLStatus.NOT_COMPLIANT


def days_until_compliant(last_dose_date: DoseDate, withdrawal_days: int, now: Now) -> int:
    """
    Days left before the withdrawal period ends; 0 without a dose date.
    An unparseable date counts as nothing elapsed yet.
    """
    if _dose_is_absent(last_dose_date):
        return 0
    elapsed = days_since_dose(last_dose_date, now)
    if elapsed is None:
        elapsed = 0
    return max(0, int(withdrawal_days - elapsed))


def recommendations_for(record: AnimalRecord, score: int, now: Now) -> tuple[str, ...]:
    """
    Advisory messages for an animal, in a fixed order:
    critical banner, withdrawal, young animal, underweight, vaccination,
    veterinary consultation, stewardship. Falls back to a "satisfactory"
    pair when nothing applies.
    """
    messages: list[str] = []

    if score >= CRITICAL_SCORE:
        messages.append("CRITICAL ACTION REQUIRED")

    if record.antibiotic_used:
        remaining = days_until_compliant(record.last_dose_date, record.withdrawal_days, now)
        if remaining > 0:
            messages.append(f"NOT SAFE for slaughter - {remaining} days remaining")
        else:
            messages.append("Withdrawal period completed")

    if record.age_months < YOUNG_AGE_MONTHS:
        messages.append("Young animal - requires extra care and monitoring")

    optimal = weight_baseline_for(record.species).optimal_kg
    if record.weight_kg < optimal * UNDERWEIGHT_RATIO:
        messages.append("Underweight - improve nutrition and health")

    if not record.vaccination_status:
        messages.append("Update vaccination schedule immediately")

    if is_poor_health(record.health_status):
        messages.append("Veterinary consultation required")

    if score >= HIGH_SCORE:
        messages.append("Implement antimicrobial stewardship measures")
        messages.append("Monitor closely for AMR development")

    if not messages:
        messages.append("Animal health status is satisfactory")
        messages.append("Continue regular monitoring")

    return tuple(dict.fromkeys(messages))


def assess(record: AnimalRecord, now: Now) -> RiskAssessment:
    """
    Compute the full RiskAssessment of one animal.
    An untreated animal is SAFE with no withdrawal left, whatever dose details it carries.
    """
    score = compute_amu_risk(record, now)
    if record.antibiotic_used:
        status = mrl_status(record.last_dose_date, record.withdrawal_days, now)
        remaining = days_until_compliant(record.last_dose_date, record.withdrawal_days, now)
    else:
        status, remaining = MRLStatus.SAFE, 0
    return RiskAssessment(
        amu_score=score,
        amu_level=level_of(score),
        mrl_status=status,
        days_until_compliant=remaining,
        recommendations=recommendations_for(record, score, now),
        assessed_at=_as_datetime(now),
    )


def assess_herd(records: Iterable[AnimalRecord], now: Now) -> list[RiskAssessment]:
    """
    Assess a batch of animals against a single snapshot of `now`, so that
    boundary days do not shift between entries. Order follows `records`.
    """
    assessments = [assess(record, now) for record in records]
    logger.debug(f"Assessed {len(assessments)} animals as of {_as_datetime(now).isoformat()}")
    return assessments
