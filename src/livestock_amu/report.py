"""
Herd report.

Summarizes a batch of assessments the way the farm dashboard shows them:
counts per AMU level and MRL status, animals still inside their withdrawal
period, and animals that need attention.
"""

import logging
import typing
from dataclasses import dataclass, field
from datetime import datetime

import pandas as pd

from .animal import AnimalRecord
from .assessment import AMULevel, MRLStatus, RiskAssessment
from .sinks import EventSink

logger = logging.getLogger(__name__)

_ATTENTION_LEVELS = {AMULevel.HIGH, AMULevel.CRITICAL}


@dataclass(frozen=True)
class HerdSummary:
    """
    Attributes:
        total: Number of animals assessed.
        level_counts: Animals per AMU level, every level present.
        mrl_counts: Animals per MRL status, every status present.
        mean_score: Average AMU score (0.0 for an empty herd).
        withdrawal_pending: animal id → days until compliant, for NOT_COMPLIANT animals.
        high_risk_ids: Ids of animals at HIGH or CRITICAL level.
    """

    total: int
    level_counts: dict[AMULevel, int]
    mrl_counts: dict[MRLStatus, int]
    mean_score: float
    withdrawal_pending: dict[str, int] = field(default_factory=dict)
    high_risk_ids: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "levelCounts": {level.value: count for level, count in self.level_counts.items()},
            "levelColors": {level.value: level.color for level in self.level_counts},
            "mrlCounts": {status.value: count for status, count in self.mrl_counts.items()},
            "meanScore": self.mean_score,
            "withdrawalPending": dict(self.withdrawal_pending),
            "highRiskIds": list(self.high_risk_ids),
        }


def _check_paired(records: typing.Sequence[AnimalRecord], assessments: typing.Sequence[RiskAssessment]):
    if len(records) != len(assessments):
        raise ValueError(
            f"got {len(records)} records but {len(assessments)} assessments"
        )


def summarize_herd(
        records: typing.Sequence[AnimalRecord], assessments: typing.Sequence[RiskAssessment]
) -> HerdSummary:
    """`assessments[i]` must belong to `records[i]`."""
    _check_paired(records, assessments)

    level_counts = {level: 0 for level in AMULevel}
    mrl_counts = {status: 0 for status in MRLStatus}
    withdrawal_pending: dict[str, int] = {}
    high_risk_ids: list[str] = []

    for record, assessment in zip(records, assessments):
        level_counts[assessment.amu_level] += 1
        mrl_counts[assessment.mrl_status] += 1
        if assessment.mrl_status is MRLStatus.NOT_COMPLIANT:
            withdrawal_pending[record.animal_id or ""] = assessment.days_until_compliant
        if assessment.amu_level in _ATTENTION_LEVELS:
            high_risk_ids.append(record.animal_id or "")

    total = len(assessments)
    mean_score = round(sum(a.amu_score for a in assessments) / total, 1) if total else 0.0
    return HerdSummary(
        total=total,
        level_counts=level_counts,
        mrl_counts=mrl_counts,
        mean_score=mean_score,
        withdrawal_pending=withdrawal_pending,
        high_risk_ids=tuple(high_risk_ids),
    )


def assessments_frame(
        records: typing.Sequence[AnimalRecord], assessments: typing.Sequence[RiskAssessment]
) -> pd.DataFrame:
    """One row per animal: identifying fields, inputs and the computed assessment."""
    _check_paired(records, assessments)
    rows = []
    for record, assessment in zip(records, assessments):
        rows.append(
            {
                "animal_id": record.animal_id,
                "owner": record.owner,
                "species": record.species,
                "breed": record.breed,
                "age_months": record.age_months,
                "weight_kg": record.weight_kg,
                "antibiotic_used": record.antibiotic_used,
                "antibiotic_name": record.antibiotic_name,
                "last_dose_date": record.last_dose_date,
                "withdrawal_days": record.withdrawal_days,
                "health_status": record.health_status,
                "vaccination_status": record.vaccination_status,
                "amu_score": assessment.amu_score,
                "amu_level": assessment.amu_level.value,
                "mrl_status": assessment.mrl_status.value,
                "days_until_compliant": assessment.days_until_compliant,
                "recommendations": "; ".join(assessment.recommendations),
            }
        )
    return pd.DataFrame(rows).set_index("animal_id") if rows else pd.DataFrame()


def search_animals(records: typing.Iterable[AnimalRecord], term: str) -> list[AnimalRecord]:
    """Case-insensitive substring search over id, species and breed."""
    needle = term.strip().casefold()
    if not needle:
        return list(records)
    return [
        record
        for record in records
        if any(
            needle in (value or "").casefold()
            for value in (record.animal_id, record.species, record.breed)
        )
    ]


def write_report(summary: HerdSummary, sink: EventSink, generated_at: datetime) -> dict:
    """Hand a farm-dashboard report event to `sink`; returns the event."""
    event = {
        "kind": "report",
        "type": "farm-dashboard",
        "status": "completed",
        "generated_at": generated_at.isoformat(),
        **summary.to_dict(),
    }
    sink.write(event)
    logger.info(f"Wrote herd report covering {summary.total} animals")
    return event
