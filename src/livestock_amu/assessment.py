"""
Assessment domain model.

Defines the AMU risk levels, MRL compliance states and the RiskAssessment
produced for each animal.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


def _label_key(label: str) -> str:
    return label.strip().lower().replace(" ", "_").replace("-", "_")


class AMULevel(Enum):
    """
    Antimicrobial-usage risk category, ordered from lowest to highest.
    """
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @classmethod
    def from_label(cls, label: str) -> "AMULevel":
        """
        Convert a label such as "high" or " Critical " into the enum.
        """
        try:
            return cls[_label_key(label).upper()]
        except KeyError:
            raise ValueError(f"Unknown AMU level label: {label!r}")

    @property
    def color(self) -> str:
        """Hex colour used for this level on dashboards."""
        return _LEVEL_COLORS[self]


_LEVEL_COLORS = {
    AMULevel.CRITICAL: "#DC2626",
    AMULevel.HIGH: "#EA580C",
    AMULevel.MODERATE: "#CA8A04",
    AMULevel.LOW: "#16A34A",
}


class MRLStatus(Enum):
    """
    Maximum-residue-limit compliance of an animal's products.
    Values are the labels stored alongside animal records.
    """
    SAFE = "SAFE"
    COMPLIANT = "COMPLIANT"
    NOT_COMPLIANT = "NOT COMPLIANT"
    PENDING = "PENDING"

    @classmethod
    def from_label(cls, label: str) -> "MRLStatus":
        """
        Accepts both the stored label ("NOT COMPLIANT") and the member name
        ("not_compliant"), case-insensitively.
        """
        try:
            return cls[_label_key(label).upper()]
        except KeyError:
            raise ValueError(f"Unknown MRL status label: {label!r}")


@dataclass(frozen=True)
class RiskAssessment:
    """
    Derived risk picture for one animal. Always recomputable from the
    AnimalRecord and the assessment time, so storing it is only a cache.

    Attributes:
        amu_score: Integer risk score in [0, 100].
        amu_level: Category of amu_score.
        mrl_status: Withdrawal-period compliance.
        days_until_compliant: Days left in the withdrawal period (0 when none).
        recommendations: Ordered advisory messages.
        assessed_at: The "now" the assessment was computed against.
    """

    amu_score: int
    amu_level: AMULevel
    mrl_status: MRLStatus
    days_until_compliant: int
    recommendations: tuple[str, ...]
    assessed_at: datetime

    def __post_init__(self):
        if not 0 <= self.amu_score <= 100:
            raise ValueError(f"amu_score out of range: {self.amu_score!r}")

    def to_dict(self) -> dict:
        return {
            "amuScore": self.amu_score,
            "amuLevel": self.amu_level.value,
            "mrlStatus": self.mrl_status.value,
            "daysUntilCompliant": self.days_until_compliant,
            "recommendations": list(self.recommendations),
            "assessedAt": self.assessed_at.isoformat(),
        }
