"""
Animal domain model.

Defines the AnimalRecord class holding the owner-entered attributes of a single
animal, and the species weight baselines used to judge under/overweight risk.
"""

import numbers
from dataclasses import dataclass
from datetime import date, datetime
from typing import NamedTuple, Optional, Union


class WeightBaseline(NamedTuple):
    min_kg: float
    optimal_kg: float


# Keys are casefolded species names
SPECIES_WEIGHT_BASELINES: dict[str, WeightBaseline] = {
    "cow": WeightBaseline(80, 300),
    "buffalo": WeightBaseline(90, 350),
    "goat": WeightBaseline(15, 35),
    "sheep": WeightBaseline(20, 45),
    "pig": WeightBaseline(30, 100),
    "chicken": WeightBaseline(1, 2.5),
    "duck": WeightBaseline(1, 2),
}
DEFAULT_WEIGHT_BASELINE = WeightBaseline(30, 100)

DoseDate = Union[str, date, datetime, None]


def is_known_species(species: Optional[str]) -> bool:
    return str(species or "").strip().casefold() in SPECIES_WEIGHT_BASELINES


def weight_baseline_for(species: Optional[str]) -> WeightBaseline:
    """
    Look up the (min, optimal) weight pair for a species.
    Unrecognized species fall back to DEFAULT_WEIGHT_BASELINE.
    """
    key = str(species or "").strip().casefold()
    return SPECIES_WEIGHT_BASELINES.get(key, DEFAULT_WEIGHT_BASELINE)


@dataclass(frozen=True)
class AnimalRecord:
    """
    Represents the editable attributes of one animal at assessment time.

    Attributes:
        species: Species name (Cow, Buffalo, Goat, Sheep, Pig, Chicken, Duck or other).
        age_months: Age in months.
        weight_kg: Live weight in kilograms.
        antibiotic_used: True if the animal received an antibiotic.
        withdrawal_days: Withdrawal period of that antibiotic, in days.
        health_status: excellent, good, fair/moderate or poor/critical.
        vaccination_status: True if vaccinations are up to date.
        antibiotic_name: Name of the antibiotic, if any.
        last_dose_date: ISO calendar date of the last dose, if any.
        animal_id: Identifier used on traceability labels.
        owner: Owner name or id.
        breed: Breed name.

    Only types are checked here. Range checks (negative age, weight, ...) are the
    caller's job, see HerdMapper.
    """

    species: str
    age_months: float
    weight_kg: float
    antibiotic_used: bool
    withdrawal_days: int
    health_status: str
    vaccination_status: bool
    antibiotic_name: Optional[str] = None
    last_dose_date: DoseDate = None
    animal_id: Optional[str] = None
    owner: Optional[str] = None
    breed: Optional[str] = None

    def __post_init__(self):
        for name in ("antibiotic_used", "vaccination_status"):
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise TypeError(f"{name} must be a boolean, got {type(value).__name__}")

        for name in ("age_months", "weight_kg", "withdrawal_days"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise TypeError(f"{name} must be a number, got {type(value).__name__}")

        if not isinstance(self.species, str):
            raise TypeError(f"species must be a string, got {type(self.species).__name__}")
        if not isinstance(self.health_status, str):
            raise TypeError(
                f"health_status must be a string, got {type(self.health_status).__name__}"
            )
        if self.last_dose_date is not None and not isinstance(self.last_dose_date, (str, date)):
            raise TypeError(
                f"last_dose_date must be an ISO date string or a date, "
                f"got {type(self.last_dose_date).__name__}"
            )

    @property
    def weight_baseline(self) -> WeightBaseline:
        return weight_baseline_for(self.species)

    @property
    def weight_ratio(self) -> float:
        """Live weight relative to the species optimal weight."""
        return self.weight_kg / self.weight_baseline.optimal_kg
