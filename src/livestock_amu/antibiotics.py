"""
Antibiotic reference tables.

Name fragments are matched case-insensitively as substrings, so
"Oxytetracycline LA 20%" matches both "tetracycline" and "oxytetracycline".
"""

from enum import Enum
from typing import Iterable, Optional

# Antibiotics critically important for human medicine; scoring treats these as
# the highest-risk tier
CRITICAL_ANTIBIOTIC_FRAGMENTS: tuple[str, ...] = (
    "penicillin",
    "amoxicillin",
    "cephalosporin",
    "fluoroquinolone",
    "ciprofloxacin",
    "enrofloxacin",
    "tetracycline",
    "oxytetracycline",
    "streptomycin",
    "gentamicin",
    "colistin",
    "polymyxin",
)

# Veterinary antibiotics commonly entered by farmers, grouped by class
COMMON_ANTIBIOTICS: tuple[str, ...] = (
    # Penicillins
    "Penicillin", "Amoxicillin", "Ampicillin", "Cloxacillin",
    # Cephalosporins
    "Ceftiofur", "Cephalexin", "Cefquinome",
    # Tetracyclines
    "Oxytetracycline", "Tetracycline", "Doxycycline",
    # Fluoroquinolones
    "Enrofloxacin", "Ciprofloxacin", "Marbofloxacin",
    # Aminoglycosides
    "Streptomycin", "Gentamicin", "Neomycin",
    # Macrolides
    "Tylosin", "Tilmicosin", "Erythromycin",
    # Sulfonamides
    "Sulfadimidine", "Sulfamethoxazole", "Trimethoprim",
    # Others
    "Colistin", "Lincomycin", "Florfenicol",
)

_CRITICALLY_IMPORTANT = (
    "fluoroquinolone", "ciprofloxacin", "enrofloxacin",
    "cephalosporin", "colistin", "polymyxin",
)
_HIGHLY_IMPORTANT = (
    "penicillin", "amoxicillin", "ampicillin",
    "tetracycline", "oxytetracycline", "macrolide",
)


class AntibioticImportance(Enum):
    CRITICALLY_IMPORTANT = "CRITICALLY IMPORTANT"
    HIGHLY_IMPORTANT = "HIGHLY IMPORTANT"
    IMPORTANT = "IMPORTANT"


def _contains_any(name: Optional[str], fragments: Iterable[str]) -> bool:
    lowered = (name or "").lower()
    return any(fragment in lowered for fragment in fragments)


def is_critical_antibiotic(name: Optional[str]) -> bool:
    return _contains_any(name, CRITICAL_ANTIBIOTIC_FRAGMENTS)


def is_common_antibiotic(name: Optional[str]) -> bool:
    """True if some catalogue entry appears in the given name."""
    return _contains_any(name, (entry.lower() for entry in COMMON_ANTIBIOTICS))


def antibiotic_importance(name: Optional[str]) -> AntibioticImportance:
    """
    Classify an antibiotic by its importance to human medicine.
    Anything not recognized is reported as IMPORTANT.
    """
    if _contains_any(name, _CRITICALLY_IMPORTANT):
        return AntibioticImportance.CRITICALLY_IMPORTANT
    if _contains_any(name, _HIGHLY_IMPORTANT):
        return AntibioticImportance.HIGHLY_IMPORTANT
    return AntibioticImportance.IMPORTANT
