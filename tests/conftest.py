import pandas as pd
import pytest
from datetime import datetime

from livestock_amu.animal import AnimalRecord


@pytest.fixture(scope="session")
def now() -> datetime:
    """
    Fixed assessment time. Dose dates in tests are counted back from here.
    """
    return datetime(2025, 3, 15, 9, 30)


@pytest.fixture
def make_record():
    """
    Factory for AnimalRecords: a healthy, vaccinated, untreated adult cow at
    its optimal weight unless overridden.
    """
    def _make(**overrides) -> AnimalRecord:
        fields = dict(
            animal_id="A1",
            species="Cow",
            age_months=60,
            weight_kg=300,
            antibiotic_used=False,
            withdrawal_days=0,
            health_status="excellent",
            vaccination_status=True,
        )
        fields.update(overrides)
        return AnimalRecord(**fields)

    return _make


# Rows written with the headers a farmer would type; the loader normalizes them
HERD_ROWS = [
    {
        "Animal ID": "A1", "Owner": "Ravi", "Type": "Cow", "Breed": "Holstein",
        "Age (months)": 24, "Weight (kg)": 300, "Antibiotic Used": "no",
        "Antibiotic": "", "Withdrawal (days)": 0, "Last Dose": "",
        "Health": "Excellent", "Vaccinated": "yes",
    },
    {
        "Animal ID": "A2", "Owner": "Ravi", "Type": "Cow", "Breed": "Jersey",
        "Age (months)": 1, "Weight (kg)": 20, "Antibiotic Used": "yes",
        "Antibiotic": "Colistin", "Withdrawal (days)": 35, "Last Dose": "2025-03-12",
        "Health": "poor", "Vaccinated": "no",
    },
    {
        "Animal ID": "A3", "Owner": "Meena", "Type": "Goat", "Breed": "Boer",
        "Age (months)": 60, "Weight (kg)": 35, "Antibiotic Used": "yes",
        "Antibiotic": "Tylosin", "Withdrawal (days)": 14, "Last Dose": "2025-03-05",
        "Health": "Good", "Vaccinated": "yes",
    },
    {
        "Animal ID": "A4", "Owner": "Meena", "Type": "Sheep", "Breed": "Merino",
        "Age (months)": 30, "Weight (kg)": 45, "Antibiotic Used": "no",
        "Antibiotic": "", "Withdrawal (days)": 0, "Last Dose": "",
        "Health": "fair", "Vaccinated": "yes",
    },
]


@pytest.fixture
def herd_workbook(tmp_path) -> str:
    """Excel workbook with an 'Animals' sheet and an unrelated notes sheet."""
    path = tmp_path / "herd.xlsx"
    with pd.ExcelWriter(path, engine="openpyxl") as w:
        pd.DataFrame(HERD_ROWS).to_excel(w, sheet_name="Animals", index=False)
        pd.DataFrame({"Note": ["n1"], "Text": ["fence repaired"]}).to_excel(
            w, sheet_name="Notes", index=False
        )
    return str(path)


@pytest.fixture
def herd_csv(tmp_path) -> str:
    path = tmp_path / "herd.csv"
    pd.DataFrame(HERD_ROWS).to_csv(path, index=False)
    return str(path)
