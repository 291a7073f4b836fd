import abc
import math
import typing
from datetime import date, datetime

import pandas as pd
from stairval.notepad import Notepad

from .animal import AnimalRecord, is_known_species
from .antibiotics import is_common_antibiotic
from .risk import is_known_health_status, parse_dose_date

# Minimal required columns (after renaming) to identify an animals sheet
ANIMAL_KEY_COLUMNS = {"species", "age_months", "weight_kg", "health_status"}

# Columns read when present; missing ones fall back to defaults
OPTIONAL_ANIMAL_COLUMNS = {
    "antibiotic_used",
    "antibiotic_name",
    "withdrawal_days",
    "last_dose_date",
    "vaccination_status",
    "owner",
    "breed",
}

ANTIBIOTIC_DETAIL_COLUMNS = ("antibiotic_name", "last_dose_date", "withdrawal_days")

# Friendly sheet names, matched case-insensitively
KNOWN_SHEET_ALIASES: set[str] = {"animals", "animal", "livestock", "herd"}

ID_COLUMN = "animal_id"


class TableMapper(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def apply_mapping(
            self, tables: dict[str, pd.DataFrame], notepad: Notepad
    ) -> typing.Sequence[AnimalRecord]:
        raise NotImplementedError


class HerdMapper(TableMapper):
    """
    Turns herd workbook rows into AnimalRecords.

    The risk engine does not validate its input, so this is where range checks
    happen: rows with errors are skipped and reported on the notepad, rows with
    warnings are kept.
    """

    def apply_mapping(
            self, tables: dict[str, pd.DataFrame], notepad: Notepad
    ) -> list[AnimalRecord]:
        """
        1) choose the animals sheet
        2) bring the index in as the animal id
        3) check required columns
        4) map rows to AnimalRecords, skipping duplicate ids
        """
        chosen = self._choose_animals_table(tables, notepad)
        if chosen is None:
            return []
        sheet_name, df = chosen

        working = self._prepare_sheet(df)
        missing = sorted(ANIMAL_KEY_COLUMNS - set(working.columns))
        if missing:
            notepad.add_error(f"Sheet {sheet_name!r}: missing required columns: {missing}")
            return []

        records: list[AnimalRecord] = []
        seen_ids: set[str] = set()
        for _, row in working.iterrows():
            record = self.parse_animal_row(row, sheet_name, notepad)
            if record is None:
                continue
            if record.animal_id in seen_ids:
                notepad.add_error(
                    f"Sheet {sheet_name!r}: duplicate animal id {record.animal_id!r}; row skipped"
                )
                continue
            seen_ids.add(record.animal_id)
            records.append(record)
        return records

    @staticmethod
    def _prepare_sheet(df: pd.DataFrame) -> pd.DataFrame:
        """Bring the index into a column named 'animal_id'."""
        working = df.reset_index()
        original = working.columns[0]
        return working.rename(columns={original: ID_COLUMN})

    @staticmethod
    def _choose_animals_table(
            tables: dict[str, pd.DataFrame], notepad: Notepad
    ) -> typing.Optional[tuple[str, pd.DataFrame]]:
        """
        Prefer a sheet named like "animals"; otherwise take the first sheet that
        carries every required column.
        """
        for sheet_name, df in tables.items():
            if sheet_name.strip().casefold() in KNOWN_SHEET_ALIASES:
                return sheet_name, df
        for sheet_name, df in tables.items():
            if ANIMAL_KEY_COLUMNS.issubset(df.columns):
                return sheet_name, df
        notepad.add_error(
            f"Missing animals sheet: name one of {sorted(KNOWN_SHEET_ALIASES)} "
            f"or provide columns {sorted(ANIMAL_KEY_COLUMNS)}."
        )
        return None

    @staticmethod
    def _is_blank(value: typing.Any) -> bool:
        # Handle None, NaN, NaT, pandas NA, and empty/whitespace-only strings
        if value is None:
            return True
        if isinstance(value, str):
            return not value.strip()
        try:
            return bool(pd.isna(value))
        except (TypeError, ValueError):
            return False

    @staticmethod
    def _to_bool(value: typing.Any) -> bool:
        """
        Robust boolean parsing:
        - True for: 1, '1', 'true', 't', 'yes', 'y' (case-insensitive)
        - False for: 0, '0', 'false', 'f', 'no', 'n', '', None, NaN
        - Fallback: Python truthiness on other values (rare)
        """
        if isinstance(value, bool):
            return value
        if HerdMapper._is_blank(value):
            return False
        s = str(value).strip().lower()
        if s in {"1", "1.0", "true", "t", "yes", "y"}:
            return True
        if s in {"0", "0.0", "false", "f", "no", "n"}:
            return False
        return bool(value)

    @staticmethod
    def _to_number(value: typing.Any) -> typing.Optional[float]:
        """
        Numeric cell → float. Blank cells give None; anything else that is not a
        number raises ValueError.
        """
        if HerdMapper._is_blank(value):
            return None
        if isinstance(value, bool):
            raise ValueError(f"expected a number, got {value!r}")
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
        if math.isnan(number) or math.isinf(number):
            raise ValueError(f"expected a finite number, got {value!r}")
        return number

    @staticmethod
    def _to_text(value: typing.Any) -> typing.Optional[str]:
        if HerdMapper._is_blank(value):
            return None
        return str(value).strip()

    @staticmethod
    def _normalize_date(value: typing.Any) -> typing.Optional[str]:
        """
        Dose dates:
        - Excel/pandas timestamps and dates → 'YYYY-MM-DD'
        - strings are trimmed and kept as written (the engine decides validity)
        - empty/NaN/NaT → None
        """
        if HerdMapper._is_blank(value):
            return None
        if isinstance(value, datetime):
            return value.date().isoformat()
        if isinstance(value, date):
            return value.isoformat()
        return str(value).strip()

    @staticmethod
    def parse_animal_row(
            row: pd.Series, sheet_name: str, notepad: Notepad
    ) -> typing.Optional[AnimalRecord]:
        """
        Parse a single row into an AnimalRecord.
        Returns None if validation fails for this row.
        """
        animal_id = HerdMapper._to_text(row.get(ID_COLUMN))
        if animal_id is None:
            notepad.add_error(f"Sheet {sheet_name!r}: row without an animal id; row skipped")
            return None
        where = f"Sheet {sheet_name!r}, animal {animal_id!r}"

        species = HerdMapper._to_text(row.get("species"))
        health_status = HerdMapper._to_text(row.get("health_status"))
        if species is None:
            notepad.add_error(f"{where}: missing species")
            return None
        if health_status is None:
            notepad.add_error(f"{where}: missing health_status")
            return None

        try:
            age_months = HerdMapper._to_number(row.get("age_months"))
            weight_kg = HerdMapper._to_number(row.get("weight_kg"))
            withdrawal = HerdMapper._to_number(row.get("withdrawal_days"))
        except (ValueError, TypeError) as e:
            notepad.add_error(f"{where}: {e}")
            return None

        for name, value in (("age_months", age_months), ("weight_kg", weight_kg)):
            if value is None:
                notepad.add_error(f"{where}: missing {name}")
                return None
            if value < 0:
                notepad.add_error(f"{where}: {name} must not be negative, got {value:g}")
                return None

        withdrawal = 0.0 if withdrawal is None else withdrawal
        if withdrawal < 0 or not withdrawal.is_integer():
            notepad.add_error(
                f"{where}: withdrawal_days must be a non-negative whole number, got {withdrawal:g}"
            )
            return None

        antibiotic_used = HerdMapper._to_bool(row.get("antibiotic_used"))
        antibiotic_name = HerdMapper._to_text(row.get("antibiotic_name"))
        last_dose_date = HerdMapper._normalize_date(row.get("last_dose_date"))

        if antibiotic_used:
            if antibiotic_name and not is_common_antibiotic(antibiotic_name):
                notepad.add_warning(f"{where}: antibiotic {antibiotic_name!r} not in the common catalogue")
            if last_dose_date is None:
                notepad.add_warning(f"{where}: antibiotic used but no last_dose_date; MRL status will be SAFE")
            elif parse_dose_date(last_dose_date) is None:
                notepad.add_warning(
                    f"{where}: last_dose_date {last_dose_date!r} is not a calendar date; MRL status will be PENDING"
                )
        elif antibiotic_name or last_dose_date or withdrawal:
            # no antibiotic: drop the details so the record reads as unexposed
            notepad.add_warning(f"{where}: antibiotic details given but antibiotic_used is false; ignored")
            antibiotic_name, last_dose_date, withdrawal = None, None, 0.0

        if not is_known_species(species):
            notepad.add_warning(f"{where}: unrecognized species {species!r}; default weight baseline used")
        if not is_known_health_status(health_status):
            notepad.add_warning(f"{where}: unrecognized health_status {health_status!r}")

        try:
            return AnimalRecord(
                animal_id=animal_id,
                species=species,
                age_months=age_months,
                weight_kg=weight_kg,
                antibiotic_used=antibiotic_used,
                antibiotic_name=antibiotic_name,
                last_dose_date=last_dose_date,
                withdrawal_days=int(withdrawal),
                health_status=health_status,
                vaccination_status=HerdMapper._to_bool(row.get("vaccination_status")),
                owner=HerdMapper._to_text(row.get("owner")),
                breed=HerdMapper._to_text(row.get("breed")),
            )
        except (ValueError, TypeError) as e:
            notepad.add_error(f"{where}: {e}")
            return None
