import pathlib

import pandas as pd

# Columns that need renaming → AnimalRecord fields
RENAME_MAP = {
    "type": "species",
    "animal_type": "species",
    "age": "age_months",
    "weight": "weight_kg",
    "antibiotic": "antibiotic_name",
    "antibiotic_given": "antibiotic_used",
    "withdrawal": "withdrawal_days",
    "withdrawal_period": "withdrawal_days",
    "last_dose": "last_dose_date",
    "health": "health_status",
    "vaccinated": "vaccination_status",
    "vaccination": "vaccination_status",
}


def normalize_headers(df: pd.DataFrame) -> pd.DataFrame:
    """
    - normalize all headers to snake_case lowercase, dropping any "(…)" unit hint
    - apply renames from RENAME_MAP
    """
    df.columns = (
        df.columns.astype(str).str.strip()
        .str.replace(r"\s*\(.*?\)", "", regex=True)  # drop any "(…)"
        .str.replace(r"[\s\-]+", "_", regex=True)  # spaces/hyphens → underscore
        .str.replace(":", "", regex=False)  # drop colons
        .str.lower()
    )
    return df.rename(
        columns={orig: target for orig, target in RENAME_MAP.items() if orig in df.columns}
    )


def load_sheets_as_tables(workbook_path: str) -> dict[str, pd.DataFrame]:
    """
    Read a herd workbook into DataFrames, one per sheet:
      - first row = header
      - first column = index (animal id)
      - headers normalized, see normalize_headers

    A .csv file is read as a single sheet named after the file stem.
    """
    path = pathlib.Path(workbook_path)
    if path.suffix.lower() == ".csv":
        df = pd.read_csv(path, header=0, index_col=0)
        return {path.stem: normalize_headers(df)}

    excel = pd.ExcelFile(path, engine="openpyxl")
    tables: dict[str, pd.DataFrame] = {}

    for sheet_name in excel.sheet_names:
        df = pd.read_excel(
            excel, sheet_name=sheet_name, header=0, index_col=0, engine="openpyxl"
        )
        tables[sheet_name] = normalize_headers(df)

    return tables
