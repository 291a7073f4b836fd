"""
Command-line interface for the livestock AMU toolkit.

Reads a herd workbook, validates each animal row, scores antimicrobial-usage
risk and MRL compliance, and writes the results for the farm dashboard.
"""

import json
import logging
import os
import pathlib
import sys
import typing
from collections import namedtuple
from dataclasses import asdict
from datetime import datetime

import click
import pandas as pd
from stairval.notepad import Notepad, create_notepad

from .assessment import AMULevel
from .loader import load_sheets_as_tables
from .mapper import ANIMAL_KEY_COLUMNS, KNOWN_SHEET_ALIASES, HerdMapper
from .report import assessments_frame, summarize_herd, write_report
from .risk import assess, assess_herd
from .sinks import JsonLinesSink
from .traceability import decode_label, encode_label, label_for, log_scan

AuditEntry = namedtuple("AuditEntry", ["step", "sheet", "message", "level"])

DEFAULT_OUTPUT_DIR = "amu_reports"

_LEVEL_STYLES = {
    AMULevel.CRITICAL: "red",
    AMULevel.HIGH: "yellow",
    AMULevel.MODERATE: "cyan",
    AMULevel.LOW: "green",
}


@click.group()
@click.option(
    "--verbose-logging",
    is_flag=True,
    help="Also emit debug logs to stderr",
)
@click.option(
    "--log-file-path",
    type=click.Path(dir_okay=False, writable=True),
    help="Append timestamped logs to this file",
)
def main(verbose_logging: bool, log_file_path: typing.Optional[str]):
    """livestock-amu: antimicrobial-usage risk and MRL compliance for a herd."""
    handlers: list[logging.Handler] = []
    if log_file_path:
        handlers.append(logging.FileHandler(log_file_path, mode="a", encoding="utf-8"))
    if verbose_logging:
        handlers.append(logging.StreamHandler(sys.stderr))
    if handlers:
        logging.basicConfig(
            level=logging.DEBUG if verbose_logging else logging.INFO,
            format="%(asctime)s %(levelname)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            handlers=handlers,
        )


_workbook_option = click.option(
    "-e",
    "--excel-path",
    "excel_file",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="path to the herd workbook (.xlsx or .csv)",
)
_as_of_option = click.option(
    "--as-of",
    "as_of",
    default=None,
    type=str,
    help="assessment date YYYY-MM-DD (default: $AMU_AS_OF, else now)",
)


@main.command(name="assess")
@_workbook_option
@_as_of_option
@click.option(
    "-o",
    "--output-dir",
    "output_dir",
    default=None,
    type=click.Path(file_okay=False),
    help="base folder for reports (default: $AMU_OUTPUT_DIR, else ./amu_reports)",
)
@click.option(
    "--report-log",
    "report_log",
    default=None,
    type=click.Path(dir_okay=False),
    help="also append the herd report event to this JSON-lines file",
)
@click.option("--verbose", is_flag=True, help="Show the workbook audit before mapping")
def assess_workbook(
    excel_file: str,
    as_of: typing.Optional[str],
    output_dir: typing.Optional[str],
    report_log: typing.Optional[str],
    verbose: bool,
):
    """
    Score every animal in the workbook and write, into a timestamped folder:
      - assessments.csv: one row per animal
      - summary.json: herd counts per AMU level and MRL status
    """
    now = _resolve_as_of(as_of)
    tables = _read_sheets(excel_file)

    if verbose:
        _echo_audit(preprocess(tables))

    notepad = create_notepad("herd")
    records = HerdMapper().apply_mapping(tables, notepad)
    _report_issues(notepad)

    if not records:
        click.echo("No animals to assess.", err=True)
        sys.exit(1 if notepad.has_errors(include_subsections=True) else 0)

    # one snapshot of "now" for the whole herd
    assessments = assess_herd(records, now)
    summary = summarize_herd(records, assessments)

    out_dir = _prepare_output_dir(output_dir)
    assessments_frame(records, assessments).to_csv(out_dir / "assessments.csv")
    with open(out_dir / "summary.json", "w", encoding="utf-8") as out_f:
        json.dump({"assessedAt": now.isoformat(), **summary.to_dict()}, out_f, indent=2)
    if report_log:
        write_report(summary, JsonLinesSink(report_log), now)
    logging.info(f"Wrote assessments for {summary.total} animals to {out_dir}")

    click.echo(f"Assessed {summary.total} animals as of {now.date().isoformat()}")
    for level, count in summary.level_counts.items():
        click.echo("  " + click.style(f"{level.value:<9} {count}", fg=_LEVEL_STYLES[level]))
    for animal_id, days in summary.withdrawal_pending.items():
        click.echo(f"  {animal_id}: NOT COMPLIANT, {days} days of withdrawal remaining")
    click.echo(f"Wrote reports to {out_dir}")


@main.command(name="audit-excel")
@_workbook_option
@click.option("-r", "--raw", is_flag=True, help="emit the audit as JSON")
def audit_excel(excel_file: str, raw: bool):
    """Check sheet classification and required columns without scoring."""
    entries = preprocess(_read_sheets(excel_file))
    if raw:
        click.echo(json.dumps([entry._asdict() for entry in entries], indent=2))
        return
    click.echo(f"{'SHEET':<15}  {'STEP':<20}  {'LEVEL':<7}  MESSAGE")
    for entry in entries:
        click.echo(f"{entry.sheet:<15}  {entry.step:<20}  {entry.level:<7}  {entry.message}")


@main.command(name="label")
@_workbook_option
@_as_of_option
@click.option("--animal-id", "animal_id", required=True, help="animal to label")
def label(excel_file: str, as_of: typing.Optional[str], animal_id: str):
    """Print the traceability label payload for one animal."""
    now = _resolve_as_of(as_of)
    notepad = create_notepad("herd")
    records = HerdMapper().apply_mapping(_read_sheets(excel_file), notepad)

    record = next((r for r in records if r.animal_id == animal_id), None)
    if record is None:
        _report_issues(notepad)
        click.echo(f"Error: animal {animal_id!r} not found or not valid", err=True)
        sys.exit(1)
    click.echo(encode_label(label_for(record, assess(record, now))))


@main.command(name="scan")
@click.argument("payload")
@click.option(
    "--scan-log",
    "scan_log",
    default=None,
    type=click.Path(dir_okay=False),
    help="append the scan event to this JSON-lines file",
)
def scan(payload: str, scan_log: typing.Optional[str]):
    """Decode a scanned label payload and show the animal's status."""
    trace_label = decode_label(payload)
    if trace_label is None:
        click.echo("Error: invalid label payload", err=True)
        sys.exit(1)

    for name, value in asdict(trace_label).items():
        click.echo(f"{name:<11} {value}")
    if scan_log:
        log_scan(trace_label, JsonLinesSink(scan_log), datetime.now())


def _resolve_as_of(as_of: typing.Optional[str]) -> datetime:
    # --as-of wins over $AMU_AS_OF; neither means the current time
    value = as_of or os.getenv("AMU_AS_OF", "").strip()
    if not value:
        return datetime.now()
    try:
        return datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise click.BadParameter(f"expected YYYY-MM-DD, got {value!r}", param_hint="--as-of")


def _read_sheets(excel_file: str) -> dict[str, pd.DataFrame]:
    # read each worksheet into a DataFrame
    try:
        return load_sheets_as_tables(excel_file)
    except (OSError, ValueError) as e:
        logging.error(f"Failed to read '{excel_file}': {e}")
        click.echo(f"Error: cannot read {excel_file}: {e}", err=True)
        sys.exit(1)


def _report_issues(notepad: Notepad):
    # if there were errors, show them
    if notepad.has_errors(include_subsections=True):
        click.echo("Errors found in mapping:")
        for err in notepad.errors():
            click.echo(f"- {err}")
    # show any warnings but keep going
    if notepad.has_warnings(include_subsections=True):
        click.echo("Warnings found in mapping:")
        for w in notepad.warnings():
            click.echo(f"- {w}")


def _prepare_output_dir(output_dir: typing.Optional[str] = None) -> pathlib.Path:
    # use YYYY-MM-DD_HH-MM-SS for human-readable timestamps
    base = pathlib.Path(output_dir or os.getenv("AMU_OUTPUT_DIR") or pathlib.Path.cwd() / DEFAULT_OUTPUT_DIR)
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    out_dir = base / timestamp
    out_dir.mkdir(parents=True, exist_ok=True)
    return out_dir


def _echo_audit(entries: list[AuditEntry]):
    indent = "              "
    for entry in entries:
        line = f"{entry.step:20} {entry.sheet:15} {entry.message}"
        # color by level
        if entry.level == "error":
            colored = click.style(line, fg="red")
        elif entry.level in ("warn", "warning"):
            colored = click.style(line, fg="yellow")
        else:
            colored = click.style(line, fg="cyan")
        click.echo(indent + colored)
    click.echo("")  # a blank line before mapping output


def preprocess(tables: dict[str, pd.DataFrame]) -> list[AuditEntry]:
    """
    Run lightweight audits on each sheet:
      - header normalization
      - sheet classification
      - required-column presence for sheets named like an animals sheet
    """
    entries: list[AuditEntry] = []

    # Step 1: header counts
    for name, df in tables.items():
        entries.append(AuditEntry(
            step="normalize-headers",
            sheet=name,
            message=f"{len(df.columns)} cols, {len(df)} rows",
            level="info",
        ))

    # Step 2: classify
    for name, df in tables.items():
        kind = "animals" if ANIMAL_KEY_COLUMNS.issubset(df.columns) else "skip"
        entries.append(AuditEntry(step="classify-sheet", sheet=name, message=kind, level="info"))

    # Step 3: required columns
    for name, df in tables.items():
        missing = sorted(ANIMAL_KEY_COLUMNS - set(df.columns))
        if name.strip().casefold() in KNOWN_SHEET_ALIASES and missing:
            entries.append(AuditEntry(
                step="required-columns",
                sheet=name,
                message=f"missing {', '.join(missing)}",
                level="error",
            ))
    return entries


if __name__ == "__main__":
    main()
