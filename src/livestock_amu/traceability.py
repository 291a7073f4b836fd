"""
Traceability labels.

A label is the flat projection of an animal and its latest assessment that is
printed as a QR code on ear tags and product batches. This module only deals
with the text payload; turning it into an image is left to the label printer.
"""

import json
import logging
import typing
from dataclasses import asdict, dataclass, fields
from datetime import datetime

from .animal import AnimalRecord
from .assessment import AMULevel, MRLStatus, RiskAssessment
from .sinks import EventSink

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TraceLabel:
    """
    Attributes:
        animal_id: Identifier of the animal.
        owner: Owner name or id.
        species: Species name.
        breed: Breed name.
        amu_level: AMU risk category label (LOW … CRITICAL).
        amu_score: AMU risk score in [0, 100].
        mrl_status: MRL compliance label (SAFE, COMPLIANT, NOT COMPLIANT, PENDING).
        issued_at: ISO timestamp the label was produced.
    """

    animal_id: str
    owner: str
    species: str
    breed: str
    amu_level: str
    amu_score: int
    mrl_status: str
    issued_at: str

    def __post_init__(self):
        # both raise ValueError on unknown labels
        AMULevel.from_label(self.amu_level)
        MRLStatus.from_label(self.mrl_status)
        if isinstance(self.amu_score, bool) or not isinstance(self.amu_score, int):
            raise ValueError(f"amu_score must be an integer, got {self.amu_score!r}")
        if not 0 <= self.amu_score <= 100:
            raise ValueError(f"amu_score out of range: {self.amu_score!r}")


def label_for(record: AnimalRecord, assessment: RiskAssessment) -> TraceLabel:
    return TraceLabel(
        animal_id=record.animal_id or "",
        owner=record.owner or "",
        species=record.species,
        breed=record.breed or "",
        amu_level=assessment.amu_level.value,
        amu_score=assessment.amu_score,
        mrl_status=assessment.mrl_status.value,
        issued_at=assessment.assessed_at.isoformat(),
    )


def encode_label(label: TraceLabel) -> str:
    """Serialize a label to the compact JSON text stored in the QR code."""
    return json.dumps(asdict(label), separators=(",", ":"))


def decode_label(payload: str) -> typing.Optional[TraceLabel]:
    """
    Parse a scanned payload back into a TraceLabel.
    Malformed payloads are logged and give None.
    """
    try:
        data = json.loads(payload)
    except (TypeError, ValueError) as e:
        logger.warning(f"Invalid label payload: {e}")
        return None
    if not isinstance(data, dict):
        logger.warning(f"Invalid label payload: expected an object, got {type(data).__name__}")
        return None

    names = [f.name for f in fields(TraceLabel)]
    missing = [name for name in names if name not in data]
    if missing:
        logger.warning(f"Invalid label payload: missing fields {missing}")
        return None
    try:
        return TraceLabel(**{name: data[name] for name in names})
    except (TypeError, ValueError) as e:
        logger.warning(f"Invalid label payload: {e}")
        return None


def log_scan(label: TraceLabel, sink: EventSink, scanned_at: datetime) -> dict:
    """Record that a label was scanned; returns the event written to `sink`."""
    event = {"kind": "scan", **asdict(label), "scanned_at": scanned_at.isoformat()}
    sink.write(event)
    logger.info(f"Logged scan of animal {label.animal_id!r}")
    return event
