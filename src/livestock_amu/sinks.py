"""
Event sinks.

Scan logs and generated reports are handed to a sink chosen by the caller, so
nothing in the scoring code writes anywhere on its own.
"""

import json
import logging
import pathlib
import typing

logger = logging.getLogger(__name__)


class EventSink(typing.Protocol):
    def write(self, event: dict) -> None:
        ...


class JsonLinesSink:
    """Appends each event as one JSON object per line."""

    def __init__(self, path: typing.Union[str, pathlib.Path]):
        self.path = pathlib.Path(path)

    def write(self, event: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a", encoding="utf-8") as out_f:
            out_f.write(json.dumps(event, sort_keys=True) + "\n")
        logger.debug(f"Wrote {event.get('kind', 'event')} to {self.path}")

    def read_all(self) -> list[dict]:
        if not self.path.is_file():
            return []
        with open(self.path, encoding="utf-8") as in_f:
            return [json.loads(line) for line in in_f if line.strip()]


class MemorySink:
    """Keeps events in memory; handy for previews and tests."""

    def __init__(self):
        self.events: list[dict] = []

    def write(self, event: dict) -> None:
        self.events.append(event)
