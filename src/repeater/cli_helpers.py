"""CLI helper functions for reading and writing records as JSON lines.

Input line format (all keys optional):
    {"id": "r1", "attributes": {"repeater.count": "2"}, "content": "payload"}

Output line format:
    {"id": "r1", "route": "repeat", "penalized": false, "attributes": {...}, "content": "payload"}
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any, TextIO

from repeater.contracts import Record


class RecordFormatError(ValueError):
    """Raised when an input line cannot be turned into a Record."""

    def __init__(self, line_number: int, message: str) -> None:
        self.line_number = line_number
        super().__init__(f"line {line_number}: {message}")


def record_from_json(data: Any, line_number: int) -> Record:
    """Build a Record from one decoded JSON line.

    Raises:
        RecordFormatError: If the shape or value types are wrong
    """
    if not isinstance(data, dict):
        raise RecordFormatError(line_number, f"expected a JSON object, got {type(data).__name__}")

    unknown = set(data) - {"id", "attributes", "content"}
    if unknown:
        raise RecordFormatError(line_number, f"unknown keys {sorted(unknown)}")

    attributes = data.get("attributes", {})
    if not isinstance(attributes, dict):
        raise RecordFormatError(line_number, "'attributes' must be an object")
    for key, value in attributes.items():
        if not isinstance(value, str):
            raise RecordFormatError(line_number, f"attribute '{key}' must be a string, got {type(value).__name__}")

    content = data.get("content", "")
    if not isinstance(content, str):
        raise RecordFormatError(line_number, "'content' must be a string")

    kwargs: dict[str, Any] = {"attributes": attributes, "content": content.encode("utf-8")}
    if "id" in data:
        if not isinstance(data["id"], str) or not data["id"]:
            raise RecordFormatError(line_number, "'id' must be a non-empty string")
        kwargs["record_id"] = data["id"]
    return Record(**kwargs)


def read_records(path: Path) -> Iterator[Record]:
    """Yield records from a JSON lines file, skipping blank lines.

    Raises:
        RecordFormatError: On the first malformed line
    """
    with path.open("rb") as f:
        for line_number, raw in enumerate(f, start=1):
            try:
                line = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise RecordFormatError(line_number, f"invalid UTF-8 at byte {e.start}") from e
            if not line.strip():
                continue
            try:
                data = json.loads(line)
            except json.JSONDecodeError as e:
                raise RecordFormatError(line_number, f"invalid JSON: {e.msg}") from e
            yield record_from_json(data, line_number)


def record_to_json(record: Record, route: str) -> dict[str, Any]:
    return {
        "id": record.record_id,
        "route": route,
        "penalized": record.penalized,
        "attributes": dict(record.attributes),
        "content": record.content.decode("utf-8", errors="replace"),
    }


def write_records(emitted: list[tuple[Record, str]], out: TextIO) -> None:
    for record, route in emitted:
        out.write(json.dumps(record_to_json(record, route), sort_keys=True))
        out.write("\n")
