"""Shared fixtures: synthetic Dexcom Clarity rows and exports."""

from pathlib import Path
from typing import Callable, List

import pytest

from cgm_days.formats.dexcom import DexcomColumn, DEXCOM_SCHEMA


CLARITY_HEADER = DEXCOM_SCHEMA.get_column_names()


def build_row(index: str, event_type: str, **cells: str) -> List[str]:
    """Build a full-width raw row; keyword names are DexcomColumn member names."""
    row = [""] * len(CLARITY_HEADER)
    row[DEXCOM_SCHEMA.position_of(DexcomColumn.INDEX)] = index
    row[DEXCOM_SCHEMA.position_of(DexcomColumn.EVENT_TYPE)] = event_type
    for name, value in cells.items():
        row[DEXCOM_SCHEMA.position_of(DexcomColumn[name])] = value
    return row


def egv_row(index: int, timestamp: str, glucose: str = "120") -> List[str]:
    return build_row(
        str(index), "EGV",
        TIMESTAMP=timestamp,
        SOURCE_DEVICE_ID="iOS G6",
        GLUCOSE_VALUE=glucose,
        TRANSMITTER_TIME="5000",
        TRANSMITTER_ID="8AAAAA",
    )


SAMPLE_ROWS = [
    build_row("1", "FirstName", PATIENT_INFO="Jane"),
    build_row("2", "LastName", PATIENT_INFO="Doe"),
    # Ragged: metadata rows usually stop before the transmitter columns
    build_row("3", "Device", DEVICE_INFO="G6 Mobile App", SOURCE_DEVICE_ID="iOS G6")[:7],
    build_row("4", "Alert", EVENT_SUBTYPE="High", SOURCE_DEVICE_ID="iOS G6", GLUCOSE_VALUE="200", DURATION="00:30:00"),
    build_row("5", "Alert", EVENT_SUBTYPE="Fall", SOURCE_DEVICE_ID="iOS G6", GLUCOSE_RATE_OF_CHANGE="3"),
    egv_row(6, "2024-03-01T00:10:00", "112"),
    egv_row(7, "2024-03-01T04:10:00", "145"),
    build_row("8", "Insulin", TIMESTAMP="2024-03-01T07:30:00", EVENT_SUBTYPE="Fast-Acting",
              SOURCE_DEVICE_ID="iOS G6", INSULIN_VALUE="4.5")[:12],
    build_row("9", "Carbs", TIMESTAMP="2024-03-01T07:35:00", SOURCE_DEVICE_ID="iOS G6", CARB_VALUE="45")[:12],
    build_row("10", "Calibration", TIMESTAMP="2024-03-01T12:00:00", SOURCE_DEVICE_ID="iOS G6",
              GLUCOSE_VALUE="130", TRANSMITTER_ID="8AAAAA"),
    egv_row(11, "2024-03-01T23:55:00", "260"),
    build_row("12", "Exercise", TIMESTAMP="2024-03-02T01:00:00", EVENT_SUBTYPE="Light", DURATION="00:30:00"),
]


def to_csv_text(rows: List[List[str]]) -> str:
    lines = [",".join(CLARITY_HEADER)] + [",".join(row) for row in rows]
    return "\n".join(lines) + "\n"


@pytest.fixture
def make_row() -> Callable[..., List[str]]:
    """Factory for full-width raw rows."""
    return build_row


@pytest.fixture
def sample_rows() -> List[List[str]]:
    return [list(row) for row in SAMPLE_ROWS]


@pytest.fixture
def clarity_csv_text() -> str:
    """A small Clarity export covering every row kind."""
    return to_csv_text(SAMPLE_ROWS)


@pytest.fixture
def clarity_csv_file(tmp_path: Path, clarity_csv_text: str) -> Path:
    """The sample export written to disk with a UTF-8 BOM, as Clarity does."""
    path = tmp_path / "clarity_export.csv"
    path.write_bytes(b'\xef\xbb\xbf' + clarity_csv_text.encode("utf-8"))
    return path


@pytest.fixture
def malformed_csv_file(tmp_path: Path) -> Path:
    """An export whose second EGV reading has a non-numeric glucose value."""
    rows = [
        egv_row(1, "2024-03-01T08:00:00", "110"),
        egv_row(2, "2024-03-01T08:05:00", "High"),
        egv_row(3, "2024-03-01T08:10:00", "115"),
    ]
    path = tmp_path / "malformed_export.csv"
    path.write_text(to_csv_text(rows), encoding="utf-8")
    return path
