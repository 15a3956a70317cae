"""Typed records for Dexcom Clarity export rows.

Every raw row becomes exactly one immutable record. The record class is
chosen once from the Event Type field; after construction nothing looks at
the discriminant again. Downstream code should go through the ``get_*``
accessors, which are defined on every record and return None when the
record kind does not carry that attribute.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, ClassVar, Dict, Optional, Type, TypeVar

from cgm_days.interface.cgm_interface import RawRow, ClassificationError
from cgm_days.formats.dexcom import (
    DexcomColumn,
    DexcomEventType,
    DEXCOM_SCHEMA,
    DEXCOM_TIMESTAMP_FORMAT,
    DEXCOM_DURATION_FORMAT,
)

T = TypeVar("T")

_UNSIGNED_PATTERN = re.compile(r"\+?[0-9]+")
_DURATION_PATTERN = re.compile(r"[0-9]{2}:[0-9]{2}:[0-9]{2}")
_REAL_PATTERN = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)")


@dataclass(frozen=True)
class DexcomRecord:
    """Base class of all typed records; carries the row index."""
    index: int

    event_type: ClassVar[Optional[DexcomEventType]] = None

    def get_timestamp(self) -> Optional[datetime]:
        if isinstance(self, (GlucoseReading, InsulinRecord, CarbsRecord, CalibrationRecord)):
            return self.timestamp
        return None

    def get_glucose_value(self) -> Optional[int]:
        """Glucose in mg/dL for alerts, EGV readings and calibrations."""
        if isinstance(self, (AlertRecord, GlucoseReading, CalibrationRecord)):
            return self.glucose_value
        return None

    def get_source_device_id(self) -> Optional[str]:
        if isinstance(self, (DeviceRecord, AlertRecord, GlucoseReading, InsulinRecord, CarbsRecord, CalibrationRecord)):
            return self.source_device_id
        return None

    def get_event_subtype(self) -> Optional[str]:
        if isinstance(self, (AlertRecord, InsulinRecord)):
            return self.event_subtype
        return None

    def get_patient_info(self) -> Optional[str]:
        if isinstance(self, (PatientFirstName, PatientLastName)):
            return self.patient_info
        return None

    def get_device_info(self) -> Optional[str]:
        if isinstance(self, DeviceRecord):
            return self.device_info
        return None

    def get_insulin_value(self) -> Optional[float]:
        if isinstance(self, InsulinRecord):
            return self.insulin_value
        return None

    def get_carb_value(self) -> Optional[int]:
        if isinstance(self, CarbsRecord):
            return self.carb_value
        return None

    def get_duration(self) -> Optional[timedelta]:
        if isinstance(self, AlertRecord):
            return self.duration
        return None

    def get_glucose_rate_of_change(self) -> Optional[int]:
        if isinstance(self, AlertRecord):
            return self.glucose_rate_of_change
        return None

    def get_transmitter_time(self) -> Optional[int]:
        """Seconds since transmitter start, EGV readings only."""
        if isinstance(self, GlucoseReading):
            return self.transmitter_time
        return None

    def get_transmitter_id(self) -> Optional[str]:
        if isinstance(self, (GlucoseReading, CalibrationRecord)):
            return self.transmitter_id
        return None


@dataclass(frozen=True)
class PatientFirstName(DexcomRecord):
    patient_info: str

    event_type: ClassVar[Optional[DexcomEventType]] = DexcomEventType.FIRST_NAME


@dataclass(frozen=True)
class PatientLastName(DexcomRecord):
    patient_info: str

    event_type: ClassVar[Optional[DexcomEventType]] = DexcomEventType.LAST_NAME


@dataclass(frozen=True)
class DeviceRecord(DexcomRecord):
    device_info: str
    source_device_id: str

    event_type: ClassVar[Optional[DexcomEventType]] = DexcomEventType.DEVICE


@dataclass(frozen=True)
class AlertRecord(DexcomRecord):
    """Alert settings or alert events; numeric fields are best effort."""
    event_subtype: str
    source_device_id: str
    glucose_value: Optional[int]
    duration: Optional[timedelta]
    glucose_rate_of_change: Optional[int]

    event_type: ClassVar[Optional[DexcomEventType]] = DexcomEventType.ALERT


@dataclass(frozen=True)
class GlucoseReading(DexcomRecord):
    """Estimated glucose value (EGV) reported by the sensor."""
    timestamp: datetime
    source_device_id: str
    glucose_value: int
    transmitter_time: Optional[int]
    transmitter_id: str

    event_type: ClassVar[Optional[DexcomEventType]] = DexcomEventType.EGV


@dataclass(frozen=True)
class InsulinRecord(DexcomRecord):
    timestamp: datetime
    event_subtype: str
    source_device_id: str
    insulin_value: float

    event_type: ClassVar[Optional[DexcomEventType]] = DexcomEventType.INSULIN


@dataclass(frozen=True)
class CarbsRecord(DexcomRecord):
    timestamp: datetime
    source_device_id: str
    carb_value: int

    event_type: ClassVar[Optional[DexcomEventType]] = DexcomEventType.CARBS


@dataclass(frozen=True)
class CalibrationRecord(DexcomRecord):
    timestamp: datetime
    source_device_id: str
    glucose_value: int
    transmitter_id: str

    event_type: ClassVar[Optional[DexcomEventType]] = DexcomEventType.CALIBRATION


@dataclass(frozen=True)
class UnknownRecord(DexcomRecord):
    """Row whose Event Type is not recognized; only the index is kept."""
    pass


# ===== Field Parsers =====

def parse_unsigned(text: str, bits: int) -> int:
    """Parse an unsigned integer that must fit in ``bits`` bits.

    Raises:
        ValueError: If the text is not a plain non-negative integer or overflows
    """
    if not _UNSIGNED_PATTERN.fullmatch(text):
        raise ValueError(f"invalid unsigned integer: {text!r}")
    value = int(text)
    if value >= 1 << bits:
        raise ValueError(f"{text!r} does not fit in {bits} bits")
    return value


def parse_real(text: str) -> float:
    """Parse a finite decimal number.

    Raises:
        ValueError: On whitespace, digit separators, exponents, nan or inf
    """
    if not _REAL_PATTERN.fullmatch(text):
        raise ValueError(f"invalid number: {text!r}")
    return float(text)


def parse_timestamp(text: str) -> datetime:
    return datetime.strptime(text, DEXCOM_TIMESTAMP_FORMAT)


def parse_duration(text: str) -> Optional[timedelta]:
    """Parse an ``HH:MM:SS`` clock string into time elapsed since midnight.

    Returns None for empty text, anything not shaped like ``HH:MM:SS``,
    and impossible clock values such as ``25:00:00``.
    """
    if not _DURATION_PATTERN.fullmatch(text):
        return None
    try:
        clock = datetime.strptime(text, DEXCOM_DURATION_FORMAT)
    except ValueError:
        return None
    return timedelta(hours=clock.hour, minutes=clock.minute, seconds=clock.second)


def _optional(parser: Callable[[str], T], text: str) -> Optional[T]:
    try:
        return parser(text)
    except ValueError:
        return None


def _u8(text: str) -> int:
    return parse_unsigned(text, 8)


def _u16(text: str) -> int:
    return parse_unsigned(text, 16)


def _u32(text: str) -> int:
    return parse_unsigned(text, 32)


def _u64(text: str) -> int:
    return parse_unsigned(text, 64)


# ===== Row Access =====

class _RowReader:
    """Positional access to one raw row with error attribution."""

    def __init__(self, row: RawRow):
        self.row = row
        self.index: Optional[int] = None

    def text(self, column: DexcomColumn) -> str:
        position = DEXCOM_SCHEMA.position_of(column)
        if position >= len(self.row) or self.row[position] is None:
            return ""
        return self.row[position]

    def required(self, column: DexcomColumn, parser: Callable[[str], T]) -> T:
        value = self.text(column)
        try:
            return parser(value)
        except ValueError as e:
            raise ClassificationError(str(column), value, row_index=self.index, cause=e) from e

    def optional(self, column: DexcomColumn, parser: Callable[[str], T]) -> Optional[T]:
        return _optional(parser, self.text(column))


# ===== Classification =====

def _first_name(reader: _RowReader, index: int) -> DexcomRecord:
    return PatientFirstName(index=index, patient_info=reader.text(DexcomColumn.PATIENT_INFO))


def _last_name(reader: _RowReader, index: int) -> DexcomRecord:
    return PatientLastName(index=index, patient_info=reader.text(DexcomColumn.PATIENT_INFO))


def _device(reader: _RowReader, index: int) -> DexcomRecord:
    return DeviceRecord(
        index=index,
        device_info=reader.text(DexcomColumn.DEVICE_INFO),
        source_device_id=reader.text(DexcomColumn.SOURCE_DEVICE_ID),
    )


def _alert(reader: _RowReader, index: int) -> DexcomRecord:
    return AlertRecord(
        index=index,
        event_subtype=reader.text(DexcomColumn.EVENT_SUBTYPE),
        source_device_id=reader.text(DexcomColumn.SOURCE_DEVICE_ID),
        glucose_value=reader.optional(DexcomColumn.GLUCOSE_VALUE, _u16),
        duration=parse_duration(reader.text(DexcomColumn.DURATION)),
        glucose_rate_of_change=reader.optional(DexcomColumn.GLUCOSE_RATE_OF_CHANGE, _u8),
    )


def _egv(reader: _RowReader, index: int) -> DexcomRecord:
    return GlucoseReading(
        index=index,
        timestamp=reader.required(DexcomColumn.TIMESTAMP, parse_timestamp),
        source_device_id=reader.text(DexcomColumn.SOURCE_DEVICE_ID),
        glucose_value=reader.required(DexcomColumn.GLUCOSE_VALUE, _u16),
        transmitter_time=reader.optional(DexcomColumn.TRANSMITTER_TIME, _u64),
        transmitter_id=reader.text(DexcomColumn.TRANSMITTER_ID),
    )


def _insulin(reader: _RowReader, index: int) -> DexcomRecord:
    return InsulinRecord(
        index=index,
        timestamp=reader.required(DexcomColumn.TIMESTAMP, parse_timestamp),
        event_subtype=reader.text(DexcomColumn.EVENT_SUBTYPE),
        source_device_id=reader.text(DexcomColumn.SOURCE_DEVICE_ID),
        insulin_value=reader.required(DexcomColumn.INSULIN_VALUE, parse_real),
    )


def _carbs(reader: _RowReader, index: int) -> DexcomRecord:
    return CarbsRecord(
        index=index,
        timestamp=reader.required(DexcomColumn.TIMESTAMP, parse_timestamp),
        source_device_id=reader.text(DexcomColumn.SOURCE_DEVICE_ID),
        carb_value=reader.required(DexcomColumn.CARB_VALUE, _u16),
    )


def _calibration(reader: _RowReader, index: int) -> DexcomRecord:
    return CalibrationRecord(
        index=index,
        timestamp=reader.required(DexcomColumn.TIMESTAMP, parse_timestamp),
        source_device_id=reader.text(DexcomColumn.SOURCE_DEVICE_ID),
        glucose_value=reader.required(DexcomColumn.GLUCOSE_VALUE, _u16),
        transmitter_id=reader.text(DexcomColumn.TRANSMITTER_ID),
    )


def _unknown(reader: _RowReader, index: int) -> DexcomRecord:
    return UnknownRecord(index=index)


RECORD_BUILDERS: Dict[str, Callable[[_RowReader, int], DexcomRecord]] = {
    DexcomEventType.FIRST_NAME: _first_name,
    DexcomEventType.LAST_NAME: _last_name,
    DexcomEventType.DEVICE: _device,
    DexcomEventType.ALERT: _alert,
    DexcomEventType.EGV: _egv,
    DexcomEventType.INSULIN: _insulin,
    DexcomEventType.CARBS: _carbs,
    DexcomEventType.CALIBRATION: _calibration,
}

RECORD_CLASSES: Dict[DexcomEventType, Type[DexcomRecord]] = {
    record_class.event_type: record_class
    for record_class in (
        PatientFirstName, PatientLastName, DeviceRecord, AlertRecord,
        GlucoseReading, InsulinRecord, CarbsRecord, CalibrationRecord,
    )
}


def classify(row: RawRow) -> DexcomRecord:
    """Convert one raw export row into its typed record.

    Args:
        row: Ordered string fields of one export row (header excluded)

    Returns:
        The record matching the row's Event Type, or UnknownRecord

    Raises:
        ClassificationError: If the row is too short or a mandatory field
            (index, timestamp, EGV/calibration glucose, insulin or carb
            amount) cannot be parsed
    """
    if len(row) < DEXCOM_SCHEMA.minimum_field_count:
        raise ClassificationError(
            str(DexcomColumn.EVENT_TYPE),
            ",".join(value or "" for value in row),
            cause=ValueError(f"expected at least {DEXCOM_SCHEMA.minimum_field_count} fields, got {len(row)}"),
        )

    reader = _RowReader(row)
    reader.index = reader.required(DexcomColumn.INDEX, _u32)
    builder = RECORD_BUILDERS.get(reader.text(DexcomColumn.EVENT_TYPE), _unknown)
    return builder(reader, reader.index)
