"""Dexcom Clarity export layout.

Clarity exports one CSV with a single header row followed by every event in
the account: patient and device metadata first, then alerts, EGV readings,
insulin, carbs and calibrations. The schema is positional and rows are
ragged (non-EGV rows usually omit the trailing transmitter cells).
"""

import polars as pl

from cgm_days.interface.schema import EnumLiteral, CGMSchemaDefinition


class DexcomColumn(EnumLiteral):
    """Clarity column headers, in field order."""
    INDEX = "Index"
    TIMESTAMP = "Timestamp (YYYY-MM-DDThh:mm:ss)"
    EVENT_TYPE = "Event Type"
    EVENT_SUBTYPE = "Event Subtype"
    PATIENT_INFO = "Patient Info"
    DEVICE_INFO = "Device Info"
    SOURCE_DEVICE_ID = "Source Device ID"
    GLUCOSE_VALUE = "Glucose Value (mg/dL)"
    INSULIN_VALUE = "Insulin Value (u)"
    CARB_VALUE = "Carb Value (grams)"
    DURATION = "Duration (hh:mm:ss)"
    GLUCOSE_RATE_OF_CHANGE = "Glucose Rate of Change (mg/dL/min)"
    TRANSMITTER_TIME = "Transmitter Time (Long Integer)"
    TRANSMITTER_ID = "Transmitter ID"


class DexcomEventType(EnumLiteral):
    """Values of the Event Type column (the row discriminant)."""
    FIRST_NAME = "FirstName"
    LAST_NAME = "LastName"
    DEVICE = "Device"
    ALERT = "Alert"
    EGV = "EGV"
    INSULIN = "Insulin"
    CARBS = "Carbs"
    CALIBRATION = "Calibration"


DEXCOM_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"
DEXCOM_DURATION_FORMAT = "%H:%M:%S"

DEXCOM_HEADER_LINE = 1
# Index, timestamp and event type must always be present
DEXCOM_MINIMUM_FIELD_COUNT = 3

DEXCOM_DETECTION_PATTERNS = [
    DexcomColumn.TIMESTAMP.value,
    "Transmitter Time (Long Integer)",
    "Source Device ID",
]

DEXCOM_SCHEMA = CGMSchemaDefinition(
    columns=[
        {"name": DexcomColumn.INDEX, "dtype": pl.UInt32, "description": "Row index within the export"},
        {"name": DexcomColumn.TIMESTAMP, "dtype": pl.Datetime, "description": "Device-local event time, no time zone"},
        {"name": DexcomColumn.EVENT_TYPE, "dtype": pl.Utf8, "description": "Row kind discriminant"},
        {"name": DexcomColumn.EVENT_SUBTYPE, "dtype": pl.Utf8, "description": "Alert or insulin subtype"},
        {"name": DexcomColumn.PATIENT_INFO, "dtype": pl.Utf8, "description": "Patient first or last name"},
        {"name": DexcomColumn.DEVICE_INFO, "dtype": pl.Utf8, "description": "Receiver or app description"},
        {"name": DexcomColumn.SOURCE_DEVICE_ID, "dtype": pl.Utf8, "description": "Device that recorded the event"},
        {"name": DexcomColumn.GLUCOSE_VALUE, "dtype": pl.UInt16, "description": "Sensor glucose", "unit": "mg/dL"},
        {"name": DexcomColumn.INSULIN_VALUE, "dtype": pl.Float64, "description": "Insulin dose", "unit": "u"},
        {"name": DexcomColumn.CARB_VALUE, "dtype": pl.UInt16, "description": "Carbohydrate intake", "unit": "g"},
        {"name": DexcomColumn.DURATION, "dtype": pl.Duration, "description": "Alert duration as HH:MM:SS"},
        {"name": DexcomColumn.GLUCOSE_RATE_OF_CHANGE, "dtype": pl.UInt8, "description": "Rise/fall rate", "unit": "mg/dL/min"},
        {"name": DexcomColumn.TRANSMITTER_TIME, "dtype": pl.UInt64, "description": "Seconds since transmitter start", "unit": "s"},
        {"name": DexcomColumn.TRANSMITTER_ID, "dtype": pl.Utf8, "description": "Transmitter serial"},
    ],
    header_line=DEXCOM_HEADER_LINE,
    minimum_field_count=DEXCOM_MINIMUM_FIELD_COUNT,
)
