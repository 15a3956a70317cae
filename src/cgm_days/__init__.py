"""cgm_days - Typed records and clinical-day grouping for CGM exports.

This package classifies every row of a Dexcom Clarity CSV export into an
immutable typed record and groups timestamped records into clinical days
that start at a configurable wake-up time rather than midnight.

Main Components:
    RecordParser: Decode, detect and classify an export into typed records
    DayBucketer: Group typed records by clinical day
    classify: Classify a single raw row

Quick Start:
    >>> from datetime import time
    >>> from cgm_days import RecordParser, DayBucketer
    >>>
    >>> records = RecordParser.parse_file("data/dexcom_export.csv")
    >>> bucketer = DayBucketer(wake_up_time=time(4, 0))
    >>> for day, readings in bucketer.group_glucose_readings(records).items():
    ...     print(day, len(readings))
"""

from cgm_days.records import classify
from cgm_days.record_parser import RecordParser
from cgm_days.day_bucketer import DayBucketer, clinical_day, group_by_clinical_day

__version__ = "0.1.0"

__all__ = [
    "RecordParser",
    "DayBucketer",
    "classify",
    "clinical_day",
    "group_by_clinical_day",
    "__version__",
]
