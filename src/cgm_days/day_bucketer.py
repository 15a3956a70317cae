"""Clinical Day Bucketing Implementation.

Groups timestamped records into clinical days: calendar dates whose
boundary sits at a configured wake-up time instead of midnight. A reading
taken at 03:30 with a 04:00 wake-up time belongs to the previous day.
All arithmetic is on naive device-local timestamps.
"""

import polars as pl
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from cgm_days.interface.cgm_interface import CGMBucketer, DEFAULT_WAKE_UP_TIME
from cgm_days.records import DexcomRecord, GlucoseReading

DayGroups = Dict[date, List[DexcomRecord]]


def wake_up_offset(wake_up_time: time) -> timedelta:
    """Time elapsed between midnight and ``wake_up_time``."""
    return timedelta(
        hours=wake_up_time.hour,
        minutes=wake_up_time.minute,
        seconds=wake_up_time.second,
        microseconds=wake_up_time.microsecond,
    )


def clinical_day(record: DexcomRecord, wake_up_time: time) -> Optional[date]:
    """Clinical day of a record.

    Args:
        record: Any typed record
        wake_up_time: Time of day at which a new clinical day starts

    Returns:
        The date of ``timestamp - (wake_up_time - midnight)``, or None for
        records that carry no timestamp
    """
    timestamp = record.get_timestamp()
    if timestamp is None:
        return None
    return (timestamp - wake_up_offset(wake_up_time)).date()


def group_by_clinical_day(records: Iterable[DexcomRecord], wake_up_time: time) -> DayGroups:
    """Partition records by clinical day.

    Every record of a given day lands in the same group even when records of
    other days sit between them in the input. Groups appear in order of the
    first record of each day; records keep their input order within a group.
    Records without a timestamp are left out.
    """
    groups: DayGroups = {}
    for record in records:
        day = clinical_day(record, wake_up_time)
        if day is None:
            continue
        groups.setdefault(day, []).append(record)
    return groups


class DayBucketer(CGMBucketer):
    """Implementation of CGMBucketer for typed Dexcom records.

    Provides:
    - Clinical day computation for a fixed wake-up time
    - Full-partition grouping of records (or of EGV readings only)
    - Tabular projections of records and day groups as polars DataFrames
    """

    def __init__(self, wake_up_time: time = DEFAULT_WAKE_UP_TIME):
        """Initialize the bucketer.

        Args:
            wake_up_time: Time of day that starts a clinical day (default: 04:00:00)
        """
        self.wake_up_time = wake_up_time

    def clinical_day(self, record: DexcomRecord) -> Optional[date]:
        return clinical_day(record, self.wake_up_time)

    @staticmethod
    def glucose_readings(records: Iterable[DexcomRecord]) -> List[GlucoseReading]:
        """EGV readings only, in input order."""
        return [record for record in records if isinstance(record, GlucoseReading)]

    def group_records(self, records: Iterable[DexcomRecord]) -> DayGroups:
        """Group every timestamped record (EGV, insulin, carbs, calibration) by clinical day."""
        return group_by_clinical_day(records, self.wake_up_time)

    def group_glucose_readings(self, records: Iterable[DexcomRecord]) -> DayGroups:
        """Group only EGV readings by clinical day."""
        return group_by_clinical_day(self.glucose_readings(records), self.wake_up_time)

    # ===== Tabular Projections =====

    def to_frame(self, records: Iterable[DexcomRecord]) -> pl.DataFrame:
        """Project records into a DataFrame.

        Columns: index, event_type, timestamp, glucose_value, clinical_day.
        Records without a timestamp get nulls in the time columns; unknown
        rows get a null event_type.
        """
        rows = [
            {
                "index": record.index,
                "event_type": record.event_type.value if record.event_type is not None else None,
                "timestamp": record.get_timestamp(),
                "glucose_value": record.get_glucose_value(),
                "clinical_day": self.clinical_day(record),
            }
            for record in records
        ]
        return pl.DataFrame(
            rows,
            schema={
                "index": pl.UInt32,
                "event_type": pl.Utf8,
                "timestamp": pl.Datetime,
                "glucose_value": pl.UInt16,
                "clinical_day": pl.Date,
            },
        )

    @staticmethod
    def summarize_days(groups: DayGroups) -> pl.DataFrame:
        """One row per clinical day: record count and first/last timestamps.

        Rows follow the order of ``groups``.
        """
        summary = []
        for day, day_records in groups.items():
            first_timestamp, last_timestamp = _time_span(day_records)
            summary.append({
                "clinical_day": day,
                "count": len(day_records),
                "first_timestamp": first_timestamp,
                "last_timestamp": last_timestamp,
            })
        return pl.DataFrame(
            summary,
            schema={
                "clinical_day": pl.Date,
                "count": pl.UInt32,
                "first_timestamp": pl.Datetime,
                "last_timestamp": pl.Datetime,
            },
        )


def _time_span(records: List[DexcomRecord]) -> Tuple[Optional[datetime], Optional[datetime]]:
    timestamps = [record.get_timestamp() for record in records if record.get_timestamp() is not None]
    if not timestamps:
        return None, None
    return min(timestamps), max(timestamps)
