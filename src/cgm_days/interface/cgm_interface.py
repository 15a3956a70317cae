"""Abstract Base Class interface for the CGM record pipeline.

Separated into two concerns:
- CGMParser: Vendor-specific decoding, detection and row classification
- CGMBucketer: Vendor-agnostic grouping of typed records into clinical days
"""

from abc import ABC, abstractmethod
from datetime import date, time
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Union

DEFAULT_WAKE_UP_TIME = time(4, 0, 0)  # clinical day boundary

# Glucose bands used by console presentation (mg/dL)
GLUCOSE_LOW_THRESHOLD = 70
GLUCOSE_HIGH_THRESHOLD = 180
GLUCOSE_VERY_HIGH_THRESHOLD = 250

# A raw export row: ordered text fields, meaning encoded by position
RawRow = Sequence[str]


class SupportedCGMFormat(Enum):
    """Supported CGM vendor formats."""
    DEXCOM = "dexcom"


class MalformedDataError(ValueError):
    """Raised when data cannot be parsed or converted properly."""
    pass


class UnknownFormatError(ValueError):
    """Raised when format cannot be determined."""
    pass


class ClassificationError(MalformedDataError):
    """Raised when a mandatory field of a raw row cannot be parsed.

    Attributes:
        field: Column name of the offending field
        value: Raw text found in that field
        row_index: Parsed row index, or None if the index itself failed
    """

    def __init__(self, field: str, value: str, row_index: Optional[int] = None, cause: Optional[Exception] = None):
        self.field = field
        self.value = value
        self.row_index = row_index
        self.cause = cause
        where = f"row {row_index}" if row_index is not None else "row with unreadable index"
        message = f"Cannot parse {field!r} in {where}: {value!r}"
        if cause is not None:
            message = f"{message} ({cause})"
        super().__init__(message)


class CGMParser(ABC):
    """Abstract base class for vendor-specific export parsing.

    This interface handles:
    - Stage 1: Preprocessing raw data (BOM removal, encoding fixes)
    - Stage 2: Format detection (identifying vendor)
    - Stage 3: Reading raw rows and classifying each into a typed record
    """

    # ===== STAGE 1: Preprocess Raw Data =====

    @classmethod
    @abstractmethod
    def decode_raw_data(cls, raw_data: Union[bytes, str]) -> str:
        """Remove BOM marks, encoding artifacts, and other junk from raw input.

        Args:
            raw_data: Raw file contents (bytes or string)

        Returns:
            Cleaned string data ready for format detection
        """
        pass

    # ===== STAGE 2: Format Detection =====

    @classmethod
    @abstractmethod
    def detect_format(cls, text_data: str) -> SupportedCGMFormat:
        """Guess the vendor format based on header patterns in raw CSV string.

        Raises:
            UnknownFormatError: If format cannot be determined
        """
        pass

    # ===== STAGE 3: Row Classification =====

    @classmethod
    @abstractmethod
    def read_rows(cls, text_data: str) -> List[List[str]]:
        """Split export text into raw rows of string fields (header excluded).

        Raises:
            MalformedDataError: If the text is not readable as CSV
        """
        pass

    @classmethod
    @abstractmethod
    def classify_rows(cls, rows: Iterable[RawRow]) -> list:
        """Classify raw rows into typed records, in row order.

        Stops at the first row whose mandatory fields fail to parse.

        Raises:
            ClassificationError: On the first malformed mandatory field
        """
        pass


class CGMBucketer(ABC):
    """Abstract base class for grouping typed records into clinical days."""

    @abstractmethod
    def clinical_day(self, record) -> Optional[date]:
        """Clinical day of a record, or None if the record has no timestamp."""
        pass

    @abstractmethod
    def group_records(self, records: Iterable) -> Dict[date, list]:
        """Partition timestamped records by clinical day."""
        pass
