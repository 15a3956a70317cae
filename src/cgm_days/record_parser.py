"""Record parser for CGM vendor exports.

Turns raw export bytes or text into typed records: strips BOM and encoding
artifacts, detects the vendor from header patterns, reads rows with polars
and classifies each one.
"""

from typing import Dict, Iterable, List, Union
from io import StringIO
from pathlib import Path
import polars as pl

from cgm_days.interface.cgm_interface import (
    CGMParser,
    SupportedCGMFormat,
    RawRow,
    UnknownFormatError,
    MalformedDataError,
)
from cgm_days.formats.supported import FORMAT_DETECTION_PATTERNS, FORMAT_HEADER_LINE
from cgm_days.records import DexcomRecord, classify

# Common encoding artifacts and their fixes
UTF8_BOM = b'\xef\xbb\xbf'
ENCODING_ARTIFACTS = {
    # Double-encoded BOM in quotes: "ïººº¿"
    b'\x22\xc3\xaf\xc2\xbb\xc2\xbf\x22': UTF8_BOM,
    # Triple-encoded BOM
    b'\x22\xc3\x83\xc2\xaf\xc3\x82\xc2\xbb\xc3\x82\xc2\xbf\x22': UTF8_BOM,
    # Double-encoded BOM without quotes
    b'\xc3\xaf\xc2\xbb\xc2\xbf': UTF8_BOM,
    # Quoted BOM (some systems do this)
    b'\x22\xef\xbb\xbf\x22': UTF8_BOM,
}

DETECTION_LINE_COUNT = 15  # lines to check


class RecordParser(CGMParser):
    """Main record parser implementing the CGMParser interface.

    This class orchestrates the pipeline from raw export data to typed records:
    1. Decode raw data (remove BOM, fix encoding)
    2. Detect format (determine vendor)
    3. Read raw rows and classify each one into a DexcomRecord
    """

    # ===== STAGE 1: Preprocess Raw Data =====

    @classmethod
    def decode_raw_data(cls, raw_data: Union[bytes, str]) -> str:
        """Remove BOM marks, encoding artifacts, and other junk from raw input.

        Args:
            raw_data: Raw file contents (bytes or string)

        Returns:
            Cleaned string data ready for format detection
        """
        # If already a string, only drop a leading BOM character
        if isinstance(raw_data, str):
            return raw_data.removeprefix('\ufeff')

        # Normalize encoding artifacts
        normalized = raw_data
        for corrupted_pattern, proper_bom in ENCODING_ARTIFACTS.items():
            if normalized.startswith(corrupted_pattern):
                normalized = proper_bom + normalized[len(corrupted_pattern):]
                break

        # Decode with utf-8-sig to handle BOM
        return normalized.decode('utf-8-sig', errors='replace')

    # ===== STAGE 2: Format Detection =====

    @classmethod
    def detect_format(cls, text_data: str) -> SupportedCGMFormat:
        """Guess the vendor format based on header patterns in raw CSV string.

        Args:
            text_data: Preprocessed string data

        Returns:
            SupportedCGMFormat enum value

        Raises:
            UnknownFormatError: If format cannot be determined
        """
        # Check first N lines for format indicators
        lines = text_data.split('\n', DETECTION_LINE_COUNT+1)[:DETECTION_LINE_COUNT]

        for cgm_type, patterns in FORMAT_DETECTION_PATTERNS.items():
            if any(pattern in line for line in lines for pattern in patterns):
                return cgm_type

        raise UnknownFormatError(f"Unknown CGM data format. Sample lines: {lines[:3]}")

    # ===== STAGE 3: Row Classification =====

    @classmethod
    def read_rows(cls, text_data: str, format_type: SupportedCGMFormat = SupportedCGMFormat.DEXCOM) -> List[List[str]]:
        """Split export text into raw rows of string fields.

        The header row is consumed here and never reaches the classifier.
        Every cell is kept as text; empty cells and trailing cells missing
        from short rows come back as empty strings.

        Args:
            text_data: Preprocessed string data
            format_type: Detected vendor format

        Returns:
            Rows in file order, each a list of string fields

        Raises:
            MalformedDataError: If the CSV cannot be read
        """
        try:
            # Note: truncate_ragged_lines=True handles variable-length rows. Polars pads
            # missing trailing cells with nulls.
            df = pl.read_csv(
                StringIO(text_data),
                skip_rows=FORMAT_HEADER_LINE[format_type] - 1,
                has_header=True,
                truncate_ragged_lines=True,
                infer_schema_length=0,  # Read all as strings
                ignore_errors=False,
            )
        except pl.exceptions.NoDataError:
            return []
        except pl.exceptions.PolarsError as e:
            raise MalformedDataError(f"Failed to read {format_type.value} CSV: {e}")

        return [
            ["" if value is None else value for value in row]
            for row in df.iter_rows()
        ]

    @classmethod
    def classify_rows(cls, rows: Iterable[RawRow]) -> List[DexcomRecord]:
        """Classify raw rows into typed records, in row order.

        Ingestion is fail-fast: the first malformed mandatory field aborts
        the whole pass and nothing classified so far is returned.

        Raises:
            ClassificationError: On the first malformed mandatory field
        """
        return [classify(row) for row in rows]

    @classmethod
    def parse_to_records(cls, text_data: str, format_type: SupportedCGMFormat) -> List[DexcomRecord]:
        """Read and classify all rows of a detected export.

        Raises:
            UnknownFormatError: If the format has no record classifier
            MalformedDataError: If the CSV cannot be read
            ClassificationError: On the first malformed mandatory field
        """
        if format_type == SupportedCGMFormat.DEXCOM:
            return cls.classify_rows(cls.read_rows(text_data, format_type))

        raise UnknownFormatError(f"Unknown CGM data format: {format_type}")

    # ===== Convenience Methods =====

    @classmethod
    def parse_from_bytes(cls, raw_data: bytes) -> List[DexcomRecord]:
        """Convenience method to parse raw bytes directly to typed records.

        This method chains all stages together:
        1. Decode raw data
        2. Detect format
        3. Read and classify rows

        Raises:
            UnknownFormatError: If format cannot be determined
            MalformedDataError: If data cannot be parsed
        """
        text_data = cls.decode_raw_data(raw_data)
        format_type = cls.detect_format(text_data)
        return cls.parse_to_records(text_data, format_type)

    @classmethod
    def parse_from_string(cls, text_data: str) -> List[DexcomRecord]:
        """Convenience method to parse cleaned string directly to typed records.

        Raises:
            UnknownFormatError: If format cannot be determined
            MalformedDataError: If data cannot be parsed
        """
        text_data = cls.decode_raw_data(text_data)
        format_type = cls.detect_format(text_data)
        return cls.parse_to_records(text_data, format_type)

    @classmethod
    def parse_file(cls, file_path: Union[str, Path]) -> List[DexcomRecord]:
        """Parse an export file into typed records.

        Raises:
            FileNotFoundError: If file doesn't exist
            UnknownFormatError: If format cannot be determined
            MalformedDataError: If data cannot be parsed
        """
        file_path = Path(file_path)
        with open(file_path, 'rb') as f:
            raw_data = f.read()

        return cls.parse_from_bytes(raw_data)

    @staticmethod
    def count_event_types(records: Iterable[DexcomRecord]) -> Dict[str, int]:
        """Number of records per Event Type, in order of first appearance.

        Unknown rows are counted under ``"Unknown"``.
        """
        counts: Dict[str, int] = {}
        for record in records:
            name = record.event_type.value if record.event_type is not None else "Unknown"
            counts[name] = counts.get(name, 0) + 1
        return counts
