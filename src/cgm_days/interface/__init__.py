"""Interface package for CGM record processing.

This package provides base interfaces and utilities for CGM record processing.
"""

from cgm_days.interface.schema import (
    EnumLiteral,
    ColumnSchema,
    CGMSchemaDefinition,
)
from cgm_days.interface.cgm_interface import (
    SupportedCGMFormat,
    CGMParser,
    CGMBucketer,
    RawRow,
    UnknownFormatError,
    MalformedDataError,
    ClassificationError,
    DEFAULT_WAKE_UP_TIME,
    GLUCOSE_LOW_THRESHOLD,
    GLUCOSE_HIGH_THRESHOLD,
    GLUCOSE_VERY_HIGH_THRESHOLD,
)

__all__ = [
    # Schema definitions
    "EnumLiteral",
    "ColumnSchema",
    "CGMSchemaDefinition",
    # Core interfaces
    "SupportedCGMFormat",
    "CGMParser",
    "CGMBucketer",
    "RawRow",
    # Exceptions
    "UnknownFormatError",
    "MalformedDataError",
    "ClassificationError",
    # Constants
    "DEFAULT_WAKE_UP_TIME",
    "GLUCOSE_LOW_THRESHOLD",
    "GLUCOSE_HIGH_THRESHOLD",
    "GLUCOSE_VERY_HIGH_THRESHOLD",
]
