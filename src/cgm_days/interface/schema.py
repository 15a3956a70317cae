"""Base Schema Infrastructure.

This module defines the base types, enums, and schema builder classes
used to describe positional CGM export layouts.
"""

import polars as pl
from enum import Enum
from typing import List, Union, Type, TypedDict, NotRequired


class EnumLiteral(str, Enum):
    """
    A general base class for string-based enums that behave like literals.
    Ensures compatibility with str comparisons and retains enum benefits.
    """
    def __new__(cls, value, *args, **kwargs):
        obj = str.__new__(cls, value)
        obj._value_ = value
        return obj

    def __str__(self):
        # String representation directly returns the value
        return self.value

    def __eq__(self, other):
        # Allow direct comparison with strings
        if isinstance(other, str):
            return self.value == other
        return super().__eq__(other)

    def __hash__(self):
        # Use the hash of the value to behave like a string in hashable contexts
        return hash(self.value)

    def __repr__(self):
        # For print statements and serialization
        return self.value


class ColumnSchema(TypedDict):
    """Schema definition for a single positional column."""
    name: str
    dtype: Union[Type[pl.DataType], pl.DataType]
    description: str
    unit: NotRequired[str]


class CGMSchemaDefinition:
    """Positional schema definition for a CGM export.

    Column order is significant: the position of a column in ``columns``
    is the field position of that column in every raw row.
    """

    def __init__(
        self,
        columns: List[ColumnSchema],
        header_line: int = 1,
        minimum_field_count: int = 1,
    ) -> None:
        """Initialize schema definition.

        Args:
            columns: Columns in field order
            header_line: Line number where the header row is located (1-indexed)
            minimum_field_count: Fewest fields a data row may carry
        """
        self.columns = columns
        self.header_line = header_line
        self.minimum_field_count = minimum_field_count
        self._positions = {col["name"]: position for position, col in enumerate(columns)}

    def get_column_names(self) -> List[str]:
        """Get list of all column names in field order."""
        return [col["name"] for col in self.columns]

    def position_of(self, column_name: str) -> int:
        """Get the field position of a column.

        Raises:
            KeyError: If the column is not part of this schema
        """
        return self._positions[column_name]
