"""Cell decoding — raw spreadsheet cells to typed values.

A RawCell is a tagged union of what a workbook cell holds. Formula cells carry
the type of their cached result, which becomes their effective type. Each target
kind (string, number, date) has its own decode function; a cell whose effective
type does not fit the requested kind raises StructureError.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from openpyxl.utils import get_column_letter
from openpyxl.utils.datetime import from_excel

from credential_excel.core.errors import StructureError


class CellKind(str, Enum):
    STRING = "string"
    NUMERIC = "numeric"
    DATE = "date"
    BOOLEAN = "boolean"
    BLANK = "blank"
    ERROR = "error"
    FORMULA = "formula"


class ValueKind(str, Enum):
    """Kinds a caller can ask a cell to be decoded as."""
    STRING = "string"
    NUMBER = "number"
    DATE = "date"


CellValue = Union[str, float, datetime]


@dataclass(frozen=True)
class RawCell:
    """One workbook cell as read from the file.

    For FORMULA cells `value` is the cached result and `cached_kind` its type.
    `row` and `column` are 0-based and only used for error messages.
    """
    kind: CellKind
    value: Any = None
    cached_kind: Optional[CellKind] = None
    row: int = 0
    column: int = 0

    @property
    def address(self) -> str:
        return f"{get_column_letter(self.column + 1)}{self.row + 1}"

    @property
    def effective_kind(self) -> CellKind:
        if self.kind == CellKind.FORMULA:
            return self.cached_kind or CellKind.BLANK
        return self.kind


def blank_cell(row: int, column: int) -> RawCell:
    """Placeholder for a cell that does not exist in the sheet."""
    return RawCell(kind=CellKind.BLANK, row=row, column=column)


def _mismatch(cell: RawCell, expected: ValueKind, sheet_name: str) -> StructureError:
    actual = cell.effective_kind.value
    if cell.kind == CellKind.FORMULA:
        actual = f"formula with cached {actual} result"
    return StructureError(
        f"Cell value {cell.value!r} at {cell.address} on sheet {sheet_name} "
        f"is not a {expected.value}, it is of type {actual}",
        sheet=sheet_name,
        cell=cell.address,
    )


def decode_string(cell: RawCell, sheet_name: str) -> str:
    kind = cell.effective_kind
    if kind == CellKind.BLANK:
        return ""
    if kind == CellKind.STRING:
        return "" if cell.value is None else str(cell.value)
    raise _mismatch(cell, ValueKind.STRING, sheet_name)


def decode_number(cell: RawCell, sheet_name: str) -> float:
    if cell.effective_kind == CellKind.NUMERIC:
        return float(cell.value)
    raise _mismatch(cell, ValueKind.NUMBER, sheet_name)


def decode_date(cell: RawCell, sheet_name: str) -> datetime:
    """Decode a date cell, reinterpreting a numeric serial as a calendar date."""
    kind = cell.effective_kind
    if kind == CellKind.DATE:
        return cell.value
    if kind == CellKind.NUMERIC:
        return from_excel(cell.value)
    raise _mismatch(cell, ValueKind.DATE, sheet_name)


_DECODERS = {
    ValueKind.STRING: decode_string,
    ValueKind.NUMBER: decode_number,
    ValueKind.DATE: decode_date,
}


def decode(cell: RawCell, expected: ValueKind, sheet_name: str) -> CellValue:
    """Decode `cell` as `expected`, raising StructureError on a type mismatch."""
    return _DECODERS[expected](cell, sheet_name)
