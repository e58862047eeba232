"""Table — per-sheet accessor over a Sheet with a fixed header row.

Column headings are resolved to indices on first use and memoized. Getters take
an explicit row index; RowView binds a table and a row into an immutable value
so that entity readers never depend on shared state. The mutable current-row
cursor and the *_for_current_row getters are kept as convenience sugar only.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Optional

from credential_excel.core.cells import CellKind, CellValue, RawCell, ValueKind, decode
from credential_excel.core.errors import NotFoundError, StructureError
from credential_excel.core.workbook import Sheet

logger = logging.getLogger(__name__)

MULTI_VALUE_DELIMITER = ";"


class Table:
    """Typed, header-addressed access to one sheet."""

    def __init__(self, sheet: Sheet, header_row: int):
        if header_row < 0 or header_row > sheet.last_row:
            raise StructureError(
                f"sheet {sheet.name} does not have header row {header_row}",
                sheet=sheet.name,
            )
        self._sheet = sheet
        self._header_row = header_row
        self._columns: dict[str, int] = {}
        self._current_row = 0

    @property
    def sheet_name(self) -> str:
        return self._sheet.name

    @property
    def header_row(self) -> int:
        return self._header_row

    @property
    def first_data_row(self) -> int:
        return self._header_row + 1

    @property
    def last_row(self) -> int:
        return self._sheet.last_row

    # ------------------------------------------------------------------
    # Header resolution
    # ------------------------------------------------------------------

    def _scan_header(self, name: str) -> int:
        """Linear search of the header row for a column heading."""
        for column in range(self._sheet.row_length(self._header_row)):
            cell = self._sheet.cell(self._header_row, column)
            if cell.value is not None and str(cell.value) == name:
                return column
        raise StructureError(
            f"sheet {self.sheet_name} does not have column {name} on row {self._header_row}",
            sheet=self.sheet_name,
        )

    def resolve_column(self, name: str) -> int:
        """Index of the column headed `name`. Scans the header only once per name."""
        column = self._columns.get(name)
        if column is None:
            column = self._scan_header(name)
            self._columns[name] = column
        return column

    def has_column(self, name: str) -> bool:
        try:
            self.resolve_column(name)
        except StructureError:
            return False
        return True

    # ------------------------------------------------------------------
    # Cell access
    # ------------------------------------------------------------------

    def cell_at(self, row: int, column: int) -> RawCell:
        """Raw cell by position, blank if the sheet has no such cell."""
        return self._sheet.cell(row, column)

    def is_blank(self, row: int, column_name: str) -> bool:
        cell = self._sheet.cell(row, self.resolve_column(column_name))
        if cell.effective_kind == CellKind.BLANK:
            return True
        return cell.effective_kind == CellKind.STRING and not str(cell.value).strip()

    def get_cell(self, row: int, column_name: str, kind: ValueKind) -> CellValue:
        column = self.resolve_column(column_name)
        return decode(self._sheet.cell(row, column), kind, self.sheet_name)

    def get_string(self, row: int, column_name: str) -> str:
        return self.get_cell(row, column_name, ValueKind.STRING)

    def get_number(self, row: int, column_name: str) -> float:
        return self.get_cell(row, column_name, ValueKind.NUMBER)

    def get_date(self, row: int, column_name: str) -> datetime:
        return self.get_cell(row, column_name, ValueKind.DATE)

    def get_multi_value(self, row: int, column_name: str) -> list[str]:
        """Split a `;` separated cell into trimmed parts. Empty cell gives []."""
        raw = self.get_string(row, column_name)
        return [part.strip() for part in raw.split(MULTI_VALUE_DELIMITER) if part.strip()]

    def row(self, index: int) -> "RowView":
        return RowView(self, index)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def _expected_values(self, predicate: Mapping[str, str]) -> dict[int, str]:
        return {
            self.resolve_column(name): value.casefold()
            for name, value in predicate.items()
        }

    def _row_matches(self, row: int, expected: dict[int, str]) -> bool:
        for column, value in expected.items():
            actual = decode(self._sheet.cell(row, column), ValueKind.STRING, self.sheet_name)
            if actual.casefold() != value:
                return False
        return True

    def matches(self, row: int, predicate: Mapping[str, str]) -> bool:
        """Whether a single row satisfies the predicate (case-insensitive)."""
        return self._row_matches(row, self._expected_values(predicate))

    def find_rows(self, predicate: Mapping[str, str], stop: Optional[int] = None) -> list[int]:
        """All data rows whose string cells equal the predicate values, ignoring case.

        Rows are scanned from the row after the header to the last row (or up to,
        not including, `stop`) and returned in ascending order.
        """
        expected = self._expected_values(predicate)
        end = self.last_row + 1 if stop is None else min(stop, self.last_row + 1)
        return [
            row for row in range(self.first_data_row, end)
            if self._row_matches(row, expected)
        ]

    def find_first_row(self, predicate: Mapping[str, str]) -> int:
        """Lowest row index matching the predicate.

        When several rows match, the first one is used and the rest are ignored.
        """
        rows = self.find_rows(predicate)
        if not rows:
            raise NotFoundError(
                f"{self.sheet_name} cannot find row for values {dict(predicate)}",
                sheet=self.sheet_name,
                query=dict(predicate),
            )
        if len(rows) > 1:
            logger.debug(
                f"{self.sheet_name}: {len(rows)} rows match {dict(predicate)}, using row {rows[0]}"
            )
        return rows[0]

    # ------------------------------------------------------------------
    # Current-row cursor
    # ------------------------------------------------------------------

    def get_current_row(self) -> int:
        return self._current_row

    def set_current_row(self, row: int) -> None:
        self._current_row = row

    current_row = property(get_current_row, set_current_row)

    def get_string_for_current_row(self, column_name: str) -> str:
        return self.get_string(self._current_row, column_name)

    def get_number_for_current_row(self, column_name: str) -> float:
        return self.get_number(self._current_row, column_name)

    def get_date_for_current_row(self, column_name: str) -> datetime:
        return self.get_date(self._current_row, column_name)

    def get_multi_value_for_current_row(self, column_name: str) -> list[str]:
        return self.get_multi_value(self._current_row, column_name)

    def __repr__(self) -> str:
        return f"Table(sheet={self.sheet_name!r}, header_row={self._header_row})"


@dataclass(frozen=True)
class RowView:
    """One row of a table; typed getters without the shared cursor."""
    table: Table
    index: int

    def is_blank(self, column_name: str) -> bool:
        return self.table.is_blank(self.index, column_name)

    def get_string(self, column_name: str) -> str:
        return self.table.get_string(self.index, column_name)

    def get_number(self, column_name: str) -> float:
        return self.table.get_number(self.index, column_name)

    def get_date(self, column_name: str) -> datetime:
        return self.table.get_date(self.index, column_name)

    def get_multi_value(self, column_name: str) -> list[str]:
        return self.table.get_multi_value(self.index, column_name)


@dataclass(frozen=True)
class TableLink:
    """Value-equality join between two tables.

    A source row links to the first target row whose target_column equals the
    source row's source_column value. For example credentials link to
    organisations by issuer name = organisation legal name.
    """
    source_table: Table
    source_column: str
    target_table: Table
    target_column: str

    def resolve(self, source_row: int) -> int:
        value = self.source_table.get_string(source_row, self.source_column)
        return self.target_table.find_first_row({self.target_column: value})

    def resolve_for_current_row(self) -> int:
        return self.resolve(self.source_table.get_current_row())
