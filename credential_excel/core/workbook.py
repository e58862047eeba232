"""Workbook reader — loads an EDCL workbook into in-memory sheets of RawCells.

openpyxl exposes either formulas (data_only=False) or their cached results
(data_only=True), never both. The workbook is therefore opened twice and each
formula cell is paired with its cached value so that decoding can use the
cached result type.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Iterable, Optional

import openpyxl

from credential_excel.core.cells import CellKind, RawCell, blank_cell
from credential_excel.core.errors import StructureError

logger = logging.getLogger(__name__)


@dataclass
class Sheet:
    """A read-only grid of cells addressed by 0-based row and column."""
    name: str
    rows: list[list[RawCell]] = field(default_factory=list)

    @property
    def last_row(self) -> int:
        """Index of the last row, -1 for an empty sheet."""
        return len(self.rows) - 1

    def row_length(self, row: int) -> int:
        if 0 <= row < len(self.rows):
            return len(self.rows[row])
        return 0

    def cell(self, row: int, column: int) -> RawCell:
        if 0 <= row < len(self.rows) and 0 <= column < len(self.rows[row]):
            return self.rows[row][column]
        return blank_cell(row, column)


@dataclass
class Workbook:
    """Sheets of a workbook keyed by sheet name, in workbook order."""
    sheets: dict[str, Sheet] = field(default_factory=dict)

    @property
    def sheet_names(self) -> list[str]:
        return list(self.sheets)

    def sheet(self, name: str) -> Sheet:
        try:
            return self.sheets[name]
        except KeyError:
            raise StructureError(f"Workbook does not have sheet '{name}'", sheet=name) from None


def _classify(value: Any) -> tuple[CellKind, Any]:
    """Map a plain Python cell value to its cell kind."""
    if value is None:
        return CellKind.BLANK, None
    if isinstance(value, bool):
        return CellKind.BOOLEAN, value
    if isinstance(value, (int, float)):
        return CellKind.NUMERIC, value
    if isinstance(value, datetime):
        return CellKind.DATE, value
    if isinstance(value, date):
        return CellKind.DATE, datetime(value.year, value.month, value.day)
    if isinstance(value, time):
        return CellKind.DATE, datetime.combine(date(1899, 12, 30), value)
    return CellKind.STRING, str(value)


def _to_raw_cell(cell, cached_cell, row: int, column: int) -> RawCell:
    if cell.data_type == "e":
        return RawCell(kind=CellKind.ERROR, value=cell.value, row=row, column=column)
    if cell.data_type == "f":
        cached_value = cached_cell.value if cached_cell is not None else None
        if cached_cell is not None and cached_cell.data_type == "e":
            cached_kind = CellKind.ERROR
        else:
            cached_kind, cached_value = _classify(cached_value)
        return RawCell(
            kind=CellKind.FORMULA, value=cached_value, cached_kind=cached_kind,
            row=row, column=column,
        )
    kind, value = _classify(cell.value)
    return RawCell(kind=kind, value=value, row=row, column=column)


def sheet_from_worksheet(ws, values_ws=None) -> Sheet:
    """Convert an openpyxl worksheet to a Sheet.

    values_ws is the same worksheet opened with data_only=True; it supplies the
    cached results of formula cells.
    """
    rows: list[list[RawCell]] = []
    for row_idx, row in enumerate(ws.iter_rows()):
        cells = []
        for col_idx, cell in enumerate(row):
            cached = None
            if cell.data_type == "f" and values_ws is not None:
                cached = values_ws.cell(row=row_idx + 1, column=col_idx + 1)
            cells.append(_to_raw_cell(cell, cached, row_idx, col_idx))
        rows.append(cells)
    return Sheet(name=ws.title, rows=rows)


def sheet_from_rows(name: str, rows: Iterable[Iterable[Any]]) -> Sheet:
    """Build a Sheet from plain values. RawCell instances are kept as given."""
    grid: list[list[RawCell]] = []
    for row_idx, row in enumerate(rows):
        cells = []
        for col_idx, value in enumerate(row):
            if isinstance(value, RawCell):
                cells.append(RawCell(
                    kind=value.kind, value=value.value, cached_kind=value.cached_kind,
                    row=row_idx, column=col_idx,
                ))
            else:
                kind, converted = _classify(value)
                cells.append(RawCell(kind=kind, value=converted, row=row_idx, column=col_idx))
        grid.append(cells)
    return Sheet(name=name, rows=grid)


def load_workbook(file_path: Path, sheet_names: Optional[Iterable[str]] = None) -> Workbook:
    """Read an Excel workbook (.xlsx/.xlsm) into memory.

    Only the named sheets are converted when sheet_names is given.
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Workbook not found: {file_path}")

    wanted = set(sheet_names) if sheet_names is not None else None
    formulas = openpyxl.load_workbook(file_path, read_only=False, data_only=False)
    values = openpyxl.load_workbook(file_path, read_only=False, data_only=True)

    workbook = Workbook()
    try:
        for ws in formulas.worksheets:
            if wanted is not None and ws.title not in wanted:
                continue
            workbook.sheets[ws.title] = sheet_from_worksheet(ws, values[ws.title])
    finally:
        formulas.close()
        values.close()

    logger.info(f"Loaded {len(workbook.sheets)} sheets from {file_path.name}")
    return workbook
