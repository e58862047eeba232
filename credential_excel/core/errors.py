"""Error types raised while reading the credential workbook.

Two families matter to callers:
- StructureError: the workbook does not look like the expected EDCL template
  (missing sheet or column, wrong cell type, malformed grade block).
- NotFoundError: a well-formed query matched no row.
"""

from typing import Optional


class CredentialDataError(Exception):
    """Base class for all workbook access errors."""


class StructureError(CredentialDataError):
    """The workbook does not match the expected layout."""

    def __init__(self, message: str, sheet: Optional[str] = None, cell: Optional[str] = None):
        super().__init__(message)
        self.sheet = sheet
        self.cell = cell


class CyclicStructureError(StructureError):
    """An assessment lists itself, directly or indirectly, as a sub-assessment."""

    def __init__(self, path: list[str], sheet: Optional[str] = None):
        super().__init__(
            f"Assessment hierarchy contains a cycle: {' -> '.join(path)}",
            sheet=sheet,
        )
        self.path = path


class NotFoundError(CredentialDataError):
    """A query against a sheet matched no row."""

    def __init__(self, message: str, sheet: Optional[str] = None, query: Optional[dict] = None):
        super().__init__(message)
        self.sheet = sheet
        self.query = query


class MappingNotFoundError(CredentialDataError):
    """No vocabulary URI is configured for a label."""

    def __init__(self, label: str, vocabulary: Optional[str] = None):
        where = f" in vocabulary '{vocabulary}'" if vocabulary else ""
        super().__init__(f"No mapping found for label '{label}'{where}")
        self.label = label
        self.vocabulary = vocabulary
