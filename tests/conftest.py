"""Shared test fixtures for the credential workbook test suite.

The EDCL template keeps its column headings on row 8 (0-based header row 7);
rows above it hold instructions that the readers never look at.
"""

import tempfile
from datetime import datetime
from pathlib import Path
from typing import Optional

import openpyxl
import pytest

from credential_excel.core.assembler import CredentialAssembler
from credential_excel.core.credential_data import CredentialData
from credential_excel.core.vocabulary import static_vocabularies
from credential_excel.core.workbook import Workbook, sheet_from_rows

HEADER_ROW = 7

JANE = "jane2.doe2@test.edu"
JOHN = "john.smith@test.edu"
DSB_CREDENTIAL = "Data and Software Business module"
SE_CREDENTIAL = "Software Engineering module"


def with_preamble(title: str, rows: list[list]) -> list[list]:
    """Prefix sheet rows with the instruction block that precedes the header."""
    preamble = [[title]] + [[] for _ in range(HEADER_ROW - 1)]
    return preamble + rows


def persons_rows() -> list[list]:
    return with_preamble("Persons", [
        [
            "E-Mail Address", "Given Name", "Family Name", "Date of Birth",
            "Other Identifier 1 Scheme Name", "Other Identifier 1",
            "Europass Credential", "Learning Achievements", "Learning Activities",
            "Grade", "Grade", "Grade", "Grade",
        ],
        [
            None, None, None, None, None, None, None, None, None,
            "Assessment - Individual assignment1",
            "Assessment - Individual assignment2",
            "Assessment - Project assignment",
            "Assessment - Overall grade",
        ],
        [
            JANE, "Jane", "Doe", datetime(1998, 4, 12), "Student number", "123456",
            DSB_CREDENTIAL, "Data and Software Business", "Lectures; Project work",
            3.0, 5.0, 4.0, 4.0,
        ],
        [
            JOHN, "John", "Smith", datetime(1997, 1, 2), None, None,
            DSB_CREDENTIAL, "Data and Software Business", None,
            None, 4.0, None, 3.0,
        ],
        [
            JANE, "Jane", "Doe", datetime(1998, 4, 12), "Student number", "123456",
            SE_CREDENTIAL, "Software Engineering", None,
        ],
    ])


def credentials_rows() -> list[list]:
    return with_preamble("Europass Credentials", [
        ["Title", "Issuer", "Valid From"],
        [DSB_CREDENTIAL, "Tampere University", datetime(2021, 9, 1)],
        [SE_CREDENTIAL, "Tampere University", datetime(2022, 1, 1)],
    ])


def organisations_rows() -> list[list]:
    return with_preamble("Organisations", [
        ["Legal Name", "Common Name", "Legal Identifier", "homepage", "Location Name"],
        ["Tampere University", "TAU", "0245894-7", "https://www.tuni.fi", "Tampere"],
    ])


def achievements_rows() -> list[list]:
    return with_preamble("Achievements", [
        [
            "Title", "Proven by", "Influenced by", "Specification Title",
            "ECTS Credit Points", "Learning Setting", "Learning Opportunity Type",
            "Learning Outcomes",
        ],
        [
            "Data and Software Business", "Overall grade", "Lectures;Project work",
            "Data and Software Business specification", 5, "formal", "Module",
            "Business models; Software ecosystems",
        ],
        ["Software Engineering", None, None, "Software Engineering specification"],
    ])


def assessments_rows() -> list[list]:
    return with_preamble("Assessments", [
        ["Title", "Specification Title", "Grading Scheme", "Sub-Assessments"],
        [
            "Overall grade", "Overall grade specification", "0-5",
            "Individual assignment1;Individual assignment2;Project assignment",
        ],
        ["Individual assignment1", "Individual assignment 1 specification", "0-5", None],
        ["Individual assignment2", "Individual assignment 2 specification", "0-5", None],
        ["Project assignment", "Project assignment specification", None, None],
    ])


def activities_rows() -> list[list]:
    return with_preamble("Activities", [
        [
            "Title", "Description", "Specification Title", "Specification Description",
            "Activity Type", "Mode of Learning",
        ],
        ["Lectures", "Weekly lectures", "Lecture series", None, "Lecture", "Face-to-face"],
        [
            "Project work", "Group project", "Company project", "Team project with a company",
            "Laboratory Work", "Blended",
        ],
    ])


def learning_outcomes_rows() -> list[list]:
    return with_preamble("Learning Outcomes", [
        [
            "Title", "Description", "Related ESCO Skill 1 URL",
            "Related ESCO Skill 2 URL", "Related ESCO Skill 3 URL",
        ],
        [
            "Business models", "Can analyse software business models",
            "http://data.europa.eu/esco/skill/business-models", None,
            "http://data.europa.eu/esco/skill/strategy",
        ],
        ["Software ecosystems", "Understands software ecosystems"],
    ])


def edcl_rows() -> dict[str, list[list]]:
    """Rows of every sheet of a small but complete EDCL workbook."""
    return {
        "Persons": persons_rows(),
        "Europass Credentials": credentials_rows(),
        "Organisations": organisations_rows(),
        "Achievements": achievements_rows(),
        "Assessments": assessments_rows(),
        "Activities": activities_rows(),
        "Learning Outcomes": learning_outcomes_rows(),
    }


def make_workbook(overrides: Optional[dict[str, list[list]]] = None) -> Workbook:
    """In-memory EDCL workbook; `overrides` replaces the rows of whole sheets."""
    sheets = edcl_rows()
    sheets.update(overrides or {})
    return Workbook({name: sheet_from_rows(name, rows) for name, rows in sheets.items()})


def write_xlsx(sheets: dict[str, list[list]]) -> Path:
    """Save sheets to a temporary .xlsx file. The caller unlinks it."""
    wb = openpyxl.Workbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(name)
        for row in rows:
            ws.append(row)
    path = Path(tempfile.mktemp(suffix=".xlsx"))
    wb.save(path)
    wb.close()
    return path


@pytest.fixture
def credential_data() -> CredentialData:
    return CredentialData(make_workbook(), positional_fast_path=False)


@pytest.fixture
def assembler(credential_data) -> CredentialAssembler:
    return CredentialAssembler(credential_data, static_vocabularies())
