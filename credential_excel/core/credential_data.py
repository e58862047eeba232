"""Credential Data — the EDCL workbook seen as a set of linked tables.

Owns one Table per sheet (Persons, Europass Credentials, Organisations,
Achievements, Assessments, Activities, Learning Outcomes) and the link from
credentials to their issuing organisation. Query operations find a student's
credential, list their credential titles and check that they exist; entity
readers turn single rows into immutable records for the assembler.

A person is joined to a credential by value: the Persons row must carry the
student's email and the credential title. Positional alignment (same row
number on both sheets) is only tried as a fast path when enabled, and is
accepted only when it agrees with the value join.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

from credential_excel.core.cells import CellKind, ValueKind, decode
from credential_excel.core.config import settings
from credential_excel.core.errors import NotFoundError, StructureError
from credential_excel.core.layout import WorkbookLayout
from credential_excel.core.table import RowView, Table, TableLink
from credential_excel.core.workbook import Workbook, load_workbook

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CredentialMatch:
    """Rows that together describe one credential of one student."""
    person_row: int
    credential_row: int
    organisation_row: int


@dataclass(frozen=True)
class PersonRecord:
    row: int
    email: str
    given_name: str
    family_name: str
    date_of_birth: Optional[datetime]
    identifier_scheme: str
    identifier: str
    credential_title: str
    achievement: str
    activities: list[str] = field(default_factory=list)
    grades: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class CredentialRecord:
    row: int
    title: str
    issuer: str
    valid_from: Optional[datetime]


@dataclass(frozen=True)
class OrganisationRecord:
    row: int
    legal_name: str
    common_name: str
    legal_identifier: str
    homepage: str
    location: str


@dataclass(frozen=True)
class AchievementRecord:
    row: int
    title: str
    assessment: str
    activities: list[str]
    specification_title: str
    ects_credit_points: Optional[float]
    learning_setting: str
    learning_opportunity_type: str
    learning_outcomes: list[str]


@dataclass(frozen=True)
class AssessmentRecord:
    row: int
    title: str
    specification_title: str
    grading_scheme: str
    sub_assessments: list[str]


@dataclass(frozen=True)
class ActivityRecord:
    row: int
    title: str
    description: str
    specification_title: str
    specification_description: str
    activity_type: str
    mode: str


@dataclass(frozen=True)
class LearningOutcomeRecord:
    row: int
    title: str
    description: str
    skills: list[str]


def _optional_date(view: RowView, column: str) -> Optional[datetime]:
    if view.is_blank(column):
        return None
    return view.get_date(column)


def _optional_number(view: RowView, column: str) -> Optional[float]:
    if view.is_blank(column):
        return None
    return view.get_number(column)


class CredentialData:
    """Typed access to the sheets of an EDCL credential workbook."""

    def __init__(
        self,
        workbook: Workbook,
        layout: Optional[WorkbookLayout] = None,
        positional_fast_path: Optional[bool] = None,
    ):
        self.layout = layout or WorkbookLayout()
        self.positional_fast_path = (
            settings.positional_fast_path if positional_fast_path is None else positional_fast_path
        )
        lay = self.layout
        self.persons_table = self._table(workbook, lay.persons.sheet_name, lay.persons.header_row)
        self.credentials_table = self._table(
            workbook, lay.credentials.sheet_name, lay.credentials.header_row
        )
        self.organisations_table = self._table(
            workbook, lay.organisations.sheet_name, lay.organisations.header_row
        )
        self.achievements_table = self._table(
            workbook, lay.achievements.sheet_name, lay.achievements.header_row
        )
        self.assessments_table = self._table(
            workbook, lay.assessments.sheet_name, lay.assessments.header_row
        )
        self.activities_table = self._table(
            workbook, lay.activities.sheet_name, lay.activities.header_row
        )
        self.outcomes_table = self._table(
            workbook, lay.learning_outcomes.sheet_name, lay.learning_outcomes.header_row
        )
        self.organisation_link = TableLink(
            self.credentials_table, lay.credentials.issuer_column,
            self.organisations_table, lay.organisations.legal_name_column,
        )

    @staticmethod
    def _table(workbook: Workbook, sheet_name: str, header_row: int) -> Table:
        return Table(workbook.sheet(sheet_name), header_row)

    @classmethod
    def from_file(
        cls,
        file_path: Path,
        layout: Optional[WorkbookLayout] = None,
        positional_fast_path: Optional[bool] = None,
    ) -> "CredentialData":
        layout = layout or WorkbookLayout()
        workbook = load_workbook(file_path, sheet_names=layout.sheet_names)
        return cls(workbook, layout, positional_fast_path)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_person(self, email: str) -> int:
        """First Persons row for the student with `email`."""
        return self.persons_table.find_first_row({self.layout.persons.email_column: email})

    def _person_for_credential(self, credential_row: int, email: str) -> Optional[int]:
        """Persons row of `email` holding the credential on `credential_row`, if any."""
        persons = self.layout.persons
        title = self.credentials_table.get_string(
            credential_row, self.layout.credentials.title_column
        )
        predicate = {persons.email_column: email, persons.credential_column: title}

        if self.positional_fast_path:
            candidate = credential_row
            if (
                self.persons_table.first_data_row <= candidate <= self.persons_table.last_row
                and self.persons_table.matches(candidate, predicate)
            ):
                # Accept only if no earlier row is the value-join answer.
                earlier = self.persons_table.find_rows(predicate, stop=candidate)
                if not earlier:
                    return candidate
                logger.warning(
                    f"Positional person row {candidate} for credential row {credential_row} "
                    f"disagrees with value join (row {earlier[0]}); using value join"
                )
                return earlier[0]
            logger.debug(
                f"Persons row {candidate} is not aligned with credential row {credential_row}"
            )

        rows = self.persons_table.find_rows(predicate)
        return rows[0] if rows else None

    def find_credential(self, email: str, title: str) -> CredentialMatch:
        """Locate the person, credential and issuing organisation rows.

        Every credential row titled `title` is tried in row order; the first one
        that a Persons row with `email` refers to wins.
        """
        credential_rows = self.credentials_table.find_rows(
            {self.layout.credentials.title_column: title}
        )
        for credential_row in credential_rows:
            person_row = self._person_for_credential(credential_row, email)
            if person_row is None:
                continue
            organisation_row = self.organisation_link.resolve(credential_row)
            logger.debug(
                f"Credential '{title}' for {email}: person row {person_row}, "
                f"credential row {credential_row}, organisation row {organisation_row}"
            )
            return CredentialMatch(person_row, credential_row, organisation_row)

        raise NotFoundError(
            f"No credential '{title}' found for student {email}",
            sheet=self.credentials_table.sheet_name,
            query={"email": email, "title": title},
        )

    def list_credential_titles(self, email: str) -> list[str]:
        """Credential titles of every Persons row for `email`, in row order."""
        persons = self.layout.persons
        rows = self.persons_table.find_rows({persons.email_column: email})
        return [self.persons_table.get_string(row, persons.credential_column) for row in rows]

    def student_exists(self, email: str) -> bool:
        try:
            self.find_person(email)
        except NotFoundError:
            return False
        except StructureError as e:
            logger.error(f"Cannot check student {email}: {e}")
            return False
        return True

    # ------------------------------------------------------------------
    # Entity readers
    # ------------------------------------------------------------------

    def grades(self, person_row: int) -> dict[str, float]:
        """Assessment name -> grade for a person.

        Grades sit in a contiguous run of columns headed `Grade`. The row below
        the header labels each of them `Assessment - <name>`. Blank grade cells
        are left out.
        """
        persons = self.layout.persons
        table = self.persons_table
        sheet = table.sheet_name
        prefix = persons.assessment_label_prefix.rstrip()
        label_row = table.header_row + 1

        grades: dict[str, float] = {}
        column = table.resolve_column(persons.grade_column)
        while True:
            heading = table.cell_at(table.header_row, column)
            if heading.effective_kind != CellKind.STRING or heading.value != persons.grade_column:
                break
            label_cell = table.cell_at(label_row, column)
            label = decode(label_cell, ValueKind.STRING, sheet).strip()
            if not label.startswith(prefix) or not label[len(prefix):].strip():
                raise StructureError(
                    f"Grade column at {label_cell.address} on sheet {sheet} has label "
                    f"{label!r}, expected '{persons.assessment_label_prefix}<name>'",
                    sheet=sheet,
                    cell=label_cell.address,
                )
            name = label[len(prefix):].strip()
            grade_cell = table.cell_at(person_row, column)
            if grade_cell.effective_kind != CellKind.BLANK:
                grades[name] = decode(grade_cell, ValueKind.NUMBER, sheet)
            column += 1
        return grades

    def person(self, row: int, include_grades: bool = True) -> PersonRecord:
        p = self.layout.persons
        view = self.persons_table.row(row)
        return PersonRecord(
            row=row,
            email=view.get_string(p.email_column),
            given_name=view.get_string(p.given_name_column),
            family_name=view.get_string(p.family_name_column),
            date_of_birth=_optional_date(view, p.date_of_birth_column),
            identifier_scheme=view.get_string(p.identifier_scheme_column),
            identifier=view.get_string(p.identifier_column),
            credential_title=view.get_string(p.credential_column),
            achievement=view.get_string(p.achievement_column),
            activities=view.get_multi_value(p.activities_column),
            grades=self.grades(row) if include_grades else {},
        )

    def credential(self, row: int) -> CredentialRecord:
        c = self.layout.credentials
        view = self.credentials_table.row(row)
        return CredentialRecord(
            row=row,
            title=view.get_string(c.title_column),
            issuer=view.get_string(c.issuer_column),
            valid_from=_optional_date(view, c.valid_from_column),
        )

    def organisation(self, row: int) -> OrganisationRecord:
        o = self.layout.organisations
        view = self.organisations_table.row(row)
        return OrganisationRecord(
            row=row,
            legal_name=view.get_string(o.legal_name_column),
            common_name=view.get_string(o.common_name_column),
            legal_identifier=view.get_string(o.legal_identifier_column),
            homepage=view.get_string(o.homepage_column),
            location=view.get_string(o.location_column),
        )

    def achievement(self, title: str) -> AchievementRecord:
        a = self.layout.achievements
        row = self.achievements_table.find_first_row({a.title_column: title})
        view = self.achievements_table.row(row)
        return AchievementRecord(
            row=row,
            title=view.get_string(a.title_column),
            assessment=view.get_string(a.assessment_column).strip(),
            activities=view.get_multi_value(a.activities_column),
            specification_title=view.get_string(a.specification_title_column),
            ects_credit_points=_optional_number(view, a.ects_column),
            learning_setting=view.get_string(a.learning_setting_column).strip(),
            learning_opportunity_type=view.get_string(a.opportunity_type_column).strip(),
            learning_outcomes=view.get_multi_value(a.learning_outcomes_column),
        )

    def assessment(self, title: str) -> AssessmentRecord:
        a = self.layout.assessments
        row = self.assessments_table.find_first_row({a.title_column: title})
        view = self.assessments_table.row(row)
        return AssessmentRecord(
            row=row,
            title=view.get_string(a.title_column),
            specification_title=view.get_string(a.specification_title_column),
            grading_scheme=view.get_string(a.grading_scheme_column).strip(),
            sub_assessments=view.get_multi_value(a.sub_assessments_column),
        )

    def activity(self, title: str) -> ActivityRecord:
        a = self.layout.activities
        row = self.activities_table.find_first_row({a.title_column: title})
        view = self.activities_table.row(row)
        return ActivityRecord(
            row=row,
            title=view.get_string(a.title_column),
            description=view.get_string(a.description_column),
            specification_title=view.get_string(a.specification_title_column),
            specification_description=view.get_string(a.specification_description_column),
            activity_type=view.get_string(a.activity_type_column).strip(),
            mode=view.get_string(a.mode_column).strip(),
        )

    def learning_outcome(self, title: str) -> LearningOutcomeRecord:
        lo = self.layout.learning_outcomes
        row = self.outcomes_table.find_first_row({lo.title_column: title})
        view = self.outcomes_table.row(row)
        skills = []
        for column in lo.skill_columns:
            skill = view.get_string(column).strip()
            if skill:
                skills.append(skill)
        return LearningOutcomeRecord(
            row=row,
            title=view.get_string(lo.title_column),
            description=view.get_string(lo.description_column),
            skills=skills,
        )
