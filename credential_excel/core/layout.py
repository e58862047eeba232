"""Workbook Layout Definition.

Describes where the credential data lives in an EDCL workbook:
1. The sheet name of each table
2. The header row (0-based) holding the column headings
3. The column headings the readers use

Defaults match the EDCL template. A layout YAML file may override any field
(see layouts/edcl.yaml).
"""

from pydantic import BaseModel

DEFAULT_HEADER_ROW = 7


class SheetLayout(BaseModel):
    sheet_name: str
    header_row: int = DEFAULT_HEADER_ROW


class PersonsLayout(SheetLayout):
    sheet_name: str = "Persons"
    email_column: str = "E-Mail Address"
    given_name_column: str = "Given Name"
    family_name_column: str = "Family Name"
    date_of_birth_column: str = "Date of Birth"
    identifier_scheme_column: str = "Other Identifier 1 Scheme Name"
    identifier_column: str = "Other Identifier 1"
    credential_column: str = "Europass Credential"
    achievement_column: str = "Learning Achievements"
    activities_column: str = "Learning Activities"
    grade_column: str = "Grade"
    assessment_label_prefix: str = "Assessment - "


class CredentialsLayout(SheetLayout):
    sheet_name: str = "Europass Credentials"
    title_column: str = "Title"
    issuer_column: str = "Issuer"
    valid_from_column: str = "Valid From"


class OrganisationsLayout(SheetLayout):
    sheet_name: str = "Organisations"
    legal_name_column: str = "Legal Name"
    common_name_column: str = "Common Name"
    legal_identifier_column: str = "Legal Identifier"
    homepage_column: str = "homepage"
    location_column: str = "Location Name"


class AchievementsLayout(SheetLayout):
    sheet_name: str = "Achievements"
    title_column: str = "Title"
    assessment_column: str = "Proven by"
    activities_column: str = "Influenced by"
    specification_title_column: str = "Specification Title"
    ects_column: str = "ECTS Credit Points"
    learning_setting_column: str = "Learning Setting"
    opportunity_type_column: str = "Learning Opportunity Type"
    learning_outcomes_column: str = "Learning Outcomes"


class AssessmentsLayout(SheetLayout):
    sheet_name: str = "Assessments"
    title_column: str = "Title"
    specification_title_column: str = "Specification Title"
    grading_scheme_column: str = "Grading Scheme"
    sub_assessments_column: str = "Sub-Assessments"


class ActivitiesLayout(SheetLayout):
    sheet_name: str = "Activities"
    title_column: str = "Title"
    description_column: str = "Description"
    specification_title_column: str = "Specification Title"
    specification_description_column: str = "Specification Description"
    activity_type_column: str = "Activity Type"
    mode_column: str = "Mode of Learning"


class LearningOutcomesLayout(SheetLayout):
    sheet_name: str = "Learning Outcomes"
    title_column: str = "Title"
    description_column: str = "Description"
    skill_columns: list[str] = [
        "Related ESCO Skill 1 URL",
        "Related ESCO Skill 2 URL",
        "Related ESCO Skill 3 URL",
    ]


class WorkbookLayout(BaseModel):
    layout_name: str = "edcl"
    persons: PersonsLayout = PersonsLayout()
    credentials: CredentialsLayout = CredentialsLayout()
    organisations: OrganisationsLayout = OrganisationsLayout()
    achievements: AchievementsLayout = AchievementsLayout()
    assessments: AssessmentsLayout = AssessmentsLayout()
    activities: ActivitiesLayout = ActivitiesLayout()
    learning_outcomes: LearningOutcomesLayout = LearningOutcomesLayout()

    @property
    def sheet_names(self) -> list[str]:
        return [
            self.persons.sheet_name,
            self.credentials.sheet_name,
            self.organisations.sheet_name,
            self.achievements.sheet_name,
            self.assessments.sheet_name,
            self.activities.sheet_name,
            self.learning_outcomes.sheet_name,
        ]
