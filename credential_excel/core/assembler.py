"""Credential Assembler — walks the linked sheets to build a credential document.

Given a student email and a credential title:
1. Find the person, credential and issuing organisation rows
2. Build the credential subject from the person row
3. Look up the achievement named on the person row and its specification
4. Expand the assessment tree rooted at the achievement's assessment
5. Expand the achievement's learning activities
6. Expand the specification's learning outcomes
7. Return the nested CredentialDocument

Any StructureError or NotFoundError aborts the assembly and is propagated
unchanged; no partial document is ever returned.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from credential_excel.core.config import settings
from credential_excel.core.credential_data import (
    AchievementRecord,
    CredentialData,
    OrganisationRecord,
    PersonRecord,
)
from credential_excel.core.errors import CyclicStructureError, StructureError
from credential_excel.core.id_gen import generate_id
from credential_excel.core.models import (
    Achievement,
    Activity,
    ActivitySpecification,
    Assessment,
    AssessmentSpecification,
    AwardingBody,
    AwardingProcess,
    CredentialDocument,
    CredentialSubject,
    GradingScheme,
    IdDocument,
    Identifier,
    IdSubject,
    LearningOutcome,
    LearningSpecification,
    ProofParameters,
)
from credential_excel.core.vocabulary import Vocabularies, VocabularyMapping, load_vocabularies

logger = logging.getLogger(__name__)

UTC_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def to_utc_string(value: datetime) -> str:
    """Format a date as ISO 8601 UTC, e.g. 2021-09-01T00:00:00Z."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(UTC_FORMAT)


def _blank_to_none(value: str) -> Optional[str]:
    value = value.strip()
    return value or None


def _translate(vocabulary: VocabularyMapping, label: str) -> Optional[str]:
    return vocabulary.resolve(label) if label else None


def _grade_for(grades: dict[str, float], name: str) -> Optional[float]:
    """Grade of assessment `name`, matching the grade label case-insensitively."""
    key = name.casefold()
    for label, grade in grades.items():
        if label.casefold() == key:
            return grade
    return None


class CredentialAssembler:
    """Builds credential and student id documents from CredentialData."""

    def __init__(
        self,
        data: CredentialData,
        vocabularies: Optional[Vocabularies] = None,
        max_assessment_depth: Optional[int] = None,
    ):
        self.data = data
        self.vocabularies = vocabularies or load_vocabularies()
        self.max_assessment_depth = (
            settings.max_assessment_depth if max_assessment_depth is None else max_assessment_depth
        )

    # ------------------------------------------------------------------
    # Credential
    # ------------------------------------------------------------------

    def assemble(
        self, email: str, title: str, proof: Optional[ProofParameters] = None
    ) -> CredentialDocument:
        proof = proof or ProofParameters()
        match = self.data.find_credential(email, title)
        person = self.data.person(match.person_row)
        credential = self.data.credential(match.credential_row)
        organisation = self.data.organisation(match.organisation_row)

        achievement = self.data.achievement(person.achievement)
        achieved = self._build_achievement(achievement, person, organisation, proof)
        subject = self._build_subject(person, proof, [achieved])

        document = CredentialDocument(
            id=generate_id("credential"),
            title=credential.title,
            issuer=proof.issuer_did,
            valid_from=to_utc_string(credential.valid_from) if credential.valid_from else None,
            credential_subject=subject,
        )
        logger.info(
            f"Assembled credential '{credential.title}' for {email} "
            f"(achievement '{achievement.title}')"
        )
        return document

    def _build_subject(
        self, person: PersonRecord, proof: ProofParameters, achieved: list[Achievement]
    ) -> CredentialSubject:
        return CredentialSubject(
            id=proof.subject_did,
            given_names=person.given_name,
            family_name=person.family_name,
            date_of_birth=person.date_of_birth.date().isoformat() if person.date_of_birth else None,
            identifier=self._identifiers(person),
            achieved=achieved,
        )

    @staticmethod
    def _identifiers(person: PersonRecord) -> list[Identifier]:
        scheme = person.identifier_scheme.strip()
        value = person.identifier.strip()
        if not scheme or not value:
            return []
        return [Identifier(scheme_name=scheme, value=value)]

    def _build_achievement(
        self,
        achievement: AchievementRecord,
        person: PersonRecord,
        organisation: OrganisationRecord,
        proof: ProofParameters,
    ) -> Achievement:
        assessments = []
        if achievement.assessment:
            assessments.append(self.build_assessment(achievement.assessment, person.grades))

        return Achievement(
            id=generate_id("learningAchievement"),
            title=achievement.title,
            was_derived_from=assessments,
            was_influenced_by=[self.build_activity(name) for name in achievement.activities],
            was_awarded_by=AwardingProcess(
                id=generate_id("awardingProcess"),
                awarding_body=self._awarding_body(organisation, proof),
            ),
            specified_by=[self._build_specification(achievement)],
        )

    @staticmethod
    def _awarding_body(organisation: OrganisationRecord, proof: ProofParameters) -> AwardingBody:
        return AwardingBody(
            id=proof.issuer_did,
            preferred_name=organisation.common_name.strip() or organisation.legal_name,
            legal_name=organisation.legal_name,
            legal_identifier=_blank_to_none(organisation.legal_identifier),
            homepage=_blank_to_none(organisation.homepage),
            location=_blank_to_none(organisation.location),
        )

    def _build_specification(self, achievement: AchievementRecord) -> LearningSpecification:
        vocab = self.vocabularies
        opportunity_type = _translate(
            vocab.learning_opportunity_type, achievement.learning_opportunity_type
        )
        ects = achievement.ects_credit_points
        return LearningSpecification(
            id=generate_id("learningSpecification"),
            title=achievement.specification_title,
            ects_credit_points=int(ects) if ects is not None else None,
            learning_setting=_translate(vocab.learning_setting, achievement.learning_setting),
            learning_opportunity_type=[opportunity_type] if opportunity_type else [],
            learning_outcome=[
                self.build_learning_outcome(name) for name in achievement.learning_outcomes
            ],
        )

    # ------------------------------------------------------------------
    # Assessment tree
    # ------------------------------------------------------------------

    def build_assessment(
        self,
        name: str,
        grades: dict[str, float],
        path: tuple[str, ...] = (),
    ) -> Assessment:
        """Build the assessment `name` and, recursively, its sub-assessments.

        `path` holds the assessments above this one; meeting a name already on
        the path is a cycle in the sheet.
        """
        key = name.casefold()
        if key in (p.casefold() for p in path):
            raise CyclicStructureError(
                list(path) + [name], sheet=self.data.assessments_table.sheet_name
            )
        if len(path) >= self.max_assessment_depth:
            raise StructureError(
                f"Assessment hierarchy below '{(path or (name,))[0]}' is deeper than "
                f"{self.max_assessment_depth} levels",
                sheet=self.data.assessments_table.sheet_name,
            )

        record = self.data.assessment(name)
        grade = _grade_for(grades, name)
        grading_scheme = None
        if record.grading_scheme:
            grading_scheme = GradingScheme(
                id=generate_id("gradingScheme"), title=record.grading_scheme
            )

        children = [
            self.build_assessment(sub, grades, path + (name,))
            for sub in record.sub_assessments
        ]
        return Assessment(
            id=generate_id("assessment"),
            title=record.title,
            grade=str(grade) if grade is not None else None,
            specified_by=AssessmentSpecification(
                id=generate_id("assessmentSpecification"),
                title=record.specification_title,
                grading_scheme=grading_scheme,
            ),
            has_part=children,
        )

    # ------------------------------------------------------------------
    # Activities and learning outcomes
    # ------------------------------------------------------------------

    def build_activity(self, name: str) -> Activity:
        record = self.data.activity(name)
        activity_type = _translate(self.vocabularies.activity_type, record.activity_type)
        mode = _translate(self.vocabularies.mode_of_learning, record.mode)
        return Activity(
            id=generate_id("learningActivity"),
            title=record.title,
            description=_blank_to_none(record.description),
            specified_by=ActivitySpecification(
                id=generate_id("learningActivitySpecification"),
                title=record.specification_title,
                description=_blank_to_none(record.specification_description),
                activity_type=[activity_type] if activity_type else [],
                mode=[mode] if mode else [],
            ),
        )

    def build_learning_outcome(self, name: str) -> LearningOutcome:
        record = self.data.learning_outcome(name)
        return LearningOutcome(
            id=generate_id("learningOutcome"),
            title=record.title,
            definition=_blank_to_none(record.description),
            related_esco_skill=record.skills,
        )

    # ------------------------------------------------------------------
    # Student id
    # ------------------------------------------------------------------

    def assemble_id(self, email: str, proof: Optional[ProofParameters] = None) -> IdDocument:
        """Student id document from the first Persons row for `email`."""
        proof = proof or ProofParameters()
        person = self.data.person(self.data.find_person(email), include_grades=False)
        document = IdDocument(
            id=generate_id("verifiableId"),
            issuer=proof.issuer_did,
            valid_from=to_utc_string(datetime.now(timezone.utc)),
            credential_subject=IdSubject(
                id=proof.subject_did,
                first_name=person.given_name,
                family_name=person.family_name,
                date_of_birth=(
                    person.date_of_birth.date().isoformat() if person.date_of_birth else None
                ),
                identifier=self._identifiers(person),
            ),
        )
        logger.info(f"Assembled student id for {email}")
        return document
