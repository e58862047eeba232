"""Pydantic models for the assembled credential documents."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DocumentKind(str, Enum):
    EUROPASS = "Europass"
    VERIFIABLE_ID = "VerifiableId"


class ProofParameters(BaseModel):
    """Who issues and who receives a document; passed through from the issuer."""
    issuer_did: Optional[str] = None
    subject_did: Optional[str] = None


class DocumentModel(BaseModel):
    """Document graph node; serialised with camelCase keys such as credentialSubject."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Credential subject ---


class Identifier(DocumentModel):
    scheme_name: str
    value: str


class GradingScheme(DocumentModel):
    id: str
    title: str


class AssessmentSpecification(DocumentModel):
    id: str
    title: str
    grading_scheme: Optional[GradingScheme] = None


class Assessment(DocumentModel):
    """Node of the assessment tree; has_part holds the sub-assessments."""
    id: str
    title: str
    grade: Optional[str] = None
    specified_by: AssessmentSpecification
    has_part: list[Assessment] = []


class ActivitySpecification(DocumentModel):
    id: str
    title: str
    description: Optional[str] = None
    activity_type: list[str] = []
    mode: list[str] = []


class Activity(DocumentModel):
    id: str
    title: str
    description: Optional[str] = None
    specified_by: ActivitySpecification


class LearningOutcome(DocumentModel):
    id: str
    title: str
    definition: Optional[str] = None
    related_esco_skill: list[str] = []


class LearningSpecification(DocumentModel):
    id: str
    title: str
    ects_credit_points: Optional[int] = None
    learning_setting: Optional[str] = None
    learning_opportunity_type: list[str] = []
    learning_outcome: list[LearningOutcome] = []


class AwardingBody(DocumentModel):
    id: Optional[str] = None
    preferred_name: str
    legal_name: str
    legal_identifier: Optional[str] = None
    homepage: Optional[str] = None
    location: Optional[str] = None


class AwardingProcess(DocumentModel):
    id: str
    awarding_body: AwardingBody


class Achievement(DocumentModel):
    id: str
    title: str
    was_derived_from: list[Assessment] = []
    was_influenced_by: list[Activity] = []
    was_awarded_by: AwardingProcess
    specified_by: list[LearningSpecification] = []


class CredentialSubject(DocumentModel):
    id: Optional[str] = None
    given_names: str
    family_name: str
    date_of_birth: Optional[str] = None
    identifier: list[Identifier] = []
    achieved: list[Achievement] = []


class CredentialDocument(DocumentModel):
    """Unsigned Europass credential request for one student and credential title."""
    id: str
    type: DocumentKind = DocumentKind.EUROPASS
    title: str
    issuer: Optional[str] = None
    valid_from: Optional[str] = None
    credential_subject: CredentialSubject


# --- Student id ---


class IdSubject(DocumentModel):
    id: Optional[str] = None
    first_name: str
    family_name: str
    date_of_birth: Optional[str] = None
    identifier: list[Identifier] = []


class IdDocument(DocumentModel):
    """Unsigned verifiable student id request."""
    id: str
    type: DocumentKind = DocumentKind.VERIFIABLE_ID
    issuer: Optional[str] = None
    valid_from: Optional[str] = None
    credential_subject: IdSubject


# --- API response models ---


class StudentResponse(BaseModel):
    email: str
    exists: bool


class CredentialTitlesResponse(BaseModel):
    email: str
    titles: list[str]


class HealthResponse(BaseModel):
    status: str
    workbook: Optional[str] = None
    sheets: list[str] = []
