"""Tests for the issuance seam — template population through an issuer callback."""

import pytest

from credential_excel.core.errors import NotFoundError
from credential_excel.core.issuance import (
    CredentialPopulator,
    Issuer,
    issue_credential,
    issue_id,
)
from credential_excel.core.models import DocumentKind, ProofParameters
from tests.conftest import DSB_CREDENTIAL, JANE

PROOF = ProofParameters(issuer_did="did:example:tau", subject_did="did:example:jane")


class RecordingIssuer:
    """Issuer stand-in that populates a template and returns it unsigned."""

    def __init__(self):
        self.calls = []

    def issue(self, document_kind, proof, populate):
        self.calls.append((document_kind, proof))
        template = {"type": document_kind.value, "@context": ["https://www.w3.org/2018/credentials/v1"]}
        return populate(template, proof)


class TestCredentialPopulator:
    def test_populates_europass_template(self, assembler):
        populator = CredentialPopulator(assembler, JANE, DSB_CREDENTIAL)
        template = {"type": "Europass", "@context": ["https://www.w3.org/2018/credentials/v1"]}
        populated = populator.populate(template, PROOF)
        assert populated["@context"] == template["@context"]
        assert populated["title"] == DSB_CREDENTIAL
        assert populated["issuer"] == "did:example:tau"
        assert populated["credentialSubject"]["givenNames"] == "Jane"

    def test_fills_camel_case_template_keys(self, assembler):
        template = {
            "type": "Europass",
            "validFrom": "1970-01-01T00:00:00Z",
            "credentialSubject": {},
        }
        populated = CredentialPopulator(assembler, JANE, DSB_CREDENTIAL).populate(template, PROOF)
        assert populated["validFrom"] == "2021-09-01T00:00:00Z"
        assert populated["credentialSubject"]["familyName"] == "Doe"
        assert "valid_from" not in populated
        assert "credential_subject" not in populated

    def test_template_is_not_modified(self, assembler):
        template = {"type": "Europass"}
        CredentialPopulator(assembler, JANE, DSB_CREDENTIAL).populate(template, PROOF)
        assert template == {"type": "Europass"}

    def test_populates_id_template(self, assembler):
        populated = CredentialPopulator(assembler, JANE).populate({"type": "VerifiableId"}, PROOF)
        assert populated["type"] == "VerifiableId"
        assert populated["credentialSubject"]["firstName"] == "Jane"

    def test_unsupported_template(self, assembler):
        with pytest.raises(ValueError, match="Unsupported template type 'Diploma'"):
            CredentialPopulator(assembler, JANE, DSB_CREDENTIAL).populate({"type": "Diploma"}, PROOF)

    def test_europass_requires_title(self, assembler):
        with pytest.raises(ValueError, match="title is required"):
            CredentialPopulator(assembler, JANE).populate({"type": "Europass"}, PROOF)

    def test_errors_propagate(self, assembler):
        populator = CredentialPopulator(assembler, "nobody@test.edu", DSB_CREDENTIAL)
        with pytest.raises(NotFoundError):
            populator.populate({"type": "Europass"}, PROOF)


class TestIssue:
    def test_recording_issuer_satisfies_protocol(self):
        issuer: Issuer = RecordingIssuer()
        assert callable(issuer.issue)

    def test_issue_credential(self, assembler):
        issuer = RecordingIssuer()
        result = issue_credential(issuer, assembler, JANE, DSB_CREDENTIAL, PROOF)
        assert issuer.calls == [(DocumentKind.EUROPASS, PROOF)]
        assert result["title"] == DSB_CREDENTIAL
        assert result["credentialSubject"]["id"] == "did:example:jane"

    def test_issue_id(self, assembler):
        issuer = RecordingIssuer()
        result = issue_id(issuer, assembler, JANE, PROOF)
        assert issuer.calls == [(DocumentKind.VERIFIABLE_ID, PROOF)]
        assert result["credentialSubject"]["familyName"] == "Doe"
