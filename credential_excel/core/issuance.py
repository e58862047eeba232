"""Issuance seam — hands assembled documents to an external credential issuer.

The issuer (signing, DIDs, proofs) lives outside this package. It is called
as issue(document_kind, proof, populate) and calls back populate(template,
proof) to obtain the document contents. CredentialPopulator is that
callback: it fills a template with the document assembled from the workbook.
"""

import logging
from typing import Any, Callable, Optional, Protocol

from credential_excel.core.assembler import CredentialAssembler
from credential_excel.core.models import DocumentKind, ProofParameters

logger = logging.getLogger(__name__)

Populate = Callable[[dict, ProofParameters], dict]


class Issuer(Protocol):
    def issue(self, document_kind: DocumentKind, proof: ProofParameters, populate: Populate) -> Any:
        """Issue a document of `document_kind`, calling back `populate` for its contents."""
        ...


class CredentialPopulator:
    """Populates Europass credential and student id templates for one student.

    `title` may be None when only the student id is going to be issued.
    """

    def __init__(self, assembler: CredentialAssembler, email: str, title: Optional[str] = None):
        self.assembler = assembler
        self.email = email
        self.title = title

    def populate(self, template: dict, proof: ProofParameters) -> dict:
        kind = template.get("type")
        if kind == DocumentKind.EUROPASS.value:
            if self.title is None:
                raise ValueError("A credential title is required to populate a Europass credential")
            document = self.assembler.assemble(self.email, self.title, proof)
        elif kind == DocumentKind.VERIFIABLE_ID.value:
            document = self.assembler.assemble_id(self.email, proof)
        else:
            raise ValueError(
                f"Unsupported template type '{kind}'. "
                f"Only {DocumentKind.EUROPASS.value} and {DocumentKind.VERIFIABLE_ID.value} are supported"
            )

        populated = dict(template)
        populated.update(document.model_dump(mode="json", by_alias=True, exclude_none=True))
        logger.debug(f"Populated {kind} template for {self.email}")
        return populated

    __call__ = populate


def issue_credential(
    issuer: Issuer,
    assembler: CredentialAssembler,
    email: str,
    title: str,
    proof: ProofParameters,
) -> Any:
    """Issue the Europass credential `title` of the student with `email`."""
    populator = CredentialPopulator(assembler, email, title)
    return issuer.issue(DocumentKind.EUROPASS, proof, populator.populate)


def issue_id(issuer: Issuer, assembler: CredentialAssembler, email: str, proof: ProofParameters) -> Any:
    """Issue a student id for the student with `email`."""
    populator = CredentialPopulator(assembler, email)
    return issuer.issue(DocumentKind.VERIFIABLE_ID, proof, populator.populate)
