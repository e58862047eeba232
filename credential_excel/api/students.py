"""Student endpoints — existence check, credential titles and document assembly.

Handlers are synchronous: FastAPI runs them in its threadpool, and the workbook
lock serialises access to the shared tables.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from credential_excel.api.deps import get_assembler, get_credential_data, get_workbook_lock
from credential_excel.core.assembler import CredentialAssembler
from credential_excel.core.credential_data import CredentialData
from credential_excel.core.errors import MappingNotFoundError, NotFoundError, StructureError
from credential_excel.core.models import (
    CredentialDocument,
    CredentialTitlesResponse,
    IdDocument,
    StudentResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _unprocessable(email: str, e: Exception) -> HTTPException:
    logger.error(f"Workbook data for {email} is malformed: {e}")
    return HTTPException(status_code=422, detail=str(e))


@router.get("/students/{email}", response_model=StudentResponse)
def get_student(
    email: str,
    data: CredentialData = Depends(get_credential_data),
    lock=Depends(get_workbook_lock),
):
    """Check whether the workbook has a Persons row for the student."""
    with lock:
        exists = data.student_exists(email)
    return StudentResponse(email=email, exists=exists)


@router.get("/students/{email}/credentials", response_model=CredentialTitlesResponse)
def list_credentials(
    email: str,
    data: CredentialData = Depends(get_credential_data),
    lock=Depends(get_workbook_lock),
):
    """List the credential titles held by the student, in workbook order."""
    try:
        with lock:
            titles = data.list_credential_titles(email)
    except StructureError as e:
        raise _unprocessable(email, e)
    return CredentialTitlesResponse(email=email, titles=titles)


@router.get("/students/{email}/credentials/{title:path}", response_model=CredentialDocument)
def get_credential(
    email: str,
    title: str,
    assembler: CredentialAssembler = Depends(get_assembler),
    lock=Depends(get_workbook_lock),
):
    """Assemble the unsigned credential document `title` for the student."""
    try:
        with lock:
            return assembler.assemble(email, title)
    except NotFoundError as e:
        logger.info(f"Credential '{title}' for {email}: {e}")
        raise HTTPException(status_code=404, detail=f"required data missing: {e}")
    except (StructureError, MappingNotFoundError) as e:
        raise _unprocessable(email, e)


@router.get("/students/{email}/id", response_model=IdDocument)
def get_student_id(
    email: str,
    assembler: CredentialAssembler = Depends(get_assembler),
    lock=Depends(get_workbook_lock),
):
    """Assemble the unsigned student id document."""
    try:
        with lock:
            return assembler.assemble_id(email)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=f"required data missing: {e}")
    except (StructureError, MappingNotFoundError) as e:
        raise _unprocessable(email, e)
