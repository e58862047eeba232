"""FastAPI dependencies for access to the loaded credential workbook."""

from fastapi import HTTPException, Request

from credential_excel.core.assembler import CredentialAssembler
from credential_excel.core.credential_data import CredentialData


def get_credential_data(request: Request) -> CredentialData:
    """Return the loaded CredentialData.

    Raises 503 if the workbook could not be loaded on startup.
    """
    data = getattr(request.app.state, "credential_data", None)
    if data is None:
        raise HTTPException(status_code=503, detail="Credential workbook is not loaded")
    return data


def get_assembler(request: Request) -> CredentialAssembler:
    get_credential_data(request)
    return request.app.state.assembler


def get_workbook_lock(request: Request):
    return request.app.state.workbook_lock
