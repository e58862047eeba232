"""Health check endpoint — reports whether the credential workbook is loaded."""

from fastapi import APIRouter, Request

from credential_excel.core.models import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Check backend status and which workbook sheets are available."""
    data = getattr(request.app.state, "credential_data", None)
    if data is None:
        return HealthResponse(status="degraded")

    return HealthResponse(
        status="ok",
        workbook=getattr(request.app.state, "workbook_path", None),
        sheets=data.layout.sheet_names,
    )
