"""Credential Excel service — FastAPI application entry point.

Opens the credential workbook on startup and registers the read-only API routers.
"""

import logging
import threading
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI

from credential_excel.api import health, students
from credential_excel.core.assembler import CredentialAssembler
from credential_excel.core.config import settings
from credential_excel.core.credential_data import CredentialData
from credential_excel.core.errors import CredentialDataError
from credential_excel.core.layout_loader import load_layout
from credential_excel.core.vocabulary import load_vocabularies

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def _workbook_path() -> Path:
    path = Path(settings.workbook_path)
    if not path.is_absolute():
        path = settings.project_root / path
    return path


def init_credential_state(app: FastAPI, data: CredentialData, workbook: Optional[str] = None) -> None:
    """Store the workbook data, its assembler and the access lock on app.state."""
    app.state.credential_data = data
    app.state.assembler = CredentialAssembler(data, load_vocabularies())
    app.state.workbook_lock = threading.Lock()
    app.state.workbook_path = workbook


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the workbook on startup, release it on shutdown."""
    logger.info("Starting credential service...")
    app.state.credential_data = None
    app.state.assembler = None
    app.state.workbook_lock = threading.Lock()
    app.state.workbook_path = None

    workbook_path = _workbook_path()
    try:
        layout = load_layout()
        data = CredentialData.from_file(workbook_path, layout)
        init_credential_state(app, data, str(workbook_path))
        logger.info(f"Credential workbook loaded from {workbook_path}")
    except (FileNotFoundError, ValueError, CredentialDataError) as e:
        logger.error(f"Failed to load credential workbook {workbook_path}: {e}")

    logger.info("Credential service ready")
    yield

    logger.info("Shutting down credential service...")
    app.state.credential_data = None
    app.state.assembler = None
    logger.info("Credential service stopped")


app = FastAPI(
    title="Credential Excel Service",
    version="0.1.0",
    description="Read-only access to Europass credentials kept in an EDCL workbook.",
    lifespan=lifespan,
)

app.include_router(health.router, prefix="/api", tags=["health"])
app.include_router(students.router, prefix="/api", tags=["students"])
