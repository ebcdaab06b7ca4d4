"""
Bulk CSV import routes.

GET  /api/import         upload form (shows the last row count)
POST /api/import         run the import, redirect back with ?rows_imported=N
POST /api/import/report  run the import, return the full report as JSON
"""

from html import escape
from io import BytesIO
from typing import Optional

from fastapi import APIRouter, File, Form, Header, Query, UploadFile
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from starlette.concurrency import run_in_threadpool
import structlog

from models.import_report import ImportReport, ImportReportResponse
from services.auth_service import ImportAuthorizer
from services.import_service import get_import_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()

FORM_PATH = "/api/import"

FORM_TEMPLATE = """<!doctype html>
<html>
<head><title>Bulk CSV Importer</title></head>
<body>
<h1>Bulk CSV Importer</h1>
{notice}
<form method="post" action="{action}" enctype="multipart/form-data">
  <input type="hidden" name="import_token" value="{token}">
  <label for="csv_file">Upload CSV File</label>
  <input type="file" name="csv_file" id="csv_file" accept=".csv" required>
  <button type="submit">Upload and Import</button>
</form>
</body>
</html>
"""


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


async def _run(
    csv_file: Optional[UploadFile],
    import_token: Optional[str],
    actor: Optional[str]
) -> ImportReport:
    """Read the upload and hand it to the import service."""
    filename = csv_file.filename if csv_file else None
    stream = BytesIO(await csv_file.read()) if csv_file else None

    logger.info(
        "csv_upload_received",
        filename=filename,
        content_type=csv_file.content_type if csv_file else None,
        actor=actor
    )

    service = get_import_service()
    # run_import blocks on remote fetches
    return await run_in_threadpool(
        service.run_import, filename, stream, token=import_token, actor=actor
    )


# ===================
# ROUTES
# ===================

@router.get("", response_class=HTMLResponse)
async def import_form(
    rows_imported: Optional[int] = Query(None, ge=0, description="Rows processed by the last import"),
    actor: Optional[str] = Header(None, alias="X-Actor")
):
    """
    Render the upload form.

    The embedded token is bound to the requesting actor.
    """
    token = ImportAuthorizer().issue_token(actor) if actor else ""
    notice = ""
    if rows_imported is not None:
        notice = f"<p>{rows_imported} rows imported.</p>"

    return HTMLResponse(FORM_TEMPLATE.format(
        notice=notice,
        action=FORM_PATH,
        token=escape(token),
    ))


@router.post("")
async def submit_import(
    csv_file: Optional[UploadFile] = File(None),
    import_token: Optional[str] = Form(None),
    actor: Optional[str] = Header(None, alias="X-Actor")
):
    """
    Import the uploaded CSV and redirect back to the form.

    Raises:
        400: Missing, non-CSV or header-less file
        403: Actor not allowed or token invalid
    """
    try:
        report = await _run(csv_file, import_token, actor)
        return RedirectResponse(
            url=f"{FORM_PATH}?rows_imported={report.rows_processed}",
            status_code=303
        )

    except Exception as e:
        return handle_error(e)


@router.post("/report", response_model=ImportReportResponse)
async def submit_import_report(
    csv_file: Optional[UploadFile] = File(None),
    import_token: Optional[str] = Form(None),
    actor: Optional[str] = Header(None, alias="X-Actor")
):
    """
    Import the uploaded CSV and return per-row outcomes.

    Raises:
        400: Missing, non-CSV or header-less file
        403: Actor not allowed or token invalid
    """
    try:
        report = await _run(csv_file, import_token, actor)
        return ImportReportResponse(**report.to_dict())

    except Exception as e:
        return handle_error(e)
