from typing import Any, Optional

from fastapi import APIRouter, Body

from picwall.utils.errors import AppError, ErrorSeverity, ErrorSource, log_error
from picwall.utils.schemas import CamelModel

# Defining the router
router = APIRouter(
    prefix="/api/log-error",
    tags=["Logs"],
)


class ClientErrorReport(CamelModel):
    message: Optional[str] = None
    # browsers send objects, strings (stack traces) or lists here
    details: Optional[Any] = None
    url: Optional[str] = None
    user_agent: Optional[str] = None
    client_timestamp: Optional[str] = None


@router.post("")
def log_client_error(report: ClientErrorReport = Body(...)):
    """Record an error reported by the browser."""
    if isinstance(report.details, dict):
        details = dict(report.details)
    elif report.details is not None:
        details = {"details": report.details}
    else:
        details = {}

    details.update({
        "clientUrl": report.url,
        "userAgent": report.user_agent,
        "clientTimestamp": report.client_timestamp,
    })
    log_error(AppError(
        report.message or "Client error",
        source=ErrorSource.CLIENT,
        severity=ErrorSeverity.ERROR,
        details=details,
    ))
    return {"success": True}
