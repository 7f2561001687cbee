"""
API Dependencies
"""

from fastapi import Request

from pos_reporting.reporting import QueryFailed, ReportService


def get_report_service(request: Request) -> ReportService:
    """
    FastAPI dependency for the process-wide report service.

    The service, and with it the summary cache, lives on app.state.
    """
    service = getattr(request.app.state, "report_service", None)
    if service is None:
        raise QueryFailed("report", "database not initialized")
    return service
