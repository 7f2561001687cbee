"""
Reporting Errors

InvalidParameter is raised before any query runs and maps to HTTP 400.
QueryFailed wraps store failures and timeouts and maps to HTTP 500.
An empty result is not an error.
"""

from typing import Any, Dict, Optional


class ReportError(Exception):
    """Base class for reporting failures"""

    status_code: int = 500
    error_type: str = "ReportError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidParameter(ReportError):
    """Malformed or contradictory filter input"""

    status_code = 400
    error_type = "InvalidParameter"

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class QueryFailed(ReportError):
    """
    The store was unreachable, timed out, or rejected the query.

    `detail` holds the driver diagnostic; it is logged and returned in the
    envelope's `error` field, never in the user-facing `message`.
    """

    status_code = 500
    error_type = "QueryFailed"

    def __init__(
        self,
        report: str,
        detail: str,
        timed_out: bool = False,
        params: Optional[Dict[str, Any]] = None,
    ):
        label = report.replace("-", " ")
        super().__init__(f"Error retrieving {label} data")
        self.report = report
        self.detail = detail
        self.timed_out = timed_out
        self.params = params or {}
