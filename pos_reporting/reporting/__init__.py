"""
Reporting Module

Parameter validation, query construction, normalization and the report
service behind the /reports endpoints.
"""
from .errors import InvalidParameter, QueryFailed, ReportError
from .params import ReportKind, ReportParams, default_window, parse_report_params
from .service import ReportService

__all__ = [
    "InvalidParameter",
    "QueryFailed",
    "ReportError",
    "ReportKind",
    "ReportParams",
    "ReportService",
    "default_window",
    "parse_report_params",
]
