"""Built-in report components."""

from .base import Report
from .json_report import JsonReport
from .manager import ReportManager
from .stdout_report import StdoutReport

BUILTIN_REPORTS = {report.name: report for report in (JsonReport, StdoutReport)}

__all__ = ["BUILTIN_REPORTS", "JsonReport", "Report", "ReportManager", "StdoutReport"]
