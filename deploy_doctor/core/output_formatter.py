"""
Output Formatter
================
THE SINGLE SOURCE OF TRUTH for operator-facing report text.

STRICT DETERMINISM CONTRACT:
  - This module NEVER reads environment variables or files.
  - Given the same inputs, it ALWAYS returns the exact same lines.

Callers print or log the returned lines; nothing here writes output itself.
"""
from typing import List

from deploy_doctor.core.constants import MAX_REPORT_GENERIC_LINES, MAX_REPORT_LOG_LINES
from deploy_doctor.models.analysis_result import AnalysisResult
from deploy_doctor.models.fix_result import AutoFixReport, FixReportEntry
from deploy_doctor.models.monitor_result import MonitorResult


# ---------------------------------------------------------------------------
# Section Headers
# ---------------------------------------------------------------------------
KNOWN_ISSUES_HEADER = "Detected known deployment issues:"
ERROR_LINES_HEADER = "Error-like lines from deployment log:"
APPLIED_HEADER = "Applied local auto fixes:"
SKIPPED_HEADER = "Skipped fixes:"
FAILED_HEADER = "Failed fixes:"
RERUN_ADVICE = "Re-run the deployment to upload the fixed files."


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------
def format_analysis(analysis: AnalysisResult) -> List[str]:
    """
    Render an AnalysisResult for an operator.

    Output (only when the analysis has errors):
        Detected known deployment issues:
        - [<id>] <title>
          log: <matched line>        (at most 2)
          hint: <hint>               (all)
        Error-like lines from deployment log:
        - <line>                     (at most 5)
    """
    if not analysis.has_errors:
        return []

    lines: List[str] = []
    if analysis.issues:
        lines.append(KNOWN_ISSUES_HEADER)
        for issue in analysis.issues:
            lines.append(f"- [{issue.id}] {issue.title}")
            for matched in issue.matched_lines[:MAX_REPORT_LOG_LINES]:
                lines.append(f"  log: {matched}")
            for hint in issue.hints:
                lines.append(f"  hint: {hint}")

    if analysis.generic_error_lines:
        lines.append(ERROR_LINES_HEADER)
        for error_line in analysis.generic_error_lines[:MAX_REPORT_GENERIC_LINES]:
            lines.append(f"- {error_line}")

    return lines


# ---------------------------------------------------------------------------
# Fix Report
# ---------------------------------------------------------------------------
def _entry_lines(entries: List[FixReportEntry], with_files: bool = False) -> List[str]:
    lines: List[str] = []
    for entry in entries:
        lines.append(f"- {entry.id}: {entry.reason}")
        if with_files:
            for path in entry.files:
                lines.append(f"  file: {path}")
    return lines


def format_fix_report(report: AutoFixReport) -> List[str]:
    """Render the applied / skipped / failed buckets, omitting empty ones."""
    lines: List[str] = []
    if report.applied:
        lines.append(APPLIED_HEADER)
        lines.extend(_entry_lines(report.applied, with_files=True))
        lines.append(RERUN_ADVICE)
    if report.skipped:
        lines.append(SKIPPED_HEADER)
        lines.extend(_entry_lines(report.skipped))
    if report.failed:
        lines.append(FAILED_HEADER)
        lines.extend(_entry_lines(report.failed))
    return lines


def format_monitor_result(result: MonitorResult) -> List[str]:
    """Status header followed by the analysis and (if any) the fix report."""
    lines = [f"Deployment monitor result: {result.status}"]
    if result.log_path:
        lines.append(f"Deployment log saved at: {result.log_path}")
    lines.extend(format_analysis(result.analysis))
    if result.fix_report is not None:
        lines.extend(format_fix_report(result.fix_report))
    return lines
