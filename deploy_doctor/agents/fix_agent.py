"""
Fix Agent
=========
Applies registered, idempotent local fixes for detected deployment issues.

Core Philosophy:
    - One patch function per issue id, looked up in an explicit registry
    - Each id is processed at most once per batch
    - Failures are data: every id lands in exactly one of applied /
      skipped / failed, and one failing fix never stops the batch

Outcome Rules:
    unknown id                         -> skipped "Unknown issue id."
    InfoOnly or non-callable patch     -> skipped "No automatic fix available."
    patch raised or returned no result -> failed (exception message)
    patch returned changed=False       -> skipped (its reason)
    patch returned changed=True        -> applied (its reason and files)

The FixAgent does NOT:
    - Read logs or detect issues (that's the log classifier's job)
    - Re-upload or redeploy the project (callers decide from applied[].files)
"""
import logging
from typing import Any, Iterable, List, Optional

from deploy_doctor.models.fix_result import AutoFixReport, FixOutcome, FixReportEntry
from deploy_doctor.models.issue import Fixable
from deploy_doctor.parser.known_issues import IssueRegistry, build_default_registry

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Skip Reasons
# ---------------------------------------------------------------------------
UNKNOWN_ISSUE = "Unknown issue id."
NO_AUTOMATIC_FIX = "No automatic fix available."
NO_CHANGES_REQUIRED = "No changes required."


def _issue_id(issue: Any) -> str:
    """Accept an id string, a DetectedIssue-like object or a mapping with "id"."""
    if isinstance(issue, str):
        return issue
    if isinstance(issue, dict):
        return str(issue.get("id") or "")
    return str(getattr(issue, "id", "") or "")


def unique_issue_ids(issues: Optional[Iterable[Any]]) -> List[str]:
    """Issue ids in first-occurrence order, duplicates and blanks removed."""
    seen: List[str] = []
    for issue in issues or []:
        issue_id = _issue_id(issue)
        if issue_id and issue_id not in seen:
            seen.append(issue_id)
    return seen


# ---------------------------------------------------------------------------
# Auto-Fix Applier
# ---------------------------------------------------------------------------
class AutoFixApplier:
    """
    Runs the registered fix for each detected issue against a project.

    Parameters
    ----------
    registry : IssueRegistry
        Issue definitions and their remedies. May be empty.
    """

    def __init__(self, registry: IssueRegistry) -> None:
        self.registry = registry

    def apply(self, project_path: str, issues: Optional[Iterable[Any]]) -> AutoFixReport:
        """
        Apply known fixes for ``issues`` under ``project_path``.

        Parameters
        ----------
        project_path : str
            Project root (expected to contain the Dockerfile).
        issues : iterable
            Issue ids, DetectedIssue objects or {"id": ...} mappings.

        Returns
        -------
        AutoFixReport
            Three-bucket report. Never raises for per-issue failures.
        """
        report = AutoFixReport()

        for issue_id in unique_issue_ids(issues):
            definition = self.registry.get(issue_id)
            if definition is None:
                report.skipped.append(FixReportEntry(id=issue_id, reason=UNKNOWN_ISSUE))
                continue

            remedy = definition.remedy
            if not isinstance(remedy, Fixable) or not callable(remedy.patch):
                report.skipped.append(FixReportEntry(id=issue_id, reason=NO_AUTOMATIC_FIX))
                continue

            try:
                outcome = remedy.patch(project_path)
                if not isinstance(outcome, FixOutcome):
                    raise TypeError(f"Fix returned {type(outcome).__name__}, expected FixOutcome")
            except Exception as e:
                logger.error("Auto-fix %s failed for %s: %s", issue_id, project_path, e, exc_info=True)
                report.failed.append(FixReportEntry(id=issue_id, reason=str(e) or type(e).__name__))
                continue

            if outcome.changed:
                logger.info("Applied auto-fix %s: %s", issue_id, outcome.reason)
                report.applied.append(FixReportEntry(
                    id=issue_id,
                    reason=outcome.reason,
                    files=list(outcome.files),
                ))
            else:
                logger.info("Skipped auto-fix %s: %s", issue_id, outcome.reason)
                report.skipped.append(FixReportEntry(
                    id=issue_id,
                    reason=outcome.reason or NO_CHANGES_REQUIRED,
                ))

        return report


def apply_known_auto_fixes(
    project_path: str,
    issues: Optional[Iterable[Any]],
    registry: Optional[IssueRegistry] = None,
) -> AutoFixReport:
    """Convenience wrapper around AutoFixApplier (default registry if None)."""
    if registry is None:
        registry = build_default_registry()
    return AutoFixApplier(registry).apply(project_path, issues)
