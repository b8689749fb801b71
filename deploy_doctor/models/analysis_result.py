"""
Analysis Result Model
=====================
Structured verdict produced by the log classifier for one log snapshot.

Fields:
    has_errors          — True iff a known issue matched OR a generic error line exists
    success_detected    — True iff a success phrase appears anywhere in the log
    issues              — List[DetectedIssue] in registry order
    generic_error_lines — up to 12 error-looking lines, source order

has_errors and success_detected are computed independently; both may be
True for an ambiguous log. This layer surfaces that, it does not resolve it.
"""
from typing import List

from .camel_model import CamelModel
from .issue import DetectedIssue


class AnalysisResult(CamelModel):
    has_errors: bool = False
    success_detected: bool = False
    issues: List[DetectedIssue] = []
    generic_error_lines: List[str] = []

    def issue_ids(self) -> List[str]:
        return [issue.id for issue in self.issues]
