"""
Log Classifier
==============
Converts raw deployment log text into a structured AnalysisResult.

Pipeline:
    1. Match every registered issue pattern against the WHOLE text
       (multi-line signatures still qualify)
    2. For each matched issue, collect up to 4 matching lines (per line,
       trimmed, empty lines dropped, source order)
    3. Collect up to 12 generic error-looking lines, independent of step 2
    4. Test the whole text for a success phrase, independent of steps 1-3
    5. has_errors = any issue matched OR any generic error line

Contract:
    - DETERMINISTIC: same log -> same AnalysisResult, always.
    - Total: None, empty, bytes or garbage input never raises.
    - Case-insensitive matching throughout.
    - No cross-tier dedup: a line may appear both in an issue's
      matched_lines and in generic_error_lines.
"""
import logging
import re
from typing import List, Optional, Union

from deploy_doctor.core.constants import MAX_GENERIC_ERROR_LINES, MAX_MATCHED_LINES
from deploy_doctor.models.analysis_result import AnalysisResult
from deploy_doctor.models.issue import DetectedIssue, IssueDefinition
from deploy_doctor.parser.known_issues import IssueRegistry, build_default_registry
from deploy_doctor.utils.text_utils import coerce_text, non_empty_lines

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Fixed Patterns
# ---------------------------------------------------------------------------
ERROR_LINE_PATTERN = re.compile(
    r"(\b(error|failed|failure|exception|traceback)\b|not found|GL_HOOK_ERR|EACCES|ENOENT|denied|invalid)",
    re.IGNORECASE | re.ASCII,
)

# English and Chinese success phrasing of the hosting console
SUCCESS_PATTERN = re.compile(
    r"(deploy(ment)?\s+success|部署成功|service\s+running|服务运行中|started\s+successfully|启动成功)",
    re.IGNORECASE,
)

# [2026-02-27 00:07:16] ...
_TIMESTAMPED_LINE = re.compile(r"^\[\d{4}-\d{2}-\d{2}\s+\d{2}:\d{2}:\d{2}\]")


# ---------------------------------------------------------------------------
# Line Extraction
# ---------------------------------------------------------------------------
def extract_matched_lines(
    log_text: str,
    pattern: "re.Pattern[str]",
    max_lines: int = MAX_MATCHED_LINES,
) -> List[str]:
    """Return up to ``max_lines`` trimmed lines matching ``pattern``, in source order."""
    matched: List[str] = []
    for line in non_empty_lines(log_text):
        if pattern.search(line):
            matched.append(line)
            if len(matched) >= max_lines:
                break
    return matched


def extract_generic_error_lines(
    log_text: str,
    max_lines: int = MAX_GENERIC_ERROR_LINES,
) -> List[str]:
    """Lines that look like errors, whether or not a known issue covers them."""
    return extract_matched_lines(log_text, ERROR_LINE_PATTERN, max_lines)


def extract_latest_log_lines(log_text: Optional[str], latest_count: int = 10) -> List[str]:
    """
    Return the last ``latest_count`` timestamped lines of a log dialog.

    Only lines starting with ``[YYYY-MM-DD HH:MM:SS]`` are kept; console
    chrome (titles, buttons) around the log body is dropped.
    """
    if latest_count <= 0:
        return []
    lines = [
        line for line in non_empty_lines(coerce_text(log_text))
        if _TIMESTAMPED_LINE.match(line)
    ]
    return lines[-latest_count:]


# ---------------------------------------------------------------------------
# Classifier
# ---------------------------------------------------------------------------
class LogClassifier:
    """
    Classifies deployment logs against an explicit IssueRegistry.

    Parameters
    ----------
    registry : IssueRegistry
        Known issues to match. May be empty.
    """

    def __init__(self, registry: IssueRegistry) -> None:
        self.registry = registry

    def _detect(self, definition: IssueDefinition, source: str) -> DetectedIssue:
        return DetectedIssue(
            id=definition.id,
            title=definition.title,
            auto_fixable=definition.auto_fixable,
            hints=list(definition.hints),
            matched_lines=extract_matched_lines(source, definition.pattern),
        )

    def analyze(self, log_text: Optional[Union[str, bytes]]) -> AnalysisResult:
        """
        Analyze one log snapshot.

        Parameters
        ----------
        log_text : str | bytes | None
            Raw deployment log. None and "" analyze as a clean, non-success log.

        Returns
        -------
        AnalysisResult
            Never raises.
        """
        source = coerce_text(log_text)

        issues: List[DetectedIssue] = []
        for definition in self.registry:
            try:
                if definition.pattern.search(source):
                    issues.append(self._detect(definition, source))
            except Exception as e:
                logger.warning("Failed to evaluate issue %s: %s", definition.id, e, exc_info=True)

        generic_error_lines = extract_generic_error_lines(source)

        result = AnalysisResult(
            has_errors=len(issues) > 0 or len(generic_error_lines) > 0,
            success_detected=SUCCESS_PATTERN.search(source) is not None,
            issues=issues,
            generic_error_lines=generic_error_lines,
        )
        logger.debug(
            "Analyzed log (%d chars): %d issue(s), %d error line(s), success=%s",
            len(source), len(issues), len(generic_error_lines), result.success_detected,
        )
        return result


def analyze_deploy_log(
    log_text: Optional[Union[str, bytes]],
    registry: Optional[IssueRegistry] = None,
) -> AnalysisResult:
    """Convenience wrapper: analyze with ``registry`` (default registry if None)."""
    if registry is None:
        registry = build_default_registry()
    return LogClassifier(registry).analyze(log_text)
