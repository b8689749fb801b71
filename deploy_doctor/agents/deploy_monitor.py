"""
Deploy Monitor Agent
====================
Polls a deployment log source until the log shows a failure, a success,
or the deadline passes.

The log source is any async callable returning the current log text: a
browser driver scraping the console's log panel, or ``file_log_source``
reading a log file that such a driver keeps exporting. This agent never
touches the browser itself.

Per poll:
    1. Fetch text (truncated to max_log_chars)
    2. If it changed, persist a snapshot to <output_dir>/deploy-log-<stamp>.txt
    3. Analyze: has_errors -> "failed", else success_detected -> "success"
    4. Fetch errors are logged and polling continues (pages reload mid-deploy)

On "failed" with auto_fix enabled, the detected issues are handed to the
fix applier and its report is attached to the result. Snapshot writes and
fixes run in a worker thread so a large log never stalls the event loop.
"""
import asyncio
import logging
import os
import time
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from deploy_doctor.agents.fix_agent import AutoFixApplier
from deploy_doctor.core.config import (
    DEPLOY_TIMEOUT_SECONDS,
    LOG_POLL_INTERVAL_SECONDS,
    MAX_LOG_CHARS,
    OUTPUT_DIR,
)
from deploy_doctor.core.constants import STATUS_FAILED, STATUS_SUCCESS, STATUS_TIMEOUT
from deploy_doctor.models.analysis_result import AnalysisResult
from deploy_doctor.models.monitor_result import MonitorResult
from deploy_doctor.parser.known_issues import IssueRegistry
from deploy_doctor.parser.log_classifier import LogClassifier
from deploy_doctor.services.results_writer import ResultsWriter
from deploy_doctor.utils.text_utils import coerce_text

logger = logging.getLogger(__name__)

LogSource = Callable[[], Awaitable[str]]


def read_log_file(path: str) -> str:
    """Current contents of a log file, "" while the exporter has not created it."""
    if not os.path.isfile(path):
        return ""
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return f.read()


def file_log_source(path: str) -> LogSource:
    """LogSource that re-reads ``path`` on every poll."""

    async def fetch_log() -> str:
        return await asyncio.to_thread(read_log_file, path)

    return fetch_log


class DeployMonitor:
    """
    Agent that watches a deployment log and optionally applies known fixes.

    Parameters
    ----------
    registry : IssueRegistry
        Shared by the classifier and (unless given) the fix applier.
    applier : AutoFixApplier or None
        Fix applier (auto-created from ``registry`` if not provided).
    timeout_seconds : float
        Deadline for the whole watch.
    poll_interval_seconds : float
        Sleep between polls.
    max_log_chars : int
        Fetched text is truncated to this length.
    output_dir : str
        Directory for log snapshots.
    """

    def __init__(
        self,
        registry: IssueRegistry,
        applier: Optional[AutoFixApplier] = None,
        timeout_seconds: float = DEPLOY_TIMEOUT_SECONDS,
        poll_interval_seconds: float = LOG_POLL_INTERVAL_SECONDS,
        max_log_chars: int = MAX_LOG_CHARS,
        output_dir: str = OUTPUT_DIR,
    ) -> None:
        self.classifier = LogClassifier(registry)
        self.applier = applier or AutoFixApplier(registry)
        self.timeout_seconds = timeout_seconds
        self.poll_interval_seconds = poll_interval_seconds
        self.max_log_chars = max_log_chars
        self.output_dir = output_dir

    async def watch(
        self,
        fetch_log: LogSource,
        project_path: Optional[str] = None,
        auto_fix: bool = False,
    ) -> MonitorResult:
        """
        Poll ``fetch_log`` until a terminal verdict or the deadline.

        Parameters
        ----------
        fetch_log : async callable
            Returns the current deployment log text.
        project_path : str or None
            Project root to patch when auto-fix runs.
        auto_fix : bool
            Apply known fixes when the watch ends in "failed".

        Returns
        -------
        MonitorResult
            status "failed" | "success" | "timeout".
        """
        log_path = ResultsWriter.new_log_path(self.output_dir)
        written_path = ""
        latest_text = ""
        analysis = self.classifier.analyze("")
        deadline = time.monotonic() + self.timeout_seconds

        while time.monotonic() < deadline:
            status: Optional[str] = None
            try:
                text = coerce_text(await fetch_log())[: self.max_log_chars]
                if text and text != latest_text:
                    latest_text = text
                    written_path = await asyncio.to_thread(ResultsWriter.write_log, latest_text, log_path)

                analysis = self.classifier.analyze(latest_text)
                if analysis.has_errors:
                    status = STATUS_FAILED
                elif analysis.success_detected:
                    status = STATUS_SUCCESS

            except Exception as e:
                logger.warning("Error polling deployment log, retrying: %s", e)

            if status is not None:
                logger.info("Deployment watch finished: %s %s", status, analysis.issue_ids())
                return await self._finish(status, written_path, analysis, project_path, auto_fix)

            await asyncio.sleep(self.poll_interval_seconds)

        logger.warning("Deployment watch timed out after %.0fs", self.timeout_seconds)
        return await self._finish(STATUS_TIMEOUT, written_path, analysis, project_path, auto_fix)

    async def _finish(
        self,
        status: str,
        log_path: str,
        analysis: AnalysisResult,
        project_path: Optional[str],
        auto_fix: bool,
    ) -> MonitorResult:
        fix_report = None
        if status == STATUS_FAILED and auto_fix and project_path:
            fix_report = await asyncio.to_thread(self.applier.apply, project_path, analysis.issues)
            if fix_report.has_changes:
                logger.info("Auto-fix rewrote %s; re-run the deployment", fix_report.changed_files())

        return MonitorResult(
            status=status,
            log_path=log_path,
            analysis=analysis,
            fix_report=fix_report,
            checked_at=datetime.now(timezone.utc).isoformat(),
        )
