"""
Monitor Result Model
====================
Terminal state of one deployment-log watch.

Fields:
    status      — "failed" | "success" | "timeout"
    log_path    — file holding the latest log snapshot ("" if none was written)
    analysis    — AnalysisResult of the latest snapshot
    fix_report  — AutoFixReport when auto-fix ran, else None
    checked_at  — ISO-8601 UTC timestamp of the final poll
"""
from typing import Literal, Optional

from pydantic import Field

from .analysis_result import AnalysisResult
from .camel_model import CamelModel
from .fix_result import AutoFixReport

MonitorStatus = Literal["failed", "success", "timeout"]


class MonitorResult(CamelModel):
    status: MonitorStatus
    log_path: str = ""
    analysis: AnalysisResult = Field(default_factory=AnalysisResult)
    fix_report: Optional[AutoFixReport] = None
    checked_at: str = ""
