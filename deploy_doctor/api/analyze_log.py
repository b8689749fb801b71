"""
POST /api/analyze-log
=====================
Classifies a deployment log snapshot posted by an external driver.

Returns the structured analysis, the tail of timestamped log lines and the
operator report lines. Pure: no files are read or written.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Request
from pydantic import field_validator

from deploy_doctor.core.config import LATEST_LOG_COUNT
from deploy_doctor.core.output_formatter import format_analysis
from deploy_doctor.models.analysis_result import AnalysisResult
from deploy_doctor.models.camel_model import CamelModel
from deploy_doctor.parser.log_classifier import LogClassifier, extract_latest_log_lines

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Analysis"])


# ---------------------------------------------------------------------------
# Request / Response schemas
# ---------------------------------------------------------------------------
class AnalyzeLogRequest(CamelModel):
    log_text: Optional[str] = ""
    latest_log_count: int = LATEST_LOG_COUNT

    @field_validator("latest_log_count")
    @classmethod
    def validate_latest_log_count(cls, v: int) -> int:
        if v < 0:
            raise ValueError("latestLogCount must be >= 0")
        return v


class AnalyzeLogResponse(CamelModel):
    analysis: AnalysisResult
    latest_log_lines: List[str] = []
    report: List[str] = []


# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------
@router.post("/analyze-log", response_model=AnalyzeLogResponse, response_model_by_alias=True)
async def analyze_log(payload: AnalyzeLogRequest, request: Request):
    """Analyze one deployment log snapshot against the known-issue registry."""
    classifier = LogClassifier(request.app.state.registry)
    analysis = classifier.analyze(payload.log_text)

    logger.info(
        "[API] Analyzed %d chars: has_errors=%s success=%s issues=%s",
        len(payload.log_text or ""), analysis.has_errors,
        analysis.success_detected, analysis.issue_ids(),
    )

    return AnalyzeLogResponse(
        analysis=analysis,
        latest_log_lines=extract_latest_log_lines(payload.log_text, payload.latest_log_count),
        report=format_analysis(analysis),
    )
