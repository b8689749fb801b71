"""
POST /api/auto-fix
==================
Applies known local fixes to a project directory on this host.

Route: POST /api/auto-fix

Safety:
    - Disabled by default (requires ENABLE_AUTOFIX_ENDPOINT=true)
    - Only existing directories are accepted
    - Only <projectPath>/Dockerfile is ever rewritten
"""
import logging
import os
from typing import List

from fastapi import APIRouter, HTTPException, Request
from pydantic import field_validator

from deploy_doctor.agents.fix_agent import AutoFixApplier
from deploy_doctor.core.config import ENABLE_AUTOFIX_ENDPOINT
from deploy_doctor.models.camel_model import CamelModel
from deploy_doctor.models.fix_result import AutoFixReport

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Auto-Fix"])

# ---------------------------------------------------------------------------
# Environment gate
# ---------------------------------------------------------------------------
_AUTOFIX_ENABLED = ENABLE_AUTOFIX_ENDPOINT


# ---------------------------------------------------------------------------
# Request schema
# ---------------------------------------------------------------------------
class AutoFixRequest(CamelModel):
    project_path: str
    issues: List[str] = []

    @field_validator("project_path")
    @classmethod
    def validate_project_path(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("projectPath must not be empty")
        return v.strip()


# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------
@router.post("/auto-fix", response_model=AutoFixReport, response_model_by_alias=True)
async def auto_fix(payload: AutoFixRequest, request: Request):
    """
    Apply registered fixes for ``issues`` to the project at ``projectPath``.

    Disabled unless ENABLE_AUTOFIX_ENDPOINT=true.
    """
    if not _AUTOFIX_ENABLED:
        raise HTTPException(status_code=404, detail="Not found")

    project_path = os.path.abspath(payload.project_path)
    if not os.path.isdir(project_path):
        raise HTTPException(
            status_code=400,
            detail=f"Project path must be an existing directory: {project_path}",
        )

    applier = AutoFixApplier(request.app.state.registry)
    report = applier.apply(project_path, payload.issues)

    logger.info(
        "[API] Auto-fix for %s: applied=%d skipped=%d failed=%d",
        project_path, len(report.applied), len(report.skipped), len(report.failed),
    )
    return report
