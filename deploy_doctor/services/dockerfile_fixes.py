"""
Dockerfile Fixes
================
Idempotent, line-oriented patch functions for the project's Dockerfile.

Each function has the same contract:

    fix(project_path) -> FixOutcome

Rules:
    - Operates only on <project_path>/Dockerfile.
    - Missing Dockerfile or nothing to change -> changed=False with a reason.
      These are normal outcomes, never exceptions.
    - Only unexpected I/O errors (permission denied, disk failure) propagate.
    - Content is compared before/after; the file is written only if it changed.
    - Text surgery with regular expressions, no Dockerfile parsing.
"""
import logging
import os
import re
from typing import Optional, Tuple

from deploy_doctor.core.constants import (
    DOCKERFILE_NAME,
    ENTRYPOINT_INSTALL_PATH,
    ENTRYPOINT_NORMALIZE_COMMAND,
    ENTRYPOINT_SCRIPT,
    REGISTRY_MIRROR_URL,
)
from deploy_doctor.models.fix_result import FixOutcome
from deploy_doctor.utils.text_utils import normalize_lf

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# File I/O
# ---------------------------------------------------------------------------
def dockerfile_path(project_path: str) -> str:
    return os.path.join(project_path, DOCKERFILE_NAME)


def _read_dockerfile(project_path: str) -> Tuple[str, Optional[str]]:
    """Return (path, LF-normalized content) or (path, None) if the file is absent."""
    path = dockerfile_path(project_path)
    if not os.path.isfile(path):
        return path, None
    # newline="" keeps CRLF intact so normalize_lf sees the real bytes
    with open(path, "r", encoding="utf-8", newline="") as f:
        return path, normalize_lf(f.read())


def _write_dockerfile(path: str, content: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)
    logger.info("Rewrote %s (%d chars)", path, len(content))


def _missing(path: str) -> FixOutcome:
    return FixOutcome(changed=False, reason=f"Dockerfile not found at {path}", files=[])


# ---------------------------------------------------------------------------
# Entrypoint Path Fix
# ---------------------------------------------------------------------------
# ENTRYPOINT ["docker-entrypoint.sh", ...] / ENTRYPOINT ['./docker-entrypoint.sh']
_BARE_ENTRYPOINT_RE = re.compile(
    r"""ENTRYPOINT\s*\[\s*["'](?:\./)?docker-entrypoint\.sh["']"""
)
_SCRIPT_REFERENCE_RE = re.compile(re.escape(ENTRYPOINT_SCRIPT), re.IGNORECASE)
_COPY_SCRIPT_LINE_RE = re.compile(
    r"^.*\b(?:COPY|ADD)\b[^\n]*docker-entrypoint\.sh[^\n]*$",
    re.MULTILINE,
)
_ENTRYPOINT_LINE_RE = re.compile(r"^.*ENTRYPOINT[^\n]*$", re.MULTILINE)


def _insert_normalize_command(content: str) -> str:
    """
    Insert the CRLF-normalization + chmod command at the best anchor.

    Anchor preference:
        1. directly after the first COPY/ADD line that brings in the script
        2. directly before the first ENTRYPOINT line
        3. appended at end of file
    """
    copy_line = _COPY_SCRIPT_LINE_RE.search(content)
    if copy_line:
        end = copy_line.end()
        return f"{content[:end]}\n{ENTRYPOINT_NORMALIZE_COMMAND}{content[end:]}"

    entrypoint_line = _ENTRYPOINT_LINE_RE.search(content)
    if entrypoint_line:
        start = entrypoint_line.start()
        return f"{content[:start]}{ENTRYPOINT_NORMALIZE_COMMAND}\n{content[start:]}"

    return f"{content.rstrip()}\n{ENTRYPOINT_NORMALIZE_COMMAND}\n"


def fix_docker_entrypoint_not_found(project_path: str) -> FixOutcome:
    """
    Make the image invoke docker-entrypoint.sh by absolute path with LF endings.

    Steps:
        1. Read Dockerfile, normalize CRLF -> LF
        2. Rewrite ENTRYPOINT ["docker-entrypoint.sh"] to the install path
        3. If the script is referenced and the normalize command is absent,
           insert it (after COPY, else before ENTRYPOINT, else at EOF)
        4. Write only if the content changed

    Parameters
    ----------
    project_path : str
        Project root expected to contain a Dockerfile.

    Returns
    -------
    FixOutcome
        changed=True with the Dockerfile in ``files`` when rewritten.
    """
    path, original = _read_dockerfile(project_path)
    if original is None:
        return _missing(path)

    updated = _BARE_ENTRYPOINT_RE.sub(
        lambda _m: f'ENTRYPOINT ["{ENTRYPOINT_INSTALL_PATH}"',
        original,
    )

    if _SCRIPT_REFERENCE_RE.search(updated) and ENTRYPOINT_NORMALIZE_COMMAND not in updated:
        updated = _insert_normalize_command(updated)

    if updated == original:
        return FixOutcome(
            changed=False,
            reason="Dockerfile already looks compatible with entrypoint requirements.",
            files=[],
        )

    _write_dockerfile(path, updated)
    return FixOutcome(
        changed=True,
        reason="Updated ENTRYPOINT and added CRLF normalization for docker-entrypoint.sh.",
        files=[path],
    )


# ---------------------------------------------------------------------------
# Corepack Registry Mirror Fix
# ---------------------------------------------------------------------------
_COREPACK_RE = re.compile(r"corepack", re.IGNORECASE)
_MIRROR_CONFIGURED_RE = re.compile(r"COREPACK_NPM_REGISTRY|npm_config_registry", re.IGNORECASE)
_FROM_LINE_RE = re.compile(r"^\s*FROM\s", re.IGNORECASE)

MIRROR_ENV_LINES = (
    f"ENV COREPACK_NPM_REGISTRY={REGISTRY_MIRROR_URL} \\",
    f"    npm_config_registry={REGISTRY_MIRROR_URL}",
)


def fix_corepack_registry_mirror(project_path: str) -> FixOutcome:
    """
    Point corepack and npm at a reachable registry mirror.

    No-op when the Dockerfile does not use corepack or already configures
    a registry. Otherwise the ENV declaration goes right after the first
    FROM line (or at the top when there is no FROM).
    """
    path, original = _read_dockerfile(project_path)
    if original is None:
        return _missing(path)

    if not _COREPACK_RE.search(original):
        return FixOutcome(changed=False, reason="No corepack usage detected in Dockerfile.", files=[])

    if _MIRROR_CONFIGURED_RE.search(original):
        return FixOutcome(changed=False, reason="Registry mirror already configured.", files=[])

    lines = original.split("\n")
    from_index = next(
        (i for i, line in enumerate(lines) if _FROM_LINE_RE.match(line)),
        None,
    )
    if from_index is None:
        lines[0:0] = MIRROR_ENV_LINES
    else:
        lines[from_index + 1:from_index + 1] = MIRROR_ENV_LINES
    updated = "\n".join(lines)

    _write_dockerfile(path, updated)
    return FixOutcome(
        changed=True,
        reason="Added corepack/npm registry mirror config.",
        files=[path],
    )
