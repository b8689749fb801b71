"""
Known Issues
============
The closed registry of deployment failure signatures this tool recognises.

Each entry maps a case-insensitive regex to an issue id, a title, operator
hints and a remedy (Fixable patch function or InfoOnly).

Registry Rules:
    1. Built once by build_default_registry() and passed explicitly to the
       classifier and the fix applier. There is no module-level instance.
    2. Immutable after construction; ids are unique.
    3. Registry order is the order issues are reported in.

Adding an issue = add one IssueDefinition below. Patterns are tuned to one
hosting platform's build/run logs; this is not a general log parser.
"""
import re
from typing import Iterable, Iterator, List, Optional, Tuple

from deploy_doctor.core.constants import (
    COREPACK_REGISTRY_TIMEOUT,
    DOCKER_ENTRYPOINT_NOT_FOUND,
    VITE_ROUTER_BASE_PATH,
)
from deploy_doctor.models.issue import Fixable, InfoOnly, IssueDefinition
from deploy_doctor.services.dockerfile_fixes import (
    fix_corepack_registry_mirror,
    fix_docker_entrypoint_not_found,
)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------
class IssueRegistry:
    """
    Immutable, ordered collection of IssueDefinitions keyed by id.

    Raises
    ------
    ValueError
        If two definitions share an id.
    """

    def __init__(self, definitions: Iterable[IssueDefinition] = ()) -> None:
        self._definitions: Tuple[IssueDefinition, ...] = tuple(definitions)
        self._by_id = {}
        for definition in self._definitions:
            if definition.id in self._by_id:
                raise ValueError(f"Duplicate issue id in registry: {definition.id}")
            self._by_id[definition.id] = definition

    def __iter__(self) -> Iterator[IssueDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, issue_id: object) -> bool:
        return issue_id in self._by_id

    def get(self, issue_id: str) -> Optional[IssueDefinition]:
        return self._by_id.get(issue_id)

    def ids(self) -> List[str]:
        return [d.id for d in self._definitions]


# ---------------------------------------------------------------------------
# Default Definitions
# ---------------------------------------------------------------------------
def _pattern(expr: str) -> "re.Pattern[str]":
    return re.compile(expr, re.IGNORECASE)


def build_default_registry() -> IssueRegistry:
    """Construct the registry of known deployment issues."""
    return IssueRegistry([
        IssueDefinition(
            id=DOCKER_ENTRYPOINT_NOT_FOUND,
            title="docker-entrypoint.sh not found",
            pattern=_pattern(r"docker-entrypoint\.sh:\s*not found"),
            hints=(
                "Use absolute ENTRYPOINT path, for example /usr/local/bin/docker-entrypoint.sh.",
                "Normalize line endings to LF in Docker build (sed -i 's/\\r$//' ...).",
            ),
            remedy=Fixable(fix_docker_entrypoint_not_found),
        ),
        IssueDefinition(
            id=COREPACK_REGISTRY_TIMEOUT,
            title="Corepack/pnpm registry network issue",
            pattern=_pattern(
                r"(corepack is about to download|registry\.npmjs\.org|pnpm-\d+.*\.tgz"
                r"|ERR_PNPM_FETCH|ECONNRESET|ETIMEDOUT)"
            ),
            hints=(
                "Set npm/corepack registry mirror in Dockerfile when build env cannot access npmjs reliably.",
                "Example mirror: https://registry.npmmirror.com",
            ),
            remedy=Fixable(fix_corepack_registry_mirror),
        ),
        IssueDefinition(
            id=VITE_ROUTER_BASE_PATH,
            title="Vite/Router base path mismatch",
            pattern=_pattern(
                r"(Failed to load resource.*404|Cannot\s+GET\s+\/app\/|route.*not\s+matched)"
            ),
            hints=(
                "Set Vite base to './' for relative asset paths.",
                "If using BrowserRouter under sub-path, configure basename.",
            ),
            remedy=InfoOnly(),
        ),
    ])
