"""
Issue Models
============
Static issue definitions and the per-analysis DetectedIssue.

IssueDefinition is an immutable record built once by the registry.
Fixability is expressed by its ``remedy``, one of two variants:

    Fixable(patch)  — ``patch(project_path) -> FixOutcome`` rewrites local files
    InfoOnly()      — no automatic remedy, hints only

Hints live on the definition itself because they are shown regardless
of fixability.
"""
import re
from dataclasses import dataclass, field
from typing import Callable, List, Tuple, Union

from .camel_model import CamelModel
from .fix_result import FixOutcome


PatchFunction = Callable[[str], FixOutcome]


@dataclass(frozen=True)
class Fixable:
    """Remedy variant: a local patch function is available."""
    patch: PatchFunction


@dataclass(frozen=True)
class InfoOnly:
    """Remedy variant: no automatic fix, the operator follows the hints."""


Remedy = Union[Fixable, InfoOnly]


@dataclass(frozen=True)
class IssueDefinition:
    """Immutable known-issue rule. ``pattern`` is matched case-insensitively."""
    id: str
    title: str
    pattern: "re.Pattern[str]"
    hints: Tuple[str, ...] = ()
    remedy: Remedy = field(default_factory=InfoOnly)

    @property
    def auto_fixable(self) -> bool:
        return isinstance(self.remedy, Fixable)


class DetectedIssue(CamelModel):
    id: str
    title: str
    auto_fixable: bool = False
    hints: List[str] = []
    matched_lines: List[str] = []
