"""
Fix Result Models
=================
Pydantic models tracking the outcome of automatic fix attempts.

FixOutcome — returned by a single fix function:
    changed   — True if the file on disk was rewritten
    reason    — human-readable explanation (also set when nothing changed)
    files     — absolute paths of files that were rewritten

FixReportEntry — one issue's line in the batch report:
    id        — issue id the entry refers to
    reason    — fix reason, skip reason, or error message
    files     — rewritten files (only populated for applied entries)

AutoFixReport — three-bucket batch result:
    applied / skipped / failed
"""
from typing import List

from .camel_model import CamelModel


class FixOutcome(CamelModel):
    changed: bool = False
    reason: str = ""
    files: List[str] = []


class FixReportEntry(CamelModel):
    id: str
    reason: str = ""
    files: List[str] = []


class AutoFixReport(CamelModel):
    applied: List[FixReportEntry] = []
    skipped: List[FixReportEntry] = []
    failed: List[FixReportEntry] = []

    @property
    def has_changes(self) -> bool:
        """True if at least one file was rewritten (re-upload is warranted)."""
        return len(self.applied) > 0

    def changed_files(self) -> List[str]:
        """Unique rewritten files across all applied entries, in report order."""
        seen: List[str] = []
        for entry in self.applied:
            for path in entry.files:
                if path not in seen:
                    seen.append(path)
        return seen
