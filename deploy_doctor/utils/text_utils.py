"""
Text Utilities
==============
Small, deterministic helpers shared by the classifier and the fix functions.
"""
import re
from typing import List, Optional, Union

_LINE_SPLIT_RE = re.compile(r"\r?\n")


def coerce_text(value: Optional[Union[str, bytes]]) -> str:
    """Turn None / bytes / str into str. Never raises."""
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def normalize_lf(content: str) -> str:
    """Convert CRLF line endings to LF."""
    return content.replace("\r\n", "\n")


def non_empty_lines(text: str) -> List[str]:
    """Split on LF or CRLF, strip each line, drop empty ones."""
    lines = (line.strip() for line in _LINE_SPLIT_RE.split(text))
    return [line for line in lines if line]
