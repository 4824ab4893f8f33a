"""
Candidate pipeline status values.

A status is either one of the fixed pipeline stages or an interview round
result such as ``"L2 - SELECT"``.
"""
import re
from typing import Optional

from ..models.candidate import VALID_STATUSES

ROUND_RESULT = re.compile(r"^L[1-5]\s*-\s*(SELECT|REJECT|HOLD)$")


def format_status(status: Optional[str] = None, level: Optional[str] = None, outcome: Optional[str] = None) -> str:
    """Build the status string; level + outcome take precedence over a plain status."""
    if level and outcome:
        return f"{level.strip()} - {outcome.strip()}"
    return (status or "").strip()


def is_valid_status(value: str) -> bool:
    return value in VALID_STATUSES or bool(ROUND_RESULT.match(value))
