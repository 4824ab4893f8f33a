from .candidate import (
    CandidateCreate, CandidateUpdate, CandidateResponse, CandidateMessage,
    StatusUpdate, RemarksUpdate, InlineUpdate, ParsedResumeResponse, BulkAssignRequest
)
from .bulk_import import ImportErrorDetail, ImportSummary

__all__ = [
    "CandidateCreate", "CandidateUpdate", "CandidateResponse", "CandidateMessage",
    "StatusUpdate", "RemarksUpdate", "InlineUpdate", "ParsedResumeResponse", "BulkAssignRequest",
    "ImportErrorDetail", "ImportSummary"
]
