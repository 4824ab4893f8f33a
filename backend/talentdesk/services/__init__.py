from .resume_parser import (
    ExtractedCandidate,
    ResumeParseResult,
    extract_information,
    parse_resume
)
from .bulk_import import (
    import_candidates,
    read_worksheet,
    parse_rows,
    reconcile
)
from .candidate_store import (
    CandidateStore,
    create_candidate,
    next_candidate_id
)
from .identity import Recruiter, get_current_recruiter

__all__ = [
    # Resume parsing
    "ExtractedCandidate",
    "ResumeParseResult",
    "extract_information",
    "parse_resume",
    # Bulk import
    "import_candidates",
    "read_worksheet",
    "parse_rows",
    "reconcile",
    # Storage
    "CandidateStore",
    "create_candidate",
    "next_candidate_id",
    # Identity
    "Recruiter",
    "get_current_recruiter"
]
