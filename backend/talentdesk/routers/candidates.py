"""
Candidates API - resume parsing, Excel bulk import, candidate CRUD and
pipeline status updates
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import get_settings
from ..database import get_db, get_session_maker
from ..models.candidate import Candidate
from ..schemas.bulk_import import ImportSummary
from ..schemas.candidate import (
    CandidateCreate, CandidateUpdate, CandidateResponse, CandidateMessage,
    StatusUpdate, RemarksUpdate, InlineUpdate, ParsedResumeResponse, BulkAssignRequest
)
from ..services.bulk_import import import_candidates
from ..services.candidate_status import format_status, is_valid_status
from ..services.candidate_store import CandidateStore, create_candidate
from ..services.identity import Recruiter, get_current_recruiter
from ..services.resume_parser import parse_resume

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(prefix="/api/candidates", tags=["Candidates"])

EXCEL_TYPES = {
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


# ========== Helpers ==========

def get_candidate_store() -> CandidateStore:
    return CandidateStore(get_session_maker())


async def read_upload(file: UploadFile) -> bytes:
    """Read an upload, enforcing the size limit."""
    content = await file.read()
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File size must be less than {settings.max_upload_mb}MB"
        )
    return content


async def get_candidate_or_404(db: AsyncSession, candidate_pk: int) -> Candidate:
    result = await db.execute(select(Candidate).where(Candidate.id == candidate_pk))
    candidate = result.scalar_one_or_none()
    if not candidate:
        raise HTTPException(status_code=404, detail="Candidate not found")
    return candidate


def apply_status(candidate: Candidate, new_status: str):
    if not is_valid_status(new_status):
        raise HTTPException(status_code=400, detail="Invalid status format")
    candidate.status = [new_status]


# ========== Resume Parsing ==========

@router.post("/parse-resume", response_model=ParsedResumeResponse)
async def parse_resume_upload(
    resume: UploadFile = File(...),
    recruiter: Recruiter = Depends(get_current_recruiter)
):
    """Extract candidate fields from a PDF/DOC/DOCX resume to prefill the add-candidate form"""
    content = await read_upload(resume)
    result = await run_in_threadpool(parse_resume, content, resume.content_type, resume.filename)

    if not result.success:
        logger.info(f"Resume parsing failed for {resume.filename}: {result.message}")
        return ParsedResumeResponse(
            success=False,
            message=f"Could not parse resume: {result.message}",
            data={}
        )

    return ParsedResumeResponse(
        success=True,
        data=result.data.model_dump(),
        raw_text=result.raw_text
    )


# ========== Excel Bulk Import ==========

@router.post("/bulk-import", response_model=ImportSummary)
async def bulk_import(
    file: UploadFile = File(...),
    recruiter: Recruiter = Depends(get_current_recruiter),
    store: CandidateStore = Depends(get_candidate_store)
):
    """
    Bulk import candidates from an Excel sheet.
    Any column layout is accepted; existing emails are updated, the rest created.
    """
    filename = (file.filename or "").lower()
    if file.content_type not in EXCEL_TYPES and not filename.endswith((".xlsx", ".xls")):
        raise HTTPException(
            status_code=400,
            detail="Invalid file type. Only Excel (.xlsx, .xls) allowed."
        )

    content = await read_upload(file)

    try:
        summary = await import_candidates(content, recruiter, store)
    except Exception as e:
        logger.exception("Bulk import failed")
        raise HTTPException(status_code=500, detail=f"Critical server error during import: {str(e)}")

    if not summary.success:
        return JSONResponse(status_code=400, content=summary.model_dump())
    return summary


# Registered before PUT /{candidate_pk}
@router.put("/bulk-assign")
async def bulk_assign_recruiter(
    data: BulkAssignRequest,
    db: AsyncSession = Depends(get_db),
    recruiter: Recruiter = Depends(get_current_recruiter)
):
    """Hand a set of candidates over to another recruiter"""
    if not data.candidate_ids:
        raise HTTPException(status_code=400, detail="No candidates selected")
    if not data.recruiter_id:
        raise HTTPException(status_code=400, detail="Target recruiter is required")

    recruiter_name = (data.recruiter_name or "").strip() or data.recruiter_id
    result = await db.execute(
        update(Candidate)
        .where(Candidate.id.in_(data.candidate_ids))
        .values(recruiter_id=data.recruiter_id, recruiter_name=recruiter_name, updated_by=recruiter.id)
        .execution_options(synchronize_session=False)
    )
    await db.commit()

    logger.info(f"{recruiter.id} assigned {result.rowcount} candidates to {data.recruiter_id}")
    return {
        "success": True,
        "assigned": result.rowcount,
        "message": f"Successfully assigned {result.rowcount} candidates to {recruiter_name}"
    }


# ========== Candidate CRUD ==========

@router.get("", response_model=List[CandidateResponse])
async def list_candidates(
    recruiter_id: Optional[str] = None,
    active: Optional[bool] = None,
    db: AsyncSession = Depends(get_db),
    recruiter: Recruiter = Depends(get_current_recruiter)
):
    """List candidates, newest first"""
    query = select(Candidate)
    if recruiter_id:
        query = query.where(Candidate.recruiter_id == recruiter_id)
    if active is not None:
        query = query.where(Candidate.active == active)
    query = query.order_by(Candidate.created_at.desc(), Candidate.id.desc())

    result = await db.execute(query)
    return result.scalars().all()


@router.post("", response_model=CandidateResponse, status_code=status.HTTP_201_CREATED)
async def add_candidate(
    data: CandidateCreate,
    db: AsyncSession = Depends(get_db),
    recruiter: Recruiter = Depends(get_current_recruiter)
):
    """Create a candidate; the VTS identifier is assigned from the shared counter"""
    values = data.model_dump()
    for value in values["status"]:
        if not is_valid_status(value):
            raise HTTPException(status_code=400, detail="Invalid status format")

    values["recruiter_id"] = recruiter.id
    values["recruiter_name"] = recruiter.display_name

    candidate = await create_candidate(db, values)
    await db.commit()
    await db.refresh(candidate)
    logger.info(f"Created {candidate.candidate_id} - {candidate.name}")
    return candidate


@router.get("/{candidate_pk}", response_model=CandidateResponse)
async def get_candidate(
    candidate_pk: int,
    db: AsyncSession = Depends(get_db),
    recruiter: Recruiter = Depends(get_current_recruiter)
):
    return await get_candidate_or_404(db, candidate_pk)


@router.put("/{candidate_pk}", response_model=CandidateResponse)
async def update_candidate(
    candidate_pk: int,
    data: CandidateUpdate,
    db: AsyncSession = Depends(get_db),
    recruiter: Recruiter = Depends(get_current_recruiter)
):
    """Partial update of candidate details"""
    candidate = await get_candidate_or_404(db, candidate_pk)

    for field, value in data.model_dump(exclude_unset=True).items():
        if field == "email" and value:
            value = value.strip().lower()
        setattr(candidate, field, value)
    candidate.updated_by = recruiter.id

    await db.commit()
    await db.refresh(candidate)
    return candidate


@router.delete("/{candidate_pk}")
async def delete_candidate(
    candidate_pk: int,
    db: AsyncSession = Depends(get_db),
    recruiter: Recruiter = Depends(get_current_recruiter)
):
    candidate = await get_candidate_or_404(db, candidate_pk)
    await db.delete(candidate)
    await db.commit()
    return {"message": "Candidate deleted"}


# ========== Status & Remarks ==========

@router.put("/{candidate_pk}/status", response_model=CandidateMessage)
async def update_candidate_status(
    candidate_pk: int,
    data: StatusUpdate,
    db: AsyncSession = Depends(get_db),
    recruiter: Recruiter = Depends(get_current_recruiter)
):
    """Set the pipeline status, either a stage or an interview round result (L2 - SELECT)"""
    candidate = await get_candidate_or_404(db, candidate_pk)

    apply_status(candidate, format_status(data.status, data.level, data.outcome))
    candidate.updated_by = recruiter.id

    await db.commit()
    await db.refresh(candidate)
    return CandidateMessage(message="Candidate status updated successfully", candidate=candidate)


@router.put("/{candidate_pk}/remarks", response_model=CandidateMessage)
async def update_candidate_remarks(
    candidate_pk: int,
    data: RemarksUpdate,
    db: AsyncSession = Depends(get_db),
    recruiter: Recruiter = Depends(get_current_recruiter)
):
    candidate = await get_candidate_or_404(db, candidate_pk)

    candidate.remarks = data.remarks or ""
    candidate.updated_by = recruiter.id

    await db.commit()
    await db.refresh(candidate)
    return CandidateMessage(message="Candidate remarks updated successfully", candidate=candidate)


@router.put("/{candidate_pk}/inline-update", response_model=CandidateMessage)
async def inline_update_candidate(
    candidate_pk: int,
    data: InlineUpdate,
    db: AsyncSession = Depends(get_db),
    recruiter: Recruiter = Depends(get_current_recruiter)
):
    """Update status and remarks together from the candidates table"""
    candidate = await get_candidate_or_404(db, candidate_pk)

    new_status = format_status(data.status, data.level, data.outcome)
    if new_status:
        apply_status(candidate, new_status)

    # Remarks may be cleared with an empty string
    if "remarks" in data.model_fields_set:
        candidate.remarks = data.remarks or ""
    candidate.updated_by = recruiter.id

    await db.commit()
    await db.refresh(candidate)
    return CandidateMessage(message="Candidate updated successfully", candidate=candidate)
