from pydantic import BaseModel, field_validator
from typing import Optional, List
from datetime import datetime


def _split_skills(value):
    # Forms send skills as "React, Node"; API clients send a list
    if isinstance(value, str):
        return [skill.strip() for skill in value.split(",") if skill.strip()]
    return value


class CandidateBase(BaseModel):
    name: str
    email: str
    contact: Optional[str] = None
    alternate_number: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[str] = None
    linkedin: Optional[str] = None
    current_location: Optional[str] = None
    preferred_location: Optional[str] = None
    position: Optional[str] = None
    client: Optional[str] = None
    current_company: Optional[str] = None
    industry: Optional[str] = None
    education: Optional[str] = None
    total_experience: Optional[str] = None
    relevant_experience: Optional[str] = None
    reason_for_change: Optional[str] = None
    skills: List[str] = []
    ctc: Optional[str] = None
    ectc: Optional[str] = None
    take_home_salary: Optional[str] = None
    notice_period: Optional[str] = None
    serving_notice_period: bool = False
    offers_in_hand: bool = False
    offer_package: Optional[str] = None
    source: Optional[str] = "Portal"
    remarks: Optional[str] = None

    @field_validator("skills", mode="before")
    @classmethod
    def split_skills(cls, value):
        return _split_skills(value)


class CandidateCreate(CandidateBase):
    status: List[str] = ["Submitted"]


class CandidateUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    contact: Optional[str] = None
    alternate_number: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[str] = None
    linkedin: Optional[str] = None
    current_location: Optional[str] = None
    preferred_location: Optional[str] = None
    position: Optional[str] = None
    client: Optional[str] = None
    current_company: Optional[str] = None
    industry: Optional[str] = None
    education: Optional[str] = None
    total_experience: Optional[str] = None
    relevant_experience: Optional[str] = None
    reason_for_change: Optional[str] = None
    skills: Optional[List[str]] = None
    ctc: Optional[str] = None
    ectc: Optional[str] = None
    take_home_salary: Optional[str] = None
    notice_period: Optional[str] = None
    serving_notice_period: Optional[bool] = None
    offers_in_hand: Optional[bool] = None
    offer_package: Optional[str] = None
    source: Optional[str] = None
    remarks: Optional[str] = None
    active: Optional[bool] = None

    @field_validator("skills", mode="before")
    @classmethod
    def split_skills(cls, value):
        return _split_skills(value)


class CandidateResponse(CandidateBase):
    id: int
    candidate_id: str
    status: List[str] = []
    recruiter_id: Optional[str] = None
    recruiter_name: Optional[str] = None
    active: bool = True
    resume_url: Optional[str] = None
    date_added: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("skills", "status", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return value or []

    class Config:
        from_attributes = True


class StatusUpdate(BaseModel):
    status: Optional[str] = None
    level: Optional[str] = None
    outcome: Optional[str] = None


class RemarksUpdate(BaseModel):
    remarks: Optional[str] = None


class InlineUpdate(BaseModel):
    status: Optional[str] = None
    level: Optional[str] = None
    outcome: Optional[str] = None
    remarks: Optional[str] = None


class CandidateMessage(BaseModel):
    message: str
    candidate: CandidateResponse


class ParsedResumeResponse(BaseModel):
    success: bool
    message: Optional[str] = None
    data: dict = {}
    raw_text: Optional[str] = None


class BulkAssignRequest(BaseModel):
    candidate_ids: List[int] = []
    recruiter_id: Optional[str] = None
    recruiter_name: Optional[str] = None
