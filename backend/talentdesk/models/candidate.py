from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, JSON
from sqlalchemy.sql import func
from ..database import Base


VALID_STATUSES = [
    "Submitted",
    "Shared Profiles",
    "Yet to attend",
    "Turnups",
    "No Show",
    "Selected",
    "Joined",
    "Rejected",
    "Pipeline",
    "Hold",
    "Backout",
]


class Candidate(Base):
    __tablename__ = "candidates"

    id = Column(Integer, primary_key=True, index=True)
    candidate_id = Column(String(20), unique=True, index=True, nullable=False)

    # Personal info
    name = Column(String(255), nullable=False)
    email = Column(String(255), index=True, nullable=False)
    contact = Column(String(20), nullable=True)
    alternate_number = Column(String(20), nullable=True)
    gender = Column(String(20), nullable=True)
    date_of_birth = Column(String(20), nullable=True)
    linkedin = Column(String(500), nullable=True)
    current_location = Column(String(255), nullable=True)
    preferred_location = Column(String(255), nullable=True)

    # Professional info
    position = Column(String(255), nullable=True)
    client = Column(String(255), nullable=True)
    current_company = Column(String(255), nullable=True)
    industry = Column(String(255), nullable=True)
    education = Column(String(255), nullable=True)
    total_experience = Column(String(50), nullable=True)
    relevant_experience = Column(String(50), nullable=True)
    reason_for_change = Column(Text, nullable=True)
    skills = Column(JSON, default=list)

    # Compensation (kept as entered: "12 LPA", "1,20,000", ...)
    ctc = Column(String(50), nullable=True)
    ectc = Column(String(50), nullable=True)
    take_home_salary = Column(String(50), nullable=True)

    # Availability
    notice_period = Column(String(50), nullable=True)
    serving_notice_period = Column(Boolean, default=False)
    offers_in_hand = Column(Boolean, default=False)
    offer_package = Column(String(50), nullable=True)

    # Tracking
    source = Column(String(100), default="Portal")
    recruiter_id = Column(String(64), index=True, nullable=True)
    recruiter_name = Column(String(255), nullable=True)
    remarks = Column(Text, nullable=True)
    status = Column(JSON, default=lambda: ["Submitted"])

    # System
    active = Column(Boolean, default=True)
    resume_url = Column(String(500), nullable=True)
    resume_original_name = Column(String(255), nullable=True)
    date_added = Column(DateTime(timezone=True), server_default=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    updated_by = Column(String(64), nullable=True)
