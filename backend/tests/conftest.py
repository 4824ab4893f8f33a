"""
Pytest fixtures and configuration for the TalentDesk test suite.
"""
from io import BytesIO
from typing import Any, Dict, Iterable, List, Set

import openpyxl
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from talentdesk.database import Base
from talentdesk.services.identity import Recruiter


# === Test Data Fixtures ===

@pytest.fixture
def sample_resume_text():
    """Sample resume for testing."""
    return """
Priya Sharma
Senior Software Engineer
priya.sharma@gmail.com | +91 98765 43210
linkedin.com/in/priya-sharma-dev
Gender: Female
Bangalore, Karnataka

SUMMARY
Backend engineer building payment platforms.

WORK EXPERIENCE
Currently working at Infosys, Bangalore
Senior Software Engineer, Infosys (2019 - 2022)
- Built REST API services in Python and Django
- Deployed to AWS with Docker and Kubernetes

Software Engineer, Wipro (2016 - 2019)
- Java and Spring microservices, MySQL

EDUCATION
B.Tech in Computer Science, VIT University, 2016

SKILLS
Python, Django, Java, Spring, MySQL, AWS, Docker, Kubernetes, Git
"""


@pytest.fixture
def recruiter():
    return Recruiter(id="rec-1", name="Asha Rao", email="asha@talentdesk.in")


# === Spreadsheet Fixtures ===

def build_workbook(rows: Iterable[Iterable[Any]]) -> bytes:
    """Write rows (header first) to an in-memory .xlsx file."""
    wb = openpyxl.Workbook()
    ws = wb.active
    for row in rows:
        ws.append(list(row))
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def make_workbook():
    return build_workbook


# === Storage Fixtures ===

class FakeStore:
    """In-memory stand-in for CandidateStore."""

    def __init__(self, existing: Iterable[str] = (), fail_create_for: Iterable[str] = ()):
        self.records: Dict[str, Dict[str, Any]] = {email: {"email": email} for email in existing}
        self.fail_create_for = set(fail_create_for)
        self.created: List[Dict[str, Any]] = []
        self.updates: List[tuple] = []
        self.counter = 0

    async def find_existing_emails(self, emails: Iterable[str]) -> Set[str]:
        return {email for email in emails if email in self.records}

    async def create(self, data: Dict[str, Any]) -> str:
        if data.get("name") in self.fail_create_for:
            raise RuntimeError("insert rejected")
        self.counter += 1
        candidate_id = f"VTS{self.counter:07d}"
        self.records[data["email"]] = dict(data, candidate_id=candidate_id)
        self.created.append(data)
        return candidate_id

    async def update_fields(self, email: str, fields: Dict[str, Any]) -> bool:
        if email not in self.records:
            return False
        self.records[email].update(fields)
        self.updates.append((email, fields))
        return True


@pytest.fixture
def fake_store():
    return FakeStore


@pytest_asyncio.fixture
async def session_maker(tmp_path):
    """Fresh SQLite database per test, with all tables created."""
    from talentdesk import models  # noqa: F401

    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()
