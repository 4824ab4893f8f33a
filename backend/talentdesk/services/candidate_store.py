"""
Candidate persistence used by bulk import and the candidates API.

Human-readable identifiers (VTS0000001, ...) come from a counter row that is
incremented with a single UPDATE ... RETURNING inside the same transaction as
the candidate insert. The counter row stays locked until that transaction
ends, so overlapping imports are serialized on it and a failed insert rolls
the increment back.
"""
import logging
from typing import Any, Dict, Iterable, Optional, Set

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..config import get_settings
from ..models.candidate import Candidate
from ..models.counter import SequenceCounter

logger = logging.getLogger(__name__)
settings = get_settings()

CREATE_ATTEMPTS = 2


def format_candidate_id(number: int) -> str:
    return f"{settings.candidate_id_prefix}{number:0{settings.candidate_id_width}d}"


async def increment_counter(session: AsyncSession, key: str) -> Optional[int]:
    """Atomically add one to a counter. Returns None if the counter does not exist yet."""
    result = await session.execute(
        update(SequenceCounter)
        .where(SequenceCounter.key == key)
        .values(value=SequenceCounter.value + 1)
        .returning(SequenceCounter.value)
        .execution_options(synchronize_session=False)
    )
    return result.scalar_one_or_none()


async def highest_candidate_number(session: AsyncSession) -> int:
    """Largest numeric suffix among existing identifiers (0 when there are none)."""
    prefix = settings.candidate_id_prefix
    result = await session.execute(
        select(func.max(Candidate.candidate_id)).where(Candidate.candidate_id.like(f"{prefix}%"))
    )
    highest = result.scalar_one_or_none()
    if not highest:
        return 0
    suffix = highest[len(prefix):]
    return int(suffix) if suffix.isdigit() else 0


async def next_candidate_id(session: AsyncSession) -> str:
    """Take the next identifier. Must run inside the transaction that inserts the candidate."""
    key = settings.candidate_counter_key
    number = await increment_counter(session, key)
    if number is None:
        # First use: continue after whatever identifiers already exist
        number = await highest_candidate_number(session) + 1
        session.add(SequenceCounter(key=key, value=number))
        await session.flush()
    return format_candidate_id(number)


async def create_candidate(session: AsyncSession, data: Dict[str, Any]) -> Candidate:
    """Insert a candidate with a freshly assigned identifier (flushes, does not commit)."""
    values = dict(data)
    values.pop("candidate_id", None)
    if values.get("email"):
        values["email"] = values["email"].strip().lower()

    candidate = Candidate(candidate_id=await next_candidate_id(session), **values)
    session.add(candidate)
    await session.flush()
    return candidate


class CandidateStore:
    """Record store for bulk import; every call runs in its own transaction."""

    def __init__(self, session_maker: async_sessionmaker):
        self.session_maker = session_maker

    async def find_existing_emails(self, emails: Iterable[str]) -> Set[str]:
        lowered = [email.lower() for email in emails]
        if not lowered:
            return set()
        async with self.session_maker() as session:
            result = await session.execute(
                select(func.lower(Candidate.email)).where(func.lower(Candidate.email).in_(lowered))
            )
            return set(result.scalars().all())

    async def create(self, data: Dict[str, Any]) -> str:
        """Create one candidate and return its identifier."""
        attempt = 1
        while True:
            try:
                async with self.session_maker() as session:
                    async with session.begin():
                        candidate = await create_candidate(session, data)
                        return candidate.candidate_id
            except IntegrityError:
                # Two requests initialised the counter at the same time
                if attempt >= CREATE_ATTEMPTS:
                    raise
                attempt += 1
                logger.warning("Candidate counter initialised concurrently, retrying create")

    async def update_fields(self, email: str, fields: Dict[str, Any]) -> bool:
        """Set ``fields`` on the candidate(s) with this email. False if none exist."""
        match = func.lower(Candidate.email) == email.lower()
        async with self.session_maker() as session:
            async with session.begin():
                if not fields:
                    result = await session.execute(select(Candidate.id).where(match).limit(1))
                    return result.first() is not None
                result = await session.execute(
                    update(Candidate)
                    .where(match)
                    .values(**fields)
                    .execution_options(synchronize_session=False)
                )
                return result.rowcount > 0
