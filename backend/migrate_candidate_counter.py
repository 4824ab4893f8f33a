"""
Migration: Create the sequence_counters table and seed the candidate counter.

Run this once before enabling the API on a database that already holds
candidates, so new identifiers continue after the highest existing VTS number.
"""
import asyncio
from sqlalchemy import text

from talentdesk.config import get_settings
from talentdesk.database import engine

settings = get_settings()


async def migrate():
    """Create sequence_counters and set candidate_id to the highest used number."""
    prefix = settings.candidate_id_prefix
    key = settings.candidate_counter_key

    async with engine.begin() as conn:
        await conn.execute(text(
            """
            CREATE TABLE IF NOT EXISTS sequence_counters (
                key VARCHAR(50) PRIMARY KEY,
                value INTEGER NOT NULL DEFAULT 0
            )
            """
        ))

        result = await conn.execute(
            text("SELECT candidate_id FROM candidates WHERE candidate_id LIKE :pattern"),
            {"pattern": f"{prefix}%"}
        )
        numbers = [
            int(row[0][len(prefix):])
            for row in result
            if row[0][len(prefix):].isdigit()
        ]
        highest = max(numbers, default=0)

        existing = await conn.execute(
            text("SELECT value FROM sequence_counters WHERE key = :key"), {"key": key}
        )
        current = existing.scalar()
        if current is None:
            await conn.execute(
                text("INSERT INTO sequence_counters (key, value) VALUES (:key, :value)"),
                {"key": key, "value": highest}
            )
            print(f"✅ Seeded counter '{key}' at {highest}")
        elif current < highest:
            await conn.execute(
                text("UPDATE sequence_counters SET value = :value WHERE key = :key"),
                {"key": key, "value": highest}
            )
            print(f"✅ Raised counter '{key}' from {current} to {highest}")
        else:
            print(f"Counter '{key}' already at {current}, nothing to do")


if __name__ == "__main__":
    print("Running migration: Seed candidate identifier counter...")
    asyncio.run(migrate())
    print("Migration complete!")
