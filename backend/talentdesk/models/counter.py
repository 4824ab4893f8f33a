"""
Sequence counters for human-readable identifiers.

One row per counter key. The value is only ever changed through a single
``UPDATE ... SET value = value + 1`` so concurrent writers never observe the
same number.
"""
from sqlalchemy import Column, Integer, String
from ..database import Base


class SequenceCounter(Base):
    __tablename__ = "sequence_counters"

    key = Column(String(50), primary_key=True)
    value = Column(Integer, nullable=False, default=0)
