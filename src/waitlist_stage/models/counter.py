# src/waitlist_stage/models/counter.py
"""Running total of waitlist signups."""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column

from waitlist_stage.db.session import Base
from waitlist_stage.db.time import utcnow

COUNTER_ROW_ID = 1


class CounterState(Base):
    """Single-row counter seeded with the social-proof baseline.

    ``count`` only ever moves up by one per accepted signup.
    """

    __tablename__ = "counter_state"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=COUNTER_ROW_ID)
    count: Mapped[int] = mapped_column(BigInteger, nullable=False)
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
