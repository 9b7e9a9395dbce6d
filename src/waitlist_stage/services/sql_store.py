"""SQLAlchemy-backed signup store."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from sqlalchemy import Engine, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from waitlist_stage.db.session import build_session_factory, create_tables
from waitlist_stage.db.time import utcnow
from waitlist_stage.models import COUNTER_ROW_ID, CounterState, Signup
from waitlist_stage.services.errors import DuplicateSignupError, StorageUnavailableError
from waitlist_stage.services.store import (
    SignupRecord,
    SignupResult,
    SignupStore,
    WaitlistSnapshot,
)

# Configure logger for this module
logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back out.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class SqlSignupStore(SignupStore):
    """Signup store persisting to the ``signups`` and ``counter_state`` tables.

    The dedupe check, the insert and the counter increment share a single
    transaction. Within a process they are serialized by the store lock.
    Across processes the unique constraint on ``signups.email`` rejects the
    loser of a race on one address, which is then reported as a duplicate.
    The counter is incremented in SQL (``count = count + 1``) rather than
    written back, since SQLite ignores ``FOR UPDATE`` and two writers may
    have read the same value.
    """

    def __init__(self, engine: Engine, *, seed_count: int, create_schema: bool = True) -> None:
        super().__init__(seed_count)
        self._engine = engine
        self._session_factory = build_session_factory(engine)
        if create_schema:
            try:
                create_tables(engine)
            except SQLAlchemyError as exc:
                raise StorageUnavailableError("Could not create waitlist tables") from exc

    def _counter(self, session: Session) -> CounterState:
        counter = session.get(CounterState, COUNTER_ROW_ID, with_for_update=True)
        if counter is None:
            existing = session.scalar(select(func.count()).select_from(Signup)) or 0
            counter = CounterState(
                id=COUNTER_ROW_ID,
                count=self.seed_count + existing,
                last_updated=utcnow(),
            )
            session.add(counter)
            session.flush()
        return counter

    def _email_registered(self, email: str) -> bool:
        with self._session_factory() as session:
            return session.scalar(select(Signup.id).where(Signup.email == email)) is not None

    def _add_signup_locked(self, email: str, *, retry: bool = True) -> SignupResult:
        try:
            with self._session_factory() as session, session.begin():
                counter = self._counter(session)
                existing = session.scalar(select(Signup.id).where(Signup.email == email))
                if existing is not None:
                    raise DuplicateSignupError(email, counter.count)

                now = utcnow()
                session.add(Signup(email=email, submitted_at=now))
                session.flush()
                session.execute(
                    update(CounterState)
                    .where(CounterState.id == COUNTER_ROW_ID)
                    .values(count=CounterState.count + 1, last_updated=now)
                    .execution_options(synchronize_session=False)
                )
                new_count = session.scalar(
                    select(CounterState.count).where(CounterState.id == COUNTER_ROW_ID)
                )
        except IntegrityError as exc:
            # Another process won a race on the email or on the counter row.
            try:
                registered = self._email_registered(email)
            except SQLAlchemyError as read_exc:
                raise StorageUnavailableError("Could not record signup") from read_exc
            if registered:
                logger.info("Signup lost a concurrent insert race; treating as duplicate")
                raise DuplicateSignupError(email, self.get_count()) from None
            if retry:
                return self._add_signup_locked(email, retry=False)
            logger.error("Failed to record waitlist signup: %s", exc)
            raise StorageUnavailableError("Could not record signup") from exc
        except SQLAlchemyError as exc:
            logger.error("Failed to record waitlist signup: %s", exc)
            raise StorageUnavailableError("Could not record signup") from exc
        return SignupResult(accepted=True, count=new_count)

    def get_count(self) -> int:
        try:
            with self._session_factory() as session:
                counter = session.get(CounterState, COUNTER_ROW_ID)
                if counter is not None:
                    return counter.count
            with self._write_lock, self._session_factory() as session, session.begin():
                return self._counter(session).count
        except IntegrityError:
            # Another process created the row first.
            return self.get_count()
        except SQLAlchemyError as exc:
            logger.error("Failed to read waitlist count: %s", exc)
            raise StorageUnavailableError("Could not read count") from exc

    def list_signups(self) -> list[SignupRecord]:
        try:
            with self._session_factory() as session:
                rows = session.scalars(
                    select(Signup).order_by(Signup.submitted_at.desc(), Signup.id.desc())
                ).all()
        except SQLAlchemyError as exc:
            logger.error("Failed to list waitlist signups: %s", exc)
            raise StorageUnavailableError("Could not list signups") from exc
        return [SignupRecord(email=row.email, submitted_at=_as_utc(row.submitted_at)) for row in rows]

    def snapshot(self) -> WaitlistSnapshot:
        try:
            with self._write_lock, self._session_factory() as session:
                rows = session.scalars(select(Signup).order_by(Signup.id)).all()
                counter = session.get(CounterState, COUNTER_ROW_ID)
                total = counter.count if counter is not None else self.seed_count + len(rows)
        except SQLAlchemyError as exc:
            logger.error("Failed to read waitlist snapshot: %s", exc)
            raise StorageUnavailableError("Could not read waitlist") from exc
        emails = tuple(
            SignupRecord(email=row.email, submitted_at=_as_utc(row.submitted_at)) for row in rows
        )
        return WaitlistSnapshot(emails=emails, total_count=total)

    def close(self) -> None:
        self._engine.dispose()
