"""File-backed signup store.

The whole waitlist lives in one JSON document::

    {"emails": [{"email": "...", "submittedAt": "..."}], "totalCount": 1249}

The file is replaced atomically on every accepted signup, so readers never
observe a half-written document.
"""

from __future__ import annotations

import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from waitlist_stage.db.time import utcnow
from waitlist_stage.services.errors import DuplicateSignupError, StorageUnavailableError
from waitlist_stage.services.store import (
    SignupRecord,
    SignupResult,
    SignupStore,
    WaitlistSnapshot,
)

# Configure logger for this module
logger = logging.getLogger(__name__)


class StoredSignup(BaseModel):
    """One entry of the persisted ``emails`` list."""

    model_config = ConfigDict(populate_by_name=True)

    email: str
    submitted_at: datetime = Field(..., alias="submittedAt")


class WaitlistDocument(BaseModel):
    """The persisted waitlist document."""

    model_config = ConfigDict(populate_by_name=True)

    emails: list[StoredSignup] = Field(default_factory=list)
    total_count: int = Field(..., ge=0, alias="totalCount")


class JsonFileSignupStore(SignupStore):
    """Signup store persisting to a single JSON file."""

    def __init__(self, path: str | os.PathLike[str], *, seed_count: int) -> None:
        super().__init__(seed_count)
        self.path = Path(path)
        with self._write_lock:
            if not self.path.exists():
                self._write(WaitlistDocument(total_count=seed_count))

    def _read(self) -> WaitlistDocument:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return WaitlistDocument(total_count=self.seed_count)
        except OSError as exc:
            logger.error("Failed to read waitlist file %s: %s", self.path, exc)
            raise StorageUnavailableError(f"Could not read {self.path}") from exc
        try:
            return WaitlistDocument.model_validate_json(raw)
        except ValidationError as exc:
            logger.error("Waitlist file %s is corrupt: %s", self.path, exc)
            raise StorageUnavailableError(f"Corrupt waitlist file {self.path}") from exc

    def _write(self, document: WaitlistDocument) -> None:
        payload = document.model_dump_json(by_alias=True, indent=2)
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
        except OSError as exc:
            logger.error("Failed to write waitlist file %s: %s", self.path, exc)
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageUnavailableError(f"Could not write {self.path}") from exc

    def _add_signup_locked(self, email: str) -> SignupResult:
        document = self._read()
        if any(entry.email == email for entry in document.emails):
            raise DuplicateSignupError(email, document.total_count)

        document.emails.append(StoredSignup(email=email, submitted_at=utcnow()))
        document.total_count += 1
        self._write(document)
        return SignupResult(accepted=True, count=document.total_count)

    def get_count(self) -> int:
        return self._read().total_count

    def list_signups(self) -> list[SignupRecord]:
        records = [
            SignupRecord(email=entry.email, submitted_at=entry.submitted_at)
            for entry in self._read().emails
        ]
        # Appends are in acceptance order; reverse keeps ties stable.
        records.reverse()
        return records

    def snapshot(self) -> WaitlistSnapshot:
        document = self._read()
        return WaitlistSnapshot(
            emails=tuple(
                SignupRecord(email=entry.email, submitted_at=entry.submitted_at)
                for entry in document.emails
            ),
            total_count=document.total_count,
        )
