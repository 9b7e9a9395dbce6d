# src/waitlist_stage/schemas/signup.py
"""Signup-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SignupCreate(BaseModel):
    """Schema for submitting a waitlist email.

    The email is optional at this layer so that a missing value is reported
    as an invalid email rather than a schema error.
    """

    email: str | None = Field(default=None, description="Email address to register")


class SignupAccepted(BaseModel):
    """Response returned when a signup is accepted."""

    success: bool = True
    count: int = Field(..., ge=0, description="Waitlist count after this signup")


class CountResponse(BaseModel):
    """Current waitlist count."""

    count: int = Field(..., ge=0)


class ErrorResponse(BaseModel):
    """Error body shared by every failing endpoint."""

    error: str


class SignupEntry(BaseModel):
    """A single registered email as shown to administrators."""

    model_config = ConfigDict(populate_by_name=True)

    email: str
    submitted_at: datetime = Field(..., alias="submittedAt")


class SignupListing(BaseModel):
    """Administrative view of every signup, most recent first."""

    count: int = Field(..., ge=0)
    entries: list[SignupEntry] = Field(default_factory=list)
