"""Waitlist signup endpoints for the Waitlist Stage API."""

from typing import Annotated

from fastapi import APIRouter, Depends

from waitlist_stage.api.v1.dependencies import CounterServiceDep, require_admin
from waitlist_stage.schemas.signup import (
    ErrorResponse,
    SignupAccepted,
    SignupCreate,
    SignupEntry,
    SignupListing,
)

router = APIRouter(prefix="/signups", tags=["signups"])

AdminDep = Annotated[None, Depends(require_admin)]


@router.post(
    "",
    response_model=SignupAccepted,
    responses={
        400: {"model": ErrorResponse, "description": "Malformed email"},
        409: {"model": ErrorResponse, "description": "Email already registered"},
        503: {"model": ErrorResponse, "description": "Storage unavailable"},
    },
)
async def create_signup(payload: SignupCreate, service: CounterServiceDep) -> SignupAccepted:
    """Add an email to the waitlist and return the new count.

    Args:
        payload: The submitted email
        service: Counter service owning the store and broadcast channel

    Returns:
        The waitlist count after this signup
    """
    result = await service.submit_email(payload.email)
    return SignupAccepted(count=result.count)


@router.get(
    "",
    response_model=SignupListing,
    responses={503: {"model": ErrorResponse}},
)
async def list_signups(service: CounterServiceDep, _admin: AdminDep) -> SignupListing:
    """Return every registered email, most recent first."""
    count, records = await service.list_signups()
    entries = [
        SignupEntry(email=record.email, submitted_at=record.submitted_at) for record in records
    ]
    return SignupListing(count=count, entries=entries)
