"""Current waitlist count endpoint."""

from fastapi import APIRouter

from waitlist_stage.api.v1.dependencies import CounterServiceDep
from waitlist_stage.schemas.signup import CountResponse, ErrorResponse

router = APIRouter(prefix="/count", tags=["count"])


@router.get(
    "",
    response_model=CountResponse,
    responses={503: {"model": ErrorResponse}},
)
async def get_count(service: CounterServiceDep) -> CountResponse:
    """Return the authoritative waitlist count.

    Used by viewers for their initial value and as the polling fallback
    while the realtime channel is down.
    """
    return CountResponse(count=await service.get_current_count())
