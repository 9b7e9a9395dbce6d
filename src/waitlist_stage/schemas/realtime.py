# src/waitlist_stage/schemas/realtime.py
"""Messages exchanged over the realtime count channel."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

COUNT_UPDATE = "count_update"
GET_COUNT = "get_count"


class CountUpdateMessage(BaseModel):
    """Server to client: the latest known count."""

    type: Literal["count_update"] = COUNT_UPDATE
    count: int = Field(..., ge=0)


class ClientMessage(BaseModel):
    """Client to server request.

    Only ``get_count`` is understood; other types are accepted by the schema
    and ignored by the endpoint.
    """

    type: str
