"""Websocket endpoint streaming live waitlist counts.

Server messages are ``{"type": "count_update", "count": N}``; one is sent as
soon as the socket opens, one after every accepted signup and one in reply
to each ``{"type": "get_count"}`` from the client.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError
from starlette.websockets import WebSocketState

from waitlist_stage.api.v1.dependencies import CounterServiceDep
from waitlist_stage.schemas.realtime import GET_COUNT, ClientMessage
from waitlist_stage.services.broadcast import Subscriber
from waitlist_stage.services.counter import CounterService
from waitlist_stage.services.errors import ServiceUnavailableError

# Configure logger for this module
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ws", tags=["realtime"])


async def _pump_updates(websocket: WebSocket, subscriber: Subscriber) -> None:
    """Write queued count updates to the socket until the subscriber closes."""
    while True:
        message = await subscriber.next_message()
        if message is None:
            return
        try:
            await websocket.send_text(message.model_dump_json())
        except (WebSocketDisconnect, RuntimeError, OSError) as exc:
            logger.info("Count stream: delivery to subscriber %s failed: %s", subscriber.id, exc)
            return


async def _read_requests(
    websocket: WebSocket, service: CounterService, subscriber: Subscriber
) -> None:
    """Answer client requests until the client disconnects."""
    while True:
        try:
            raw = await websocket.receive_text()
        except WebSocketDisconnect:
            logger.info("Count stream: subscriber %s disconnected", subscriber.id)
            return

        try:
            request = ClientMessage.model_validate_json(raw)
        except ValidationError:
            logger.warning("Count stream: ignoring malformed message from %s", subscriber.id)
            continue

        if request.type != GET_COUNT:
            logger.info("Count stream: ignoring unknown message type %r", request.type)
            continue

        try:
            count = await service.get_current_count()
        except ServiceUnavailableError:
            logger.warning("Count stream: could not answer get_count for %s", subscriber.id)
            continue
        service.channel.sync(subscriber, count)


@router.websocket("/count")
async def count_stream(websocket: WebSocket, service: CounterServiceDep) -> None:
    """Subscribe the connecting viewer to live count updates."""
    await websocket.accept()
    channel = service.channel
    subscriber = channel.subscribe()

    try:
        count = await service.get_current_count()
    except ServiceUnavailableError:
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
        return

    channel.open(subscriber, count)
    logger.info("Count stream: subscriber %s connected", subscriber.id)

    sender = asyncio.create_task(_pump_updates(websocket, subscriber))
    receiver = asyncio.create_task(_read_requests(websocket, service, subscriber))
    try:
        await asyncio.wait({sender, receiver}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        channel.close(subscriber)
        for task in (sender, receiver):
            task.cancel()
        await asyncio.gather(sender, receiver, return_exceptions=True)

    if (
        websocket.client_state == WebSocketState.CONNECTED
        and websocket.application_state == WebSocketState.CONNECTED
    ):
        try:
            await websocket.close()
        except (RuntimeError, WebSocketDisconnect):
            # The client already went away.
            pass
