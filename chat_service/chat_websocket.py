"""
WebSocket handler for chat participants
"""
import asyncio
import logging
import uuid
from typing import Optional

from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError

import config
from lifecycle import ChatCoordinator, InvalidEventError, coordinator
from models import ClientEvent, make_event, ERROR
from outbox import Outbox

logger = logging.getLogger(__name__)


async def websocket_chat_participant(websocket: WebSocket, chat_coordinator: Optional[ChatCoordinator] = None):
    """Handle one participant's WebSocket connection from accept to teardown"""
    chat_coordinator = chat_coordinator or coordinator
    await websocket.accept()
    participant_id = str(uuid.uuid4())
    client_host = websocket.client.host if websocket.client else "unknown"
    client_port = websocket.client.port if websocket.client else 0
    logger.info(f"Participant '{participant_id}' connecting from {client_host}:{client_port}")

    outbox = Outbox(participant_id, max_size=config.OUTBOX_MAX_SIZE)
    writer_task = asyncio.create_task(outbox.drain_to(websocket))
    chat_coordinator.connect(participant_id, outbox)

    reason = "closed"
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))
            raw_data = message.get("text")
            if raw_data is None:
                logger.warning(f"Participant '{participant_id}' sent a non-text frame.")
                outbox.send_nowait(make_event(ERROR, message="Only text frames are supported"))
                continue
            logger.debug(f"Received raw message from '{participant_id}': {raw_data}")
            try:
                event = ClientEvent.model_validate_json(raw_data)
                chat_coordinator.handle_event(participant_id, event)
            except ValidationError as e:
                logger.warning(f"Participant '{participant_id}' sent malformed message: {raw_data!r} ({e.error_count()} errors)")
                outbox.send_nowait(make_event(ERROR, message="Invalid message format"))
            except InvalidEventError as e:
                logger.warning(f"Participant '{participant_id}': {e}")
                outbox.send_nowait(make_event(ERROR, message=str(e)))

    except WebSocketDisconnect as e:
        reason = f"code {e.code}"
    except Exception as e:
        logger.exception(f"Error with participant '{participant_id}' WebSocket.")
        reason = f"error: {e}"
    finally:
        chat_coordinator.disconnect(participant_id, reason)
        outbox.close()
        writer_task.cancel()
        results = await asyncio.gather(writer_task, return_exceptions=True)
        for result in results:
            if isinstance(result, Exception):
                logger.debug(f"Writer for '{participant_id}' stopped with: {result!r}")
