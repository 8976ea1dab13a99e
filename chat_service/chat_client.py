"""
Terminal client for the random chat service.

Lines typed on stdin are sent as chat messages. Commands:
    /next   leave the current partner (if any) and look for a new one
    /stop   cancel a search in progress
    /end    end the current chat
    /quit   disconnect
"""
import asyncio
import json
import logging
import os
import sys
import threading
from typing import Any, Dict, Optional

import websockets
from websockets.exceptions import ConnectionClosed

from models import (
    make_event,
    FIND_PARTNER, CANCEL_SEARCH, END_CHAT, SEND_MESSAGE, REJECT_VIDEO_CALL,
    CONNECTED, WAITING_FOR_PARTNER, PARTNER_FOUND, PARTNER_DISCONNECTED, RECEIVE_MESSAGE,
    PARTNER_TYPING_START, INCOMING_VIDEO_CALL, VIDEO_CALL_REJECTED, VIDEO_CALL_ENDED, ERROR,
)

logger = logging.getLogger(__name__)

QUIT = "/quit"
COMMANDS = {
    "/next": FIND_PARTNER,
    "/stop": CANCEL_SEARCH,
    "/end": END_CHAT,
}


def command_to_event(line: str) -> Optional[Dict[str, Any]]:
    """Translate one line of user input into an outbound frame, or None to send nothing"""
    line = line.strip()
    if not line:
        return None
    if line in COMMANDS:
        return make_event(COMMANDS[line])
    return make_event(SEND_MESSAGE, text=line)


def describe_event(event: Dict[str, Any]) -> Optional[str]:
    """Human readable line for a received frame, None for frames the terminal ignores"""
    event_type = event.get("type")
    if event_type == CONNECTED:
        return f"* Connected as {event.get('participantId')}. Type /next to find a partner."
    if event_type == WAITING_FOR_PARTNER:
        return "* Waiting for a partner..."
    if event_type == PARTNER_FOUND:
        return f"* Partner found ({event.get('partnerId')}). Say hi!"
    if event_type == PARTNER_DISCONNECTED:
        return "* Partner left. You are back in the queue."
    if event_type == RECEIVE_MESSAGE:
        return f"[{event.get('timestamp')}] Stranger: {event.get('text')}"
    if event_type == PARTNER_TYPING_START:
        return "* Stranger is typing..."
    if event_type == INCOMING_VIDEO_CALL:
        # Terminal has no media stack, decline right away
        return "* Stranger wants a video call (not supported here)."
    if event_type in (VIDEO_CALL_REJECTED, VIDEO_CALL_ENDED):
        return "* Video call ended."
    if event_type == ERROR:
        return f"! {event.get('message')}"
    return None


def _start_stdin_reader(loop: asyncio.AbstractEventLoop, outgoing: asyncio.Queue) -> threading.Thread:
    # Daemon thread so a blocked readline() never holds up interpreter exit
    def read_lines():
        for line in sys.stdin:
            loop.call_soon_threadsafe(outgoing.put_nowait, line)
        loop.call_soon_threadsafe(outgoing.put_nowait, QUIT)

    reader = threading.Thread(target=read_lines, name="stdin-reader", daemon=True)
    reader.start()
    return reader


async def run_client(service_ws_url: str):
    ping_interval = float(os.environ.get("PING_INTERVAL_SEC", "25"))
    ping_timeout = float(os.environ.get("PING_TIMEOUT_SEC", "25"))
    outgoing: asyncio.Queue = asyncio.Queue()
    _start_stdin_reader(asyncio.get_running_loop(), outgoing)

    async with websockets.connect(service_ws_url, ping_interval=ping_interval, ping_timeout=ping_timeout) as ws:
        logger.info(f"Connected to chat service at {service_ws_url}")

        async def receive_loop():
            async for raw in ws:
                try:
                    event = json.loads(raw)
                except json.JSONDecodeError:
                    logger.warning(f"Service sent non-JSON: {raw!r}")
                    continue
                if event.get("type") == INCOMING_VIDEO_CALL:
                    await ws.send(json.dumps(make_event(REJECT_VIDEO_CALL)))
                text = describe_event(event)
                if text:
                    print(text)

        receiver = asyncio.create_task(receive_loop())
        try:
            while not receiver.done():
                get_line = asyncio.create_task(outgoing.get())
                done, _ = await asyncio.wait({get_line, receiver}, return_when=asyncio.FIRST_COMPLETED)
                if get_line not in done:
                    get_line.cancel()
                    break
                line = get_line.result()
                if line.strip() == QUIT:
                    break
                frame = command_to_event(line)
                if frame:
                    await ws.send(json.dumps(frame))
        finally:
            receiver.cancel()
            await asyncio.gather(receiver, return_exceptions=True)


if __name__ == "__main__":
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "WARNING").upper())
    url = os.environ.get("CHAT_SERVICE_URL", "ws://localhost:3000/ws/chat")
    try:
        asyncio.run(run_client(url))
    except (KeyboardInterrupt, ConnectionClosed):
        pass
