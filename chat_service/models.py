"""
Data models and event names for the random chat service
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, NamedTuple, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


# Inbound events (participant -> server)
FIND_PARTNER = "find-partner"
CANCEL_SEARCH = "cancel-search"
END_CHAT = "end-chat"
SEND_MESSAGE = "send-message"
TYPING_START = "typing-start"
TYPING_STOP = "typing-stop"
START_VIDEO_CALL = "start-video-call"
ACCEPT_VIDEO_CALL = "accept-video-call"
REJECT_VIDEO_CALL = "reject-video-call"
END_VIDEO_CALL = "end-video-call"
WEBRTC_OFFER = "webrtc-offer"
WEBRTC_ANSWER = "webrtc-answer"
WEBRTC_ICE_CANDIDATE = "webrtc-ice-candidate"
PING = "ping"

# Outbound events (server -> participant)
CONNECTED = "connected"
WAITING_FOR_PARTNER = "waiting-for-partner"
PARTNER_FOUND = "partner-found"
PARTNER_DISCONNECTED = "partner-disconnected"
RECEIVE_MESSAGE = "receive-message"
PARTNER_TYPING_START = "partner-typing-start"
PARTNER_TYPING_STOP = "partner-typing-stop"
INCOMING_VIDEO_CALL = "incoming-video-call"
VIDEO_CALL_ACCEPTED = "video-call-accepted"
VIDEO_CALL_REJECTED = "video-call-rejected"
VIDEO_CALL_ENDED = "video-call-ended"
PONG = "pong"
ERROR = "error"

SIGNALING_EVENTS = (WEBRTC_OFFER, WEBRTC_ANSWER, WEBRTC_ICE_CANDIDATE)


class ClientEvent(BaseModel):
    """One JSON frame received from a participant's WebSocket"""
    model_config = ConfigDict(extra="ignore")

    type: str
    # Older clients send the chat body as "message"
    text: Optional[str] = Field(default=None, validation_alias=AliasChoices("text", "message"))
    # Opaque WebRTC signaling blob, never inspected
    payload: Any = None


class StatsResponse(BaseModel):
    connected_count: int
    waiting_count: int
    active_chats: int


class Notification(NamedTuple):
    """An outbound event addressed to one participant"""
    target_id: str
    event: Dict[str, Any]


@dataclass
class Participant:
    participant_id: str
    channel: Any  # Outbox or anything with send_nowait(event) -> bool
    joined_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def make_event(event_type: str, **fields: Any) -> Dict[str, Any]:
    event = {"type": event_type}
    event.update(fields)
    return event
