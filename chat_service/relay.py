"""
Session relay: forwards in-session events to the sender's current partner only
"""
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List

from models import (
    Notification, make_event,
    SEND_MESSAGE, TYPING_START, TYPING_STOP,
    START_VIDEO_CALL, ACCEPT_VIDEO_CALL, REJECT_VIDEO_CALL, END_VIDEO_CALL,
    WEBRTC_OFFER, WEBRTC_ANSWER, WEBRTC_ICE_CANDIDATE,
    RECEIVE_MESSAGE, PARTNER_TYPING_START, PARTNER_TYPING_STOP,
    INCOMING_VIDEO_CALL, VIDEO_CALL_ACCEPTED, VIDEO_CALL_REJECTED, VIDEO_CALL_ENDED,
)
from pairing import PairingTable

logger = logging.getLogger(__name__)


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class SessionRelay:
    def __init__(self, pairing_table: PairingTable, clock: Callable[[], str] = utc_timestamp):
        self.pairing_table = pairing_table
        self.clock = clock
        # inbound kind -> builder(sender_id, text, payload) for the partner's event
        self._builders: Dict[str, Callable[[str, Any, Any], Dict[str, Any]]] = {
            SEND_MESSAGE: lambda sender, text, payload: make_event(
                RECEIVE_MESSAGE, text=text, timestamp=self.clock(), senderId=sender),
            TYPING_START: lambda sender, text, payload: make_event(PARTNER_TYPING_START, senderId=sender),
            TYPING_STOP: lambda sender, text, payload: make_event(PARTNER_TYPING_STOP, senderId=sender),
            START_VIDEO_CALL: lambda sender, text, payload: make_event(INCOMING_VIDEO_CALL, callerId=sender),
            ACCEPT_VIDEO_CALL: lambda sender, text, payload: make_event(VIDEO_CALL_ACCEPTED, accepterId=sender),
            REJECT_VIDEO_CALL: lambda sender, text, payload: make_event(VIDEO_CALL_REJECTED, senderId=sender),
            END_VIDEO_CALL: lambda sender, text, payload: make_event(VIDEO_CALL_ENDED, senderId=sender),
            WEBRTC_OFFER: lambda sender, text, payload: make_event(WEBRTC_OFFER, payload=payload, senderId=sender),
            WEBRTC_ANSWER: lambda sender, text, payload: make_event(WEBRTC_ANSWER, payload=payload, senderId=sender),
            WEBRTC_ICE_CANDIDATE: lambda sender, text, payload: make_event(
                WEBRTC_ICE_CANDIDATE, payload=payload, senderId=sender),
        }

    def handles(self, kind: str) -> bool:
        return kind in self._builders

    def relay(self, sender_id: str, kind: str, text: Any = None, payload: Any = None) -> List[Notification]:
        """Build the partner-bound event for kind, or nothing if sender_id has no partner."""
        builder = self._builders.get(kind)
        if builder is None:
            raise ValueError(f"Unsupported relay event kind: {kind}")
        partner_id = self.pairing_table.partner_of(sender_id)
        if partner_id is None:
            logger.debug(f"Relay: Dropped '{kind}' from '{sender_id}', no active partner.")
            return []
        return [Notification(partner_id, builder(sender_id, text, payload))]
