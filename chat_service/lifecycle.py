"""
Chat coordinator: owns all shared state and applies every mutation under one lock.

Participant states:
    unregistered -> idle -> waiting <-> paired -> unregistered

Requests that make no sense in the current state (end-chat while idle, a
late cancel-search after being paired, events from an id that already
disconnected) are absorbed as no-ops. Notifications produced while the lock
is held are delivered only after it is released.
"""
import enum
import logging
import random
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

from models import (
    ClientEvent, Notification, make_event,
    CONNECTED, FIND_PARTNER, CANCEL_SEARCH, END_CHAT, SEND_MESSAGE, PING, PONG,
)
from matchmaker import Matchmaker, new_session_token
from pairing import PairingTable
from registry import ConnectionRegistry
from relay import SessionRelay, utc_timestamp
from waiting_queue import WaitingQueue

logger = logging.getLogger(__name__)


class InvalidEventError(ValueError):
    """A participant sent an event that cannot be processed"""


class ParticipantState(str, enum.Enum):
    UNREGISTERED = "unregistered"
    IDLE = "idle"
    WAITING = "waiting"
    PAIRED = "paired"


class ChatCoordinator:
    def __init__(self, rng: Optional[random.Random] = None,
                 token_factory: Callable[[], str] = new_session_token,
                 clock: Callable[[], str] = utc_timestamp):
        self._lock = threading.RLock()
        self._registry = ConnectionRegistry()
        self._waiting_queue = WaitingQueue(rng)
        self._pairing_table = PairingTable()
        self._matchmaker = Matchmaker(self._waiting_queue, self._pairing_table, token_factory)
        self._relay = SessionRelay(self._pairing_table, clock)

    # --- lifecycle ---

    def connect(self, participant_id: str, channel: Any) -> bool:
        with self._lock:
            if not self._registry.register(participant_id, channel):
                return False
            total = self._registry.count()
            outgoing = self._resolve([Notification(participant_id, make_event(CONNECTED, participantId=participant_id))])
        logger.info(f"Participant '{participant_id}' connected. Total: {total}")
        self._deliver(outgoing)
        return True

    def disconnect(self, participant_id: str, reason: str = "") -> None:
        with self._lock:
            if not self._registry.exists(participant_id):
                return
            notifications = self._matchmaker.purge(participant_id)
            self._registry.unregister(participant_id)
            total = self._registry.count()
            outgoing = self._resolve(notifications)
        logger.info(f"Participant '{participant_id}' disconnected ({reason or 'no reason'}). Total: {total}")
        self._deliver(outgoing)

    # --- matchmaking ---

    def find_partner(self, participant_id: str) -> None:
        self._run(participant_id, self._matchmaker.find_partner)

    def cancel_search(self, participant_id: str) -> None:
        self._run(participant_id, self._matchmaker.cancel_search)

    def end_chat(self, participant_id: str) -> None:
        self._run(participant_id, self._matchmaker.end_chat)

    # --- relay ---

    def relay(self, sender_id: str, kind: str, text: Any = None, payload: Any = None) -> None:
        self._run(sender_id, lambda pid: self._relay.relay(pid, kind, text=text, payload=payload))

    def handle_event(self, participant_id: str, event: ClientEvent) -> None:
        """Dispatch one parsed inbound frame. Raises InvalidEventError for unusable frames."""
        kind = event.type
        if kind == FIND_PARTNER:
            self.find_partner(participant_id)
        elif kind == CANCEL_SEARCH:
            self.cancel_search(participant_id)
        elif kind == END_CHAT:
            self.end_chat(participant_id)
        elif kind == PING:
            self._run(participant_id, lambda pid: [Notification(pid, make_event(PONG))])
        elif kind == SEND_MESSAGE:
            if not isinstance(event.text, str) or not event.text:
                raise InvalidEventError("Cannot send empty message.")
            self.relay(participant_id, kind, text=event.text)
        elif self._relay.handles(kind):
            self.relay(participant_id, kind, payload=event.payload)
        else:
            raise InvalidEventError(f"Unknown event type: {kind}")

    # --- queries ---

    def state_of(self, participant_id: str) -> ParticipantState:
        with self._lock:
            if not self._registry.exists(participant_id):
                return ParticipantState.UNREGISTERED
            if self._pairing_table.is_paired(participant_id):
                return ParticipantState.PAIRED
            if self._waiting_queue.contains(participant_id):
                return ParticipantState.WAITING
            return ParticipantState.IDLE

    def partner_of(self, participant_id: str) -> Optional[str]:
        with self._lock:
            return self._pairing_table.partner_of(participant_id)

    def is_connected(self, participant_id: str) -> bool:
        with self._lock:
            return self._registry.exists(participant_id)

    def waiting_snapshot(self) -> List[str]:
        with self._lock:
            return self._waiting_queue.snapshot()

    def pairing_snapshot(self) -> Dict[str, str]:
        with self._lock:
            return self._pairing_table.snapshot()

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                "connected_count": self._registry.count(),
                "waiting_count": self._waiting_queue.size(),
                "active_chats": self._pairing_table.session_count(),
            }

    # --- internals ---

    def _run(self, participant_id: str, operation: Callable[[str], List[Notification]]) -> None:
        with self._lock:
            if not self._registry.exists(participant_id):
                logger.debug(f"Ignoring request from unregistered participant '{participant_id}'.")
                return
            outgoing = self._resolve(operation(participant_id))
        self._deliver(outgoing)

    def _resolve(self, notifications: List[Notification]) -> List[Tuple[str, Any, Dict[str, Any]]]:
        """Look up target channels while the lock is still held."""
        resolved = []
        for target_id, event in notifications:
            channel = self._registry.channel_of(target_id)
            if channel is None:
                logger.debug(f"No channel for '{target_id}', dropping '{event['type']}'.")
                continue
            resolved.append((target_id, channel, event))
        return resolved

    @staticmethod
    def _deliver(outgoing: List[Tuple[str, Any, Dict[str, Any]]]) -> None:
        for target_id, channel, event in outgoing:
            if not channel.send_nowait(event):
                logger.debug(f"Event '{event['type']}' for '{target_id}' was not queued.")


# Create a global instance
coordinator = ChatCoordinator()
