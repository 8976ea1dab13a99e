"""
Random partner matching for participants
"""
import logging
import uuid
from typing import Callable, List, Optional, Tuple

from models import (
    Notification, make_event,
    WAITING_FOR_PARTNER, PARTNER_FOUND, PARTNER_DISCONNECTED,
)
from pairing import PairingTable
from waiting_queue import WaitingQueue

logger = logging.getLogger(__name__)


def new_session_token() -> str:
    return str(uuid.uuid4())


class Matchmaker:
    """
    Moves participants between the waiting queue and the pairing table.

    Methods mutate state and return the notifications that should be sent.
    Nothing is sent from here, and callers must hold the coordinator lock.
    """

    def __init__(self, waiting_queue: WaitingQueue, pairing_table: PairingTable,
                 token_factory: Callable[[], str] = new_session_token):
        self.waiting_queue = waiting_queue
        self.pairing_table = pairing_table
        self.token_factory = token_factory

    def _release_partner(self, participant_id: str) -> Tuple[Optional[str], List[Notification]]:
        """Tear down participant_id's pairing and put the abandoned partner back in the queue."""
        former_partner = self.pairing_table.unpair(participant_id)
        if former_partner is None:
            return None, []
        self.waiting_queue.enqueue(former_partner)
        logger.info(f"Matchmaker: '{participant_id}' left '{former_partner}'. '{former_partner}' re-queued.")
        return former_partner, [Notification(former_partner, make_event(PARTNER_DISCONNECTED))]

    def find_partner(self, requester_id: str) -> List[Notification]:
        former_partner, notifications = self._release_partner(requester_id)
        self.waiting_queue.dequeue(requester_id)

        # A skipped partner is not offered straight back to the participant who skipped it
        excluded = (requester_id, former_partner) if former_partner else (requester_id,)
        candidate_id: Optional[str] = self.waiting_queue.pick_partner_excluding(*excluded)
        if candidate_id is None:
            self.waiting_queue.enqueue(requester_id)
            logger.info(f"Matchmaker: '{requester_id}' is waiting. Queue size: {self.waiting_queue.size()}")
            notifications.append(Notification(requester_id, make_event(WAITING_FOR_PARTNER)))
            return notifications

        self.waiting_queue.dequeue(candidate_id)
        self.pairing_table.pair(requester_id, candidate_id)
        session_token = self.token_factory()
        logger.info(f"Matchmaker: Paired '{requester_id}' with '{candidate_id}' (session {session_token}).")
        notifications.append(Notification(
            requester_id, make_event(PARTNER_FOUND, partnerId=candidate_id, sessionToken=session_token)))
        notifications.append(Notification(
            candidate_id, make_event(PARTNER_FOUND, partnerId=requester_id, sessionToken=session_token)))
        return notifications

    def cancel_search(self, participant_id: str) -> List[Notification]:
        if self.waiting_queue.contains(participant_id):
            self.waiting_queue.dequeue(participant_id)
            logger.info(f"Matchmaker: '{participant_id}' cancelled search.")
        else:
            logger.debug(f"Matchmaker: cancel-search from '{participant_id}' ignored, not waiting.")
        return []

    def end_chat(self, participant_id: str) -> List[Notification]:
        _, notifications = self._release_partner(participant_id)
        if not notifications:
            logger.debug(f"Matchmaker: end-chat from '{participant_id}' ignored, not paired.")
        self.waiting_queue.dequeue(participant_id)
        return notifications

    def purge(self, participant_id: str) -> List[Notification]:
        """Remove every trace of participant_id. Used on disconnect."""
        _, notifications = self._release_partner(participant_id)
        self.waiting_queue.dequeue(participant_id)
        return notifications
