"""
Connection registry: the source of truth for which participant ids are live
"""
import logging
from typing import Any, Dict, List, Optional

from models import Participant

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """Owns every Participant record. Not thread safe; the coordinator locks."""

    def __init__(self):
        self._participants: Dict[str, Participant] = {}

    def register(self, participant_id: str, channel: Any) -> bool:
        """Create a record. Returns False (and keeps the first record) if already present."""
        if participant_id in self._participants:
            logger.debug(f"Participant '{participant_id}' already registered.")
            return False
        self._participants[participant_id] = Participant(participant_id=participant_id, channel=channel)
        return True

    def unregister(self, participant_id: str) -> Optional[Participant]:
        return self._participants.pop(participant_id, None)

    def exists(self, participant_id: str) -> bool:
        return participant_id in self._participants

    def get(self, participant_id: str) -> Optional[Participant]:
        return self._participants.get(participant_id)

    def channel_of(self, participant_id: str) -> Optional[Any]:
        participant = self._participants.get(participant_id)
        return participant.channel if participant else None

    def count(self) -> int:
        return len(self._participants)

    def ids(self) -> List[str]:
        return list(self._participants)
