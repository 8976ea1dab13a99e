"""
Pairing table for active one-to-one chat sessions
"""
from typing import Dict, Optional


class PairingError(Exception):
    """Raised when pair() is called for a participant that is still paired"""


class PairingTable:
    """Symmetric participant -> partner mapping. Both directions change together."""

    def __init__(self):
        self._partners: Dict[str, str] = {}

    def pair(self, peer_a_id: str, peer_b_id: str) -> None:
        if peer_a_id == peer_b_id:
            raise PairingError(f"Cannot pair participant '{peer_a_id}' with itself")
        for pid in (peer_a_id, peer_b_id):
            if pid in self._partners:
                raise PairingError(f"Participant '{pid}' is already paired with '{self._partners[pid]}'")
        self._partners[peer_a_id] = peer_b_id
        self._partners[peer_b_id] = peer_a_id

    def partner_of(self, participant_id: str) -> Optional[str]:
        return self._partners.get(participant_id)

    def is_paired(self, participant_id: str) -> bool:
        return participant_id in self._partners

    def unpair(self, participant_id: str) -> Optional[str]:
        """Remove both directions of participant_id's pairing and return the former partner."""
        partner_id = self._partners.pop(participant_id, None)
        if partner_id is not None:
            self._partners.pop(partner_id, None)
        return partner_id

    def session_count(self) -> int:
        return len(self._partners) // 2

    def snapshot(self) -> Dict[str, str]:
        return dict(self._partners)
