"""
Waiting queue of participants looking for a partner
"""
import random
from typing import List, Optional


class WaitingQueue:
    """
    Set of waiting participant ids.

    Partners are picked uniformly at random rather than first-come-first-served,
    so there is no bound on how long any one participant waits.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        # dict keeps insertion order so snapshots and random picks are reproducible with a seeded rng
        self._waiting: dict = {}
        self._rng = rng or random.Random()

    def enqueue(self, participant_id: str) -> None:
        self._waiting.setdefault(participant_id, None)

    def dequeue(self, participant_id: str) -> None:
        self._waiting.pop(participant_id, None)

    def pick_partner_excluding(self, *participant_ids: str) -> Optional[str]:
        """Uniformly random waiting id that is not one of participant_ids"""
        candidates = [pid for pid in self._waiting if pid not in participant_ids]
        if not candidates:
            return None
        return self._rng.choice(candidates)

    def contains(self, participant_id: str) -> bool:
        return participant_id in self._waiting

    def size(self) -> int:
        return len(self._waiting)

    def snapshot(self) -> List[str]:
        return list(self._waiting)
