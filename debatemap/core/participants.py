"""
Participant Registry

Ordered set of debate participants. Ids are unique; order is insertion order
and determines palette assignment.
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Optional

from ..contracts.base import Participant
from ..contracts.errors import ConstraintError, NotFoundError
from ..identity import next_participant_id, participant_color


class ParticipantRegistry:
    """Ordered participant collection with add/rename."""

    def __init__(self, participants: Iterable[Participant] = ()):
        self._participants: Dict[str, Participant] = {}
        for participant in participants:
            if participant.id in self._participants:
                raise ConstraintError(f"Participant id {participant.id!r} is used more than once.")
            self._participants[participant.id] = participant

    def __contains__(self, participant_id: str) -> bool:
        return participant_id in self._participants

    def __iter__(self):
        return iter(self._participants.values())

    def __len__(self) -> int:
        return len(self._participants)

    def get(self, participant_id: str) -> Optional[Participant]:
        return self._participants.get(participant_id)

    def require(self, participant_id: str) -> Participant:
        participant = self._participants.get(participant_id)
        if participant is None:
            raise NotFoundError(f"Participant {participant_id!r} does not exist.")
        return participant

    def ids(self) -> List[str]:
        return list(self._participants)

    def next_id(self) -> str:
        return next_participant_id(self.ids())

    def add(self, name: Optional[str] = None) -> Participant:
        """Add a participant with the next letter id; name defaults to the id."""
        pid = self.next_id()
        participant = Participant(id=pid, name=name if name else pid)
        self._participants[pid] = participant
        return participant

    def rename(self, participant_id: str, name: str) -> Participant:
        self.require(participant_id)
        renamed = Participant(id=participant_id, name=name)
        self._participants[participant_id] = renamed
        return renamed

    def color_of(self, participant_id: str) -> str:
        """Palette color by registration order; unknown ids get the first color."""
        ids = self.ids()
        index = ids.index(participant_id) if participant_id in ids else 0
        return participant_color(index)

    def copy(self) -> ParticipantRegistry:
        return ParticipantRegistry(self._participants.values())
