"""
Identifier & Palette Service

Opaque short alphanumeric ids and stable participant colors.

GUARANTEES:
- Ids are unique within a session; a collision is an implementation error
- With a fixed salt, the id sequence is reproducible
- Participant i gets PALETTE[i mod 8]
"""

from __future__ import annotations
from typing import Iterable, Optional, Sequence, Set
import hashlib
import string
import uuid

from .contracts.base import StatementKind
from .contracts.errors import InvariantViolation


PALETTE = (
    '#0072B2', '#D55E00', '#009E73', '#E69F00',
    '#56B4E9', '#CC79A7', '#F0E442', '#999999',
)

KIND_COLORS = {
    StatementKind.THESIS: '#60a5fa',
    StatementKind.ARGUMENT: '#a78bfa',
    StatementKind.ARGUMENT_SUMMARY: '#86efac',
    StatementKind.COUNTER: '#f472b6',
    StatementKind.EVIDENCE: '#f59e0b',
    StatementKind.AGREEMENT: '#22d3ee',
}

_ALPHABET = string.digits + string.ascii_lowercase


class IdGenerator:
    """
    Generates opaque ids from a salted counter.

    Ids are derived from sha256(salt|sequence) rendered in base 36, so the
    same salt yields the same sequence.
    """

    def __init__(self, salt: Optional[str] = None, length: int = 8):
        self._salt = salt if salt is not None else uuid.uuid4().hex
        self._length = length
        self._sequence = 0
        self._issued: Set[str] = set()

    def next_id(self, taken: Iterable[str] = ()) -> str:
        """
        Issue a fresh id.

        `taken` lists ids already present in the store (e.g. loaded from a
        snapshot); sequence positions that would reproduce one are skipped.
        Re-issuing an id this generator already handed out is an
        implementation error.
        """
        taken = set(taken)
        candidate = self._derive()
        while candidate in taken:
            candidate = self._derive()

        if candidate in self._issued:
            raise InvariantViolation(f"Generated id {candidate!r} was already issued")
        self._issued.add(candidate)
        return candidate

    def _derive(self) -> str:
        self._sequence += 1
        digest = hashlib.sha256(f"{self._salt}|{self._sequence}".encode('utf-8')).digest()
        number = int.from_bytes(digest, 'big')
        chars = []
        for _ in range(self._length):
            number, rem = divmod(number, len(_ALPHABET))
            chars.append(_ALPHABET[rem])
        return ''.join(chars)


def next_participant_id(existing: Sequence[str]) -> str:
    """
    Successive uppercase letters: A..Z, then AA, AB, ...

    The next id follows the greatest existing letter id.
    """
    highest = 0
    for pid in existing:
        highest = max(highest, _letters_to_number(pid))
    candidate = highest + 1
    taken = set(existing)
    while _number_to_letters(candidate) in taken:
        candidate += 1
    return _number_to_letters(candidate)


def participant_color(index: int) -> str:
    return PALETTE[index % len(PALETTE)]


def kind_color(kind: StatementKind) -> str:
    return KIND_COLORS[kind]


def _letters_to_number(value: str) -> int:
    if not value or not all(c in string.ascii_uppercase for c in value):
        return 0
    number = 0
    for c in value:
        number = number * 26 + (ord(c) - ord('A') + 1)
    return number


def _number_to_letters(number: int) -> str:
    letters = []
    while number > 0:
        number, rem = divmod(number - 1, 26)
        letters.append(chr(ord('A') + rem))
    return ''.join(reversed(letters))
