"""MessageRecord -- frozen data object for confirmed outbound messages."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MessageRecord:
    """A chat message the ledger accepted.

    Created only after a successful submission and never mutated.
    ``proof_reference`` is the public explorer URL for ``signature``.
    """

    id: int
    display_text: str
    proof_reference: str
    signature: str
    text: str

    def __str__(self) -> str:
        return self.display_text
