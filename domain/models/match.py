"""
Wagered match domain model.

A match carries a main lifecycle status plus two optional side channels:
a pending stake proposal (only while waiting) and a dispute.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class MatchStatus(str, Enum):
    WAITING = "waiting"
    LIVE = "live"
    PENDING_APPROVAL = "pending_approval"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    DISPUTED = "disputed"


class DisputeStatus(str, Enum):
    NONE = "none"
    OPEN = "open"
    RESOLVED = "resolved"


DISPUTABLE_STATUSES = (MatchStatus.PENDING_APPROVAL, MatchStatus.COMPLETED)


@dataclass(frozen=True)
class Proposal:
    """Counter-offer on the stake made by a prospective opponent."""

    amount: Decimal
    proposed_by_id: str


@dataclass(frozen=True)
class Dispute:
    status: DisputeStatus
    reason: str
    raised_by_id: str
    evidence: str | None = None
    resolved_by_id: str | None = None
    resolution: str | None = None


@dataclass
class Match:
    match_id: str
    game: str
    bet_amount: Decimal  # per-player stake
    player1_id: str
    status: MatchStatus = MatchStatus.WAITING
    player2_id: str | None = None
    reported_winner_id: str | None = None
    winner_id: str | None = None
    spectator_count: int = 0
    proposal: Proposal | None = None
    dispute: Dispute | None = None
    approved_at: int | None = None  # starts the dispute window
    settlement_executed_at: int | None = None  # idempotency marker
    created_at: int | None = None

    @property
    def dispute_status(self) -> DisputeStatus:
        return self.dispute.status if self.dispute else DisputeStatus.NONE

    @property
    def player_ids(self) -> tuple[str, ...]:
        if self.player2_id is None:
            return (self.player1_id,)
        return (self.player1_id, self.player2_id)

    def is_participant(self, user_id: str) -> bool:
        return user_id in self.player_ids

    def is_player(self, user_id: str | None) -> bool:
        """True if user_id names one of the two seated players."""
        return self.player2_id is not None and user_id in (self.player1_id, self.player2_id)

    def opponent_of(self, user_id: str) -> str | None:
        if user_id == self.player1_id:
            return self.player2_id
        if user_id == self.player2_id:
            return self.player1_id
        return None

    def dispute_window_elapsed(self, now: int, window_seconds: int) -> bool:
        return self.approved_at is not None and now - self.approved_at >= window_seconds

    def is_ready_for_settlement(self, now: int, window_seconds: int) -> bool:
        return (
            self.status == MatchStatus.COMPLETED
            and self.dispute_status == DisputeStatus.NONE
            and self.settlement_executed_at is None
            and self.dispute_window_elapsed(now, window_seconds)
        )
