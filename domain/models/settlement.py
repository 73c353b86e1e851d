"""
Settlement record domain model.
"""

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass
class SpectatorBetOutcome:
    bet_id: str
    user_id: str
    amount: Decimal
    won: bool
    payout: Decimal


@dataclass
class Settlement:
    """What one executed settlement moved."""

    match_id: str
    winner_id: str
    loser_id: str
    bet_amount: Decimal
    pot: Decimal
    platform_fee: Decimal
    winner_payout: Decimal
    executed_at: int
    via_dispute: bool = False
    spectator_outcomes: list[SpectatorBetOutcome] = field(default_factory=list)

    @property
    def spectator_payout_total(self) -> Decimal:
        return sum((o.payout for o in self.spectator_outcomes), Decimal("0.00"))


@dataclass(frozen=True)
class SettlementOutcome:
    """
    Result of asking the engine to settle a match.

    ``settlement`` is set only when funds actually moved; otherwise
    ``reason`` says why the match was not eligible.
    """

    match_id: str
    settlement: Settlement | None = None
    reason: str | None = None

    @property
    def executed(self) -> bool:
        return self.settlement is not None
