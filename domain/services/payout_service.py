"""
Payout domain service.

Pure settlement arithmetic: pot split between winner and platform, and
fixed-odds spectator payouts. Works on ``Decimal`` amounts in whole cents.
"""

from dataclasses import dataclass
from decimal import Decimal

from utils.money import apply_multiplier, percentage_of, quantize


@dataclass(frozen=True)
class MatchPayout:
    pot: Decimal
    platform_fee: Decimal
    winner_payout: Decimal


class PayoutService:
    """
    Pure domain service for settlement amounts.

    Conservation holds by construction: the fee is rounded once and the
    winner receives the remainder, so ``winner_payout + platform_fee == pot``.
    """

    def __init__(self, platform_fee_rate: Decimal):
        if not Decimal("0") <= platform_fee_rate < Decimal("1"):
            raise ValueError(f"platform_fee_rate must be in [0, 1), got {platform_fee_rate}")
        self.platform_fee_rate = platform_fee_rate

    def match_payout(self, bet_amount: Decimal) -> MatchPayout:
        pot = quantize(bet_amount * 2)
        platform_fee = percentage_of(pot, self.platform_fee_rate)
        return MatchPayout(pot=pot, platform_fee=platform_fee, winner_payout=pot - platform_fee)

    @staticmethod
    def spectator_payout(amount: Decimal, odds_multiplier: Decimal) -> Decimal:
        return apply_multiplier(amount, odds_multiplier)
