"""
Settlement engine: pays out completed matches and resolves their spectator bets.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from domain.models.match import Match
from domain.models.settlement import Settlement, SettlementOutcome
from domain.services.payout_service import PayoutService
from repositories.interfaces import IMatchRepository
from services import error_codes
from services.errors import PreconditionError, SettlementAlreadyExecutedError

logger = logging.getLogger("escrow.settlement")

NOT_ELIGIBLE = "not_eligible"
ALREADY_SETTLED = "already_settled"


class SettlementService:
    """
    Moves the pot for matches whose dispute window has passed.

    All arithmetic comes from ``PayoutService``; all fund movement happens
    in one ``MatchRepository`` transaction that also stamps
    ``settlement_executed_at``, so a match can never be paid twice.
    """

    def __init__(
        self,
        match_repo: IMatchRepository,
        payout_service: PayoutService,
        dispute_window_seconds: int,
        clock: Callable[[], int] | None = None,
    ):
        self.match_repo = match_repo
        self.payout_service = payout_service
        self.dispute_window_seconds = dispute_window_seconds
        self._clock = clock or (lambda: int(time.time()))

    def get_matches_ready_for_settlement(self, limit: int | None = None) -> list[Match]:
        return self.match_repo.get_ready_for_settlement(
            self._clock(), self.dispute_window_seconds, limit
        )

    def settle(self, match_id: str) -> SettlementOutcome:
        """
        Settle one match if it is eligible right now.

        Returns a not-executed outcome, rather than raising, when the match is
        not yet eligible or was already settled by a concurrent caller.

        Raises:
            NotFoundError: Unknown match
        """
        try:
            settlement = self.match_repo.settle_match_atomic(
                match_id, self._clock(), self.dispute_window_seconds, self.payout_service
            )
        except SettlementAlreadyExecutedError:
            logger.info(f"Match {match_id} already settled, skipping")
            return SettlementOutcome(match_id=match_id, reason=ALREADY_SETTLED)
        except PreconditionError as exc:
            if exc.code != error_codes.NOT_ELIGIBLE_FOR_SETTLEMENT:
                raise
            logger.info(f"Match {match_id} not eligible for settlement")
            return SettlementOutcome(match_id=match_id, reason=NOT_ELIGIBLE)

        self._log_settlement(settlement)
        return SettlementOutcome(match_id=match_id, settlement=settlement)

    def settle_via_dispute_resolution(
        self, match_id: str, admin_id: str, winner_id: str, resolution: str
    ) -> Settlement:
        """Close an open dispute and pay out immediately, skipping the window."""
        settlement = self.match_repo.resolve_dispute_atomic(
            match_id, admin_id, winner_id, resolution, self._clock(), self.payout_service
        )
        self._log_settlement(settlement)
        return settlement

    def _log_settlement(self, settlement: Settlement) -> None:
        won = sum(1 for o in settlement.spectator_outcomes if o.won)
        logger.info(
            f"Settled match {settlement.match_id}{' via dispute' if settlement.via_dispute else ''}: "
            f"winner {settlement.winner_id} paid {settlement.winner_payout}, "
            f"platform fee {settlement.platform_fee}, "
            f"{won}/{len(settlement.spectator_outcomes)} spectator bets won "
            f"({settlement.spectator_payout_total} paid)"
        )
