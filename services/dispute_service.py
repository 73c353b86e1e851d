"""
Dispute sub-protocol: participants contest a result, admins decide it.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from domain.models.match import Match
from domain.models.settlement import Settlement
from repositories.interfaces import IMatchRepository, IUserRepository
from services.errors import ValidationError
from services.permissions import require_active_user, require_admin
from services.settlement_service import SettlementService

logger = logging.getLogger("escrow.services.dispute")


class DisputeService:
    """
    Raising a dispute freezes automatic settlement; resolving it settles
    the match immediately in the admin's chosen winner's favour.
    """

    def __init__(
        self,
        match_repo: IMatchRepository,
        user_repo: IUserRepository,
        settlement_service: SettlementService,
        dispute_window_seconds: int,
        *,
        reason_min_length: int = 0,
        resolution_min_length: int = 0,
        clock: Callable[[], int] | None = None,
    ):
        self.match_repo = match_repo
        self.user_repo = user_repo
        self.settlement_service = settlement_service
        self.dispute_window_seconds = dispute_window_seconds
        self.reason_min_length = reason_min_length
        self.resolution_min_length = resolution_min_length
        self._clock = clock or (lambda: int(time.time()))

    def raise_dispute(
        self, user_id: str, match_id: str, reason: str, evidence: str | None = None
    ) -> Match:
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("A reason is required to raise a dispute")
        if len(reason) < self.reason_min_length:
            raise ValidationError(
                f"Dispute reason must be at least {self.reason_min_length} characters"
            )
        require_active_user(self.user_repo, user_id)

        match = self.match_repo.raise_dispute_atomic(
            match_id, user_id, reason, evidence, self._clock(), self.dispute_window_seconds
        )
        logger.info(f"Dispute raised on match {match_id} by {user_id}; settlement paused")
        return match

    def resolve_dispute(
        self, admin_id: str, match_id: str, winner_id: str, resolution: str
    ) -> Settlement:
        resolution = (resolution or "").strip()
        if not resolution:
            raise ValidationError("A resolution is required")
        if len(resolution) < self.resolution_min_length:
            raise ValidationError(
                f"Resolution must be at least {self.resolution_min_length} characters"
            )
        require_admin(self.user_repo, admin_id)

        settlement = self.settlement_service.settle_via_dispute_resolution(
            match_id, admin_id, winner_id, resolution
        )
        logger.info(f"Dispute on match {match_id} resolved by {admin_id} for {winner_id}")
        return settlement

    def get_open_disputes(self) -> list[Match]:
        return self.match_repo.get_open_disputes()
