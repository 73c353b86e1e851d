"""
Repository for wagered matches.

Every state transition is a single ``*_atomic`` method: it opens a
``BEGIN IMMEDIATE`` transaction, re-reads the match row, re-validates the
transition's preconditions against that fresh state, performs all wallet
movements through the ledger primitives, and updates the match, all before
committing. A failed guard raises and rolls back everything.
"""

from __future__ import annotations

import uuid

from domain.models.match import (
    DISPUTABLE_STATUSES,
    DisputeStatus,
    Match,
    MatchStatus,
)
from domain.models.settlement import Settlement
from domain.models.wallet import TransactionKind, WalletPurpose
from domain.services.payout_service import PayoutService
from repositories.interfaces import IMatchRepository
from repositories.ledger_repository import LedgerRepository
from repositories.match_rows import fetch_match, row_to_match
from repositories.spectator_bet_repository import SpectatorBetRepository
from services import error_codes
from services.errors import (
    AuthorizationError,
    InsufficientFundsError,
    PreconditionError,
    SettlementAlreadyExecutedError,
    ValidationError,
)
from utils.money import to_cents


class MatchRepository(LedgerRepository, IMatchRepository):
    """Handles the matches table and the escrow movements tied to it."""

    def __init__(
        self,
        db_path: str,
        platform_owner_id: str | None = None,
        spectator_bet_repo: SpectatorBetRepository | None = None,
    ):
        super().__init__(db_path, platform_owner_id)
        self.spectator_bet_repo = spectator_bet_repo or SpectatorBetRepository(
            db_path, platform_owner_id
        )

    # --- Creation / joining ---

    def create_match_atomic(self, player1_id: str, game: str, bet_cents: int, now: int) -> Match:
        """
        Escrow the creator's stake and open a waiting match.

        Raises:
            InsufficientFundsError: Personal balance below the stake
        """
        if bet_cents <= 0:
            raise ValidationError("Bet amount must be positive", code=error_codes.INVALID_AMOUNT)

        match_id = str(uuid.uuid4())
        with self.atomic_transaction() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO matches (match_id, game, bet_amount_cents, status, player1_id,
                                     spectator_count, dispute_status, created_at)
                VALUES (?, ?, ?, 'waiting', ?, 0, 'none', ?)
                """,
                (match_id, game, bet_cents, player1_id, now),
            )
            self._move_between_own_wallets(
                cursor,
                player1_id,
                WalletPurpose.PERSONAL,
                WalletPurpose.ESCROW,
                bet_cents,
                TransactionKind.ESCROW,
                f"Created match: {game}",
                now,
                match_id,
            )
            return fetch_match(cursor, match_id)

    def join_match_atomic(self, match_id: str, player2_id: str, now: int) -> Match:
        """
        Escrow the joiner's stake and take the match live.

        Only one of two racing joins can pass the ``player2_id IS NULL`` guard.
        """
        with self.atomic_transaction() as conn:
            cursor = conn.cursor()
            match = fetch_match(cursor, match_id)

            if match.status != MatchStatus.WAITING or match.player2_id is not None:
                raise PreconditionError(
                    "Match is not available", code=error_codes.MATCH_NOT_AVAILABLE
                )
            if match.player1_id == player2_id:
                raise PreconditionError(
                    "Cannot join your own match", code=error_codes.MATCH_NOT_AVAILABLE
                )

            self._move_between_own_wallets(
                cursor,
                player2_id,
                WalletPurpose.PERSONAL,
                WalletPurpose.ESCROW,
                to_cents(match.bet_amount),
                TransactionKind.ESCROW,
                f"Joined match: {match.game}",
                now,
                match_id,
            )
            cursor.execute(
                """
                UPDATE matches
                SET player2_id = ?, status = 'live',
                    proposed_amount_cents = NULL, proposed_by_id = NULL
                WHERE match_id = ? AND status = 'waiting' AND player2_id IS NULL
                """,
                (player2_id, match_id),
            )
            if cursor.rowcount == 0:
                raise PreconditionError(
                    "Match is not available", code=error_codes.MATCH_NOT_AVAILABLE
                )
            return fetch_match(cursor, match_id)

    # --- Stake negotiation ---

    def propose_amount_atomic(self, match_id: str, user_id: str, amount_cents: int) -> Match:
        if amount_cents <= 0:
            raise ValidationError("Invalid amount", code=error_codes.INVALID_AMOUNT)

        with self.atomic_transaction() as conn:
            cursor = conn.cursor()
            match = fetch_match(cursor, match_id)

            if match.status != MatchStatus.WAITING or match.player2_id is not None:
                raise PreconditionError(
                    "Match is not available", code=error_codes.MATCH_NOT_AVAILABLE
                )
            if match.player1_id == user_id:
                raise PreconditionError(
                    "Cannot propose on your own match", code=error_codes.MATCH_NOT_AVAILABLE
                )
            if match.proposal is not None:
                raise PreconditionError(
                    "There is already a pending proposal", code=error_codes.PROPOSAL_PENDING
                )

            cursor.execute(
                """
                UPDATE matches SET proposed_amount_cents = ?, proposed_by_id = ?
                WHERE match_id = ?
                """,
                (amount_cents, user_id, match_id),
            )
            return fetch_match(cursor, match_id)

    def accept_proposal_atomic(self, match_id: str, creator_id: str, now: int) -> Match:
        """
        Re-stake the creator at the proposed amount, escrow the proposer's
        stake, and take the match live, as one unit.

        Raises:
            InsufficientFundsError: Either side cannot cover the new stake
        """
        with self.atomic_transaction() as conn:
            cursor = conn.cursor()
            match = fetch_match(cursor, match_id)

            if match.player1_id != creator_id:
                raise AuthorizationError(
                    "Only the creator can accept proposals", code=error_codes.PERMISSION_DENIED
                )
            if match.proposal is None:
                raise PreconditionError(
                    "No pending proposal", code=error_codes.NO_PENDING_PROPOSAL
                )
            if match.status != MatchStatus.WAITING or match.player2_id is not None:
                raise PreconditionError(
                    "Match is not available", code=error_codes.MATCH_NOT_AVAILABLE
                )

            proposal = match.proposal
            original_cents = to_cents(match.bet_amount)
            proposed_cents = to_cents(proposal.amount)
            delta = proposed_cents - original_cents

            if delta > 0:
                try:
                    self._move_between_own_wallets(
                        cursor,
                        creator_id,
                        WalletPurpose.PERSONAL,
                        WalletPurpose.ESCROW,
                        delta,
                        TransactionKind.ESCROW,
                        f"Bet amount adjusted: {match.game}",
                        now,
                        match_id,
                    )
                except InsufficientFundsError:
                    raise InsufficientFundsError(
                        "Insufficient funds to match the proposed amount"
                    ) from None
            elif delta < 0:
                self._move_between_own_wallets(
                    cursor,
                    creator_id,
                    WalletPurpose.ESCROW,
                    WalletPurpose.PERSONAL,
                    -delta,
                    TransactionKind.REFUND,
                    f"Bet amount adjusted: {match.game}",
                    now,
                    match_id,
                )

            try:
                self._move_between_own_wallets(
                    cursor,
                    proposal.proposed_by_id,
                    WalletPurpose.PERSONAL,
                    WalletPurpose.ESCROW,
                    proposed_cents,
                    TransactionKind.ESCROW,
                    f"Joined match: {match.game}",
                    now,
                    match_id,
                )
            except InsufficientFundsError:
                raise InsufficientFundsError("Joiner has insufficient funds") from None

            cursor.execute(
                """
                UPDATE matches
                SET bet_amount_cents = ?, player2_id = ?, status = 'live',
                    proposed_amount_cents = NULL, proposed_by_id = NULL
                WHERE match_id = ?
                """,
                (proposed_cents, proposal.proposed_by_id, match_id),
            )
            return fetch_match(cursor, match_id)

    def reject_proposal_atomic(self, match_id: str, creator_id: str) -> Match:
        with self.atomic_transaction() as conn:
            cursor = conn.cursor()
            match = fetch_match(cursor, match_id)

            if match.player1_id != creator_id:
                raise AuthorizationError(
                    "Only the creator can reject proposals", code=error_codes.PERMISSION_DENIED
                )
            if match.proposal is None:
                raise PreconditionError(
                    "No pending proposal", code=error_codes.NO_PENDING_PROPOSAL
                )

            cursor.execute(
                """
                UPDATE matches SET proposed_amount_cents = NULL, proposed_by_id = NULL
                WHERE match_id = ?
                """,
                (match_id,),
            )
            return fetch_match(cursor, match_id)

    def cancel_match_atomic(self, match_id: str, creator_id: str, now: int) -> Match:
        """Refund the creator's stake from a match nobody joined."""
        with self.atomic_transaction() as conn:
            cursor = conn.cursor()
            match = fetch_match(cursor, match_id)

            if match.player1_id != creator_id:
                raise AuthorizationError(
                    "Only the creator can cancel", code=error_codes.PERMISSION_DENIED
                )
            if match.status != MatchStatus.WAITING:
                raise PreconditionError("Can only cancel waiting matches")
            if match.player2_id is not None:
                raise PreconditionError("Cannot cancel after someone joined")

            self._move_between_own_wallets(
                cursor,
                creator_id,
                WalletPurpose.ESCROW,
                WalletPurpose.PERSONAL,
                to_cents(match.bet_amount),
                TransactionKind.REFUND,
                f"Cancelled match: {match.game}",
                now,
                match_id,
            )
            cursor.execute(
                """
                UPDATE matches
                SET status = 'cancelled', proposed_amount_cents = NULL, proposed_by_id = NULL
                WHERE match_id = ?
                """,
                (match_id,),
            )
            return fetch_match(cursor, match_id)

    # --- Result reporting / admin review ---

    def report_winner_atomic(self, match_id: str, reporter_id: str, winner_id: str) -> Match:
        with self.atomic_transaction() as conn:
            cursor = conn.cursor()
            match = fetch_match(cursor, match_id)

            if match.status != MatchStatus.LIVE:
                raise PreconditionError("Match is not live")
            if not match.is_participant(reporter_id):
                raise AuthorizationError(
                    "You are not a participant", code=error_codes.NOT_A_PARTICIPANT
                )
            if not match.is_player(winner_id):
                raise ValidationError("Invalid winner", code=error_codes.INVALID_WINNER)

            cursor.execute(
                """
                UPDATE matches SET reported_winner_id = ?, status = 'pending_approval'
                WHERE match_id = ?
                """,
                (winner_id, match_id),
            )
            return fetch_match(cursor, match_id)

    def approve_match_atomic(self, match_id: str, winner_id: str, now: int) -> Match:
        """Decide the winner and start the dispute window. Moves no funds."""
        with self.atomic_transaction() as conn:
            cursor = conn.cursor()
            match = fetch_match(cursor, match_id)

            if match.status != MatchStatus.PENDING_APPROVAL:
                raise PreconditionError("Match is not pending approval")
            if not match.is_player(winner_id):
                raise ValidationError("Invalid winner", code=error_codes.INVALID_WINNER)

            cursor.execute(
                """
                UPDATE matches SET winner_id = ?, status = 'completed', approved_at = ?
                WHERE match_id = ?
                """,
                (winner_id, now, match_id),
            )
            return fetch_match(cursor, match_id)

    def reject_match_atomic(self, match_id: str, now: int) -> tuple[Match, int]:
        """
        Refund both stakes and void pending spectator bets.

        Returns:
            (cancelled match, number of spectator bets voided)
        """
        with self.atomic_transaction() as conn:
            cursor = conn.cursor()
            match = fetch_match(cursor, match_id)

            if match.status != MatchStatus.PENDING_APPROVAL:
                raise PreconditionError("Match is not pending approval")

            bet_cents = to_cents(match.bet_amount)
            for player_id in match.player_ids:
                self._move_between_own_wallets(
                    cursor,
                    player_id,
                    WalletPurpose.ESCROW,
                    WalletPurpose.PERSONAL,
                    bet_cents,
                    TransactionKind.REFUND,
                    f"Match rejected: {match.game}",
                    now,
                    match_id,
                )

            voided = self.spectator_bet_repo.void_bets_in_transaction(
                cursor, match_id, match.game, now
            )
            cursor.execute(
                "UPDATE matches SET status = 'cancelled' WHERE match_id = ?",
                (match_id,),
            )
            return fetch_match(cursor, match_id), len(voided)

    # --- Disputes ---

    def raise_dispute_atomic(
        self,
        match_id: str,
        user_id: str,
        reason: str,
        evidence: str | None,
        now: int,
        window_seconds: int,
    ) -> Match:
        with self.atomic_transaction() as conn:
            cursor = conn.cursor()
            match = fetch_match(cursor, match_id)

            if not match.is_participant(user_id):
                raise AuthorizationError(
                    "Only match participants can raise a dispute",
                    code=error_codes.NOT_A_PARTICIPANT,
                )
            if match.status not in DISPUTABLE_STATUSES:
                raise PreconditionError("Match cannot be disputed in its current state")
            if match.dispute_status != DisputeStatus.NONE:
                raise PreconditionError(
                    "A dispute has already been raised for this match",
                    code=error_codes.DISPUTE_ALREADY_RAISED,
                )
            if match.status == MatchStatus.COMPLETED:
                if match.settlement_executed_at is not None:
                    raise PreconditionError(
                        "Match has already been settled", code=error_codes.DISPUTE_WINDOW_CLOSED
                    )
                if match.dispute_window_elapsed(now, window_seconds):
                    raise PreconditionError(
                        "Dispute window has closed", code=error_codes.DISPUTE_WINDOW_CLOSED
                    )

            cursor.execute(
                """
                UPDATE matches
                SET status = 'disputed', dispute_status = 'open', dispute_reason = ?,
                    dispute_evidence = ?, dispute_raised_by_id = ?
                WHERE match_id = ?
                """,
                (reason, evidence, user_id, match_id),
            )
            return fetch_match(cursor, match_id)

    # --- Settlement ---

    def settle_match_atomic(
        self,
        match_id: str,
        now: int,
        window_seconds: int,
        payout_service: PayoutService,
    ) -> Settlement:
        """
        Move the pot for an approved match whose dispute window has elapsed.

        Raises:
            SettlementAlreadyExecutedError: Settlement already stamped
            PreconditionError: Match not eligible right now
        """
        with self.atomic_transaction() as conn:
            cursor = conn.cursor()
            match = fetch_match(cursor, match_id)

            if match.settlement_executed_at is not None:
                raise SettlementAlreadyExecutedError(f"Match {match_id} already settled")
            if not match.is_ready_for_settlement(now, window_seconds):
                raise PreconditionError(
                    f"Match {match_id} is not eligible for settlement",
                    code=error_codes.NOT_ELIGIBLE_FOR_SETTLEMENT,
                )

            return self._execute_settlement(cursor, match, match.winner_id, payout_service, now, False)

    def resolve_dispute_atomic(
        self,
        match_id: str,
        admin_id: str,
        winner_id: str,
        resolution: str,
        now: int,
        payout_service: PayoutService,
    ) -> Settlement:
        """Close an open dispute in favour of winner_id and settle immediately."""
        with self.atomic_transaction() as conn:
            cursor = conn.cursor()
            match = fetch_match(cursor, match_id)

            if match.status != MatchStatus.DISPUTED or match.dispute_status != DisputeStatus.OPEN:
                raise PreconditionError("Match is not disputed")
            if match.settlement_executed_at is not None:
                raise SettlementAlreadyExecutedError(f"Match {match_id} already settled")
            if not match.is_player(winner_id):
                raise ValidationError("Invalid winner", code=error_codes.INVALID_WINNER)

            cursor.execute(
                """
                UPDATE matches
                SET dispute_status = 'resolved', dispute_resolved_by_id = ?,
                    dispute_resolution = ?, winner_id = ?, approved_at = ?,
                    status = 'completed'
                WHERE match_id = ?
                """,
                (admin_id, resolution, winner_id, now, match_id),
            )
            return self._execute_settlement(cursor, match, winner_id, payout_service, now, True)

    def _execute_settlement(
        self,
        cursor,
        match: Match,
        winner_id: str,
        payout_service: PayoutService,
        now: int,
        via_dispute: bool,
    ) -> Settlement:
        loser_id = match.opponent_of(winner_id)
        if loser_id is None:
            raise PreconditionError(f"Winner {winner_id} is not a player in match {match.match_id}")

        payout = payout_service.match_payout(match.bet_amount)
        bet_cents = to_cents(match.bet_amount)

        for player_id in (winner_id, loser_id):
            escrow_row = self._get_wallet_row(cursor, player_id, WalletPurpose.ESCROW)
            self._debit(
                cursor,
                escrow_row,
                bet_cents,
                TransactionKind.BET,
                f"Stake paid into pot: {match.game}",
                now,
                match.match_id,
            )

        winner_personal = self._get_wallet_row(cursor, winner_id, WalletPurpose.PERSONAL)
        self._credit(
            cursor,
            winner_personal,
            to_cents(payout.winner_payout),
            TransactionKind.WINNINGS,
            f"Won match: {match.game} (after {payout_service.platform_fee_rate:.0%} fee)",
            now,
            match.match_id,
        )
        if payout.platform_fee > 0:
            platform_row = self._ensure_platform_wallet(cursor, now)
            self._credit(
                cursor,
                platform_row,
                to_cents(payout.platform_fee),
                TransactionKind.PLATFORM_FEE,
                f"Fee from match: {match.game}",
                now,
                match.match_id,
            )

        outcomes = self.spectator_bet_repo.resolve_bets_in_transaction(
            cursor, match.match_id, winner_id, match.game, now
        )

        cursor.execute(
            """
            UPDATE matches SET settlement_executed_at = ?
            WHERE match_id = ? AND settlement_executed_at IS NULL
            """,
            (now, match.match_id),
        )
        if cursor.rowcount == 0:
            raise SettlementAlreadyExecutedError(f"Match {match.match_id} already settled")

        return Settlement(
            match_id=match.match_id,
            winner_id=winner_id,
            loser_id=loser_id,
            bet_amount=match.bet_amount,
            pot=payout.pot,
            platform_fee=payout.platform_fee,
            winner_payout=payout.winner_payout,
            executed_at=now,
            via_dispute=via_dispute,
            spectator_outcomes=outcomes,
        )

    # --- Reads ---

    def get_match(self, match_id: str) -> Match | None:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM matches WHERE match_id = ?", (match_id,))
            row = cursor.fetchone()
            return row_to_match(row) if row else None

    def get_matches(self, status: MatchStatus | None = None) -> list[Match]:
        """All matches, newest first, optionally filtered by status."""
        with self.connection() as conn:
            cursor = conn.cursor()
            if status is None:
                cursor.execute("SELECT * FROM matches ORDER BY created_at DESC, rowid DESC")
            else:
                cursor.execute(
                    "SELECT * FROM matches WHERE status = ? ORDER BY created_at DESC, rowid DESC",
                    (status.value,),
                )
            return [row_to_match(row) for row in cursor.fetchall()]

    def get_matches_by_user(self, user_id: str) -> list[Match]:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT * FROM matches
                WHERE player1_id = ? OR player2_id = ?
                ORDER BY created_at DESC, rowid DESC
                """,
                (user_id, user_id),
            )
            return [row_to_match(row) for row in cursor.fetchall()]

    def get_open_disputes(self) -> list[Match]:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT * FROM matches
                WHERE status = 'disputed' AND dispute_status = 'open'
                ORDER BY created_at ASC, rowid ASC
                """
            )
            return [row_to_match(row) for row in cursor.fetchall()]

    def get_ready_for_settlement(self, now: int, window_seconds: int, limit: int | None = None) -> list[Match]:
        """
        Completed, undisputed, unsettled matches approved at least window_seconds ago.

        Oldest approval first.
        """
        with self.connection() as conn:
            cursor = conn.cursor()
            query = """
                SELECT * FROM matches
                WHERE status = 'completed'
                  AND dispute_status = 'none'
                  AND settlement_executed_at IS NULL
                  AND approved_at IS NOT NULL
                  AND approved_at <= ?
                ORDER BY approved_at ASC, rowid ASC
            """
            params: tuple = (now - window_seconds,)
            if limit is not None:
                query += " LIMIT ?"
                params = (now - window_seconds, limit)
            cursor.execute(query, params)
            return [row_to_match(row) for row in cursor.fetchall()]
