"""
Repository for managing fixed-odds spectator bets.
"""

from __future__ import annotations

import sqlite3
import uuid
from decimal import Decimal

from domain.models.match import MatchStatus
from domain.models.settlement import SpectatorBetOutcome
from domain.models.spectator_bet import BetStatus, SpectatorBet
from domain.models.wallet import TransactionKind, WalletPurpose
from domain.services.payout_service import PayoutService
from repositories.interfaces import ISpectatorBetRepository
from repositories.ledger_repository import LedgerRepository
from repositories.match_rows import fetch_match
from services import error_codes
from services.errors import PreconditionError, ValidationError
from utils.money import from_cents, to_cents


class SpectatorBetRepository(LedgerRepository, ISpectatorBetRepository):
    """
    Handles CRUD operations for the spectator_bets table.

    Spectators are non-participants betting on which player wins a live match.
    Stakes are debited from the spectator wallet at placement; winning bets are
    paid ``amount * odds_multiplier`` when the match settles.
    """

    @staticmethod
    def _row_to_bet(row: sqlite3.Row) -> SpectatorBet:
        payout = row["payout_cents"]
        return SpectatorBet(
            bet_id=row["bet_id"],
            match_id=row["match_id"],
            user_id=row["user_id"],
            predicted_winner_id=row["predicted_winner_id"],
            amount=from_cents(row["amount_cents"]),
            odds_multiplier=Decimal(row["odds_multiplier"]),
            status=BetStatus(row["status"]),
            payout=from_cents(payout) if payout is not None else None,
            created_at=row["created_at"],
        )

    def place_bet_atomic(
        self,
        match_id: str,
        user_id: str,
        predicted_winner_id: str,
        amount_cents: int,
        odds_multiplier: Decimal,
        now: int,
    ) -> SpectatorBet:
        """
        Atomically validate the match, debit the spectator wallet and record the bet.

        Args:
            match_id: Match being bet on
            user_id: Bettor
            predicted_winner_id: One of the two players
            amount_cents: Stake (must be > 0)
            odds_multiplier: Odds frozen onto the bet
            now: Unix timestamp of placement

        Returns:
            The created bet

        Raises:
            PreconditionError: Match not live, bettor is a participant, or bad pick
            InsufficientFundsError: Spectator wallet balance too low
        """
        if amount_cents <= 0:
            raise ValidationError(
                f"Bet amount must be positive, got {amount_cents}", code=error_codes.INVALID_AMOUNT
            )

        with self.atomic_transaction() as conn:
            cursor = conn.cursor()
            match = fetch_match(cursor, match_id)

            if match.status != MatchStatus.LIVE:
                raise PreconditionError(
                    "Can only bet on live matches", code=error_codes.BETTING_CLOSED
                )
            if match.is_participant(user_id):
                raise PreconditionError(
                    "Cannot bet on your own match", code=error_codes.PERMISSION_DENIED
                )
            if not match.is_player(predicted_winner_id):
                raise PreconditionError(
                    "Predicted winner is not a player in this match",
                    code=error_codes.INVALID_WINNER,
                )

            wallet_row = self._get_wallet_row(cursor, user_id, WalletPurpose.SPECTATOR)
            self._debit(
                cursor,
                wallet_row,
                amount_cents,
                TransactionKind.BET,
                f"Spectator bet on {match.game}",
                now,
                match_id,
            )

            bet_id = str(uuid.uuid4())
            cursor.execute(
                """
                INSERT INTO spectator_bets
                (bet_id, match_id, user_id, predicted_winner_id, amount_cents,
                 odds_multiplier, status, created_at)
                VALUES (?, ?, ?, ?, ?, ?, 'pending', ?)
                """,
                (
                    bet_id,
                    match_id,
                    user_id,
                    predicted_winner_id,
                    amount_cents,
                    str(odds_multiplier),
                    now,
                ),
            )
            cursor.execute(
                "UPDATE matches SET spectator_count = spectator_count + 1 WHERE match_id = ?",
                (match_id,),
            )

        return SpectatorBet(
            bet_id=bet_id,
            match_id=match_id,
            user_id=user_id,
            predicted_winner_id=predicted_winner_id,
            amount=from_cents(amount_cents),
            odds_multiplier=odds_multiplier,
            status=BetStatus.PENDING,
            created_at=now,
        )

    # --- Cursor-level resolution (called from inside match settlement) ---

    def resolve_bets_in_transaction(
        self,
        cursor,
        match_id: str,
        winner_id: str,
        game: str,
        now: int,
    ) -> list[SpectatorBetOutcome]:
        """
        Resolve every still-pending bet on a match against its winner.

        Bets already won/lost/voided are skipped, so a repeated call cannot pay twice.
        """
        cursor.execute(
            "SELECT * FROM spectator_bets WHERE match_id = ? AND status = 'pending' ORDER BY created_at",
            (match_id,),
        )
        bets = [self._row_to_bet(row) for row in cursor.fetchall()]
        outcomes: list[SpectatorBetOutcome] = []

        for bet in bets:
            won = bet.predicted_winner_id == winner_id
            payout = PayoutService.spectator_payout(bet.amount, bet.odds_multiplier) if won else from_cents(0)
            cursor.execute(
                """
                UPDATE spectator_bets SET status = ?, payout_cents = ?
                WHERE bet_id = ? AND status = 'pending'
                """,
                (BetStatus.WON.value if won else BetStatus.LOST.value, to_cents(payout), bet.bet_id),
            )
            if cursor.rowcount == 0:
                continue
            if won and payout > 0:
                wallet_row = self._get_wallet_row(cursor, bet.user_id, WalletPurpose.SPECTATOR)
                self._credit(
                    cursor,
                    wallet_row,
                    to_cents(payout),
                    TransactionKind.WINNINGS,
                    f"Won spectator bet on {game}",
                    now,
                    match_id,
                )
            outcomes.append(
                SpectatorBetOutcome(
                    bet_id=bet.bet_id,
                    user_id=bet.user_id,
                    amount=bet.amount,
                    won=won,
                    payout=payout,
                )
            )
        return outcomes

    def void_bets_in_transaction(self, cursor, match_id: str, game: str, now: int) -> list[SpectatorBet]:
        """Refund and void every pending bet on a match that will not be played out."""
        cursor.execute(
            "SELECT * FROM spectator_bets WHERE match_id = ? AND status = 'pending' ORDER BY created_at",
            (match_id,),
        )
        bets = [self._row_to_bet(row) for row in cursor.fetchall()]
        voided: list[SpectatorBet] = []

        for bet in bets:
            cursor.execute(
                "UPDATE spectator_bets SET status = 'voided' WHERE bet_id = ? AND status = 'pending'",
                (bet.bet_id,),
            )
            if cursor.rowcount == 0:
                continue
            wallet_row = self._get_wallet_row(cursor, bet.user_id, WalletPurpose.SPECTATOR)
            self._credit(
                cursor,
                wallet_row,
                to_cents(bet.amount),
                TransactionKind.REFUND,
                f"Match rejected: {game}",
                now,
                match_id,
            )
            bet.status = BetStatus.VOIDED
            voided.append(bet)
        return voided

    # --- Reads ---

    def get_bet(self, bet_id: str) -> SpectatorBet | None:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM spectator_bets WHERE bet_id = ?", (bet_id,))
            row = cursor.fetchone()
            return self._row_to_bet(row) if row else None

    def get_bets_by_match(self, match_id: str) -> list[SpectatorBet]:
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT * FROM spectator_bets WHERE match_id = ? ORDER BY created_at ASC, rowid ASC",
                (match_id,),
            )
            return [self._row_to_bet(row) for row in cursor.fetchall()]

    def get_bets_by_user(self, user_id: str) -> list[SpectatorBet]:
        """Newest first."""
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT * FROM spectator_bets WHERE user_id = ? ORDER BY created_at DESC, rowid DESC",
                (user_id,),
            )
            return [self._row_to_bet(row) for row in cursor.fetchall()]

    def get_pool_totals(self, match_id: str) -> dict:
        """
        Pending stake totals per predicted winner.

        Returns:
            Dict mapping predicted_winner_id -> Decimal total, plus "total"
        """
        with self.connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT predicted_winner_id, COALESCE(SUM(amount_cents), 0) AS total
                FROM spectator_bets
                WHERE match_id = ? AND status = 'pending'
                GROUP BY predicted_winner_id
                """,
                (match_id,),
            )
            totals = {row["predicted_winner_id"]: from_cents(row["total"]) for row in cursor.fetchall()}
        totals["total"] = sum(totals.values(), from_cents(0))
        return totals
