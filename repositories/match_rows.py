"""
Row mapping for the matches table, shared by the repositories that read
match state inside their own transactions.
"""

from __future__ import annotations

import sqlite3

from domain.models.match import Dispute, DisputeStatus, Match, MatchStatus, Proposal
from services import error_codes
from services.errors import NotFoundError
from utils.money import from_cents


def row_to_match(row: sqlite3.Row) -> Match:
    proposal = None
    if row["proposed_by_id"] is not None and row["proposed_amount_cents"] is not None:
        proposal = Proposal(
            amount=from_cents(row["proposed_amount_cents"]),
            proposed_by_id=row["proposed_by_id"],
        )

    dispute = None
    dispute_status = DisputeStatus(row["dispute_status"] or DisputeStatus.NONE.value)
    if dispute_status != DisputeStatus.NONE:
        dispute = Dispute(
            status=dispute_status,
            reason=row["dispute_reason"] or "",
            raised_by_id=row["dispute_raised_by_id"],
            evidence=row["dispute_evidence"],
            resolved_by_id=row["dispute_resolved_by_id"],
            resolution=row["dispute_resolution"],
        )

    return Match(
        match_id=row["match_id"],
        game=row["game"],
        bet_amount=from_cents(row["bet_amount_cents"]),
        player1_id=row["player1_id"],
        status=MatchStatus(row["status"]),
        player2_id=row["player2_id"],
        reported_winner_id=row["reported_winner_id"],
        winner_id=row["winner_id"],
        spectator_count=row["spectator_count"],
        proposal=proposal,
        dispute=dispute,
        approved_at=row["approved_at"],
        settlement_executed_at=row["settlement_executed_at"],
        created_at=row["created_at"],
    )


def fetch_match(cursor, match_id: str) -> Match:
    """
    Read the current persisted match inside the caller's transaction.

    Raises:
        NotFoundError: If no such match exists
    """
    cursor.execute("SELECT * FROM matches WHERE match_id = ?", (match_id,))
    row = cursor.fetchone()
    if row is None:
        raise NotFoundError(f"Match {match_id} not found", code=error_codes.MATCH_NOT_FOUND)
    return row_to_match(row)
