"""
Standard error codes for service layer.

These error codes allow callers of the escrow operations to programmatically
handle specific error conditions without parsing error message text.

Usage:
    from services import error_codes
    from services.result import Result

    if match is None:
        return Result.fail("Match not found", code=error_codes.MATCH_NOT_FOUND)
"""

# General errors
NOT_FOUND = "not_found"
VALIDATION_ERROR = "validation_error"
STATE_ERROR = "state_error"
PERMISSION_DENIED = "permission_denied"

# Identity errors
USER_NOT_FOUND = "user_not_found"
USER_ALREADY_EXISTS = "user_already_exists"
USER_SUSPENDED = "user_suspended"
ADMIN_REQUIRED = "admin_required"
NOT_A_PARTICIPANT = "not_a_participant"

# Wallet errors
WALLET_NOT_FOUND = "wallet_not_found"
INSUFFICIENT_FUNDS = "insufficient_funds"
INVALID_AMOUNT = "invalid_amount"
INVALID_WALLET_TYPE = "invalid_wallet_type"

# Match errors
MATCH_NOT_FOUND = "match_not_found"
MATCH_NOT_AVAILABLE = "match_not_available"
INVALID_WINNER = "invalid_winner"
PROPOSAL_PENDING = "proposal_pending"
NO_PENDING_PROPOSAL = "no_pending_proposal"

# Dispute errors
DISPUTE_WINDOW_CLOSED = "dispute_window_closed"
DISPUTE_ALREADY_RAISED = "dispute_already_raised"

# Settlement errors
SETTLEMENT_ALREADY_EXECUTED = "settlement_already_executed"
NOT_ELIGIBLE_FOR_SETTLEMENT = "not_eligible_for_settlement"

# Spectator betting errors
BETTING_CLOSED = "betting_closed"
BETTING_DISABLED = "betting_disabled"
