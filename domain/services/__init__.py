"""
Domain services containing pure business logic.
"""

from domain.services.payout_service import MatchPayout, PayoutService

__all__ = ["PayoutService", "MatchPayout"]
