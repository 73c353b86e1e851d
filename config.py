"""
Centralized configuration for the wager escrow core.
"""

from __future__ import annotations

import os
from decimal import Decimal, InvalidOperation

from dotenv import load_dotenv

load_dotenv()


def _parse_int(env_var: str, default: int) -> int:
    raw = os.getenv(env_var)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _parse_float(env_var: str, default: float) -> float:
    raw = os.getenv(env_var)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _parse_bool(env_var: str, default: bool) -> bool:
    raw = os.getenv(env_var)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


def _parse_decimal(env_var: str, default: str) -> Decimal:
    raw = os.getenv(env_var)
    if raw is None:
        return Decimal(default)
    try:
        return Decimal(raw.strip())
    except InvalidOperation:
        return Decimal(default)


DB_PATH = os.getenv("DB_PATH", "escrow.db")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Dispute window after admin approval before the pot moves
DISPUTE_WINDOW_SECONDS = _parse_int("DISPUTE_WINDOW_SECONDS", 300)  # 5 minutes

# Fee taken from the pot on settlement
PLATFORM_FEE_RATE = _parse_decimal("PLATFORM_FEE_RATE", "0.10")
# Owner id of the single shared platform fee wallet
PLATFORM_OWNER_ID = os.getenv("PLATFORM_OWNER_ID", "platform")

# Spectator bets pay out at fixed odds, frozen per bet at placement
SPECTATOR_ODDS_MULTIPLIER = _parse_decimal("SPECTATOR_ODDS_MULTIPLIER", "1.90")
SPECTATOR_BETTING_ENABLED = _parse_bool("SPECTATOR_BETTING_ENABLED", True)

# Upper bound for any single stake, deposit or withdrawal
MAX_BET_AMOUNT = _parse_decimal("MAX_BET_AMOUNT", "10000.00")

DISPUTE_REASON_MIN_LENGTH = _parse_int("DISPUTE_REASON_MIN_LENGTH", 10)
DISPUTE_RESOLUTION_MIN_LENGTH = _parse_int("DISPUTE_RESOLUTION_MIN_LENGTH", 10)

# Settlement sweep
SETTLEMENT_SWEEP_INTERVAL_SECONDS = _parse_float("SETTLEMENT_SWEEP_INTERVAL_SECONDS", 30.0)
SETTLEMENT_SWEEP_ENABLED = _parse_bool("SETTLEMENT_SWEEP_ENABLED", True)
SETTLEMENT_SWEEP_BATCH_SIZE = _parse_int("SETTLEMENT_SWEEP_BATCH_SIZE", 100)
