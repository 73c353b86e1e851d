"""
Amount and balance validation utilities for the escrow core.

Centralizes the amount checks used by wallet, match and spectator-bet
operations so every entry point rejects the same inputs the same way.
"""

from decimal import Decimal
from typing import TYPE_CHECKING

from config import MAX_BET_AMOUNT
from services import error_codes
from services.errors import InsufficientFundsError, NotFoundError, ValidationError
from utils.money import from_cents, to_cents, to_decimal

if TYPE_CHECKING:
    from domain.models.wallet import WalletPurpose
    from repositories.interfaces import IWalletRepository


def parse_amount(amount, max_amount: Decimal | None = None) -> Decimal:
    """
    Validate a user-supplied money amount.

    Args:
        amount: Decimal, int, str or float
        max_amount: Upper bound (defaults to config.MAX_BET_AMOUNT)

    Returns:
        The amount as a Decimal with two decimal places

    Raises:
        ValidationError: Not a number, not positive, sub-cent, or above the cap

    Examples:
        >>> parse_amount("12.50")
        Decimal('12.50')

        >>> parse_amount("0.001")
        Traceback (most recent call last):
        ...
        ValidationError: Amount must not have more than two decimal places
    """
    if max_amount is None:
        max_amount = MAX_BET_AMOUNT

    try:
        value = to_decimal(amount)
    except ValueError:
        raise ValidationError(f"Invalid amount: {amount!r}", code=error_codes.INVALID_AMOUNT) from None

    if value <= 0:
        raise ValidationError("Amount must be positive", code=error_codes.INVALID_AMOUNT)
    # Cap before scaling to cents so huge exponents never reach Decimal arithmetic
    if value > max_amount:
        raise ValidationError(
            f"Amount exceeds the maximum of {max_amount}", code=error_codes.INVALID_AMOUNT
        )
    try:
        cents = to_cents(value)
    except (ValueError, ArithmeticError):
        raise ValidationError(
            "Amount must not have more than two decimal places", code=error_codes.INVALID_AMOUNT
        ) from None
    return from_cents(cents)


def validate_can_spend(
    wallet_repo: "IWalletRepository",
    owner_id: str,
    purpose: "WalletPurpose",
    amount: Decimal,
) -> Decimal:
    """
    Pre-check that a wallet holds at least ``amount``.

    Only a fast-fail for friendlier messages; the guarded debit inside the
    repository transaction is what actually enforces the balance.

    Returns:
        The balance remaining after the spend
    """
    wallet = wallet_repo.get_wallet_for(owner_id, purpose)
    if wallet is None:
        raise NotFoundError(
            f"No {purpose.value} wallet for {owner_id}", code=error_codes.WALLET_NOT_FOUND
        )
    if wallet.balance < amount:
        raise InsufficientFundsError(
            f"Insufficient funds in {purpose.value} wallet: have {wallet.balance}, need {amount}"
        )
    return wallet.balance - amount
