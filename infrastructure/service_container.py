"""
Service container for dependency injection and initialization.

This module centralizes repository and service creation and wiring.

Usage:
    container = ServiceContainer(ServiceConfig(db_path="escrow.db"))
    container.initialize()

    # Access the operation boundary
    result = container.operations.create_match(user_id, "chess", "25.00")

    # Run the settlement sweep in the background
    container.start_scheduler()
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

import config
from database import Database
from domain.services.payout_service import PayoutService
from repositories.match_repository import MatchRepository
from repositories.spectator_bet_repository import SpectatorBetRepository
from repositories.user_repository import UserRepository
from repositories.wallet_repository import WalletRepository
from services.dispute_service import DisputeService
from services.escrow_operations import EscrowOperations
from services.match_service import MatchService
from services.settlement_scheduler import SettlementScheduler
from services.settlement_service import SettlementService
from services.spectator_bet_service import SpectatorBetService
from services.wallet_service import WalletService

logger = logging.getLogger("escrow.infrastructure.container")


@dataclass
class RepositoryContainer:
    """Container for all repositories."""

    user: UserRepository | None = None
    wallet: WalletRepository | None = None
    match: MatchRepository | None = None
    spectator_bet: SpectatorBetRepository | None = None


@dataclass
class ServiceConfig:
    """Configuration for service initialization."""

    # Database
    db_path: str = config.DB_PATH

    # Settlement
    dispute_window_seconds: int = config.DISPUTE_WINDOW_SECONDS
    platform_fee_rate: Decimal = config.PLATFORM_FEE_RATE
    platform_owner_id: str = config.PLATFORM_OWNER_ID

    # Spectator betting
    spectator_odds_multiplier: Decimal = config.SPECTATOR_ODDS_MULTIPLIER
    spectator_betting_enabled: bool = config.SPECTATOR_BETTING_ENABLED

    # Limits
    max_bet_amount: Decimal = config.MAX_BET_AMOUNT
    dispute_reason_min_length: int = config.DISPUTE_REASON_MIN_LENGTH
    dispute_resolution_min_length: int = config.DISPUTE_RESOLUTION_MIN_LENGTH

    # Scheduler
    sweep_interval_seconds: float = config.SETTLEMENT_SWEEP_INTERVAL_SECONDS
    sweep_batch_size: int | None = config.SETTLEMENT_SWEEP_BATCH_SIZE


class ServiceContainer:
    """
    Central container for all escrow services.

    Handles proper initialization order and dependency injection.

    Example:
        container = ServiceContainer(config)
        container.initialize()

        # Services are now available
        match_service = container.match_service
    """

    def __init__(self, config: ServiceConfig | None = None, clock: Callable[[], int] | None = None):
        """
        Initialize the container with configuration.

        Args:
            config: Service configuration (uses defaults if None)
            clock: Optional unix-time source shared by every service
        """
        self.config = config or ServiceConfig()
        self.clock = clock
        self._initialized = False
        self._repos = RepositoryContainer()

        self._services: dict[str, Any] = {}

    @property
    def is_initialized(self) -> bool:
        """Check if container has been initialized."""
        return self._initialized

    def initialize(self) -> None:
        """
        Initialize all services in correct order.

        This method is idempotent - calling it multiple times has no effect.
        """
        if self._initialized:
            logger.debug("ServiceContainer already initialized, skipping")
            return

        logger.info("Initializing ServiceContainer...")

        self._init_database()
        self._init_repositories()
        self._init_services()

        self._initialized = True
        logger.info("ServiceContainer initialization complete")

    def _init_database(self) -> None:
        """Initialize database and run migrations."""
        logger.debug(f"Initializing database at {self.config.db_path}")
        Database(self.config.db_path)

    def _init_repositories(self) -> None:
        logger.debug("Initializing repositories")

        db_path = self.config.db_path
        owner = self.config.platform_owner_id
        self._repos.user = UserRepository(db_path, owner)
        self._repos.wallet = WalletRepository(db_path, owner)
        self._repos.spectator_bet = SpectatorBetRepository(db_path, owner)
        self._repos.match = MatchRepository(db_path, owner, self._repos.spectator_bet)

    def _init_services(self) -> None:
        logger.debug("Initializing services")

        cfg = self.config
        self._services["wallet"] = WalletService(
            wallet_repo=self._repos.wallet,
            user_repo=self._repos.user,
            max_amount=cfg.max_bet_amount,
            clock=self.clock,
        )
        self._services["match"] = MatchService(
            match_repo=self._repos.match,
            user_repo=self._repos.user,
            wallet_repo=self._repos.wallet,
            max_bet_amount=cfg.max_bet_amount,
            clock=self.clock,
        )
        self._services["settlement"] = SettlementService(
            match_repo=self._repos.match,
            payout_service=PayoutService(cfg.platform_fee_rate),
            dispute_window_seconds=cfg.dispute_window_seconds,
            clock=self.clock,
        )
        self._services["spectator_bet"] = SpectatorBetService(
            spectator_bet_repo=self._repos.spectator_bet,
            user_repo=self._repos.user,
            wallet_repo=self._repos.wallet,
            odds_multiplier=cfg.spectator_odds_multiplier,
            enabled=cfg.spectator_betting_enabled,
            max_bet_amount=cfg.max_bet_amount,
            clock=self.clock,
        )
        self._services["dispute"] = DisputeService(
            match_repo=self._repos.match,
            user_repo=self._repos.user,
            settlement_service=self._services["settlement"],
            dispute_window_seconds=cfg.dispute_window_seconds,
            reason_min_length=cfg.dispute_reason_min_length,
            resolution_min_length=cfg.dispute_resolution_min_length,
            clock=self.clock,
        )
        self._services["operations"] = EscrowOperations(
            wallet_service=self._services["wallet"],
            match_service=self._services["match"],
            settlement_service=self._services["settlement"],
            spectator_bet_service=self._services["spectator_bet"],
            dispute_service=self._services["dispute"],
        )
        self._services["scheduler"] = SettlementScheduler(
            settlement_service=self._services["settlement"],
            interval_seconds=cfg.sweep_interval_seconds,
            batch_size=cfg.sweep_batch_size,
        )

    # =========================================================================
    # Scheduler lifecycle
    # =========================================================================

    def start_scheduler(self) -> None:
        if not self._initialized:
            raise RuntimeError("ServiceContainer must be initialized before starting the scheduler")
        self.settlement_scheduler.start()

    def shutdown(self) -> None:
        scheduler = self._services.get("scheduler")
        if scheduler is not None:
            scheduler.stop()

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def user_repo(self) -> UserRepository:
        return self._repos.user

    @property
    def wallet_repo(self) -> WalletRepository:
        return self._repos.wallet

    @property
    def match_repo(self) -> MatchRepository:
        return self._repos.match

    @property
    def spectator_bet_repo(self) -> SpectatorBetRepository:
        return self._repos.spectator_bet

    @property
    def wallet_service(self) -> WalletService | None:
        return self._services.get("wallet")

    @property
    def match_service(self) -> MatchService | None:
        return self._services.get("match")

    @property
    def settlement_service(self) -> SettlementService | None:
        return self._services.get("settlement")

    @property
    def spectator_bet_service(self) -> SpectatorBetService | None:
        return self._services.get("spectator_bet")

    @property
    def dispute_service(self) -> DisputeService | None:
        return self._services.get("dispute")

    @property
    def operations(self) -> EscrowOperations | None:
        """Get the Result-returning operation boundary."""
        return self._services.get("operations")

    @property
    def settlement_scheduler(self) -> SettlementScheduler | None:
        return self._services.get("scheduler")
