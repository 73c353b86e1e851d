"""
Pytest fixtures for tests.

Performance optimization: Uses a session-scoped schema template so the
migrations run once per session. Each test copies the resulting database
file instead of re-initializing the schema.

Time never comes from the wall clock in these tests: every service shares a
``FakeClock`` that tests advance explicitly to simulate the dispute window.
"""

import shutil
import sqlite3
from contextlib import contextmanager
from decimal import Decimal

import pytest

from database import Database
from domain.models.user import ADMIN_LEVEL_ADMIN
from domain.models.wallet import WalletPurpose
from infrastructure.service_container import ServiceConfig, ServiceContainer
from repositories.match_repository import MatchRepository
from repositories.spectator_bet_repository import SpectatorBetRepository
from repositories.user_repository import UserRepository
from repositories.wallet_repository import WalletRepository

START_TIME = 1_700_000_000
DISPUTE_WINDOW = 300


class FakeClock:
    """Callable unix-time source that only moves when told to."""

    def __init__(self, now: int = START_TIME):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        self.now += seconds
        return self.now


@pytest.fixture(scope="session")
def _schema_template_path(tmp_path_factory):
    """
    Create a schema template database once per test session.

    All migrations run ONCE here. Tests copy from this template instead of
    running schema initialization each time.
    """
    template_dir = tmp_path_factory.mktemp("schema_template")
    template_path = str(template_dir / "template.db")
    Database(template_path)
    yield template_path


@pytest.fixture
def temp_db_path(tmp_path):
    """Create a temporary database path (no schema)."""
    path = str(tmp_path / "temp.db")
    yield path


@pytest.fixture
def repo_db_path(_schema_template_path, tmp_path):
    """Create a temporary database with initialized schema for repository tests."""
    test_db_path = str(tmp_path / "test.db")
    shutil.copy2(_schema_template_path, test_db_path)
    yield test_db_path


@pytest.fixture
def clock():
    return FakeClock()


# =============================================================================
# REPOSITORY FIXTURES
# =============================================================================


@pytest.fixture
def user_repository(repo_db_path):
    return UserRepository(repo_db_path)


@pytest.fixture
def wallet_repository(repo_db_path):
    return WalletRepository(repo_db_path)


@pytest.fixture
def spectator_bet_repository(repo_db_path):
    return SpectatorBetRepository(repo_db_path)


@pytest.fixture
def match_repository(repo_db_path, spectator_bet_repository):
    return MatchRepository(repo_db_path, spectator_bet_repo=spectator_bet_repository)


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def service_config(repo_db_path):
    """Explicit settings so tests never depend on the environment."""
    return ServiceConfig(
        db_path=repo_db_path,
        dispute_window_seconds=DISPUTE_WINDOW,
        platform_fee_rate=Decimal("0.10"),
        platform_owner_id="platform",
        spectator_odds_multiplier=Decimal("1.90"),
        spectator_betting_enabled=True,
        max_bet_amount=Decimal("10000.00"),
        dispute_reason_min_length=10,
        dispute_resolution_min_length=10,
        sweep_interval_seconds=30.0,
        sweep_batch_size=100,
    )


@pytest.fixture
def container(service_config, clock):
    container = ServiceContainer(service_config, clock=clock)
    container.initialize()
    yield container
    container.shutdown()


@pytest.fixture
def ops(container):
    """The Result-returning operation boundary."""
    return container.operations


def make_user(container, user_id, personal="0", spectator="0", admin_level=0):
    """Register a user and fund their wallets through the normal deposit path."""
    container.wallet_service.register_user(user_id, user_id.title(), admin_level)
    if Decimal(personal) > 0:
        container.wallet_service.deposit_to_wallet(user_id, WalletPurpose.PERSONAL, personal)
    if Decimal(spectator) > 0:
        container.wallet_service.deposit_to_wallet(user_id, WalletPurpose.SPECTATOR, spectator)
    return user_id


def balance(container, user_id, purpose) -> Decimal:
    return container.wallet_service.get_wallet(user_id, purpose).balance


def platform_balance(container) -> Decimal:
    return container.wallet_service.get_platform_wallet().balance


@pytest.fixture
def player1(container):
    return make_user(container, "player1", personal="100.00")


@pytest.fixture
def player2(container):
    return make_user(container, "player2", personal="100.00")


@pytest.fixture
def admin(container):
    return make_user(container, "admin", admin_level=ADMIN_LEVEL_ADMIN)


@pytest.fixture
def spectator(container):
    return make_user(container, "spectator", spectator="100.00")


@pytest.fixture
def live_match(container, player1, player2):
    """A 50.00 match between player1 and player2, already live."""
    match = container.match_service.create_match(player1, "chess", "50.00")
    return container.match_service.join_match(player2, match.match_id)


@pytest.fixture
def approved_match(container, live_match, player1, admin):
    """live_match reported and approved with player1 as winner."""
    container.match_service.report_winner(player1, live_match.match_id, player1)
    return container.match_service.admin_approve_match(admin, live_match.match_id, player1)


@contextmanager
def hold_write_lock(db_path):
    """Keep the SQLite write lock taken from a separate connection."""
    holder = sqlite3.connect(db_path, isolation_level=None)
    holder.execute("BEGIN IMMEDIATE")
    try:
        yield
    finally:
        holder.execute("ROLLBACK")
        holder.close()
