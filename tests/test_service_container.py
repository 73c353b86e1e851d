"""Tests for ServiceContainer wiring."""

from infrastructure.service_container import ServiceContainer
from repositories.interfaces import IMatchRepository, ISpectatorBetRepository, IUserRepository, IWalletRepository
from services.escrow_operations import EscrowOperations


def test_initialize_wires_everything(service_config, clock):
    container = ServiceContainer(service_config, clock=clock)
    assert not container.is_initialized
    assert container.operations is None

    container.initialize()

    assert container.is_initialized
    assert isinstance(container.operations, EscrowOperations)
    assert isinstance(container.user_repo, IUserRepository)
    assert isinstance(container.wallet_repo, IWalletRepository)
    assert isinstance(container.match_repo, IMatchRepository)
    assert isinstance(container.spectator_bet_repo, ISpectatorBetRepository)
    assert container.match_repo.spectator_bet_repo is container.spectator_bet_repo
    assert container.dispute_service.settlement_service is container.settlement_service
    assert container.settlement_scheduler.settlement_service is container.settlement_service
    assert container.settlement_service.dispute_window_seconds == service_config.dispute_window_seconds
    assert container.spectator_bet_service.odds_multiplier == service_config.spectator_odds_multiplier


def test_initialize_is_idempotent(service_config, clock):
    container = ServiceContainer(service_config, clock=clock)
    container.initialize()
    match_service = container.match_service
    container.initialize()
    assert container.match_service is match_service


def test_start_scheduler_requires_initialize(service_config):
    container = ServiceContainer(service_config)
    try:
        container.start_scheduler()
    except RuntimeError as exc:
        assert "initialized" in str(exc)
    else:
        raise AssertionError("start_scheduler should fail before initialize")


def test_scheduler_start_and_shutdown(service_config, clock):
    container = ServiceContainer(service_config, clock=clock)
    container.initialize()
    container.start_scheduler()
    assert container.settlement_scheduler.running
    container.shutdown()
    assert not container.settlement_scheduler.running


def test_shared_clock_drives_services(service_config, clock):
    container = ServiceContainer(service_config, clock=clock)
    container.initialize()
    user = container.wallet_service.register_user("alice", "Alice")
    assert user.created_at == clock.now
