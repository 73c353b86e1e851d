"""
Settlement worker entry for the wager escrow core.

Opens the database, wires the services and runs the settlement sweep until
interrupted.
"""

import logging
import time

import config
from infrastructure.service_container import ServiceContainer

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    force=True,
)
logger = logging.getLogger("escrow.worker")


def main():
    """Run the settlement worker."""
    container = ServiceContainer()
    container.initialize()

    if not config.SETTLEMENT_SWEEP_ENABLED:
        logger.info("Settlement sweep disabled (SETTLEMENT_SWEEP_ENABLED=false); nothing to run")
        return

    container.start_scheduler()
    logger.info(
        f"Settlement worker started on {config.DB_PATH} "
        f"(every {config.SETTLEMENT_SWEEP_INTERVAL_SECONDS}s)"
    )
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Settlement worker stopped by user (Ctrl+C)")
    finally:
        container.shutdown()


if __name__ == "__main__":
    main()
