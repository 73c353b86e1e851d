"""
Background sweep that settles matches once their dispute window has passed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from domain.models.match import Match
from services.settlement_service import SettlementService

logger = logging.getLogger("escrow.scheduler")

SWEEP_JOB_ID = "settlement_sweep"


@dataclass
class SweepSummary:
    """What one sweep did."""

    checked: int = 0
    settled: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)


class SettlementScheduler:
    """
    Periodically calls ``SettlementService.settle`` on every eligible match.

    ``find_eligible`` and ``run_sweep`` are plain methods so they can be
    driven directly with a fake clock. ``start`` registers ``run_sweep`` as
    a single-instance interval job on an APScheduler ``BackgroundScheduler``.
    """

    def __init__(
        self,
        settlement_service: SettlementService,
        interval_seconds: float = 30.0,
        batch_size: int | None = None,
        scheduler: BackgroundScheduler | None = None,
    ):
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
        self.settlement_service = settlement_service
        self.interval_seconds = interval_seconds
        self.batch_size = batch_size
        self.scheduler = scheduler or BackgroundScheduler()

    def find_eligible(self) -> list[Match]:
        return self.settlement_service.get_matches_ready_for_settlement(self.batch_size)

    def run_sweep(self) -> SweepSummary:
        """
        Settle every eligible match. One match failing does not stop the
        sweep; it stays eligible and is retried on the next run.
        """
        summary = SweepSummary()
        try:
            eligible = self.find_eligible()
        except Exception:
            logger.exception("Settlement sweep could not list eligible matches")
            return summary

        summary.checked = len(eligible)
        for match in eligible:
            try:
                outcome = self.settlement_service.settle(match.match_id)
            except Exception as exc:
                logger.exception(f"Settlement failed for match {match.match_id}")
                summary.failed[match.match_id] = str(exc)
                continue
            if outcome.executed:
                summary.settled.append(match.match_id)
            else:
                summary.skipped.append(match.match_id)

        if summary.checked:
            logger.info(
                f"Settlement sweep: {len(summary.settled)} settled, "
                f"{len(summary.skipped)} skipped, {len(summary.failed)} failed"
            )
        return summary

    def start(self) -> None:
        self.scheduler.add_job(
            self.run_sweep,
            IntervalTrigger(seconds=self.interval_seconds),
            id=SWEEP_JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        if not self.scheduler.running:
            self.scheduler.start()
        logger.info(f"Settlement scheduler started, sweeping every {self.interval_seconds}s")

    def stop(self, wait: bool = True) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)
            logger.info("Settlement scheduler stopped")

    @property
    def running(self) -> bool:
        return self.scheduler.running
