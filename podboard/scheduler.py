"""Periodic and on-demand refresh of the pod registry.

The timer jobs and the manual trigger all go through ``Registry.update``,
so they share the registry lock and never overlap.
"""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Dict, Optional

from apscheduler.schedulers.background import BackgroundScheduler

from podboard.pods.registry import Registry

logger = logging.getLogger(__name__)

IDLE = "idle"
REFRESHING = "refreshing"

UPDATE_JOB_ID = "pods-update"
INITIAL_UPDATE_JOB_ID = "pods-initial-update"


@dataclass
class RefreshResult:
    """Outcome of a manually triggered refresh."""

    started_at: datetime
    finished_at: datetime
    episode_counts: Dict[str, int] = field(default_factory=dict)

    @property
    def duration_seconds(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()


class RefreshScheduler:
    """Refreshes the registry at a fixed interval and on demand.

    One refresh runs immediately on start, then every
    ``interval_minutes``. Once started, a refresh runs to completion.

    Example:
        scheduler = RefreshScheduler(registry, interval_minutes=60)
        scheduler.start()
        ...
        result = scheduler.trigger()  # blocks behind a refresh in flight
        scheduler.shutdown()
    """

    def __init__(
        self,
        registry: Registry,
        interval_minutes: int = 60,
        scheduler: Optional[BackgroundScheduler] = None,
    ):
        """Initialize the refresh scheduler.

        Args:
            registry: Registry to refresh.
            interval_minutes: Minutes between scheduled refreshes.
            scheduler: APScheduler instance, created if omitted.
        """
        if interval_minutes < 1:
            raise ValueError(f"interval_minutes must be >= 1, got {interval_minutes}")

        self.registry = registry
        self.interval_minutes = interval_minutes
        self._scheduler = scheduler or BackgroundScheduler(timezone=UTC)

    @property
    def state(self) -> str:
        """``refreshing`` while an update holds the registry lock, else ``idle``."""
        return REFRESHING if self.registry.is_refreshing else IDLE

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def start(self) -> None:
        """Schedule an immediate refresh and the periodic refresh, then start."""
        logger.info("Scheduler starting. Triggering immediate first run.")
        self._scheduler.add_job(
            self._scheduled_update,
            "date",
            id=INITIAL_UPDATE_JOB_ID,
            misfire_grace_time=600,
        )
        self._scheduler.add_job(
            self._scheduled_update,
            "interval",
            minutes=self.interval_minutes,
            id=UPDATE_JOB_ID,
            misfire_grace_time=600,
            coalesce=True,
            max_instances=1,
        )
        self._scheduler.start()
        logger.info(f"Refreshing podcasts every {self.interval_minutes} minutes.")

    def shutdown(self, wait: bool = False) -> None:
        """Stop the timer. A refresh already in progress is not interrupted."""
        if self._scheduler.running:
            self._scheduler.shutdown(wait=wait)
            logger.info("Scheduler stopped.")

    def trigger(self) -> RefreshResult:
        """Refresh now and wait for completion.

        If a refresh is already running, this waits for it to finish and
        then runs a full refresh of its own.
        """
        logger.info("Manual refresh requested")
        report = self.registry.update()
        return RefreshResult(
            started_at=report.started_at,
            finished_at=report.finished_at or datetime.now(UTC),
            episode_counts=dict(report.episode_counts),
        )

    def _scheduled_update(self) -> None:
        try:
            self.registry.update()
        except Exception:
            logger.exception("Scheduled refresh failed")
