"""Registry of pods and the refresh engine.

A single lock guards the pod map and every pod's state. Refreshes hold the
lock for the whole cycle, so readers always see either the state before or
after a full refresh, never a mix.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Dict, List, Optional, Tuple

from .models import Pod

logger = logging.getLogger(__name__)

LAST_UPDATE_FORMAT = "%Y-%m-%d %H:%M"


@dataclass(frozen=True)
class EpisodeSnapshot:
    """Render-ready episode."""

    title: str
    url: str


@dataclass(frozen=True)
class PodSnapshot:
    """Render-ready, point-in-time copy of a pod."""

    name: str
    last_update: datetime
    episodes: Tuple[EpisodeSnapshot, ...]

    @property
    def last_update_formatted(self) -> str:
        return self.last_update.strftime(LAST_UPDATE_FORMAT)


@dataclass
class UpdateReport:
    """Result of one refresh cycle."""

    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    finished_at: Optional[datetime] = None
    episode_counts: Dict[str, int] = field(default_factory=dict)

    @property
    def duration_seconds(self) -> float:
        """Duration of the cycle in seconds."""
        end = self.finished_at or datetime.now(UTC)
        return (end - self.started_at).total_seconds()


class Registry:
    """All pods tracked by the process, guarded by one lock.

    Pods are registered at startup and never removed. ``update`` refreshes
    every pod while holding the lock; ``snapshot`` reads under the same lock.

    Example:
        registry = Registry()
        registry.register(Pod("Kodsnack", RssParser("https://kodsnack.libsyn.com/rss")))
        registry.update()
        for pod in registry.snapshot():
            print(pod.name, pod.last_update_formatted, len(pod.episodes))
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._pods: Dict[str, Pod] = {}
        self._refreshing = False
        self._sealed = False

    def register(self, pod: Pod) -> None:
        """Add a pod before the first refresh.

        Raises:
            ValueError: If the name is already registered or the registry
                has already been refreshed.
        """
        with self._lock:
            if self._sealed:
                raise ValueError(
                    f"Cannot register '{pod.name}': registry membership is fixed after the first update"
                )
            if pod.name in self._pods:
                raise ValueError(f"Pod '{pod.name}' is already registered")
            self._pods[pod.name] = pod

        logger.debug(f"Registered pod '{pod.name}' ({pod.parser!r})")

    def get(self, name: str) -> Optional[PodSnapshot]:
        """Copy the current state of one pod, or None if it isn't registered.

        Blocks while a refresh is in progress.
        """
        with self._lock:
            pod = self._pods.get(name)
            return _snapshot_of(pod) if pod is not None else None

    def names(self) -> List[str]:
        with self._lock:
            return list(self._pods)

    def __len__(self) -> int:
        with self._lock:
            return len(self._pods)

    @property
    def is_refreshing(self) -> bool:
        """True while an update holds the lock."""
        return self._refreshing

    def update(self) -> UpdateReport:
        """Refresh every pod, one after another, under the registry lock.

        Blocks until any refresh already in progress has finished. A pod
        whose parser fails ends up with no episodes; other pods are
        unaffected.

        Returns:
            UpdateReport with per-pod episode counts and timing.
        """
        with self._lock:
            self._refreshing = True
            self._sealed = True
            report = UpdateReport()
            try:
                logger.info("pods: Updating podcasts")
                for pod in self._pods.values():
                    logger.info(f"pods:\t{pod.name}... ")
                    state = pod.refresh()
                    report.episode_counts[pod.name] = len(state.episodes)
                    logger.info(f"pods:\t{pod.name}: {len(state.episodes)} episodes")
            finally:
                report.finished_at = datetime.now(UTC)
                self._refreshing = False

        logger.info(
            f"pods: Updated {len(report.episode_counts)} podcasts "
            f"in {report.duration_seconds:.1f}s"
        )
        return report

    def snapshot(self) -> Tuple[PodSnapshot, ...]:
        """Copy the current state of every pod, in registration order.

        Blocks while a refresh is in progress.
        """
        with self._lock:
            return tuple(_snapshot_of(pod) for pod in self._pods.values())


def _snapshot_of(pod: Pod) -> PodSnapshot:
    # Callers hold the registry lock
    state = pod.state
    return PodSnapshot(
        name=pod.name,
        last_update=state.last_update,
        episodes=tuple(
            EpisodeSnapshot(title=ep.title, url=ep.url) for ep in state.episodes
        ),
    )
