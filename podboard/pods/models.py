"""Episode and pod data types.

A Pod owns the episodes most recently fetched by its parser. Refreshing a
pod replaces its timestamp and episode list in a single assignment.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Iterable, List, NamedTuple, Optional, Tuple

if TYPE_CHECKING:
    from .parsers.base import PodParser

logger = logging.getLogger(__name__)

# Upper bound on episodes kept per pod
MAX_EPISODES = 10


@dataclass(frozen=True)
class Episode:
    """One media item extracted from a feed."""

    title: str
    url: str
    subtitle: str = ""
    published: Optional[datetime] = None


class PodState(NamedTuple):
    """Timestamp and episodes produced by one refresh."""

    last_update: datetime
    episodes: Tuple[Episode, ...]


def sort_episodes(episodes: Iterable[Episode]) -> List[Episode]:
    """Sort episodes most recent first.

    Dated episodes come before undated ones, newest first. Ties and undated
    episodes are ordered by descending title, then descending URL.
    """
    # Python's sort is stable, so sort by the least significant key first
    ordered = sorted(episodes, key=lambda ep: (ep.title, ep.url), reverse=True)
    ordered.sort(key=_date_key, reverse=True)
    return ordered


def _date_key(episode: Episode) -> Tuple[bool, datetime]:
    published = episode.published
    if published is None:
        return (False, _MIN_DATE)
    if published.tzinfo is None:
        published = published.replace(tzinfo=UTC)
    return (True, published)


_MIN_DATE = datetime.min.replace(tzinfo=UTC)


class Pod:
    """A named feed with its own parser and current episode list.

    Example:
        pod = Pod("Go Time", RssParser("https://changelog.com/gotime/feed"))
        pod.refresh()
        for episode in pod.episodes:
            print(episode.title, episode.url)
    """

    def __init__(self, name: str, parser: "PodParser"):
        if not name:
            raise ValueError("Pod name must not be empty")

        self.name = name
        self.parser = parser
        self._state = PodState(last_update=datetime.now(UTC), episodes=())

    @property
    def state(self) -> PodState:
        """Current timestamp and episodes as one consistent value."""
        return self._state

    @property
    def last_update(self) -> datetime:
        return self._state.last_update

    @property
    def episodes(self) -> Tuple[Episode, ...]:
        return self._state.episodes

    def refresh(self) -> PodState:
        """Re-fetch episodes and replace the stored state.

        Never raises. A parser failure leaves the pod with no episodes and
        a new timestamp.

        Returns:
            The new PodState.
        """
        try:
            episodes = list(self.parser.episodes())
        except Exception:
            logger.exception(f"Parser for '{self.name}' failed")
            episodes = []

        state = PodState(
            last_update=datetime.now(UTC),
            episodes=tuple(sort_episodes(episodes)[:MAX_EPISODES]),
        )
        self._state = state
        return state

    def __repr__(self) -> str:
        return f"Pod(name={self.name!r}, episodes={len(self.episodes)})"
