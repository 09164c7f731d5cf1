"""Pod registry, parsers and refresh engine."""

from .models import MAX_EPISODES, Episode, Pod, PodState, sort_episodes
from .parsers import PodParser, RssParser, ScrapeParser
from .registry import EpisodeSnapshot, PodSnapshot, Registry, UpdateReport
from .sources import DEFAULT_SOURCES, SourceConfig, build_registry

__all__ = [
    "DEFAULT_SOURCES",
    "Episode",
    "EpisodeSnapshot",
    "MAX_EPISODES",
    "Pod",
    "PodParser",
    "PodSnapshot",
    "PodState",
    "Registry",
    "RssParser",
    "ScrapeParser",
    "SourceConfig",
    "UpdateReport",
    "build_registry",
    "sort_episodes",
]
