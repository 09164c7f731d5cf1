"""Fetch and extract strategies for pods."""

from .base import MAX_EPISODES, PodParser, create_session, parse_date
from .rss import RssParser
from .scrape import ExtractionError, ScrapeParser

__all__ = [
    "ExtractionError",
    "MAX_EPISODES",
    "PodParser",
    "RssParser",
    "ScrapeParser",
    "create_session",
    "parse_date",
]
