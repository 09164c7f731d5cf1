"""Base class and shared helpers for pod parsers.

A parser turns a source locator into a list of Episodes. Parsers never
raise: transport, decode and extraction failures are logged and reported
as an empty list.
"""

import logging
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from typing import List, Optional

import requests
from dateutil import parser as date_parser

from ..models import MAX_EPISODES, Episode

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "podboard/1.0"

__all__ = [
    "DEFAULT_USER_AGENT",
    "MAX_EPISODES",
    "PodParser",
    "create_session",
    "parse_date",
]


def create_session(user_agent: Optional[str] = None) -> requests.Session:
    """Create a requests session for feed fetches.

    No retry adapter is mounted: a failed fetch is retried at the next
    refresh cycle, not within the current one.
    """
    session = requests.Session()
    session.headers.update({"User-Agent": user_agent or DEFAULT_USER_AGENT})
    return session


def parse_date(value: Optional[str]) -> Optional[datetime]:
    """Parse a publication date, returning None when it can't be parsed.

    Accepts RFC 2822 (``Mon, 01 Jan 2024 12:00:00 +0000``) and ISO 8601
    style strings. Naive results are assumed to be UTC.
    """
    if not value or not value.strip():
        return None

    try:
        parsed = date_parser.parse(value)
    except (ValueError, OverflowError, TypeError) as e:
        logger.debug(f"Ignoring unparsable date {value!r}: {e}")
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


class PodParser(ABC):
    """Fetch and extract strategy bound to a pod."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        """
        Args:
            session: HTTP session to use. A new one is created if omitted.
            timeout: Per-request timeout in seconds, None for no timeout.
        """
        self.session = session or create_session()
        self.timeout = timeout

    @property
    @abstractmethod
    def locator(self) -> str:
        """URL this parser reads from."""
        pass

    @abstractmethod
    def episodes(self) -> List[Episode]:
        """Fetch up to MAX_EPISODES episodes.

        Returns:
            Episodes in no particular order, or an empty list on failure.
        """
        pass

    def _get(self, url: str) -> requests.Response:
        """GET a URL and raise for HTTP error statuses."""
        response = self.session.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.locator!r})"
