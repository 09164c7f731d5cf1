"""RSS/Atom feed parser.

Fetches a syndication feed over HTTP and decodes it with feedparser,
keeping the first MAX_EPISODES items that carry a media enclosure.
"""

import logging
from datetime import UTC, datetime
from typing import List, Optional, Union

import feedparser
import requests

from ..models import Episode
from .base import MAX_EPISODES, PodParser, parse_date

logger = logging.getLogger(__name__)


class RssParser(PodParser):
    """Parser for podcast RSS/Atom feeds.

    Example:
        parser = RssParser("https://kodsnack.libsyn.com/rss")
        for episode in parser.episodes():
            print(f"{episode.title}: {episode.url}")
    """

    def __init__(
        self,
        feed_url: str,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize the feed parser.

        Args:
            feed_url: URL of the RSS/Atom feed
            session: HTTP session to fetch the feed with
            timeout: Request timeout in seconds, None for no timeout
        """
        super().__init__(session=session, timeout=timeout)
        self.feed_url = feed_url

    @property
    def locator(self) -> str:
        return self.feed_url

    def episodes(self) -> List[Episode]:
        """Fetch the feed and extract its most recent episodes.

        Returns:
            Up to MAX_EPISODES episodes, or an empty list if the feed could
            not be fetched or decoded.
        """
        try:
            response = self._get(self.feed_url)
        except requests.RequestException as e:
            logger.error(f"Failed to fetch feed {self.feed_url}: {e}")
            return []

        return self.parse_content(response.content)

    def parse_content(self, content: Union[bytes, str]) -> List[Episode]:
        """Decode feed content that has already been fetched.

        Args:
            content: RSS/Atom document

        Returns:
            Up to MAX_EPISODES episodes from the first items of the feed.
        """
        feed = feedparser.parse(content)

        if feed.bozo and not feed.entries:
            logger.error(f"Failed to parse feed {self.feed_url}: {feed.get('bozo_exception')}")
            return []

        if feed.bozo:
            logger.warning(f"Feed parsing warning for {self.feed_url}: {feed.get('bozo_exception')}")

        episodes = []
        for entry in feed.entries[:MAX_EPISODES]:
            episode = self._parse_entry(entry)
            if episode:
                episodes.append(episode)

        logger.debug(f"Parsed {len(episodes)} episodes from {self.feed_url}")
        return episodes

    def _parse_entry(self, entry: feedparser.FeedParserDict) -> Optional[Episode]:
        """Project a feed entry into an Episode.

        Returns:
            Episode, or None if the entry has no enclosure URL
        """
        url = self._extract_enclosure_url(entry)
        if not url:
            logger.debug(f"Skipping entry without enclosure: {entry.get('title')}")
            return None

        return Episode(
            title=entry.get("title", ""),
            subtitle=entry.get("itunes_subtitle") or entry.get("subtitle") or "",
            url=url,
            published=self._parse_published(entry),
        )

    def _extract_enclosure_url(self, entry: feedparser.FeedParserDict) -> Optional[str]:
        for enclosure in entry.get("enclosures", []):
            url = enclosure.get("href") or enclosure.get("url")
            if url:
                return url

        for link in entry.get("links", []):
            if link.get("rel") == "enclosure" and link.get("href"):
                return link.get("href")

        return None

    def _parse_published(self, entry: feedparser.FeedParserDict) -> Optional[datetime]:
        # feedparser normalizes recognised dates to a UTC struct_time
        if entry.get("published_parsed"):
            try:
                return datetime(*entry.published_parsed[:6], tzinfo=UTC)
            except (TypeError, ValueError):
                pass

        return parse_date(entry.get("published"))
