"""Scraping parser for sites without media links in their landing page.

The landing page embeds its episode list as JSON in an inline script.
Each episode's media URL is only present on the episode's own page, so
every page is fetched concurrently and searched with a regular expression.
"""

import json
import logging
import re
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, Dict, List, Optional, Sequence, Union
from urllib.parse import urljoin

import requests

from ..models import Episode
from .base import MAX_EPISODES, PodParser, parse_date

logger = logging.getLogger(__name__)

# Absolute URL of an audio file, query string allowed
DEFAULT_MEDIA_PATTERN = r"""https?://[^\s"'<>]+?\.(?:mp3|m4a|ogg|aac)(?:\?[^\s"'<>]*)?"""

_SCRIPT_RE = re.compile(r"<script\b[^>]*>(.*?)</script>", re.IGNORECASE | re.DOTALL)


class ExtractionError(ValueError):
    """Raised when the embedded episode data can't be located or decoded."""


def extract_embedded_data(html: str, marker: str) -> Any:
    """Decode the JSON value that follows ``marker`` in an inline script.

    Args:
        html: Landing page markup.
        marker: Text immediately preceding the JSON value,
            e.g. ``window.__INITIAL_STATE__ =``.

    Returns:
        The decoded JSON value.

    Raises:
        ExtractionError: If no script contains the marker or the value
            after it is not valid JSON.
    """
    decoder = json.JSONDecoder()

    for script in _SCRIPT_RE.findall(html):
        index = script.find(marker)
        if index < 0:
            continue

        payload = script[index + len(marker):].lstrip()
        try:
            # raw_decode stops at the end of the value, ignoring a trailing ';'
            value, _ = decoder.raw_decode(payload)
        except json.JSONDecodeError as e:
            raise ExtractionError(f"Malformed embedded data after {marker!r}: {e}") from e
        return value

    raise ExtractionError(f"No inline script contains {marker!r}")


def resolve_path(data: Any, path: Sequence[Union[str, int]]) -> Any:
    """Walk nested dicts and lists following ``path``.

    Raises:
        ExtractionError: If a key or index along the path is missing.
    """
    current = data
    for step in path:
        try:
            current = current[step]
        except (KeyError, IndexError, TypeError):
            raise ExtractionError(f"Path {list(path)!r} not found at {step!r}")
    return current


class ScrapeParser(PodParser):
    """Parser that scrapes a landing page and resolves media URLs per episode.

    Example:
        parser = ScrapeParser(
            "https://example.com/podcast",
            data_marker="window.__INITIAL_STATE__ =",
            episodes_path=("podcast", "episodes"),
        )
        episodes = parser.episodes()
    """

    def __init__(
        self,
        page_url: str,
        data_marker: str,
        episodes_path: Sequence[Union[str, int]],
        title_key: str = "title",
        link_key: str = "url",
        subtitle_key: Optional[str] = None,
        date_key: Optional[str] = None,
        media_pattern: Union[str, "re.Pattern[str]"] = DEFAULT_MEDIA_PATTERN,
        max_workers: int = 10,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize the scraping parser.

        Args:
            page_url: Landing page listing the episodes
            data_marker: Text preceding the embedded JSON in an inline script
            episodes_path: Keys/indexes leading to the list of episode entries
            title_key: Entry key holding the episode title
            link_key: Entry key holding the episode page link (may be relative)
            subtitle_key: Optional entry key holding a subtitle
            date_key: Optional entry key holding a publication date
            media_pattern: Regex matching the media URL on an episode page
            max_workers: Maximum concurrent episode page fetches
            session: HTTP session shared by all fetches
            timeout: Request timeout in seconds, None for no timeout
        """
        super().__init__(session=session, timeout=timeout)
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")

        self.page_url = page_url
        self.data_marker = data_marker
        self.episodes_path = tuple(episodes_path)
        self.title_key = title_key
        self.link_key = link_key
        self.subtitle_key = subtitle_key
        self.date_key = date_key
        self.media_pattern = re.compile(media_pattern) if isinstance(media_pattern, str) else media_pattern
        self.max_workers = max_workers

    @property
    def locator(self) -> str:
        return self.page_url

    def episodes(self) -> List[Episode]:
        """Scrape the landing page and resolve each episode's media URL.

        Waits for every episode page fetch to finish. Episodes whose media
        URL can't be resolved are dropped.

        Returns:
            Up to MAX_EPISODES episodes, or an empty list if the landing
            page could not be fetched or decoded.
        """
        try:
            html = self._get(self.page_url).text
        except requests.RequestException as e:
            logger.error(f"Failed to fetch landing page {self.page_url}: {e}")
            return []

        try:
            entries = self.parse_entries(html)
        except ExtractionError as e:
            logger.error(f"Failed to extract episodes from {self.page_url}: {e}")
            return []

        if not entries:
            return []

        resolved = self._resolve_all(entries[:MAX_EPISODES])
        episodes = [episode for episode in resolved if episode is not None]

        logger.debug(
            f"Resolved {len(episodes)}/{len(resolved)} episodes from {self.page_url}"
        )
        return episodes

    def parse_entries(self, html: str) -> List[Dict[str, Any]]:
        """Locate the per-episode entries embedded in the landing page.

        Raises:
            ExtractionError: If the data or the entry list can't be found.
        """
        data = extract_embedded_data(html, self.data_marker)
        entries = resolve_path(data, self.episodes_path)
        if not isinstance(entries, list):
            raise ExtractionError(
                f"Expected a list at {list(self.episodes_path)!r}, got {type(entries).__name__}"
            )
        return [entry for entry in entries if isinstance(entry, dict)]

    def find_media_url(self, html: str) -> Optional[str]:
        """Return the first media URL on an episode page, if any."""
        match = self.media_pattern.search(html)
        if not match:
            return None
        return match.group(0)

    def _resolve_all(self, entries: List[Dict[str, Any]]) -> List[Optional[Episode]]:
        """Resolve entries concurrently into a list indexed by entry position."""
        results: List[Optional[Episode]] = [None] * len(entries)

        def resolve_into(index: int, entry: Dict[str, Any]) -> None:
            results[index] = self._resolve_entry(entry)

        workers = min(self.max_workers, len(entries))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(resolve_into, index, entry)
                for index, entry in enumerate(entries)
            ]
            wait(futures)

        for future in futures:
            if future.exception() is not None:
                logger.error(f"Episode resolution failed: {future.exception()}")

        return results

    def _resolve_entry(self, entry: Dict[str, Any]) -> Optional[Episode]:
        """Fetch one episode page and build its Episode.

        Returns:
            Episode, or None if the page can't be fetched or has no media URL
        """
        title = str(entry.get(self.title_key) or "")
        link = entry.get(self.link_key)
        if not link:
            logger.debug(f"Skipping entry without link: {title!r}")
            return None

        episode_url = urljoin(self.page_url, str(link))
        try:
            html = self._get(episode_url).text
        except requests.RequestException as e:
            logger.error(f"Failed to fetch episode page {episode_url}: {e}")
            return None

        media_url = self.find_media_url(html)
        if not media_url:
            logger.warning(f"No media URL found on {episode_url}")
            return None

        subtitle = entry.get(self.subtitle_key) if self.subtitle_key else None
        published = entry.get(self.date_key) if self.date_key else None

        return Episode(
            title=title,
            subtitle=str(subtitle or ""),
            url=media_url,
            published=parse_date(str(published)) if published else None,
        )
