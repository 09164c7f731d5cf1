"""
Pytest configuration and fixtures for podboard tests.

Environment variables read by Config are cleared so tests behave the same
regardless of the developer's shell or .env file. Network access is never
used: parsers get a fake requests session serving canned pages.
"""

import os
import threading
import time
from typing import Callable, Dict, Optional, Union
from unittest.mock import Mock

import pytest
import requests

from podboard.pods.models import Episode
from podboard.pods.parsers.base import PodParser

_CONFIG_ENV_VARS = (
    "LISTEN_ADDRESS",
    "REFRESH_INTERVAL_MINUTES",
    "HTTP_TIMEOUT_SECONDS",
    "USER_AGENT",
    "SCRAPE_MAX_WORKERS",
    "LOG_BUFFER_SIZE",
)

for _name in _CONFIG_ENV_VARS:
    os.environ.pop(_name, None)


PageBody = Union[str, bytes, Exception]


def make_response(url: str, body: Union[str, bytes], status_code: int = 200) -> Mock:
    """Build a fake requests.Response."""
    response = Mock(spec=requests.Response)
    response.url = url
    response.status_code = status_code
    if isinstance(body, bytes):
        response.content = body
        response.text = body.decode("utf-8")
    else:
        response.content = body.encode("utf-8")
        response.text = body

    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(
            f"{status_code} Error for url: {url}"
        )
    else:
        response.raise_for_status.return_value = None
    return response


class FakeSession:
    """Stand-in for requests.Session serving pages from a dict.

    A page value that is an exception is raised from ``get``; a missing
    URL returns a 404. ``delays`` maps URLs to seconds to sleep before
    answering, to shuffle completion order of concurrent fetches.
    """

    def __init__(
        self,
        pages: Dict[str, PageBody],
        delays: Optional[Dict[str, float]] = None,
    ):
        self.pages = dict(pages)
        self.delays = delays or {}
        self.headers: Dict[str, str] = {}
        self.requested = []
        self._lock = threading.Lock()

    def get(self, url, timeout=None, **kwargs):
        with self._lock:
            self.requested.append(url)

        if url in self.delays:
            time.sleep(self.delays[url])

        body = self.pages.get(url)
        if body is None:
            return make_response(url, "not found", status_code=404)
        if isinstance(body, Exception):
            raise body
        return make_response(url, body)


class StaticParser(PodParser):
    """Parser returning a fixed list, optionally blocking until released."""

    def __init__(
        self,
        episodes=None,
        error: Optional[Exception] = None,
        on_call: Optional[Callable[[], None]] = None,
    ):
        super().__init__(session=Mock())
        self._episodes = list(episodes or [])
        self._error = error
        self._on_call = on_call
        self.calls = 0

    @property
    def locator(self) -> str:
        return "static://"

    def episodes(self):
        self.calls += 1
        if self._on_call:
            self._on_call()
        if self._error:
            raise self._error
        return list(self._episodes)


@pytest.fixture
def fake_session():
    """Factory for FakeSession instances."""
    return FakeSession


@pytest.fixture
def make_episode():
    """Factory for Episode instances with sensible defaults."""

    def _make(title="Episode", url=None, published=None, subtitle=""):
        return Episode(
            title=title,
            url=url or f"https://cdn.example.com/{title.replace(' ', '-').lower()}.mp3",
            subtitle=subtitle,
            published=published,
        )

    return _make


@pytest.fixture
def static_parser():
    """The StaticParser class, for building pods with canned episodes."""
    return StaticParser
