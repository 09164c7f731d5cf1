"""Source configuration: the fixed list of pods served by the process."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Literal, Optional

import requests

from .models import Pod
from .parsers import PodParser, RssParser, ScrapeParser, create_session
from .registry import Registry

logger = logging.getLogger(__name__)

ParserKind = Literal["rss", "scrape"]


@dataclass(frozen=True)
class SourceConfig:
    """Name, locator and parser strategy of one pod.

    ``options`` is passed through to the parser's constructor, e.g. the
    ``data_marker`` and ``episodes_path`` of a scraped source.
    """

    name: str
    locator: str
    parser: ParserKind = "rss"
    options: Dict[str, Any] = field(default_factory=dict)


DEFAULT_SOURCES = (
    SourceConfig("Filip & Fredrik", "https://feed.pod.space/filipandfredrik"),
    SourceConfig("Alex & Sigge", "http://alexosigge.libsyn.com/rss"),
    SourceConfig("Kodsnack", "https://kodsnack.libsyn.com/rss"),
    SourceConfig("Go Time", "https://changelog.com/gotime/feed"),
)


def build_parser(
    source: SourceConfig,
    session: requests.Session,
    timeout: Optional[float] = None,
    scrape_max_workers: int = 10,
) -> PodParser:
    """Create the parser strategy a source is configured with.

    Raises:
        ValueError: If the parser kind is unknown.
    """
    if source.parser == "rss":
        return RssParser(source.locator, session=session, timeout=timeout, **source.options)

    if source.parser == "scrape":
        options = {"max_workers": scrape_max_workers, **source.options}
        return ScrapeParser(source.locator, session=session, timeout=timeout, **options)

    raise ValueError(f"Unknown parser '{source.parser}' for source '{source.name}'")


def build_registry(
    sources: Iterable[SourceConfig] = DEFAULT_SOURCES,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
    scrape_max_workers: int = 10,
    user_agent: Optional[str] = None,
) -> Registry:
    """Create a registry holding one pod per source.

    All parsers share one HTTP session.

    Raises:
        ValueError: On an unknown parser kind or a duplicate source name.
    """
    session = session or create_session(user_agent)
    registry = Registry()

    for source in sources:
        parser = build_parser(
            source,
            session=session,
            timeout=timeout,
            scrape_max_workers=scrape_max_workers,
        )
        registry.register(Pod(source.name, parser))

    logger.info(f"Registered {len(registry)} pods: {', '.join(registry.names())}")
    return registry
