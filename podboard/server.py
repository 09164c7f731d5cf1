"""podboard server.

Builds the pod registry, starts the refresh scheduler and serves the web
application with uvicorn.
"""

import logging
import sys

import uvicorn

from podboard.argparse_shared import add_listen_argument, add_log_level_argument, get_base_parser
from podboard.config import Config, parse_listen_address
from podboard.log_buffer import RecentLogHandler
from podboard.pods.sources import DEFAULT_SOURCES, build_registry
from podboard.scheduler import RefreshScheduler
from podboard.web.app import create_app


def parse_log_level(log_level: str) -> str:
    """Normalize a level name such as ``info`` to ``INFO``.

    Raises:
        ValueError: If the name is not a known logging level.
    """
    level = log_level.upper()
    # getLevelName returns "Level X" for names it doesn't know
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"Unknown log level: {log_level!r}")
    return level


def configure_logging(log_level: str, buffer_size: int = 50) -> RecentLogHandler:
    """Log to stdout and into an in-memory buffer for the /logs page.

    Returns:
        The buffer handler attached to the root logger.
    """
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    logging.basicConfig(
        level=log_level.upper(),
        format=log_format,
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )

    log_handler = RecentLogHandler(capacity=buffer_size)
    log_handler.setFormatter(logging.Formatter(log_format))
    logging.getLogger().addHandler(log_handler)

    # urllib3 and apscheduler log every request and job run on INFO
    if log_level.upper() == "INFO":
        logging.getLogger("urllib3").setLevel("WARNING")
        logging.getLogger("apscheduler").setLevel("WARNING")

    return log_handler


def main(argv=None) -> int:
    parser = get_base_parser()
    add_log_level_argument(parser)
    add_listen_argument(parser)
    args = parser.parse_args(argv)

    try:
        log_level = parse_log_level(args.log_level)
        config = Config(env_file=args.env_file)
        host, port = parse_listen_address(args.listen or config.LISTEN_ADDRESS)
    except ValueError as e:
        logging.basicConfig(level="ERROR")
        logging.critical(f"FATAL: invalid configuration: {e}")
        return 1

    log_handler = configure_logging(log_level, config.LOG_BUFFER_SIZE)

    try:
        registry = build_registry(
            DEFAULT_SOURCES,
            timeout=config.HTTP_TIMEOUT_SECONDS,
            scrape_max_workers=config.SCRAPE_MAX_WORKERS,
            user_agent=config.USER_AGENT,
        )
    except ValueError as e:
        logging.critical(f"FATAL: invalid source configuration: {e}")
        return 1

    scheduler = RefreshScheduler(registry, interval_minutes=config.REFRESH_INTERVAL_MINUTES)
    app = create_app(registry, scheduler=scheduler, log_handler=log_handler)

    logging.info(f"podboard listening on {host}:{port}")
    try:
        uvicorn.run(app, host=host, port=port, log_config=None)
    except KeyboardInterrupt:
        logging.info("Server interrupted by user")
    return 0


if __name__ == "__main__":
    sys.exit(main())
