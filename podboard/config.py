import os
from typing import Optional, Tuple

from dotenv import load_dotenv

DEFAULT_LISTEN_ADDRESS = ":6363"


def _get_int_env(
    name: str,
    default: Optional[int],
    min_val: Optional[int] = None,
    max_val: Optional[int] = None,
) -> Optional[int]:
    """Parse an integer from an environment variable with validation.

    Args:
        name: Environment variable name.
        default: Default value if env var is not set or empty.
        min_val: Minimum allowed value (inclusive), or None for no minimum.
        max_val: Maximum allowed value (inclusive), or None for no maximum.

    Returns:
        The parsed and validated integer value.

    Raises:
        ValueError: If the value cannot be parsed as an integer or is out of range.
    """
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default

    try:
        value = int(raw)
    except ValueError:
        raise ValueError(
            f"Invalid value for {name}: '{raw}' is not a valid integer"
        )

    if min_val is not None and value < min_val:
        raise ValueError(
            f"Invalid value for {name}: {value} must be >= {min_val}"
        )

    if max_val is not None and value > max_val:
        raise ValueError(
            f"Invalid value for {name}: {value} must be <= {max_val}"
        )

    return value


def parse_listen_address(address: str) -> Tuple[str, int]:
    """Split a ``host:port`` listen address.

    An empty host (``":6363"``) means all interfaces.

    Raises:
        ValueError: If the address has no port or the port is not valid.
    """
    host, sep, port = address.strip().rpartition(":")
    if not sep:
        raise ValueError(f"Listen address must be host:port, got: {address!r}")

    try:
        port_number = int(port)
    except ValueError:
        raise ValueError(f"Invalid port in listen address: {address!r}")

    if not 0 < port_number < 65536:
        raise ValueError(f"Port out of range in listen address: {address!r}")

    # IPv6 literals are written as [::1]:6363
    host = host.strip("[]")
    return host or "0.0.0.0", port_number


class Config:
    def __init__(self, env_file=None):
        """
        Load configuration from the environment.

        Reads a .env file first (``env_file`` when given, otherwise the default
        discovery), then sets the listen address, refresh interval and the
        outbound HTTP settings used by the feed parsers.

        Parameters:
            env_file (str | None): Optional path to a .env file.

        Raises:
            ValueError: If a numeric setting or the listen address is invalid.
        """
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

        # Web server
        self.LISTEN_ADDRESS = os.getenv("LISTEN_ADDRESS", DEFAULT_LISTEN_ADDRESS)
        # Validate early so a bad address fails at startup
        parse_listen_address(self.LISTEN_ADDRESS)

        # Refresh schedule
        self.REFRESH_INTERVAL_MINUTES = _get_int_env(
            "REFRESH_INTERVAL_MINUTES", 60, min_val=1
        )

        # Outbound HTTP. No timeout unless explicitly configured.
        self.HTTP_TIMEOUT_SECONDS = _get_int_env(
            "HTTP_TIMEOUT_SECONDS", None, min_val=1
        )
        self.USER_AGENT = os.getenv("USER_AGENT", "podboard/1.0")

        # Concurrent episode page resolution for scraped sources
        self.SCRAPE_MAX_WORKERS = _get_int_env("SCRAPE_MAX_WORKERS", 10, min_val=1)

        # Number of recent log lines kept for the /logs page
        self.LOG_BUFFER_SIZE = _get_int_env("LOG_BUFFER_SIZE", 50, min_val=1)

    @property
    def listen_host_port(self) -> Tuple[str, int]:
        return parse_listen_address(self.LISTEN_ADDRESS)
