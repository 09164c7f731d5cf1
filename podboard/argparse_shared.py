import argparse

def get_base_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Serve the latest episodes of a fixed set of podcasts")
    parser.add_argument("-e", "--env-file", help="Path to a custom .env file", default=None)
    return parser

def add_log_level_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-l", "--log-level", help="Set log level (DEBUG, INFO, WARNING, ERROR)", default="INFO")

def add_listen_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--listen", "--port", dest="listen", help="Address to listen on, host:port (e.g. :6363)", default=None)
