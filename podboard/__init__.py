"""Serve the latest episodes of a fixed set of podcasts."""

__version__ = "1.0.0"
