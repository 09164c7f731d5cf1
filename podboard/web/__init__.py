"""Web interface for podboard."""
