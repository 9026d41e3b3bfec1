"""Episode video-URL resolution pipeline."""

__version__ = "0.1.0"
