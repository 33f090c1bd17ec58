"""Discord music bot that plays a track through a chain of fallback sources."""

__version__ = "0.1.0"
