"""Application services for resolving, sourcing and controlling playback."""
