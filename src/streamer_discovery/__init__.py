"""Streamer Discovery: Korean game streamer ingestion for YouTube, Twitch and Chzzk."""

__version__ = "0.1.0"
