"""Twitch streamer discovery over the Helix API."""
