"""Chzzk live-channel discovery."""
