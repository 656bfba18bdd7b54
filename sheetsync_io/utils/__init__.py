"""Shared helpers for the sheetsync_io package."""
