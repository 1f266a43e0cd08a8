"""Backup exports and interactive reports for the Blessin Finance tables."""

__version__ = "0.1.0"
