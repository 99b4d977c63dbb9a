"""Keyset pagination engine for Relay cursor connections."""

__version__ = "0.1.0"
