"""Core pagination domain, exceptions and settings."""
