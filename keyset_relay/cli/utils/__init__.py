"""CLI output helpers."""

from keyset_relay.cli.utils.formatters import error, info

__all__ = ["error", "info"]
