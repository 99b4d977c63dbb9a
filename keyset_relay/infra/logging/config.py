"""Logging configuration setup.

Installs a single console handler on the root logger through
``logging.config.dictConfig``; library loggers propagate up to it. Output is
JSON Lines by default, or a plain text line when ``json_logs`` is off.
"""

from __future__ import annotations

import logging
import logging.config
from typing import TYPE_CHECKING, Any

logger = logging.getLogger(__name__)
_LOGGING_INITIALIZED = False

if TYPE_CHECKING:
    from keyset_relay.core.settings.logs import LoggingSettings

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
    **configure_kwargs: Any,
) -> None:
    """Ensure logging is configured once across entrypoints.

    Args:
        log_settings: Optional logging settings instance. If omitted, settings
            are loaded via get_logging_settings().
        force: Reconfigure logging even if it was already initialized.
        **configure_kwargs: Explicit overrides for configure_logging().
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    settings_obj = log_settings
    if settings_obj is None:
        from keyset_relay.core.settings import get_logging_settings

        settings_obj = get_logging_settings()

    log_config = {**settings_obj.to_logging_kwargs(), **configure_kwargs}
    configure_logging(**log_config)
    _LOGGING_INITIALIZED = True


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = True,
    console_enabled: bool = True,
    capture_warnings: bool = True,
    service_name: str = "keyset-relay",
    **kwargs: Any,
) -> None:
    """Configure the root logger with dictConfig.

    Args:
        log_level: Root logger level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_logs: Enable JSONL (JSON Lines) structured logging.
        console_enabled: Attach a stderr handler; when off, records are dropped
            unless the caller adds handlers of its own.
        capture_warnings: Forward Python warnings to logging system.
        service_name: Static ``service`` field added to JSON records.
        **kwargs: Ignored extra settings (logged at DEBUG).

    Example:
        from keyset_relay.core.settings import get_logging_settings
        configure_logging(**get_logging_settings().to_logging_kwargs())
    """
    logging.captureWarnings(capture_warnings)

    formatters: dict[str, Any]
    if json_logs:
        formatters = {
            "default": {
                "()": "keyset_relay.infra.logging.formatters.JSONFormatter",
                "static": {"service": service_name},
            }
        }
    else:
        formatters = {"default": {"format": TEXT_FORMAT}}

    handlers: dict[str, Any] = {}
    if console_enabled:
        handlers["console"] = {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "stream": "ext://sys.stderr",
        }

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": formatters,
            "handlers": handlers,
            "root": {
                "level": log_level.upper(),
                "handlers": list(handlers),
            },
        }
    )

    if kwargs:
        logger.debug("Unused logging kwargs supplied: %s", ", ".join(sorted(kwargs)))
