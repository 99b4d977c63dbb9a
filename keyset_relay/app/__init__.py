"""FastAPI integration: request dependencies and error handlers."""

from keyset_relay.app.dependencies import ConnectionArgs, get_connection_arguments
from keyset_relay.app.exception_handlers import configure_exception_handlers

__all__ = ["ConnectionArgs", "configure_exception_handlers", "get_connection_arguments"]
