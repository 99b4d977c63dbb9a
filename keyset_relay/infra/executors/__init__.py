"""Ordered query executor adapters.

Each adapter implements ``OrderedQueryExecutor`` for one kind of store:

    InMemoryExecutor     Python objects or mappings held in a list
    SqlAlchemyExecutor   relational tables through an async SQLAlchemy session
    DocumentExecutor     Mongo-style collections (Motor / PyMongo async)
"""

from keyset_relay.infra.executors.document import DocumentExecutor, compile_filter, compile_sort
from keyset_relay.infra.executors.memory import InMemoryExecutor
from keyset_relay.infra.executors.sql import SqlAlchemyExecutor, compile_predicate

__all__ = [
    "DocumentExecutor",
    "InMemoryExecutor",
    "SqlAlchemyExecutor",
    "compile_filter",
    "compile_predicate",
    "compile_sort",
]
