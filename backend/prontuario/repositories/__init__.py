"""Repository layer for data access.

The record store encapsulates database operations and provides a
collection-oriented interface to the services.
"""

from prontuario.repositories.collections import all_collections, get_collection
from prontuario.repositories.store import RecordStore, StoreTransaction

__all__ = ["RecordStore", "StoreTransaction", "all_collections", "get_collection"]
