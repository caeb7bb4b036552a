"""Storage backends, routing and the account lifecycle"""

from .local_store import COLLECTIONS, LocalStore
from .sync_client import SyncClient

__all__ = [
    "COLLECTIONS",
    "LocalStore",
    "SyncClient",
]
