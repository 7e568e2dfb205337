"""Entry store backends and the draft repository.

The async contract shared by both backends is available for type-checking::

    from infrastructure.database.repositories.base import EntryStore
"""

from infrastructure.database.repositories.base import EntryStore
from infrastructure.database.repositories.drafts import DraftRepository
from infrastructure.database.repositories.flat_list import FlatListEntryStore
from infrastructure.database.repositories.log_entries import SQLiteEntryStore

__all__ = [
    "DraftRepository",
    "EntryStore",
    "FlatListEntryStore",
    "SQLiteEntryStore",
]
