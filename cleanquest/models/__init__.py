"""CleanQuest Database Models."""

from cleanquest.models.store import StoreEntry

__all__ = [
    "StoreEntry",
]
