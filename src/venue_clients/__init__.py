# Store-specific data adapters and the refresh controller
# Each loader maps one store's exports onto the engine's records

from .venue_client import LoadedSnapshot, SnapshotFetchError, VenueSnapshotLoader
from .refresh import RefreshController

__all__ = ["LoadedSnapshot", "SnapshotFetchError", "VenueSnapshotLoader", "RefreshController"]
