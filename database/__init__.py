"""
SaiyanBot storage layer
"""

from .database import Database
from .progression_store import (
    Booster,
    ProgressionRecord,
    ProgressionStore,
    ProgressionStoreError,
    SnapshotLoadError,
    SnapshotSaveError,
)

__all__ = [
    'Database',
    'Booster', 'ProgressionRecord', 'ProgressionStore',
    'ProgressionStoreError', 'SnapshotLoadError', 'SnapshotSaveError',
]
