"""
Database models
"""
from app.models.kv_entry import KeyValueEntry
from app.models.cached_image import CachedWorkerPhoto

__all__ = [
    "KeyValueEntry",
    "CachedWorkerPhoto",
]
