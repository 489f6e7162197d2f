# app/database/store_factory.py
import logging

from app.database.memory_store import MemoryRecordStore
from app.database.record_store import RecordStore
from app.database.sql_store import SQLRecordStore

logger = logging.getLogger(__name__)


def build_store(settings) -> RecordStore:
    """Pick the record store variant named by STORAGE_BACKEND."""
    backend = settings.STORAGE_BACKEND
    if backend == "memory":
        store = MemoryRecordStore()
    elif backend in ("sqlite", "postgres"):
        store = SQLRecordStore(settings.database_url)
    else:
        raise ValueError(f"Unsupported STORAGE_BACKEND: {backend}")

    logger.info(f"Record store backend: {store.backend_name}")
    return store
