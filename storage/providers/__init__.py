from .base import StateStore, StoreStatus, state_from_text
from .json_file import JsonFileStore
from .memory import MemoryStore

__all__ = ["StateStore", "StoreStatus", "state_from_text", "JsonFileStore", "MemoryStore"]
