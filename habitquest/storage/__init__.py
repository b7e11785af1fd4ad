"""Persistence for the gamification state"""
from habitquest.storage.backends import (
    InMemoryBackend,
    JsonFileBackend,
    KeyValueBackend,
    RedisBackend,
    create_backend,
)
from habitquest.storage.stats_store import StatsStore

__all__ = [
    "InMemoryBackend",
    "JsonFileBackend",
    "KeyValueBackend",
    "RedisBackend",
    "create_backend",
    "StatsStore",
]
