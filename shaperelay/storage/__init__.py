"""Durable storage for identifier sets."""

from shaperelay.storage.store import KeySetStore, JsonKeySetStore

__all__ = ["KeySetStore", "JsonKeySetStore"]
