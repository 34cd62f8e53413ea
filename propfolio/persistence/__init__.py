"""Persistence backends for portfolio records and local preferences."""

from propfolio.persistence.base import LocalStorage, PortfolioBackend
from propfolio.persistence.json_file import JsonFileBackend
from propfolio.persistence.local_storage import InMemoryLocalStorage, JsonFileLocalStorage
from propfolio.persistence.memory import InMemoryBackend

__all__ = [
    "InMemoryBackend",
    "InMemoryLocalStorage",
    "JsonFileBackend",
    "JsonFileLocalStorage",
    "LocalStorage",
    "PortfolioBackend",
]
