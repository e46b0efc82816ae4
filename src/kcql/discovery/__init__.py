"""KCQL Discovery module - kind resolution and the session kind cache."""

from kcql.discovery.cache import KindCache, ReadWriteLock
from kcql.discovery.model import APIResource, ResourceCoordinate
from kcql.discovery.resolver import KindResolver

__all__ = [
    "APIResource",
    "KindCache",
    "KindResolver",
    "ReadWriteLock",
    "ResourceCoordinate",
]
