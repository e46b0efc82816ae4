# -*- encoding: utf-8 -*-
"""
KCQL Kind resolver - maps user-written kinds to resource coordinates.

A query names kinds however the user likes: "Deployment", "deployments",
"deploy". The resolver looks the identifier up in the session cache and,
on a miss, scans the discovery catalog for the first resource whose
plural name, kind or short name matches case-insensitively.
"""

import logging
import threading
from typing import Callable

from kcql.discovery.cache import KindCache
from kcql.discovery.model import APIResource, ResourceCoordinate
from kcql.exceptions import ResolutionError

logger = logging.getLogger(__name__)


Discover = Callable[[], list[APIResource]]


class KindResolver:
    """
    Resolve resource-kind identifiers through discovery, memoized.

    Concurrent misses on the same identifier trigger a single discovery
    call: the discovery lock is taken and the cache re-checked before the
    catalog is fetched.

    Example:
        resolver = KindResolver(gateway.discover, KindCache())
        coord = resolver.resolve("deploy")
        coord.resource  # "deployments"
    """

    def __init__(self, discover: Discover, cache: KindCache):
        self._discover = discover
        self.cache = cache
        self._discovery_lock = threading.Lock()

    def resolve(self, identifier: str) -> ResourceCoordinate:
        """
        Resolve an identifier to its resource coordinate.

        Args:
            identifier: Plural name, kind or short name, in any case

        Returns:
            ResourceCoordinate of the first matching catalog entry

        Raises:
            ResolutionError: If nothing in the catalog matches
            APIError: If discovery fails
        """
        key = identifier.lower()
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        with self._discovery_lock:
            cached = self.cache.get(key)
            if cached is not None:
                return cached

            logger.debug("Kind cache miss for %r, running discovery", identifier)
            for resource in self._discover():
                if resource.matches(key):
                    coord = resource.coordinate()
                    logger.debug("Resolved %r to %s", identifier, coord)
                    return self.cache.put(key, coord)

        raise ResolutionError(identifier)

    def warm(self) -> int:
        """
        Fetch discovery once and cache every name each resource answers to.

        The first catalog entry claiming a name keeps it.

        Returns:
            Number of cache entries after warming
        """
        with self._discovery_lock:
            for resource in self._discover():
                coord = resource.coordinate()
                for name in resource.identifiers:
                    if name:
                        self.cache.put(name, coord)
        logger.debug("Kind cache warmed with %d entries", len(self.cache))
        return len(self.cache)

    def dump(self) -> dict[str, str]:
        return self.cache.dump()

    def clear(self) -> None:
        self.cache.clear()
