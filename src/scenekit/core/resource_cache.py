"""
Resource Cache

Centralized, reference-counted cache of named resources loaded from the
configured resource directories.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Type, TypeVar

from ..config.settings import DEBUG_RESOURCE_CACHE, RESOURCE_CACHE_AUTO_RELEASE, RESOURCE_DIRS
from .resource import Resource
from .xml_utils import read_xml_file

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Resource)


@dataclass
class CachedResource:
    """Represents a cached resource with reference count and metadata."""
    resource: Resource
    ref_count: int = 0  # Number of active references
    access_count: int = 0


class ResourceCache:
    """
    Resource lookup by (type, name).

    Manages resource lifecycle with:
    - Loading on first request from the resource directories
    - Reference counting for cleanup
    - Manually registered in-memory resources
    - Debug statistics
    """

    _instance: Optional['ResourceCache'] = None

    def __init__(self, resource_dirs: Optional[List[Path]] = None):
        """
        Initialize resource cache.

        Args:
            resource_dirs: Directories searched for resource files, in priority order
        """
        self.resource_dirs: List[Path] = [Path(p) for p in (resource_dirs or RESOURCE_DIRS)]
        self._cache: Dict[Tuple[str, str], CachedResource] = {}
        self._stats = {
            'total_loads': 0,
            'cache_hits': 0,
            'cache_misses': 0,
            'load_failures': 0,
        }

    @classmethod
    def get_instance(cls) -> 'ResourceCache':
        """Get or create the global cache."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def set_instance(cls, cache: Optional['ResourceCache']) -> None:
        """Replace the global cache (None drops it)."""
        cls._instance = cache

    @staticmethod
    def _key(resource_type: type, name: str) -> Tuple[str, str]:
        return resource_type.__name__, name.replace("\\", "/")

    def add_resource_dir(self, path: Path | str, priority: bool = True) -> None:
        path = Path(path)
        if path in self.resource_dirs:
            return
        if priority:
            self.resource_dirs.insert(0, path)
        else:
            self.resource_dirs.append(path)

    def add_manual_resource(self, resource: Resource) -> bool:
        """
        Register an in-memory resource so it can be looked up by name.

        Returns:
            False if the resource is anonymous
        """
        if resource.is_anonymous():
            logger.error("Manual resource with empty name, can not add")
            return False

        self._cache[self._key(type(resource), resource.name)] = CachedResource(resource)
        return True

    def get_resource(self, resource_type: Type[R], name: str) -> Optional[R]:
        """
        Get a resource, loading it from disk on a cache miss.

        Args:
            resource_type: Resource class
            name: Resource name, a path relative to a resource directory

        Returns:
            The shared resource, or None if it can not be found or loaded
        """
        if not name:
            return None

        key = self._key(resource_type, name)
        cached = self._cache.get(key)
        if cached is not None:
            cached.ref_count += 1
            cached.access_count += 1
            self._stats['cache_hits'] += 1
            if DEBUG_RESOURCE_CACHE:
                logger.debug("Cache hit for %s '%s'", key[0], key[1])
            return cached.resource

        self._stats['cache_misses'] += 1
        resource = self._load_resource(resource_type, key[1])
        if resource is None:
            self._stats['load_failures'] += 1
            return None

        self._cache[key] = CachedResource(resource, ref_count=1, access_count=1)
        return resource

    def _load_resource(self, resource_type: Type[R], name: str) -> Optional[R]:
        path = self.find_resource_file(name)
        if path is None:
            logger.error("Could not find resource %s", name)
            return None

        root = read_xml_file(path)
        if root is None:
            logger.error("Could not read resource file %s", path)
            return None

        resource = resource_type()
        resource.name = name
        if not resource.load_xml(root):
            logger.error("Failed to load %s '%s'", resource_type.__name__, name)
            return None

        self._stats['total_loads'] += 1
        logger.debug("Loaded %s '%s' from %s", resource_type.__name__, name, path)
        return resource

    def find_resource_file(self, name: str) -> Optional[Path]:
        """Find the first resource directory containing a file of this name."""
        for directory in self.resource_dirs:
            candidate = directory / name
            if candidate.is_file():
                return candidate
        return None

    def is_cached(self, resource_type: type, name: str) -> bool:
        return self._key(resource_type, name) in self._cache

    def release_resource(self, resource_type: type, name: str, force: bool = False) -> None:
        """
        Release a reference to a cached resource.

        The resource is dropped when forced, or when its count reaches zero
        and auto release is enabled.
        """
        key = self._key(resource_type, name)
        cached = self._cache.get(key)
        if cached is None:
            return

        cached.ref_count = max(0, cached.ref_count - 1)
        if force or (RESOURCE_CACHE_AUTO_RELEASE and cached.ref_count == 0):
            del self._cache[key]

    def release_unused(self) -> int:
        """
        Drop all cached resources with no active references.

        Returns:
            Number of resources released
        """
        unused = [key for key, cached in self._cache.items() if cached.ref_count <= 0]
        for key in unused:
            del self._cache[key]
        return len(unused)

    def clear_cache(self) -> None:
        """Clear entire cache (for testing/cleanup)."""
        self._cache.clear()
        for stat in self._stats:
            self._stats[stat] = 0

    def get_cache_stats(self) -> Dict:
        """
        Get cache statistics.

        Returns:
            Dictionary with cache metrics
        """
        lookups = self._stats['cache_hits'] + self._stats['cache_misses']
        return {
            'num_cached_resources': len(self._cache),
            'cache_hits': self._stats['cache_hits'],
            'cache_misses': self._stats['cache_misses'],
            'hit_rate': self._stats['cache_hits'] / lookups if lookups > 0 else 0.0,
            'total_loads': self._stats['total_loads'],
            'load_failures': self._stats['load_failures'],
        }

    def print_cache_status(self) -> None:
        """Print human-readable cache statistics."""
        stats = self.get_cache_stats()
        print("\n=== Resource Cache Status ===")
        print(f"Cached Resources: {stats['num_cached_resources']}")
        print(f"Cache Hit Rate: {stats['hit_rate']:.1%} ({stats['cache_hits']} hits, {stats['cache_misses']} misses)")
        print(f"Total Loads: {stats['total_loads']}, Failures: {stats['load_failures']}")
        for (type_name, name), cached in self._cache.items():
            print(f"  {type_name} {name} (refs: {cached.ref_count})")
        print()
