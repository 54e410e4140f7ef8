"""Existence oracle base class.

An oracle answers one question: does this name exist? Each oracle loads
its full symbol set once (lazily on the first query, or eagerly through
``load``) and afterwards answers from memory. Loading goes through an
optional on-disk cache.
"""
import enum
import logging
import threading
from pathlib import Path
from typing import FrozenSet, Iterable, List, Optional

from .cache import DEFAULT_TTL, OracleCache

logger = logging.getLogger(__name__)


class OracleState(enum.Enum):
    UNLOADED = 'unloaded'
    LOADING = 'loading'
    LOADED = 'loaded'


class ExistenceOracle:
    """Base class: subclasses implement ``_build`` and describe their sources."""

    kind = 'oracle'

    def __init__(self, use_cache: bool = False, cache_dir: Optional[Path] = None,
                 cache_ttl: int = DEFAULT_TTL):
        self.use_cache = use_cache
        self.cache_dir = cache_dir
        self.cache_ttl = cache_ttl
        self.state = OracleState.UNLOADED
        self._known: FrozenSet[str] = frozenset()
        self._lock = threading.Lock()
        self._cache: Optional[OracleCache] = None

    @property
    def cache(self) -> OracleCache:
        if self._cache is None:
            self._cache = OracleCache(self.kind, self.cache_key_material(), self.cache_dir, self.cache_ttl)
        return self._cache

    def cache_key_material(self) -> str:
        """Stable description of this oracle's configuration."""
        return self.kind

    def source_files(self) -> List[Path]:
        """Files whose modification invalidates the cache."""
        return []

    def _build(self) -> Iterable[str]:
        raise NotImplementedError

    def normalize(self, name: str) -> str:
        return name

    def load(self) -> 'ExistenceOracle':
        """Load the symbol set. Safe to call repeatedly and from several threads."""
        with self._lock:
            if self.state is OracleState.LOADED:
                return self
            self.state = OracleState.LOADING
            try:
                self._known = frozenset(self._load_names())
            except BaseException:
                self.state = OracleState.UNLOADED
                raise
            self.state = OracleState.LOADED
            logger.info("Loaded %d %s", len(self._known), self.kind)
        return self

    def _load_names(self) -> Iterable[str]:
        if self.use_cache:
            cached = self.cache.read(self.source_files())
            if cached is not None:
                logger.debug("Using cached %s from %s", self.kind, self.cache.path)
                return [self.normalize(name) for name in cached]

        names = [self.normalize(name) for name in self._build()]
        if self.use_cache:
            self.cache.write(names)
        return names

    def exists(self, name: str) -> bool:
        if self.state is not OracleState.LOADED:
            self.load()
        return self.normalize(name) in self._known

    def known(self) -> FrozenSet[str]:
        if self.state is not OracleState.LOADED:
            self.load()
        return self._known

    def __contains__(self, name: str) -> bool:
        return self.exists(name)

    def __len__(self) -> int:
        return len(self.known())
