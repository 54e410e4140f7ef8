"""On-disk cache for loaded oracle symbol sets.

Cache Strategy:
- One JSON file per oracle configuration: ``{"name": true, ...}``
- File name derived from an MD5 of the oracle's configuration
- Valid while younger than the TTL and newer than every backing source file
- Unreadable or malformed cache files count as a miss
"""
import hashlib
import json
import logging
import tempfile
import time
from pathlib import Path
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)

CACHE_PREFIX = 'refcheck-'
CACHE_SUFFIX = '.cache'
DEFAULT_TTL = 3600


def cache_key(material: str) -> str:
    return hashlib.md5(material.encode('utf-8')).hexdigest()


class OracleCache:
    """JSON cache file for one oracle instance."""

    def __init__(self, kind: str, key_material: str, cache_dir: Optional[Path] = None,
                 ttl: int = DEFAULT_TTL):
        """Initialize cache location.

        Args:
            kind: Oracle kind, part of the file name (symbols, translations, routes)
            key_material: Stable description of the oracle configuration
            cache_dir: Directory for cache files (system temp dir by default)
            ttl: Maximum cache age in seconds
        """
        self.cache_dir = Path(cache_dir) if cache_dir else Path(tempfile.gettempdir())
        self.ttl = ttl
        self.path = self.cache_dir / f"{CACHE_PREFIX}{kind}-{cache_key(key_material)}{CACHE_SUFFIX}"

    def is_valid(self, source_files: Iterable[Path] = ()) -> bool:
        """Check whether the cache file can be trusted.

        Args:
            source_files: Files the cached data was built from

        Returns:
            True if the file exists, is within TTL and is newer than every source
        """
        try:
            cache_mtime = self.path.stat().st_mtime
        except OSError:
            return False

        if time.time() - cache_mtime >= self.ttl:
            logger.debug("Cache %s expired", self.path)
            return False

        for source in source_files:
            try:
                if Path(source).stat().st_mtime > cache_mtime:
                    logger.debug("Cache %s older than %s", self.path, source)
                    return False
            except OSError:
                continue
        return True

    def read(self, source_files: Iterable[Path] = ()) -> Optional[List[str]]:
        """Return cached names, or None on a miss."""
        if not self.is_valid(source_files):
            return None
        try:
            payload = json.loads(self.path.read_text(encoding='utf-8'))
        except (OSError, ValueError) as e:
            logger.debug("Discarding unreadable cache %s: %s", self.path, e)
            return None
        if not isinstance(payload, dict) or not all(value is True for value in payload.values()):
            logger.debug("Discarding malformed cache %s", self.path)
            return None
        return list(payload)

    def write(self, names: Iterable[str]) -> None:
        """Persist names; failures are logged and otherwise ignored."""
        payload = {name: True for name in names}
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            temp_path = self.path.with_suffix('.tmp')
            temp_path.write_text(json.dumps(payload), encoding='utf-8')
            temp_path.replace(self.path)
        except OSError as e:
            logger.warning("Could not write cache %s: %s", self.path, e)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


def clear_cache_dir(cache_dir: Optional[Path] = None) -> int:
    """Delete every refcheck cache file in ``cache_dir``.

    Returns:
        Number of files removed
    """
    directory = Path(cache_dir) if cache_dir else Path(tempfile.gettempdir())
    removed = 0
    for path in directory.glob(f"{CACHE_PREFIX}*{CACHE_SUFFIX}"):
        try:
            path.unlink()
            removed += 1
        except OSError as e:
            logger.warning("Could not remove %s: %s", path, e)
    return removed
