"""Configuration management for refcheck.

Environment settings are loaded from ``.env`` and the process environment;
a single run is described by an immutable ``AnalyzerConfig``.
"""
import os
from dataclasses import dataclass, field, replace
from enum import IntEnum
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

from refcheck.oracles.cache import DEFAULT_TTL
from refcheck.processors import ParallelProcessor, SerialProcessor, default_workers
from refcheck.reporters.base import Reporter
from refcheck.reporters.console import ConsoleReporter
from refcheck.resolvers.base import AnalysisResolver
from refcheck.resolvers.files import FileResolver, PathResolver

__version__ = "1.0.0"

DEFAULT_PATHS = ('app', 'tests')
DEFAULT_IGNORE = ('Illuminate\\*', 'Laravel\\*', 'Symfony\\*')


def _split(value: str) -> list[str]:
    return [item.strip() for item in value.split(',') if item.strip()]


class Config:
    """Environment-backed defaults for the command line."""

    def __init__(self, env_file: Optional[Path] = None):
        """Initialize config by loading the .env file.

        Args:
            env_file: Explicit .env path (defaults to ./.env)
        """
        load_dotenv(env_file or Path.cwd() / ".env")

    @property
    def paths(self) -> list[str]:
        """Paths analyzed when none are given on the command line."""
        return _split(os.getenv("REFCHECK_PATHS", ",".join(DEFAULT_PATHS)))

    @property
    def workers(self) -> str:
        return os.getenv("REFCHECK_WORKERS", "auto")

    @property
    def ignore(self) -> list[str]:
        """Class patterns ignored by the classes command.

        Returns:
            List of glob patterns
        """
        return _split(os.getenv("REFCHECK_IGNORE", ",".join(DEFAULT_IGNORE)))

    @property
    def cache_dir(self) -> Optional[Path]:
        value = os.getenv("REFCHECK_CACHE_DIR")
        return Path(value) if value else None

    @property
    def cache_ttl(self) -> int:
        """Cache lifetime in seconds.

        Raises:
            ValueError: If REFCHECK_CACHE_TTL is not an integer
        """
        value = os.getenv("REFCHECK_CACHE_TTL", str(DEFAULT_TTL))
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"REFCHECK_CACHE_TTL must be an integer, got {value!r}") from None

    @property
    def locales(self) -> list[str]:
        return _split(os.getenv("REFCHECK_LOCALES", "en"))

    @property
    def lang_path(self) -> Path:
        return Path(os.getenv("REFCHECK_LANG_PATH", "lang"))

    @property
    def routes_path(self) -> Path:
        return Path(os.getenv("REFCHECK_ROUTES_PATH", "routes"))

    @property
    def vendor_path(self) -> Path:
        return Path(os.getenv("REFCHECK_VENDOR_PATH", "vendor"))


# Singleton instance
_config = None


def get_config() -> Config:
    """Get or create singleton Config instance.

    Returns:
        Config instance
    """
    global _config
    if _config is None:
        _config = Config()
    return _config


class Verbosity(IntEnum):
    NORMAL = 0
    VERBOSE = 1
    VERY_VERBOSE = 2
    DEBUG = 3


def resolve_workers(value) -> int:
    """Translate a worker setting into a thread count.

    Args:
        value: ``"auto"`` or a positive integer (as int or string)

    Returns:
        Number of workers

    Raises:
        ValueError: If the value is neither ``auto`` nor an integer
    """
    if isinstance(value, str):
        if value.strip().lower() == 'auto':
            return default_workers()
        return int(value)
    return int(value)


def processor_for(workers: int):
    return SerialProcessor() if workers == 1 else ParallelProcessor(workers)


@dataclass(frozen=True)
class AnalyzerConfig:
    """Everything one analysis run needs.

    The resolver is built once by the caller; swapping the reporter or the
    processor never touches it.
    """

    resolver: AnalysisResolver
    paths: Tuple[str, ...] = DEFAULT_PATHS
    exclude: Tuple[str, ...] = ()
    processor: object = field(default_factory=ParallelProcessor)
    reporter: Reporter = field(default_factory=ConsoleReporter)
    verbosity: Verbosity = Verbosity.NORMAL
    path_resolver: PathResolver = field(default_factory=PathResolver)
    file_resolver: Optional[FileResolver] = None

    def __post_init__(self):
        object.__setattr__(self, 'paths', tuple(str(p) for p in self.paths))
        object.__setattr__(self, 'exclude', tuple(self.exclude))
        if self.file_resolver is None:
            object.__setattr__(self, 'file_resolver', FileResolver(self.exclude))

    def with_paths(self, paths) -> 'AnalyzerConfig':
        return replace(self, paths=tuple(str(p) for p in paths))

    def with_exclude(self, exclude) -> 'AnalyzerConfig':
        return replace(self, exclude=tuple(exclude), file_resolver=FileResolver(exclude))

    def with_resolver(self, resolver: AnalysisResolver) -> 'AnalyzerConfig':
        return replace(self, resolver=resolver)

    def with_processor(self, processor) -> 'AnalyzerConfig':
        return replace(self, processor=processor)

    def with_workers(self, workers: int) -> 'AnalyzerConfig':
        return replace(self, processor=processor_for(workers))

    def with_reporter(self, reporter: Reporter) -> 'AnalyzerConfig':
        return replace(self, reporter=reporter)

    def with_verbosity(self, verbosity: Verbosity) -> 'AnalyzerConfig':
        return replace(self, verbosity=verbosity)
