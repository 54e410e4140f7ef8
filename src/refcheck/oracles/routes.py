"""Named route oracle.

Route names are collected by the first strategy that succeeds:

1. Live route table from ``php artisan route:list --json``
2. A route table exported to JSON earlier (same format as 1)
3. Static scan of route files for ``->name('x')`` and ``->names([...])``

Unnamed routes are never indexed.
"""
import json
import logging
import re
import subprocess
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from refcheck.exceptions import OracleLoadError

from .base import ExistenceOracle

logger = logging.getLogger(__name__)

# Returns route names, or None to hand over to the next strategy.
RouteStrategy = Callable[[], Optional[List[str]]]

ARTISAN_TIMEOUT = 120

_NAME_CALL = re.compile(r"""->name\(['"]([^'"]+)['"]\)""")
_NAMES_CALL = re.compile(r"->names\(\[(.*?)\]\)", re.DOTALL)
_NAMES_ENTRY = re.compile(r"""['"](\w+)['"]\s*=>\s*['"]([^'"]+)['"]""")


def first_success(strategies: Sequence[RouteStrategy]) -> List[str]:
    """Run strategies in order and return the first non-None result.

    Raises:
        OracleLoadError: If every strategy passes
    """
    for strategy in strategies:
        names = strategy()
        if names is not None:
            return names
    raise OracleLoadError("No route loading strategy succeeded")


def names_from_route_table(payload) -> Optional[List[str]]:
    """Route names from ``route:list --json`` output, None if it is not a route list."""
    if not isinstance(payload, list):
        return None
    names = []
    for route in payload:
        if isinstance(route, dict) and isinstance(route.get('name'), str) and route['name']:
            names.append(route['name'])
    return names


def extract_route_names(content: str) -> List[str]:
    """Route names declared in a routes file."""
    names = list(_NAME_CALL.findall(content))
    for block in _NAMES_CALL.findall(content):
        names.extend(name for _, name in _NAMES_ENTRY.findall(block))
    return names


class RouteOracle(ExistenceOracle):
    """Knows every named route of a Laravel application."""

    kind = 'routes'

    def __init__(self, routes_path: str | Path, app_root: Optional[str | Path] = None,
                 export_file: Optional[str | Path] = None, php_binary: str = 'php',
                 strategies: Optional[Sequence[RouteStrategy]] = None, **kwargs):
        kwargs.setdefault('use_cache', True)
        super().__init__(**kwargs)
        self.routes_path = Path(routes_path)
        self.app_root = Path(app_root) if app_root is not None else None
        self.export_file = Path(export_file) if export_file is not None else None
        self.php_binary = php_binary
        self.strategies = tuple(strategies) if strategies is not None else (
            self.from_artisan,
            self.from_export,
            self.from_route_files,
        )

    def cache_key_material(self) -> str:
        return '|'.join([
            self.kind,
            str(self.routes_path.resolve()),
            str(self.app_root.resolve()) if self.app_root else '',
            str(self.export_file.resolve()) if self.export_file else '',
        ])

    def route_files(self) -> List[Path]:
        files: List[Path] = []
        for directory in (self.routes_path, self.routes_path / 'routes'):
            if directory.is_dir():
                files.extend(sorted(directory.glob('*.php')))
        return files

    def source_files(self) -> List[Path]:
        sources = self.route_files()
        if self.export_file is not None:
            sources.append(self.export_file)
        return sources

    def _build(self) -> Iterable[str]:
        return first_success(self.strategies)

    def from_artisan(self) -> Optional[List[str]]:
        """Ask the application itself for its route table."""
        if self.app_root is None or not (self.app_root / 'artisan').is_file():
            return None
        command = [self.php_binary, 'artisan', 'route:list', '--json']
        try:
            completed = subprocess.run(
                command,
                cwd=str(self.app_root),
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='replace',
                timeout=ARTISAN_TIMEOUT,
            )
        except FileNotFoundError:
            logger.info("PHP binary %r not found, skipping live route table", self.php_binary)
            return None
        except subprocess.TimeoutExpired:
            logger.warning("route:list timed out after %ss", ARTISAN_TIMEOUT)
            return None

        if completed.returncode != 0:
            logger.info("route:list failed (exit %d): %s", completed.returncode, completed.stderr.strip())
            return None
        try:
            payload = json.loads(completed.stdout)
        except ValueError:
            logger.info("route:list did not return JSON")
            return None
        return names_from_route_table(payload)

    def from_export(self) -> Optional[List[str]]:
        """Read a route table previously exported with ``route:list --json``."""
        if self.export_file is None or not self.export_file.is_file():
            return None
        try:
            payload = json.loads(self.export_file.read_text(encoding='utf-8'))
        except (OSError, ValueError) as e:
            logger.warning("Could not read route export %s: %s", self.export_file, e)
            return None
        return names_from_route_table(payload)

    def from_route_files(self) -> Optional[List[str]]:
        """Scan route files for explicit route names."""
        names: List[str] = []
        for file_path in self.route_files():
            try:
                names.extend(extract_route_names(file_path.read_text(encoding='utf-8', errors='replace')))
            except OSError as e:
                logger.warning("Could not read route file %s: %s", file_path, e)
        return names
