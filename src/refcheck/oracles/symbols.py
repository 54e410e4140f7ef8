"""Class existence oracle backed by Composer's autoload metadata.

Known symbols come from:
- PHP's built-in classes, interfaces and enums
- ``vendor/composer/autoload_classmap.php``
- PSR-4 / PSR-0 directories from ``vendor/composer/autoload_psr4.php``,
  ``autoload_namespaces.php`` and the project's ``composer.json``
- Class, interface, trait and enum declarations in extra scan paths

Names compare case-insensitively, like PHP's own class lookup.
"""
import json
import logging
import os
import re
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from tree_sitter import Node

from refcheck.analysis.literals import UNKNOWN, PhpFileEvaluator
from refcheck.analysis.names import NameContext
from refcheck.analysis.parser import PhpParser, node_text
from refcheck.analysis.traversal import Visitor, traverse
from refcheck.exceptions import EmptyClassNameError, ParseError

from .base import ExistenceOracle
from .php_builtins import BUILTIN_CLASSES

logger = logging.getLogger(__name__)

DECLARATION_TYPES = frozenset({
    'class_declaration', 'interface_declaration', 'trait_declaration', 'enum_declaration',
})

_IDENTIFIER = re.compile(r'^[A-Za-z_\x80-\uffff][\w\x80-\uffff]*$')

SKIPPED_DIRECTORIES = frozenset({'node_modules'})


class DeclarationCollector(Visitor):
    """Fully-qualified names of every class-like declaration in a file."""

    def __init__(self):
        self.names: List[str] = []

    def enter(self, node: Node, context: NameContext) -> None:
        if node.type not in DECLARATION_TYPES:
            return
        name = node.child_by_field_name('name')
        if name is None:
            return
        short = node_text(name)
        self.names.append(f"{context.namespace}\\{short}" if context.namespace else short)


def _php_files(directory: Path) -> Iterator[Path]:
    for root, dirs, files in os.walk(directory):
        dirs[:] = sorted(d for d in dirs if d not in SKIPPED_DIRECTORIES and not d.startswith('.'))
        for file_name in sorted(files):
            if file_name.endswith('.php') and not file_name.endswith('.blade.php'):
                yield Path(root) / file_name


def psr4_names(prefix: str, directory: Path) -> Iterator[str]:
    """Class names Composer's PSR-4 autoloader would find under ``directory``."""
    prefix = prefix.strip('\\')
    for file_path in _php_files(directory):
        parts = file_path.relative_to(directory).with_suffix('').parts
        if not all(_IDENTIFIER.match(part) for part in parts):
            continue
        relative = '\\'.join(parts)
        yield f"{prefix}\\{relative}" if prefix else relative


def psr0_names(prefix: str, directory: Path) -> Iterator[str]:
    """Class names resolvable under a PSR-0 root for ``prefix``."""
    prefix = prefix.strip('\\')
    for file_path in _php_files(directory):
        parts = file_path.relative_to(directory).with_suffix('').parts
        if not all(_IDENTIFIER.match(part) for part in parts):
            continue
        name = '\\'.join(parts)
        if not prefix or name.startswith(prefix) or name.replace('\\', '_').startswith(prefix):
            yield name


class SymbolOracle(ExistenceOracle):
    """Knows which classes a Composer project can autoload."""

    kind = 'symbols'

    def __init__(self, project_root: str | Path = '.', vendor_dir: str = 'vendor',
                 scan_paths: Sequence[str | Path] = (), include_builtins: bool = True,
                 **kwargs):
        super().__init__(**kwargs)
        self.project_root = Path(project_root).resolve()
        self.vendor_dir = self.project_root / vendor_dir
        self.scan_paths = tuple(Path(p).resolve() for p in scan_paths)
        self.include_builtins = include_builtins
        self._evaluator: Optional[PhpFileEvaluator] = None

    @property
    def composer_dir(self) -> Path:
        return self.vendor_dir / 'composer'

    def cache_key_material(self) -> str:
        return '|'.join([
            self.kind,
            str(self.project_root),
            str(self.vendor_dir),
            ','.join(str(p) for p in self.scan_paths),
            str(self.include_builtins),
        ])

    def normalize(self, name: str) -> str:
        return name.lstrip('\\').lower()

    def exists(self, name: str) -> bool:
        if name in ('', '0'):
            raise EmptyClassNameError()
        return super().exists(name)

    def source_files(self) -> List[Path]:
        sources = [
            self.project_root / 'composer.json',
            self.project_root / 'composer.lock',
            self.composer_dir / 'autoload_classmap.php',
            self.composer_dir / 'autoload_psr4.php',
            self.composer_dir / 'autoload_namespaces.php',
        ]
        # New files change their directory's mtime
        for _, directory in self._project_psr4():
            for root, dirs, _ in os.walk(directory):
                dirs[:] = [d for d in dirs if not d.startswith('.')]
                sources.append(Path(root))
        for path in self.scan_paths:
            sources.extend(_php_files(path) if path.is_dir() else [path])
        return sources

    def _build(self) -> Iterable[str]:
        names: List[str] = []
        if self.include_builtins:
            names.extend(BUILTIN_CLASSES)
        names.extend(self._classmap())
        for prefix, directory in self._vendor_map('autoload_psr4.php'):
            names.extend(psr4_names(prefix, directory))
        for prefix, directory in self._vendor_map('autoload_namespaces.php'):
            names.extend(psr0_names(prefix, directory))
        for prefix, directory in self._project_psr4():
            names.extend(psr4_names(prefix, directory))
        names.extend(self._declarations())
        return names

    def _evaluate(self, file_path: Path):
        if self._evaluator is None:
            self._evaluator = PhpFileEvaluator()
        try:
            return self._evaluator.evaluate_file(file_path)
        except (OSError, ParseError) as e:
            logger.warning("Could not read %s: %s", file_path, e)
            return UNKNOWN

    def _classmap(self) -> List[str]:
        path = self.composer_dir / 'autoload_classmap.php'
        if not path.is_file():
            return []
        value = self._evaluate(path)
        if not isinstance(value, dict):
            return []
        return [str(name) for name in value]

    def _vendor_map(self, file_name: str) -> List[tuple]:
        path = self.composer_dir / file_name
        if not path.is_file():
            return []
        value = self._evaluate(path)
        if not isinstance(value, dict):
            return []
        return list(self._directories(value))

    def _project_psr4(self) -> List[tuple]:
        path = self.project_root / 'composer.json'
        if not path.is_file():
            return []
        try:
            manifest = json.loads(path.read_text(encoding='utf-8'))
        except (OSError, ValueError) as e:
            logger.warning("Could not read %s: %s", path, e)
            return []

        mapping: Dict[str, List[str]] = {}
        for section in ('autoload', 'autoload-dev'):
            psr4 = (manifest.get(section) or {}).get('psr-4') or {}
            for prefix, dirs in psr4.items():
                dirs = dirs if isinstance(dirs, list) else [dirs]
                mapping.setdefault(prefix, []).extend(str(self.project_root / d) for d in dirs)
        return list(self._directories(mapping))

    @staticmethod
    def _directories(mapping: dict) -> Iterator[tuple]:
        for prefix, dirs in mapping.items():
            if isinstance(dirs, dict):
                dirs = list(dirs.values())
            elif not isinstance(dirs, list):
                dirs = [dirs]
            for directory in dirs:
                if isinstance(directory, str) and Path(directory).is_dir():
                    yield str(prefix), Path(directory)

    def _declarations(self) -> List[str]:
        names: List[str] = []
        parser = PhpParser()
        for root in self.scan_paths:
            files = _php_files(root) if root.is_dir() else [root]
            for file_path in files:
                try:
                    tree = parser.parse_file(file_path)
                except (OSError, ParseError) as e:
                    logger.debug("Skipping %s: %s", file_path, e)
                    continue
                collector = DeclarationCollector()
                traverse(tree, [collector])
                names.extend(collector.names)
        return names
