"""Translation key oracle backed by a Laravel ``lang`` directory."""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence

from refcheck.analysis.literals import PhpFileEvaluator
from refcheck.exceptions import ParseError

from .base import ExistenceOracle

logger = logging.getLogger(__name__)


def flatten_translations(translations: Dict[Any, Any], prefix: str = '') -> Iterator[str]:
    """Yield dot-joined keys for every leaf of a nested translation array."""
    for key, value in translations.items():
        full_key = str(key) if not prefix else f"{prefix}.{key}"
        if isinstance(value, dict):
            yield from flatten_translations(value, full_key)
        else:
            yield full_key


class TranslationOracle(ExistenceOracle):
    """Knows every translation key defined for the configured locales.

    For each locale, in order:
    - ``<lang>/<locale>/*.php`` as ``group.nested.key``
    - ``<lang>/<locale>.json`` as flat keys
    - ``<parent of lang>/resources/lang/<locale>/*.php`` (pre Laravel 9 layout)
    - ``<vendor>/<package>/lang/<locale>/*.php`` as ``package::group.key``

    Translation files are evaluated statically and never executed.
    """

    kind = 'translations'

    def __init__(self, lang_path: str | Path, locales: Sequence[str] = ('en',),
                 vendor_path: Optional[str | Path] = None, **kwargs):
        super().__init__(**kwargs)
        self.lang_path = Path(lang_path)
        self.locales = tuple(locales)
        self.vendor_path = Path(vendor_path) if vendor_path is not None else None
        self._evaluator = PhpFileEvaluator()

    @property
    def legacy_path(self) -> Path:
        return self.lang_path.parent / 'resources' / 'lang'

    def cache_key_material(self) -> str:
        return '|'.join([
            self.kind,
            str(self.lang_path.resolve()),
            ','.join(self.locales),
            str(self.vendor_path.resolve()) if self.vendor_path else '',
        ])

    def source_files(self) -> List[Path]:
        sources: List[Path] = []
        for locale in self.locales:
            for directory in self._group_directories(locale):
                sources.append(directory)
                sources.extend(sorted(directory.glob('*.php')))
            sources.append(self.lang_path / f"{locale}.json")
        return sources

    def vendor_package_exists(self, package: str) -> bool:
        if self.vendor_path is None:
            return False
        return (self.vendor_path / package / 'lang').is_dir()

    def _group_directories(self, locale: str) -> List[Path]:
        directories = [self.lang_path / locale, self.legacy_path / locale]
        if self.vendor_path is not None and self.vendor_path.is_dir():
            directories.extend(
                package / 'lang' / locale
                for package in sorted(self.vendor_path.iterdir())
                if package.is_dir()
            )
        return [d for d in directories if d.is_dir()]

    def _build(self) -> Iterable[str]:
        keys: List[str] = []
        for locale in self.locales:
            keys.extend(self._php_keys(self.lang_path / locale))
            keys.extend(self._json_keys(self.lang_path / f"{locale}.json"))
            keys.extend(self._php_keys(self.legacy_path / locale))
            keys.extend(self._vendor_keys(locale))
        return keys

    def _php_keys(self, directory: Path, namespace: str = '') -> List[str]:
        if not directory.is_dir():
            return []
        keys: List[str] = []
        for file_path in sorted(directory.glob('*.php')):
            try:
                translations = self._evaluator.evaluate_file(file_path)
            except (OSError, ParseError) as e:
                logger.warning("Skipping translation file %s: %s", file_path, e)
                continue
            if not isinstance(translations, dict):
                logger.debug("%s does not return an array", file_path)
                continue
            group = f"{namespace}::{file_path.stem}" if namespace else file_path.stem
            keys.extend(flatten_translations(translations, group))
        return keys

    @staticmethod
    def _json_keys(file_path: Path) -> List[str]:
        if not file_path.is_file():
            return []
        try:
            translations = json.loads(file_path.read_text(encoding='utf-8'))
        except (OSError, ValueError) as e:
            logger.warning("Skipping translation file %s: %s", file_path, e)
            return []
        if not isinstance(translations, dict):
            return []
        return list(translations)

    def _vendor_keys(self, locale: str) -> List[str]:
        if self.vendor_path is None or not self.vendor_path.is_dir():
            return []
        keys: List[str] = []
        for package in sorted(self.vendor_path.iterdir()):
            if package.is_dir():
                keys.extend(self._php_keys(package / 'lang' / locale, namespace=package.name))
        return keys
