"""Discovery of the files to analyze."""
import os
from pathlib import Path
from typing import Iterable, List, Sequence

from refcheck.analysis.patterns import matches_any


class PathResolver:
    """Keeps the input paths that exist."""

    def resolve(self, paths: Iterable[str | Path]) -> List[Path]:
        return [Path(p) for p in paths if Path(p).is_dir() or Path(p).is_file()]

    def missing(self, paths: Iterable[str | Path]) -> List[Path]:
        return [Path(p) for p in paths if not Path(p).exists()]


class FileResolver:
    """Expands paths into PHP files.

    Directories are walked recursively. Dot-files are skipped, as are files
    whose name or path relative to the walked directory matches one of the
    ``exclude`` patterns.
    """

    def __init__(self, exclude: Sequence[str] = ()):
        self.exclude = tuple(exclude)

    def should_analyze(self, path: Path, relative: str = '') -> bool:
        if path.suffix != '.php' or path.name.startswith('.'):
            return False
        if not self.exclude:
            return True
        return not matches_any(path.name, self.exclude) and not matches_any(relative or path.as_posix(), self.exclude)

    def files(self, paths: Iterable[str | Path]) -> List[Path]:
        found: List[Path] = []
        for path in paths:
            path = Path(path)
            if path.is_file():
                if self.should_analyze(path):
                    found.append(path)
            elif path.is_dir():
                found.extend(self._walk(path))
        return found

    def _walk(self, directory: Path) -> List[Path]:
        found = []
        for root, dirs, files in os.walk(directory):
            dirs.sort()
            for file_name in sorted(files):
                path = Path(root) / file_name
                relative = path.relative_to(directory).as_posix()
                if self.should_analyze(path, relative):
                    found.append(path)
        return found
