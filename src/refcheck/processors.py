"""Strategies for running the per-file callback over a file list."""
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, List, Sequence

from refcheck.exceptions import InvalidWorkerCountError
from refcheck.results import AnalysisResult

logger = logging.getLogger(__name__)

FileCallback = Callable[[Path], AnalysisResult]


def default_workers() -> int:
    return os.cpu_count() or 1


class SerialProcessor:
    """Analyze files one after another on the calling thread."""

    def process(self, files: Sequence[Path], callback: FileCallback) -> List[AnalysisResult]:
        return [callback(file) for file in files]


class ParallelProcessor:
    """Analyze files on a thread pool. Results keep the input order."""

    def __init__(self, workers: int = 4):
        if workers < 1:
            raise InvalidWorkerCountError(workers)
        self.workers = workers

    def process(self, files: Sequence[Path], callback: FileCallback) -> List[AnalysisResult]:
        if not files:
            return []
        workers = min(self.workers, len(files))
        logger.debug("Analyzing %d files on %d threads", len(files), workers)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix='refcheck') as pool:
            return list(pool.map(callback, files))
