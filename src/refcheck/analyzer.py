"""Orchestrates one analysis run.

Resolves the input paths, expands them into files, loads the resolver's
oracle once on the calling thread and then hands the files to the
configured processor. Every file yields exactly one result: unexpected
exceptions inside a resolver become error results rather than aborting
the run.
"""
import logging
import threading
import traceback
from pathlib import Path
from typing import List, Sequence

from refcheck.config import AnalyzerConfig, Verbosity
from refcheck.results import AnalysisResult

logger = logging.getLogger(__name__)


class Analyzer:
    """Runs the resolver of an ``AnalyzerConfig`` over its paths."""

    def __init__(self, config: AnalyzerConfig):
        self.config = config
        self._progress_lock = threading.Lock()

    def files(self) -> List[Path]:
        paths = self.config.path_resolver.resolve(self.config.paths)
        return self.config.file_resolver.files(paths)

    def analyze(self) -> List[AnalysisResult]:
        """Analyze every file and report progress.

        Returns:
            One result per file, in file order
        """
        config = self.config
        files = self.files()
        logger.info("Found %d files to analyze", len(files))

        config.reporter.start(files)
        config.resolver.prepare()
        results = config.processor.process(files, self._analyze_file)
        config.reporter.finish(results)
        return results

    def _analyze_file(self, file_path: Path) -> AnalysisResult:
        try:
            result = self.config.resolver.analyze(file_path)
        except Exception as e:
            logger.debug("Analysis of %s failed", file_path, exc_info=True)
            if self.config.verbosity >= Verbosity.DEBUG:
                message = ''.join(traceback.format_exception(type(e), e, e.__traceback__))
            else:
                message = str(e) or type(e).__name__
            result = AnalysisResult.errored(file_path, message)

        with self._progress_lock:
            self.config.reporter.progress(result)
        return result


def has_failures(results: Sequence[AnalysisResult]) -> bool:
    return any(not result.success for result in results)
