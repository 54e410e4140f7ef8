"""Shared resolver interface.

A resolver turns one file into an ``AnalysisResult``. It owns the
existence oracle for its reference kind and reports the vocabulary the
reporters use (``noun`` for the reference kind, ``separator`` for
grouping references by namespace).
"""
from pathlib import Path
from typing import Optional, Sequence

from refcheck.analysis.patterns import PatternFilter
from refcheck.analysis.template import TemplateCompiler, is_template_file
from refcheck.oracles.base import ExistenceOracle
from refcheck.results import TEMPLATE_SKIPPED, AnalysisResult, AnalysisWarning


class AnalysisResolver:
    """Base class for per-file resolvers."""

    noun = 'reference'
    plural = 'references'
    separator = '\\'
    compiler: Optional[TemplateCompiler] = None

    def __init__(self, oracle: ExistenceOracle, ignore: Sequence[str] = (),
                 include: Optional[Sequence[str]] = None):
        self.oracle = oracle
        self.filter = PatternFilter(include=include, ignore=ignore)

    @property
    def ignore(self):
        return self.filter.ignore

    @property
    def include(self):
        return self.filter.include

    def prepare(self) -> None:
        """Load the oracle before files are fanned out to workers."""
        self.oracle.load()

    def analyze(self, file_path: Path) -> AnalysisResult:
        raise NotImplementedError

    def skips_template(self, file_path: Path) -> bool:
        """True for template files when no compiler is configured."""
        return self.compiler is None and is_template_file(file_path)

    def template_skipped(self, file_path: Path) -> AnalysisResult:
        return AnalysisResult.passed(file_path, warnings=[AnalysisWarning(
            type=TEMPLATE_SKIPPED,
            message='Template compiler not configured',
        )])
