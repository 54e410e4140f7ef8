"""Class reference resolver."""
import logging
from pathlib import Path
from typing import Optional, Sequence

from refcheck.analysis.reference_analyzer import ReferenceAnalyzer
from refcheck.analysis.template import TemplateCompiler
from refcheck.exceptions import ParseError
from refcheck.oracles.symbols import SymbolOracle
from refcheck.results import AnalysisResult

from .base import AnalysisResolver

logger = logging.getLogger(__name__)


class ClassAnalysisResolver(AnalysisResolver):
    """Reports class names that no autoloadable symbol matches.

    Every extracted name is listed in ``references``. Names excluded by
    the include/ignore patterns are never checked.
    """

    noun = 'class'
    plural = 'classes'
    separator = '\\'

    def __init__(self, oracle: SymbolOracle, ignore: Sequence[str] = (),
                 include: Optional[Sequence[str]] = None,
                 compiler: Optional[TemplateCompiler] = None):
        super().__init__(oracle, ignore=ignore, include=include)
        self.compiler = compiler

    def analyze(self, file_path: Path) -> AnalysisResult:
        file_path = Path(file_path)
        if self.skips_template(file_path):
            return self.template_skipped(file_path)

        analyzer = ReferenceAnalyzer(self.compiler)
        try:
            references = analyzer.analyze_file(file_path)
        except ParseError as e:
            return AnalysisResult.errored(file_path, str(e))

        missing = [
            name for name in references
            if self.filter.allows(name) and not self.oracle.exists(name)
        ]
        if missing:
            logger.debug("%s: %d missing classes", file_path, len(missing))
        return AnalysisResult.build(file_path, references, missing)

    def class_exists(self, name: str) -> bool:
        return self.oracle.exists(name)
