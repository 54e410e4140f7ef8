"""Validation of call-site references (translation keys, route names)."""
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from refcheck.analysis.call_sites import CallSiteKind, collect
from refcheck.analysis.parser import PhpParser
from refcheck.analysis.reference import Reference
from refcheck.analysis.template import TemplateCompiler, is_template_file
from refcheck.exceptions import ParseError
from refcheck.oracles.base import ExistenceOracle
from refcheck.results import AnalysisResult, AnalysisWarning

from .base import AnalysisResolver

logger = logging.getLogger(__name__)


class CallSiteAnalysisResolver(AnalysisResolver):
    """Checks the string argument of every recognized call against an oracle.

    Per reference:
    - dynamic: optionally warned about, never validated
    - excluded by the patterns: skipped entirely
    - empty literal: missing, with a warning
    - otherwise: missing unless the oracle knows it

    ``references`` lists exactly the static references that were not
    skipped.
    """

    kind: CallSiteKind
    dynamic_warning = 'dynamic'
    empty_warning = 'empty'
    empty_message = 'Reference is empty'

    def __init__(self, oracle: ExistenceOracle, report_dynamic: bool = True,
                 ignore: Sequence[str] = (), include: Optional[Sequence[str]] = None,
                 compiler: Optional[TemplateCompiler] = None):
        super().__init__(oracle, ignore=ignore, include=include)
        self.report_dynamic = report_dynamic
        self.compiler = compiler

    def analyze(self, file_path: Path) -> AnalysisResult:
        file_path = Path(file_path)
        source = file_path.read_text(encoding='utf-8', errors='replace')

        if self.skips_template(file_path):
            return self.template_skipped(file_path)
        if is_template_file(file_path):
            source = self.compiler.compile(source)

        try:
            tree = PhpParser().parse(source)
        except ParseError as e:
            return AnalysisResult.errored(file_path, str(e))

        return self.validate(file_path, collect(tree, self.kind))

    def validate(self, file_path: Path, references: Sequence[Reference]) -> AnalysisResult:
        checked: List[str] = []
        missing: List[Optional[str]] = []
        warnings: List[AnalysisWarning] = []

        for ref in references:
            if ref.is_dynamic:
                if self.report_dynamic:
                    warnings.append(self.dynamic(ref))
                continue
            if not self.filter.allows(ref.text):
                continue

            checked.append(ref.text)
            if ref.is_empty:
                missing.append(ref.text)
                warnings.append(AnalysisWarning(type=self.empty_warning, line=ref.line, message=self.empty_message))
                continue

            warnings.extend(self.extra_warnings(ref))
            if not self.oracle.exists(ref.text):
                missing.append(ref.text)

        return AnalysisResult.build(file_path, checked, missing, warnings)

    def dynamic(self, ref: Reference) -> AnalysisWarning:
        return AnalysisWarning(type=self.dynamic_warning, line=ref.line, reason=ref.dynamic_reason)

    def extra_warnings(self, ref: Reference) -> List[AnalysisWarning]:
        return []
