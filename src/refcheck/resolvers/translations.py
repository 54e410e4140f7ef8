"""Translation key resolver."""
from typing import List

from refcheck.analysis.call_sites import TRANSLATION_KIND
from refcheck.analysis.reference import Reference
from refcheck.oracles.translations import TranslationOracle
from refcheck.results import DYNAMIC_KEY, EMPTY_KEY, MISSING_VENDOR_PACKAGE, AnalysisWarning

from .call_sites import CallSiteAnalysisResolver


class TranslationAnalysisResolver(CallSiteAnalysisResolver):
    """Reports translation keys missing from every configured locale."""

    kind = TRANSLATION_KIND
    noun = 'translation key'
    plural = 'translation keys'
    separator = '.'
    dynamic_warning = DYNAMIC_KEY
    empty_warning = EMPTY_KEY
    empty_message = 'Translation key is empty'

    oracle: TranslationOracle

    def extra_warnings(self, ref: Reference) -> List[AnalysisWarning]:
        package = ref.namespace_prefix
        if package is None or self.oracle.vendor_package_exists(package):
            return []
        return [AnalysisWarning(type=MISSING_VENDOR_PACKAGE, line=ref.line, package=package)]

    def translation_exists(self, key: str) -> bool:
        return self.oracle.exists(key)

    def loaded_keys(self) -> List[str]:
        return sorted(self.oracle.known())
