"""Named route resolver."""
from typing import List

from refcheck.analysis.call_sites import ROUTE_KIND
from refcheck.analysis.reference import Reference
from refcheck.oracles.routes import RouteOracle
from refcheck.results import DYNAMIC_ROUTE, EMPTY_ROUTE, AnalysisWarning

from .call_sites import CallSiteAnalysisResolver


class RouteAnalysisResolver(CallSiteAnalysisResolver):
    """Reports route names that no named route defines."""

    kind = ROUTE_KIND
    noun = 'route'
    plural = 'routes'
    separator = '.'
    dynamic_warning = DYNAMIC_ROUTE
    empty_warning = EMPTY_ROUTE
    empty_message = 'Route name is empty'

    oracle: RouteOracle

    def dynamic(self, ref: Reference) -> AnalysisWarning:
        return AnalysisWarning(
            type=self.dynamic_warning,
            line=ref.line,
            reason=ref.dynamic_reason,
            method=ref.origin,
        )

    def route_exists(self, name: str) -> bool:
        return self.oracle.exists(name)

    def loaded_routes(self) -> List[str]:
        return sorted(self.oracle.known())
