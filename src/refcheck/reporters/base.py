"""Reporter interface shared by the console and agent outputs."""
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console

from refcheck.results import AnalysisResult
from refcheck.utils.safe_console import SafeConsole

GLOBAL_NAMESPACE = '(global)'


def namespace_of(name: str, separator: str = '\\') -> str:
    """Everything before the last separator, or ``(global)``.

    >>> namespace_of('App\\\\Models\\\\User')
    'App\\\\Models'
    >>> namespace_of('auth.failed', '.')
    'auth'
    """
    head, sep, _ = name.rpartition(separator)
    return head if sep and head else GLOBAL_NAMESPACE


class Reporter:
    """Receives the file list, each result as it completes, then all results.

    ``noun``/``plural`` name the reference kind in messages, ``separator``
    splits references into namespaces for grouping.
    """

    def __init__(self, noun: str = 'class', plural: str = 'classes', separator: str = '\\',
                 console: Optional[Console] = None):
        self.noun = noun
        self.plural = plural
        self.separator = separator
        self.console = console or SafeConsole(highlight=False)

    @classmethod
    def for_resolver(cls, resolver, **kwargs) -> 'Reporter':
        return cls(noun=resolver.noun, plural=resolver.plural, separator=resolver.separator, **kwargs)

    def namespace(self, name: str) -> str:
        return namespace_of(name, self.separator)

    def start(self, files: Sequence[Path]) -> None:
        pass

    def progress(self, result: AnalysisResult) -> None:
        pass

    def finish(self, results: Sequence[AnalysisResult]) -> None:
        pass
