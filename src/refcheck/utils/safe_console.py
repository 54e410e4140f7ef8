"""Rich console that degrades status icons to ASCII on non-UTF-8 terminals."""
from typing import Any

from rich.console import Console

from .logger import is_utf8_capable, sanitize_for_terminal


class SafeConsole(Console):
    """Console whose ``print`` sanitizes string arguments when needed.

    Pass ``ascii_only=True`` to sanitize regardless of the terminal, which
    is what captured output in CI logs usually wants.
    """

    def __init__(self, *args, ascii_only: bool = False, **kwargs):
        self._needs_sanitization = ascii_only or not is_utf8_capable()
        if self._needs_sanitization:
            kwargs.setdefault('legacy_windows', True)
        super().__init__(*args, **kwargs)

    def print(self, *objects: Any, **kwargs) -> None:
        if self._needs_sanitization:
            objects = tuple(
                sanitize_for_terminal(obj, force=True) if isinstance(obj, str) else obj
                for obj in objects
            )
        super().print(*objects, **kwargs)

    def status(self, *args, **kwargs):
        if self._needs_sanitization:
            kwargs['spinner'] = 'line'
        return super().status(*args, **kwargs)
