"""Exception hierarchy for refcheck."""
from typing import Optional


class RefcheckError(Exception):
    """Base class for all refcheck errors."""


class ParseError(RefcheckError):
    """Source could not be turned into a syntax tree."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        if line is not None:
            message = f"{message} on line {line}"
        super().__init__(message)


class InvalidTypeError(RefcheckError):
    """A documentation type expression is malformed."""


class OracleLoadError(RefcheckError):
    """No loading strategy could populate an existence oracle."""


class EmptyClassNameError(RefcheckError, ValueError):
    """An empty string was passed where a class name is required."""

    def __init__(self):
        super().__init__("Class name must not be empty")


class InvalidWorkerCountError(RefcheckError, ValueError):
    """Parallel processing was requested with fewer than one worker."""

    def __init__(self, workers: int):
        self.workers = workers
        super().__init__(f"Worker count must be at least 1, got {workers}")
