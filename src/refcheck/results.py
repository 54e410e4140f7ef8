"""Per-file analysis outcome."""
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple

# Warning types
DYNAMIC_KEY = 'dynamic_key'
EMPTY_KEY = 'empty_key'
MISSING_VENDOR_PACKAGE = 'missing_vendor_package'
DYNAMIC_ROUTE = 'dynamic_route'
EMPTY_ROUTE = 'empty_route'
TEMPLATE_SKIPPED = 'template_skipped'


@dataclass(frozen=True)
class AnalysisWarning:
    """Something worth reporting that does not fail the file."""

    type: str
    line: Optional[int] = None
    reason: Optional[str] = None
    message: Optional[str] = None
    method: Optional[str] = None
    package: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {key: value for key, value in asdict(self).items() if value is not None}


@dataclass(frozen=True)
class AnalysisResult:
    """Immutable result of analyzing one file.

    ``success`` holds exactly when nothing is missing and no error
    occurred. Use the ``passed``/``failed``/``errored``/``build``
    constructors rather than the raw dataclass constructor.
    """

    file: Path
    references: Tuple[str, ...] = ()
    missing: Tuple[str, ...] = ()
    success: bool = True
    error: Optional[str] = None
    warnings: Tuple[AnalysisWarning, ...] = field(default_factory=tuple)

    def __post_init__(self):
        expected = not self.missing and self.error is None
        if self.success != expected:
            raise ValueError(
                f"Inconsistent result for {self.file}: success={self.success}, "
                f"missing={len(self.missing)}, error={self.error!r}"
            )

    @classmethod
    def passed(cls, file: Path, references: Iterable[str] = (),
               warnings: Iterable[AnalysisWarning] = ()) -> 'AnalysisResult':
        return cls(file=Path(file), references=tuple(references), warnings=tuple(warnings))

    @classmethod
    def failed(cls, file: Path, references: Iterable[str], missing: Iterable[str],
               warnings: Iterable[AnalysisWarning] = ()) -> 'AnalysisResult':
        return cls(
            file=Path(file),
            references=tuple(references),
            missing=tuple(str(name) for name in missing),
            success=False,
            warnings=tuple(warnings),
        )

    @classmethod
    def errored(cls, file: Path, message: str) -> 'AnalysisResult':
        return cls(file=Path(file), success=False, error=message)

    @classmethod
    def build(cls, file: Path, references: Iterable[str], missing: Iterable[Optional[str]],
              warnings: Iterable[AnalysisWarning] = ()) -> 'AnalysisResult':
        """Passed or failed depending on ``missing``; None entries become ''."""
        missing = tuple('' if name is None else str(name) for name in missing)
        if missing:
            return cls.failed(file, references, missing, warnings)
        return cls.passed(file, references, warnings)

    def has_missing(self) -> bool:
        return bool(self.missing)

    def has_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'file': str(self.file),
            'references': list(self.references),
            'missing': list(self.missing),
            'success': self.success,
            'error': self.error,
            'warnings': [warning.to_dict() for warning in self.warnings],
        }
