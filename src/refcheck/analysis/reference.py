"""Reference value object shared by every collector."""
from dataclasses import dataclass
from typing import Iterable, List, Optional


@dataclass(frozen=True)
class Reference:
    """A symbolic reference found in source.

    A reference is either static (``text`` holds the literal) or dynamic
    (``text`` is None and ``dynamic_reason`` says why it could not be
    resolved without running the code). Never both.
    """

    text: Optional[str]
    line: int
    origin: str
    dynamic_reason: Optional[str] = None
    separator: Optional[str] = None

    def __post_init__(self):
        if (self.text is None) == (self.dynamic_reason is None):
            raise ValueError(
                "Reference must carry exactly one of text or dynamic_reason "
                f"(text={self.text!r}, dynamic_reason={self.dynamic_reason!r})"
            )

    @classmethod
    def static(cls, text: str, line: int, origin: str, separator: Optional[str] = None) -> 'Reference':
        return cls(text=text, line=line, origin=origin, separator=separator)

    @classmethod
    def dynamic(cls, reason: str, line: int, origin: str, separator: Optional[str] = None) -> 'Reference':
        return cls(text=None, line=line, origin=origin, dynamic_reason=reason, separator=separator)

    @property
    def is_dynamic(self) -> bool:
        return self.text is None

    @property
    def is_empty(self) -> bool:
        return self.text == ''

    @property
    def is_namespaced(self) -> bool:
        return bool(self.text and self.separator and self.separator in self.text)

    @property
    def namespace_prefix(self) -> Optional[str]:
        if not self.is_namespaced:
            return None
        return self.text.split(self.separator, 1)[0]

    @property
    def is_json_style(self) -> bool:
        """Static translation key with no nesting, looked up in ``<locale>.json``."""
        return bool(self.text) and '.' not in self.text


def unique_texts(references: Iterable[Reference]) -> List[str]:
    """Static reference texts, deduplicated in first-seen order."""
    return list(dict.fromkeys(ref.text for ref in references if ref.text is not None))
