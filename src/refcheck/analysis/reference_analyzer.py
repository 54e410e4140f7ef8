"""Per-file class reference extraction."""
from pathlib import Path
from typing import List, Optional

from .docblock import DocCollector
from .imports import ImportCollector
from .parser import PhpParser
from .qualified_names import QualifiedNameCollector
from .reference import Reference, unique_texts
from .template import TemplateCompiler, is_template_file
from .traversal import traverse


class ReferenceAnalyzer:
    """Extracts every class name a PHP file refers to.

    Imports, code-position names and doc comment types are collected in a
    single traversal and merged in that order. Duplicates keep their
    first position.

    A parser is created per analyzer; use one analyzer per thread.
    """

    def __init__(self, compiler: Optional[TemplateCompiler] = None):
        self.parser = PhpParser()
        self.compiler = compiler

    def collect(self, source: str) -> List[Reference]:
        """Parse ``source`` and return every class reference, duplicates included.

        Raises:
            ParseError: If the source contains syntax errors
        """
        tree = self.parser.parse(source)
        imports = ImportCollector()
        names = QualifiedNameCollector()
        docs = DocCollector()
        traverse(tree, [imports, names, docs])
        return imports.references + names.references + docs.references()

    def analyze(self, source: str) -> List[str]:
        """Return the class names referenced by ``source`` in first-seen order."""
        return unique_texts(self.collect(source))

    def analyze_file(self, file_path: str | Path) -> List[str]:
        return self.analyze(self.read_source(file_path))

    def read_source(self, file_path: str | Path) -> str:
        source = Path(file_path).read_text(encoding='utf-8', errors='replace')
        if self.compiler is not None and is_template_file(file_path):
            source = self.compiler.compile(source)
        return source
