"""Collect class names imported with ``use`` statements."""
from typing import List, Optional

from tree_sitter import Node

from .names import NameContext, clause_item, declaration_kind, group_prefix
from .reference import Reference
from .traversal import Visitor

ORIGIN = 'import'

CLAUSE_TYPES = ('namespace_use_clause', 'namespace_use_group_clause')


class ImportCollector(Visitor):
    """Records every class imported by a ``use`` statement.

    ``use function`` and ``use const`` statements import functions and
    constants, not classes, so they are skipped. Inside a group use the
    marker may also sit on a single clause (``use A\\{B, function c}``).
    """

    def __init__(self):
        self.references: List[Reference] = []
        self._kind: Optional[str] = None
        self._prefix = ''

    def enter(self, node: Node, context: NameContext) -> None:
        if node.type == 'namespace_use_declaration':
            self._kind = declaration_kind(node)
            self._prefix = group_prefix(node)
        elif node.type in CLAUSE_TYPES and self._kind is not None:
            item = clause_item(node, self._kind, self._prefix)
            if item is not None and item.kind == 'class':
                self.references.append(Reference.static(item.name, item.line, ORIGIN, '\\'))

    def leave(self, node: Node, context: NameContext) -> None:
        if node.type == 'namespace_use_declaration':
            self._kind = None
            self._prefix = ''

    def names(self) -> List[str]:
        return [ref.text for ref in self.references]
