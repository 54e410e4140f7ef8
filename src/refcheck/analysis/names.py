"""Namespace resolution context for PHP class names.

Tracks the current ``namespace`` and the ``use`` aliases in effect so that
relative names (``User``, ``Models\\User``, ``namespace\\User``) can be
turned into absolute ones (``App\\Models\\User``).
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from tree_sitter import Node

from .parser import node_text


# Names that refer to the enclosing class and never to a real symbol.
RELATIVE_CLASS_NAMES = frozenset({'self', 'static', 'parent'})

USE_KINDS = ('function', 'const')


def normalize_name(text: str) -> str:
    """Drop whitespace that PHP tolerates inside qualified names."""
    return ''.join(text.split())


@dataclass
class UseItem:
    """One imported name from a ``use`` statement."""

    name: str
    alias: str
    kind: str  # 'class', 'function' or 'const'
    line: int


@dataclass
class NameContext:
    """Namespace plus class aliases in effect at a point in a file."""

    namespace: str = ''
    aliases: Dict[str, str] = field(default_factory=dict)

    def add_alias(self, alias: str, name: str) -> None:
        self.aliases[alias.lower()] = name

    def resolve_class(self, name: str) -> Optional[str]:
        """Resolve a class name to its fully-qualified form.

        Returns None for ``self``, ``static`` and ``parent``.
        """
        name = normalize_name(name)
        if not name:
            return None
        if name.startswith('\\'):
            return name.lstrip('\\')
        if name.lower() in RELATIVE_CLASS_NAMES:
            return None
        if name.lower().startswith('namespace\\'):
            return self._prefixed(name[len('namespace\\'):])

        first, _, rest = name.partition('\\')
        target = self.aliases.get(first.lower())
        if target is not None:
            return f"{target}\\{rest}" if rest else target
        return self._prefixed(name)

    def _prefixed(self, name: str) -> str:
        return f"{self.namespace}\\{name}" if self.namespace else name


def _keyword_kind(node: Node) -> Optional[str]:
    for child in node.children:
        if child.type in USE_KINDS:
            return child.type
    kind = node.child_by_field_name('type')
    if kind is not None and kind.type in USE_KINDS:
        return kind.type
    return None


def _clause_name_and_alias(clause: Node):
    name = None
    alias_node = clause.child_by_field_name('alias')
    for child in clause.named_children:
        if child.type in ('name', 'qualified_name', 'namespace_name') and name is None:
            name = node_text(child)
        elif child.type == 'namespace_aliasing_clause' and child.named_children:
            alias_node = child.named_children[-1]
    alias = node_text(alias_node) if alias_node is not None else None
    return name, alias


def _use_clauses(declaration: Node) -> List[Node]:
    clauses = []
    for child in declaration.named_children:
        if child.type == 'namespace_use_clause':
            clauses.append(child)
        elif child.type == 'namespace_use_group':
            clauses.extend(
                c for c in child.named_children
                if c.type in ('namespace_use_clause', 'namespace_use_group_clause')
            )
    return clauses


def group_prefix(declaration: Node) -> str:
    """Prefix shared by the clauses of a group use (``use A\\{B, C}``)."""
    for child in declaration.named_children:
        if child.type == 'namespace_name':
            return normalize_name(node_text(child)).strip('\\')
    return ''


def declaration_kind(declaration: Node) -> str:
    """Import kind of a use declaration: ``class``, ``function`` or ``const``."""
    return _keyword_kind(declaration) or 'class'


def clause_item(clause: Node, default_kind: str, prefix: str = '') -> Optional[UseItem]:
    """Build the UseItem described by a single use clause."""
    name, alias = _clause_name_and_alias(clause)
    if not name:
        return None
    name = normalize_name(name).lstrip('\\')
    if prefix:
        name = f"{prefix}\\{name}"
    kind = _keyword_kind(clause) or default_kind
    return UseItem(
        name=name,
        alias=alias or name.rsplit('\\', 1)[-1],
        kind=kind,
        line=clause.start_point[0] + 1,
    )


def parse_use_declaration(declaration: Node) -> List[UseItem]:
    """Expand a ``namespace_use_declaration`` node into imported names."""
    kind = declaration_kind(declaration)
    prefix = group_prefix(declaration)
    items = []
    for clause in _use_clauses(declaration):
        item = clause_item(clause, kind, prefix)
        if item is not None:
            items.append(item)
    return items


def namespace_name(definition: Node) -> str:
    """Declared name of a namespace definition, '' for the global namespace."""
    name = definition.child_by_field_name('name')
    if name is None:
        for child in definition.named_children:
            if child.type == 'namespace_name':
                name = child
                break
    return normalize_name(node_text(name)).strip('\\')
