"""Collect class names used in code positions.

Only positions that can hold a class name count: ``new X``, ``X::m()``,
``X::CONST``, ``X::$prop``, ``instanceof X``, type declarations, ``extends``,
``implements``, trait ``use`` and attributes. Each name is resolved to its
absolute form through the traversal's name context.

Function call names and bare constants (``strlen()``, ``PHP_EOL``) share
the ``name`` node type with class names. They are neutralized: a name
whose parent is a call or a plain expression position is never recorded.
"""
from typing import List, Optional

from tree_sitter import Node

from .names import NameContext
from .parser import node_line, node_text
from .reference import Reference
from .traversal import Visitor

ORIGIN = 'qualified-name'

NAME_TYPES = frozenset({'name', 'qualified_name', 'relative_name'})

# Any name directly below these nodes is a class name.
CLASS_LIST_PARENTS = frozenset({
    'named_type',
    'base_clause',
    'class_interface_clause',
    'use_declaration',
    'type_list',
})

# Only the first named child is the class; the rest are members or arguments.
LEADING_CLASS_PARENTS = frozenset({
    'object_creation_expression',
    'attribute',
    'scoped_call_expression',
    'class_constant_access_expression',
    'scoped_property_access_expression',
})

NEUTRAL_PARENTS = frozenset({'function_call_expression'})

# Type keywords that older grammars emit as plain names.
TYPE_KEYWORDS = frozenset({
    'array', 'bool', 'callable', 'false', 'float', 'int', 'iterable', 'mixed',
    'never', 'null', 'object', 'string', 'true', 'void',
})


def _is_first_named_child(parent: Node, node: Node) -> bool:
    children = parent.named_children
    return bool(children) and children[0].id == node.id


def _is_instanceof_operand(parent: Node, node: Node) -> bool:
    operator = parent.child_by_field_name('operator')
    right = parent.child_by_field_name('right')
    return (
        operator is not None
        and operator.type == 'instanceof'
        and right is not None
        and right.id == node.id
    )


def is_class_position(node: Node) -> bool:
    parent = node.parent
    if parent is None or parent.type in NEUTRAL_PARENTS or parent.type in NAME_TYPES:
        return False
    if parent.type in CLASS_LIST_PARENTS:
        return True
    if parent.type in LEADING_CLASS_PARENTS:
        return _is_first_named_child(parent, node)
    if parent.type == 'binary_expression':
        return _is_instanceof_operand(parent, node)
    return False


class QualifiedNameCollector(Visitor):
    """Records absolute class names referenced from code."""

    def __init__(self):
        self.references: List[Reference] = []

    def enter(self, node: Node, context: NameContext) -> None:
        if node.type not in NAME_TYPES or not is_class_position(node):
            return
        name = self._resolve(node_text(node), context)
        if name:
            self.references.append(Reference.static(name, node_line(node), ORIGIN, '\\'))

    @staticmethod
    def _resolve(text: str, context: NameContext) -> Optional[str]:
        if text.lower() in TYPE_KEYWORDS:
            return None
        return context.resolve_class(text)

    def names(self) -> List[str]:
        return [ref.text for ref in self.references]
