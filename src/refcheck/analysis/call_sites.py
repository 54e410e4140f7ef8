"""Collect string arguments of well-known call sites.

A ``CallSiteKind`` bundles the rules that recognize one family of calls
(translation lookups, named route lookups) with the vocabulary used to
explain arguments that are computed at runtime. ``CallSiteCollector`` runs
those rules over a tree and yields one ``Reference`` per recognized call:
static when the first argument is a plain string literal, dynamic with a
human-readable reason otherwise.
"""
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from tree_sitter import Node

from .literals import string_value
from .names import NameContext
from .parser import node_line, node_text
from .reference import Reference
from .traversal import Visitor, traverse

# Recognizes a call node and returns its label, or None.
CallRule = Callable[[Node], Optional[str]]

NAME_TYPES = frozenset({'name', 'qualified_name'})
METHOD_CALL_TYPES = frozenset({'member_call_expression', 'nullsafe_member_call_expression'})
CALL_TYPES = frozenset({'function_call_expression', 'scoped_call_expression'}) | METHOD_CALL_TYPES


@dataclass(frozen=True)
class CallSiteKind:
    """One family of reference-carrying calls."""

    name: str
    noun: str
    rules: Tuple[CallRule, ...]
    separator: Optional[str] = None

    def label(self, node: Node) -> Optional[str]:
        for rule in self.rules:
            label = rule(node)
            if label is not None:
                return label
        return None


def _bare_name(node: Optional[Node]) -> Optional[str]:
    if node is None or node.type not in NAME_TYPES:
        return None
    return ''.join(node_text(node).split()).lstrip('\\')


def _class_matches(class_name: Optional[str], short_name: str) -> bool:
    if class_name is None:
        return False
    return class_name == short_name or class_name.endswith('\\' + short_name)


def function_rule(*names: str) -> CallRule:
    """Free function calls such as ``__('key')``."""
    wanted = frozenset(names)

    def rule(node: Node) -> Optional[str]:
        if node.type != 'function_call_expression':
            return None
        name = _bare_name(node.child_by_field_name('function'))
        return name if name in wanted else None

    return rule


def static_rule(class_name: str, *methods: str) -> CallRule:
    """Static calls like ``Lang::get('key')``, also through a qualified facade name."""
    wanted = frozenset(methods)

    def rule(node: Node) -> Optional[str]:
        if node.type != 'scoped_call_expression':
            return None
        method = node_text(node.child_by_field_name('name'))
        if method not in wanted:
            return None
        if not _class_matches(_bare_name(node.child_by_field_name('scope')), class_name):
            return None
        return f"{class_name}::{method}"

    return rule


def container_rule(service: str, method: str, label: str) -> CallRule:
    """Method calls on a container-resolved service: ``app('translator')->get()``."""

    def rule(node: Node) -> Optional[str]:
        if node.type not in METHOD_CALL_TYPES or node_text(node.child_by_field_name('name')) != method:
            return None
        receiver = node.child_by_field_name('object')
        if receiver is None or receiver.type != 'function_call_expression':
            return None
        if _bare_name(receiver.child_by_field_name('function')) != 'app':
            return None
        argument = first_argument(receiver)
        if argument is None or string_value(argument) != service:
            return None
        return label

    return rule


def method_rule(method: str) -> CallRule:
    """Instance calls ``->route()`` labelled by what they are chained off."""

    def rule(node: Node) -> Optional[str]:
        if node.type not in METHOD_CALL_TYPES or node_text(node.child_by_field_name('name')) != method:
            return None
        receiver = node.child_by_field_name('object')
        if receiver is not None and receiver.type == 'function_call_expression':
            function = _bare_name(receiver.child_by_field_name('function'))
            if function is not None:
                return f"{function}()->{method}"
        if receiver is not None and receiver.type == 'variable_name':
            variable = node_text(receiver).lstrip('$')
            return f"${variable}->{method}"
        return f"method()->{method}"

    return rule


TRANSLATION_KIND = CallSiteKind(
    name='translation',
    noun='key',
    separator='::',
    rules=(
        function_rule('trans', '__', 'trans_choice'),
        static_rule('Lang', 'get', 'choice'),
        container_rule('translator', 'get', 'translator::get'),
        container_rule('translator', 'choice', 'translator::choice'),
    ),
)

ROUTE_KIND = CallSiteKind(
    name='route',
    noun='route name',
    rules=(
        function_rule('route', 'to_route'),
        static_rule('Route', 'has'),
        static_rule('URL', 'route'),
        method_rule('route'),
    ),
)


def first_argument(call: Node) -> Optional[Node]:
    """Expression passed as the first argument, or None for an empty call.

    First-class callable syntax (``route(...)``) counts as no arguments.
    """
    arguments = call.child_by_field_name('arguments')
    if arguments is None:
        return None
    for child in arguments.named_children:
        if child.type == 'variadic_placeholder':
            return None
        if child.type != 'argument':
            continue
        if not child.named_children:
            return None
        expression = child.named_children[-1]
        if expression.type == 'variadic_unpacking' and expression.named_children:
            expression = expression.named_children[-1]
        return expression
    return None


def unwrap(node: Node) -> Node:
    while node.type == 'parenthesized_expression' and node.named_children:
        node = node.named_children[0]
    return node


def dynamic_reason(node: Node, noun: str) -> str:
    """Explain why an argument can't be resolved without running the code."""
    node = unwrap(node)
    kind = node.type

    if kind in ('variable_name', 'dynamic_variable_name'):
        return f"Variable used as {noun}"
    if kind == 'binary_expression':
        operator = node.child_by_field_name('operator')
        operator = operator.type if operator is not None else ''
        if operator == '.':
            return "String concatenation"
        if operator == '??':
            return "Null coalescing operator"
        return "dynamic"
    if kind == 'function_call_expression' and _bare_name(node.child_by_field_name('function')):
        return f"Function call used as {noun}"
    if kind == 'scoped_call_expression' or kind in METHOD_CALL_TYPES:
        return f"Method call used as {noun}"
    if kind == 'conditional_expression':
        return "Ternary operator"
    return "dynamic"


class CallSiteCollector(Visitor):
    """Records one Reference per recognized call with at least one argument."""

    def __init__(self, kind: CallSiteKind):
        self.kind = kind
        self.references: List[Reference] = []

    def enter(self, node: Node, context: NameContext) -> None:
        if node.type not in CALL_TYPES:
            return
        label = self.kind.label(node)
        if label is None:
            return
        argument = first_argument(node)
        if argument is None:
            return
        self.references.append(self.classify(argument, node_line(node), label))

    def classify(self, argument: Node, line: int, label: str) -> Reference:
        value = string_value(unwrap(argument))
        if value is not None:
            return Reference.static(value, line, label, self.kind.separator)
        reason = dynamic_reason(argument, self.kind.noun)
        return Reference.dynamic(reason, line, label, self.kind.separator)


def collect(tree, kind: CallSiteKind) -> List[Reference]:
    """Run a single call-site collector over a parsed tree."""
    collector = CallSiteCollector(kind)
    traverse(tree, [collector])
    return collector.references
