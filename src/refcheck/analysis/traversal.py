"""Single-pass syntax tree traversal with namespace tracking.

Several collectors usually need the same tree. ``traverse`` walks it once,
calls ``enter``/``leave`` on every attached visitor for every node, and
keeps a ``NameContext`` up to date so visitors can resolve class names as
they go. Visitors are built fresh for each traversal and expose their own
results; nothing is reset or shared between runs.
"""
from typing import Iterable, Sequence

from tree_sitter import Node, Tree

from .names import NameContext, namespace_name, parse_use_declaration


class Visitor:
    """Base class for traversal visitors. Both hooks are optional."""

    def enter(self, node: Node, context: NameContext) -> None:
        pass

    def leave(self, node: Node, context: NameContext) -> None:
        pass


class Traversal:
    """Depth-first walk that maintains the name resolution context."""

    def __init__(self, visitors: Sequence[Visitor]):
        self.visitors = tuple(visitors)
        self.context = NameContext()

    def run(self, tree: Tree | Node) -> None:
        root = tree.root_node if isinstance(tree, Tree) else tree
        self.context = NameContext()

        # (node, entered) pairs; iterative to survive deeply nested files
        stack = [(root, False)]
        while stack:
            node, entered = stack.pop()
            if entered:
                self._leave(node)
                continue
            self._enter(node)
            stack.append((node, True))
            stack.extend((child, False) for child in reversed(node.children))

    def _enter(self, node: Node) -> None:
        if node.type == 'namespace_definition':
            self.context = NameContext(namespace=namespace_name(node))
        elif node.type == 'namespace_use_declaration':
            for item in parse_use_declaration(node):
                if item.kind == 'class':
                    self.context.add_alias(item.alias, item.name)

        for visitor in self.visitors:
            visitor.enter(node, self.context)

    def _leave(self, node: Node) -> None:
        for visitor in self.visitors:
            visitor.leave(node, self.context)

        # A braced namespace block ends its scope; the unbraced form
        # lasts until the next namespace statement.
        if node.type == 'namespace_definition' and node.child_by_field_name('body') is not None:
            self.context = NameContext()


def traverse(tree: Tree | Node, visitors: Iterable[Visitor]) -> None:
    Traversal(list(visitors)).run(tree)
