"""Collect class names from PHPDoc comments.

``DocCollector`` parses every ``/** */`` comment with the name context in
effect at that point of the file; ``process`` then reduces the parsed
blocks to the class names their type expressions mention.
"""
from typing import Iterable, List

from tree_sitter import Node

from .doc_types import CompoundType, DocBlock, DocBlockFactory, ListType, NullableType, ObjectType
from .names import NameContext
from .parser import node_line, node_text
from .reference import Reference
from .traversal import Visitor

ORIGIN = 'doc-type'


class DocCollector(Visitor):
    """Parses doc comments into DocBlocks, remembering where each started."""

    def __init__(self):
        self.docs: List[DocBlock] = []
        self.lines: List[int] = []

    def enter(self, node: Node, context: NameContext) -> None:
        if node.type != 'comment':
            return
        text = node_text(node)
        if not text.startswith('/**') or text.startswith('/**/'):
            return
        self.docs.append(DocBlockFactory(context).create(text))
        self.lines.append(node_line(node))

    def references(self) -> List[Reference]:
        refs = []
        for doc, line in zip(self.docs, self.lines):
            refs.extend(Reference.static(name, line, ORIGIN, '\\') for name in process([doc]))
        return refs


def flatten_type(type_) -> List[str]:
    """Class names mentioned by a single type expression."""
    if isinstance(type_, ListType):
        names = []
        for part in (type_.key, type_.value):
            if part is not None:
                names.extend(flatten_type(part))
        return names
    if isinstance(type_, CompoundType):
        names = []
        for member in type_:
            names.extend(flatten_type(member))
        return names
    if isinstance(type_, NullableType):
        return flatten_type(type_.actual)
    if isinstance(type_, ObjectType) and type_.fqsen:
        return [type_.fqsen.lstrip('\\')]
    return []


def tag_types(tag) -> List[object]:
    """Types carried by a tag: its own type plus any parameter types."""
    types = []
    type_ = getattr(tag, 'type', None)
    if type_ is not None:
        types.append(type_)

    parameters = getattr(tag, 'parameters', None)
    if isinstance(parameters, (list, tuple)):
        for parameter in parameters:
            parameter_type = getattr(parameter, 'type', None)
            if parameter_type is not None:
                types.append(parameter_type)
    return types


def process(docs: Iterable[DocBlock]) -> List[str]:
    """Flatten every tag type of every doc block, in order, duplicates kept."""
    names = []
    for doc in docs:
        for tag in getattr(doc, 'tags', ()):
            for type_ in tag_types(tag):
                names.extend(flatten_type(type_))
    return names
