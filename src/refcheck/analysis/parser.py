"""Tree-sitter parser for PHP sources."""
from pathlib import Path
from typing import Iterator, Optional

import tree_sitter_php as tsphp
from tree_sitter import Language, Node, Parser, Tree

from refcheck.exceptions import ParseError


PHP_LANGUAGE = Language(tsphp.language_php())


def node_text(node: Optional[Node]) -> str:
    """Decode the source text covered by a node."""
    if node is None:
        return ''
    return node.text.decode('utf-8', errors='replace')


def node_line(node: Node) -> int:
    """1-based line where a node starts."""
    return node.start_point[0] + 1


def iter_nodes(node: Node) -> Iterator[Node]:
    """Pre-order walk over every node below (and including) ``node``."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


class PhpParser:
    """PHP parser using the tree-sitter v0.22+ API.

    Tree-sitter never throws on bad input; it produces ERROR and MISSING
    nodes instead. ``parse`` turns those into ``ParseError`` so callers
    get a single failure signal.
    """

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self) -> Parser:
        """Factory method using the Parser(Language(capsule)) constructor."""
        return Parser(PHP_LANGUAGE)

    def parse(self, source: str | bytes) -> Tree:
        """Parse PHP source into a syntax tree.

        Args:
            source: PHP source, including the opening ``<?php`` tag

        Returns:
            Parsed Tree object

        Raises:
            ParseError: If the tree contains syntax errors
        """
        if isinstance(source, str):
            source = source.encode('utf-8')

        tree = self.parser.parse(source)
        if tree.root_node.has_error:
            raise ParseError("Syntax error", self._first_error_line(tree.root_node))
        return tree

    def parse_file(self, file_path: str | Path) -> Tree:
        """Read and parse a PHP file.

        Raises:
            OSError: If the file cannot be read
            ParseError: If the file contains syntax errors
        """
        with open(file_path, 'rb') as f:
            return self.parse(f.read())

    @staticmethod
    def _first_error_line(root: Node) -> Optional[int]:
        for node in iter_nodes(root):
            if node.is_error or node.is_missing:
                return node_line(node)
        return None
