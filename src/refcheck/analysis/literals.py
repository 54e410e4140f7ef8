"""Static evaluation of PHP literals.

Translation files and Composer's generated autoload maps are plain PHP
scripts that ``return`` an array literal. ``PhpFileEvaluator`` evaluates
the small subset of PHP those files use (strings, numbers, arrays,
concatenation, simple variable assignments, ``__DIR__`` and ``dirname``)
without executing anything.
"""
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

from tree_sitter import Node

from .parser import PhpParser, node_text

logger = logging.getLogger(__name__)

INTERPOLATION_FREE_PARTS = frozenset({'string_content', 'string_value', 'escape_sequence'})

_DOUBLE_QUOTED_ESCAPES = re.compile(
    r'\\(?:([nrtvef\\$"])|([0-7]{1,3})|x([0-9A-Fa-f]{1,2})|u\{([0-9A-Fa-f]+)\})'
)
_SIMPLE_ESCAPES = {
    'n': '\n', 'r': '\r', 't': '\t', 'v': '\v', 'e': '\x1b', 'f': '\f',
    '\\': '\\', '$': '$', '"': '"',
}


class Unknown:
    """Marker for values that cannot be determined statically."""

    def __repr__(self) -> str:
        return 'UNKNOWN'


UNKNOWN = Unknown()


def _decode_double_quoted(body: str) -> str:
    def replace(match: re.Match) -> str:
        simple, octal, hexa, codepoint = match.groups()
        if simple is not None:
            return _SIMPLE_ESCAPES[simple]
        if octal is not None:
            return chr(int(octal, 8) & 0xFF)
        if hexa is not None:
            return chr(int(hexa, 16))
        return chr(int(codepoint, 16))

    return _DOUBLE_QUOTED_ESCAPES.sub(replace, body)


def _decode_single_quoted(body: str) -> str:
    return re.sub(r"\\([\\'])", r'\1', body)


def is_interpolated(node: Node) -> bool:
    """True when a double-quoted string embeds variables or expressions."""
    return any(child.type not in INTERPOLATION_FREE_PARTS for child in node.named_children)


def string_value(node: Node) -> Optional[str]:
    """Decoded value of a plain string literal node, or None.

    Only single-quoted strings and double-quoted strings without
    interpolation have a static value. Heredoc/nowdoc bodies are
    treated as non-literal.
    """
    if node.type not in ('string', 'encapsed_string'):
        return None
    text = node_text(node)
    if text[:1] in ('b', 'B'):
        text = text[1:]
    if len(text) < 2 or text[0] != text[-1] or text[0] not in ('"', "'"):
        return None
    body = text[1:-1]
    if text[0] == "'":
        return _decode_single_quoted(body)
    if is_interpolated(node):
        return None
    return _decode_double_quoted(body)


def _array_key(key: Any) -> Any:
    # PHP casts decimal-integer strings, bools and floats to int keys
    if isinstance(key, bool):
        return int(key)
    if isinstance(key, float):
        return int(key)
    if isinstance(key, str) and re.fullmatch(r'-?(0|[1-9][0-9]*)', key):
        return int(key)
    if key is None:
        return ''
    return key


class PhpFileEvaluator:
    """Evaluate the value returned by a declarative PHP file."""

    def __init__(self, parser: Optional[PhpParser] = None):
        self.parser = parser or PhpParser()

    def evaluate_file(self, file_path: str | Path) -> Any:
        """Return the statically known return value of ``file_path``.

        Returns:
            The evaluated value, or UNKNOWN when the file has no
            evaluable top-level ``return``.

        Raises:
            OSError: If the file cannot be read
            ParseError: If the file is not valid PHP
        """
        file_path = Path(file_path).resolve()
        tree = self.parser.parse_file(file_path)
        env: Dict[str, Any] = {'__DIR__': str(file_path.parent), '__FILE__': str(file_path)}

        for statement in tree.root_node.named_children:
            if statement.type == 'expression_statement':
                self._assign(statement, env)
            elif statement.type == 'return_statement':
                expression = statement.named_children[0] if statement.named_children else None
                if expression is None:
                    return UNKNOWN
                return self.evaluate(expression, env)
        return UNKNOWN

    def _assign(self, statement: Node, env: Dict[str, Any]) -> None:
        expression = statement.named_children[0] if statement.named_children else None
        if expression is None or expression.type != 'assignment_expression':
            return
        left = expression.child_by_field_name('left')
        right = expression.child_by_field_name('right')
        if left is None or right is None or left.type != 'variable_name':
            return
        env[node_text(left)] = self.evaluate(right, env)

    def evaluate(self, node: Node, env: Optional[Dict[str, Any]] = None) -> Any:
        env = env if env is not None else {}
        kind = node.type

        if kind in ('string', 'encapsed_string'):
            value = string_value(node)
            return UNKNOWN if value is None else value
        if kind == 'integer':
            return self._integer(node_text(node))
        if kind == 'float':
            try:
                return float(node_text(node).replace('_', ''))
            except ValueError:
                return UNKNOWN
        if kind == 'boolean':
            return node_text(node).lower() == 'true'
        if kind == 'null':
            return None
        if kind == 'parenthesized_expression' and node.named_children:
            return self.evaluate(node.named_children[0], env)
        if kind == 'array_creation_expression':
            return self._array(node, env)
        if kind == 'variable_name':
            return env.get(node_text(node), UNKNOWN)
        if kind == 'name':
            return self._constant(node_text(node), env)
        if kind == 'binary_expression':
            return self._binary(node, env)
        if kind == 'function_call_expression':
            return self._call(node, env)
        return UNKNOWN

    @staticmethod
    def _integer(text: str) -> Any:
        text = text.replace('_', '').lower()
        try:
            if text.startswith('0x'):
                return int(text, 16)
            if text.startswith('0b'):
                return int(text, 2)
            if text.startswith('0o'):
                return int(text[2:], 8)
            if len(text) > 1 and text.startswith('0'):
                return int(text, 8)
            return int(text)
        except ValueError:
            return UNKNOWN

    @staticmethod
    def _constant(name: str, env: Dict[str, Any]) -> Any:
        lowered = name.lower()
        if lowered == 'true':
            return True
        if lowered == 'false':
            return False
        if lowered == 'null':
            return None
        return env.get(name, UNKNOWN)

    def _binary(self, node: Node, env: Dict[str, Any]) -> Any:
        operator = node.child_by_field_name('operator')
        if operator is None or operator.type != '.':
            return UNKNOWN
        left = self.evaluate(node.child_by_field_name('left'), env)
        right = self.evaluate(node.child_by_field_name('right'), env)
        if left is UNKNOWN or right is UNKNOWN:
            return UNKNOWN
        return f"{_stringify(left)}{_stringify(right)}"

    def _call(self, node: Node, env: Dict[str, Any]) -> Any:
        function = node_text(node.child_by_field_name('function')).lstrip('\\').lower()
        arguments = node.child_by_field_name('arguments')
        values = []
        if arguments is not None:
            for argument in arguments.named_children:
                if argument.type != 'argument' or not argument.named_children:
                    return UNKNOWN
                values.append(self.evaluate(argument.named_children[-1], env))
        if function != 'dirname' or not values or UNKNOWN in values:
            return UNKNOWN

        path = str(values[0])
        levels = values[1] if len(values) > 1 else 1
        if not isinstance(levels, int):
            return UNKNOWN
        for _ in range(levels):
            path = os.path.dirname(path)
        return path

    def _array(self, node: Node, env: Dict[str, Any]) -> Any:
        result: Dict[Any, Any] = {}
        next_index = 0
        for element in node.named_children:
            if element.type != 'array_element_initializer':
                continue
            if any(child.type == 'variadic_unpacking' for child in element.named_children):
                return UNKNOWN

            parts = element.named_children
            has_key = any(child.type == '=>' for child in element.children)
            if has_key and len(parts) >= 2:
                key = self.evaluate(parts[0], env)
                if key is UNKNOWN:
                    return UNKNOWN
                key = _array_key(key)
                value = self.evaluate(parts[-1], env)
            elif parts:
                key = next_index
                value = self.evaluate(parts[-1], env)
            else:
                continue

            result[key] = value
            if isinstance(key, int) and key >= next_index:
                next_index = key + 1
        return result


def _stringify(value: Any) -> str:
    if value is True:
        return '1'
    if value is False or value is None:
        return ''
    return str(value)
