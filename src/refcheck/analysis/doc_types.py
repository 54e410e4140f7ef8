"""PHPDoc type expressions and tag parsing.

``TypeResolver`` turns a type expression such as ``?array<int, User|Post>``
into a small tree of type objects; ``DocBlockFactory`` splits a ``/** */``
comment into tags and resolves the type attached to each. Relative class
names resolve against the ``NameContext`` of the comment's position.
"""
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from refcheck.exceptions import InvalidTypeError

from .names import NameContext


# Keywords and pseudo-types that never name a class.
KEYWORD_TYPES = frozenset({
    'array', 'array-key', 'bool', 'boolean', 'callable', 'callable-string',
    'class-string', 'closed-resource', 'double', 'empty', 'false', 'float',
    'int', 'integer', 'interface-string', 'iterable', 'key-of', 'list',
    'literal-string', 'lowercase-string', 'mixed', 'negative-int', 'never',
    'never-return', 'never-returns', 'no-return', 'non-empty-array',
    'non-empty-list', 'non-empty-lowercase-string', 'non-empty-string',
    'non-falsy-string', 'non-negative-int', 'non-positive-int', 'noreturn',
    'null', 'numeric', 'numeric-string', 'object', 'parent', 'positive-int',
    'resource', 'scalar', 'self', 'static', 'string', 'true', 'truthy-string',
    'value-of', 'void', '$this', 'callback', 'open-resource', 'trait-string',
    'enum-string',
})

LIST_KEYWORDS = frozenset({'array', 'list', 'iterable', 'non-empty-array', 'non-empty-list'})


@dataclass(frozen=True)
class ObjectType:
    fqsen: Optional[str]

    def __str__(self) -> str:
        return self.fqsen or 'object'


@dataclass(frozen=True)
class KeywordType:
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class OpaqueType:
    """Shapes, callable signatures and literal types."""

    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class ListType:
    """Array, list, iterable or generic class with key and value types."""

    value: object
    key: Optional[object] = None
    name: str = 'array'

    def __str__(self) -> str:
        if self.key is None:
            return f"{self.name}<{self.value}>"
        return f"{self.name}<{self.key}, {self.value}>"


@dataclass(frozen=True)
class CompoundType:
    members: Tuple[object, ...]
    conjunction: bool = False

    def __iter__(self):
        return iter(self.members)

    def __str__(self) -> str:
        glue = '&' if self.conjunction else '|'
        return glue.join(str(member) for member in self.members)


@dataclass(frozen=True)
class NullableType:
    actual: object

    def __str__(self) -> str:
        return f"?{self.actual}"


_TOKEN = re.compile(
    r"""
    (?P<space>\s+)
  | (?P<string>'[^']*'|"[^"]*")
  | (?P<number>-?\d+(?:\.\d+)?)
  | (?P<name>\\?[A-Za-z_\x80-\uffff$][\w\x80-\uffff\-]*(?:\\[A-Za-z_\x80-\uffff][\w\x80-\uffff]*)*)
  | (?P<punct>\[\]|::|\.\.\.|[?|&<>(){},:=*\[\]])
    """,
    re.VERBOSE,
)


def tokenize(expression: str) -> List[str]:
    tokens = []
    position = 0
    while position < len(expression):
        match = _TOKEN.match(expression, position)
        if match is None:
            raise InvalidTypeError(f"Unexpected character in type '{expression}' at {position}")
        if match.lastgroup != 'space':
            tokens.append(match.group())
        position = match.end()
    return tokens


class TypeResolver:
    """Recursive-descent parser for PHPDoc type expressions."""

    def __init__(self, context: Optional[NameContext] = None):
        self.context = context or NameContext()
        self._tokens: List[str] = []
        self._position = 0

    def resolve(self, expression: str):
        """Parse ``expression`` into a type tree.

        Raises:
            InvalidTypeError: If the expression is empty or malformed
        """
        if not expression or not expression.strip():
            raise InvalidTypeError("Type expression is empty")
        self._tokens = tokenize(expression)
        self._position = 0
        result = self._union()
        if self._position != len(self._tokens):
            raise InvalidTypeError(f"Unexpected '{self._peek()}' in type '{expression}'")
        return result

    def _peek(self) -> Optional[str]:
        if self._position < len(self._tokens):
            return self._tokens[self._position]
        return None

    def _take(self, expected: Optional[str] = None) -> str:
        token = self._peek()
        if token is None:
            raise InvalidTypeError("Unexpected end of type expression")
        if expected is not None and token != expected:
            raise InvalidTypeError(f"Expected '{expected}', got '{token}'")
        self._position += 1
        return token

    def _union(self):
        members = [self._intersection()]
        while self._peek() == '|':
            self._take()
            members.append(self._intersection())
        return members[0] if len(members) == 1 else CompoundType(tuple(members))

    def _intersection(self):
        members = [self._postfix()]
        while self._peek() == '&':
            self._take()
            members.append(self._postfix())
        return members[0] if len(members) == 1 else CompoundType(tuple(members), conjunction=True)

    def _postfix(self):
        result = self._atom()
        while self._peek() == '[]':
            self._take()
            result = ListType(value=result)
        return result

    def _atom(self):
        token = self._peek()
        if token is None:
            raise InvalidTypeError("Unexpected end of type expression")

        if token == '?':
            self._take()
            return NullableType(self._postfix())
        if token == '(':
            self._take()
            inner = self._union()
            self._take(')')
            return inner
        if token[0] in ('"', "'") or token[0].isdigit() or token[0] == '-':
            self._take()
            return OpaqueType(token)
        if token in ('*', '[', '{') or not (token[0].isalpha() or token[0] in '\\_$' or ord(token[0]) > 127):
            raise InvalidTypeError(f"Unexpected '{token}' in type expression")

        name = self._take()
        lowered = name.lower()

        if self._peek() == '::':
            # Class constant types (Foo::BAR, Foo::*)
            self._take()
            self._take()
            return OpaqueType(f"{name}::...")
        if self._peek() == '{':
            self._skip_balanced('{', '}')
            return OpaqueType(f"{name}{{...}}")
        if self._peek() == '(' and lowered in ('callable', 'closure', '\\closure'):
            self._skip_balanced('(', ')')
            if self._peek() == ':':
                self._take()
                self._postfix()
            return OpaqueType(f"{name}(...)")
        if self._peek() == '<':
            return self._generic(name)
        if lowered in KEYWORD_TYPES:
            return KeywordType(lowered)
        return ObjectType(self.context.resolve_class(name))

    def _generic(self, name: str):
        self._take('<')
        arguments = [self._union()]
        while self._peek() == ',':
            self._take()
            arguments.append(self._union())
        self._take('>')

        lowered = name.lower()
        if lowered in ('class-string', 'key-of', 'value-of', 'int', 'interface-string'):
            return OpaqueType(f"{name}<...>")

        key = arguments[0] if len(arguments) > 1 else None
        value = arguments[-1]
        label = lowered if lowered in LIST_KEYWORDS else (self.context.resolve_class(name) or name)
        return ListType(value=value, key=key, name=label)

    def _skip_balanced(self, opening: str, closing: str) -> None:
        depth = 0
        while True:
            token = self._take()
            if token == opening:
                depth += 1
            elif token == closing:
                depth -= 1
                if depth == 0:
                    return


@dataclass(frozen=True)
class DocTag:
    name: str
    type: Optional[object] = None
    description: str = ''


@dataclass(frozen=True)
class MethodParameter:
    name: str
    type: Optional[object] = None


@dataclass(frozen=True)
class MethodTag:
    """``@method`` tag. Carries parameter types but no ``type`` of its own."""

    name: str
    method_name: str
    return_type: Optional[object] = None
    parameters: Tuple[MethodParameter, ...] = ()
    is_static: bool = False


@dataclass(frozen=True)
class DocBlock:
    summary: str = ''
    tags: Tuple[object, ...] = field(default_factory=tuple)


TYPED_TAGS = frozenset({
    'param', 'return', 'returns', 'var', 'throws', 'property', 'property-read', 'property-write',
    'mixin', 'extends', 'implements', 'template-extends', 'template-implements',
})

_TAG_LINE = re.compile(r'^@([\w\-\\]+)(.*)$', re.DOTALL)
_METHOD_SIGNATURE = re.compile(r'^(?P<name>[A-Za-z_\x80-\uffff][\w\x80-\uffff]*)\s*\((?P<args>.*?)\)', re.DOTALL)


def split_type_expression(body: str) -> Tuple[str, str]:
    """Split a tag body into its leading type expression and the rest.

    Whitespace only ends the type at bracket depth zero and not next to
    a ``|`` or ``&``.
    """
    depth = 0
    position = 0
    body = body.lstrip()
    while position < len(body):
        char = body[position]
        if char in '<({[':
            depth += 1
        elif char in '>)}]':
            depth = max(depth - 1, 0)
        elif char.isspace() and depth == 0:
            before = body[:position].rstrip()
            after = body[position:].lstrip()
            if before.endswith(('|', '&', ',', ':')) or after.startswith(('|', '&')):
                position += 1
                continue
            break
        position += 1
    return body[:position].strip(), body[position:].strip()


class DocBlockFactory:
    """Parse ``/** ... */`` comments into DocBlock objects."""

    def __init__(self, context: Optional[NameContext] = None):
        self.context = context or NameContext()

    def create(self, comment: str) -> DocBlock:
        lines = self._strip_comment(comment)
        summary_lines: List[str] = []
        raw_tags: List[str] = []
        for line in lines:
            if line.startswith('@'):
                raw_tags.append(line)
            elif raw_tags:
                raw_tags[-1] = f"{raw_tags[-1]}\n{line}"
            else:
                summary_lines.append(line)

        tags = []
        for raw in raw_tags:
            tag = self._tag(raw)
            if tag is not None:
                tags.append(tag)
        summary = '\n'.join(summary_lines).strip().split('\n\n', 1)[0]
        return DocBlock(summary=summary, tags=tuple(tags))

    @staticmethod
    def _strip_comment(comment: str) -> List[str]:
        text = comment.strip()
        if text.startswith('/**'):
            text = text[3:]
        if text.endswith('*/'):
            text = text[:-2]
        lines = []
        for line in text.splitlines():
            line = line.strip()
            if line.startswith('*'):
                line = line[1:].strip()
            lines.append(line)
        return lines

    def _tag(self, raw: str):
        match = _TAG_LINE.match(raw)
        if match is None:
            return None
        name = match.group(1).lower()
        body = match.group(2).strip()
        # psalm-/phpstan- prefixed variants carry the same grammar
        for prefix in ('psalm-', 'phpstan-'):
            if name.startswith(prefix) and name[len(prefix):] in TYPED_TAGS:
                name = name[len(prefix):]

        if name == 'method':
            return self._method(body)
        if name in TYPED_TAGS:
            expression, description = split_type_expression(body)
            if expression.startswith('$') or expression.startswith('&$') or expression.startswith('...$'):
                return DocTag(name=name, description=body)
            return DocTag(name=name, type=self._resolve(expression), description=description)
        return DocTag(name=name, description=body)

    def _resolve(self, expression: str):
        if not expression:
            return None
        try:
            return TypeResolver(self.context).resolve(expression)
        except InvalidTypeError:
            return None

    def _method(self, body: str) -> Optional[MethodTag]:
        is_static = False
        if body.startswith('static ') and not _METHOD_SIGNATURE.match(body):
            is_static = True
            body = body[len('static '):].lstrip()

        return_type = None
        signature = _METHOD_SIGNATURE.match(body)
        if signature is None:
            expression, rest = split_type_expression(body)
            signature = _METHOD_SIGNATURE.match(rest)
            if signature is None:
                return None
            return_type = self._resolve(expression)

        parameters = tuple(
            parameter
            for parameter in (self._parameter(raw) for raw in _split_arguments(signature.group('args')))
            if parameter is not None
        )
        return MethodTag(
            name='method',
            method_name=signature.group('name'),
            return_type=return_type,
            parameters=parameters,
            is_static=is_static,
        )

    def _parameter(self, raw: str) -> Optional[MethodParameter]:
        raw = raw.split('=', 1)[0].strip()
        if not raw:
            return None
        dollar = raw.find('$')
        if dollar == -1:
            return MethodParameter(name='', type=self._resolve(raw))
        name = raw[dollar:]
        expression = raw[:dollar].strip().rstrip('&').rstrip('.').strip()
        return MethodParameter(name=name, type=self._resolve(expression))


def _split_arguments(arguments: str) -> List[str]:
    parts = []
    depth = 0
    current = []
    for char in arguments:
        if char in '<({[':
            depth += 1
        elif char in '>)}]':
            depth -= 1
        if char == ',' and depth == 0:
            parts.append(''.join(current))
            current = []
        else:
            current.append(char)
    if ''.join(current).strip():
        parts.append(''.join(current))
    return parts
