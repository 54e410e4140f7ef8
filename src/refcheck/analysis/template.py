"""Blade template pre-compiler.

Blade files (``*.blade.php``) are not valid PHP until compiled. The
compiler here translates the template syntax that can carry references
into plain PHP: echoes, raw echoes, ``@php`` blocks and directives with
arguments. Markup is passed through untouched and line breaks are
preserved, so line numbers in the compiled output match the template.
"""
import re
from pathlib import Path
from typing import Optional, Protocol, Tuple

TEMPLATE_SUFFIX = '.blade.php'

_TOKENS = re.compile(
    r"""
    (?P<comment>\{\{--.*?--\}\})
  | (?P<escaped>@(?P<escaped_body>\{\{.*?\}\}|\{!!.*?!!\}))
  | \{!!(?P<raw>.*?)!!\}
  | \{\{(?P<echo>.*?)\}\}
  | @verbatim(?P<verbatim>.*?)@endverbatim
  | @php(?!\s*\()(?P<php>.*?)@endphp
  | (?<![\w@])@(?P<directive>[A-Za-z_]\w*)
    """,
    re.DOTALL | re.VERBOSE,
)

# Directives whose arguments are PHP expressions. Anything else after an
# "@" (CSS at-rules, unknown directives) stays markup.
EXPRESSION_DIRECTIVES = frozenset({
    'if', 'elseif', 'unless', 'isset', 'empty', 'switch', 'case', 'break', 'continue',
    'foreach', 'forelse', 'for', 'while', 'include', 'includeif', 'includewhen',
    'includeunless', 'includefirst', 'each', 'extends', 'extendsfirst', 'section',
    'yield', 'push', 'pushif', 'pushonce', 'prepend', 'prependonce', 'stack', 'can',
    'cannot', 'canany', 'elsecan', 'elsecannot', 'elsecanany', 'auth', 'guest',
    'elseauth', 'elseguest', 'env', 'hassection', 'sectionmissing', 'error', 'props',
    'aware', 'class', 'style', 'checked', 'selected', 'disabled', 'readonly',
    'required', 'json', 'js', 'method', 'lang', 'choice', 'php', 'inject', 'session',
    'context', 'use', 'component', 'slot', 'fragment', 'dd', 'dump', 'vite', 'production',
})

LOOP_DIRECTIVES = {
    'foreach': 'foreach',
    'forelse': 'foreach',
    'for': 'for',
    'while': 'while',
}


class TemplateCompiler(Protocol):
    """Anything that can turn template source into PHP."""

    def compile(self, source: str) -> str:
        ...


def is_template_file(path: str | Path) -> bool:
    return str(path).endswith(TEMPLATE_SUFFIX)


def _blank_lines(text: str) -> str:
    return '\n' * text.count('\n')


def _expression(text: str) -> str:
    return text.strip() or "''"


def read_arguments(source: str, position: int) -> Optional[Tuple[str, int]]:
    """Read a balanced ``( ... )`` group starting at ``position``.

    Leading spaces are allowed. Returns the text between the outer
    parentheses and the index just past the closing one, or None when
    no complete group starts there.
    """
    index = position
    while index < len(source) and source[index] in ' \t':
        index += 1
    if index >= len(source) or source[index] != '(':
        return None

    depth = 0
    quote = None
    start = index
    while index < len(source):
        char = source[index]
        if quote:
            if char == '\\':
                index += 2
                continue
            if char == quote:
                quote = None
        elif char in ('"', "'"):
            quote = char
        elif char == '(':
            depth += 1
        elif char == ')':
            depth -= 1
            if depth == 0:
                return source[start + 1:index], index + 1
        index += 1
    return None


class BladeCompiler:
    """Compile Blade templates to PHP for static analysis."""

    def compile(self, source: str) -> str:
        output = []
        position = 0
        while True:
            match = _TOKENS.search(source, position)
            if match is None:
                output.append(source[position:])
                break
            output.append(source[position:match.start()])
            compiled, position = self._compile_token(source, match)
            output.append(compiled)
        return ''.join(output)

    def compile_file(self, path: str | Path) -> str:
        return self.compile(Path(path).read_text(encoding='utf-8'))

    def _compile_token(self, source: str, match: re.Match) -> Tuple[str, int]:
        groups = match.groupdict()
        end = match.end()

        if groups['comment'] is not None:
            return _blank_lines(groups['comment']), end
        if groups['escaped'] is not None:
            return groups['escaped_body'], end
        if groups['raw'] is not None:
            return f"<?php echo {_expression(groups['raw'])}; ?>", end
        if groups['echo'] is not None:
            return f"<?php echo e({_expression(groups['echo'])}); ?>", end
        if groups['verbatim'] is not None:
            return groups['verbatim'], end
        if groups['php'] is not None:
            return f"<?php{groups['php']}?>", end

        name = groups['directive']
        if name.lower() not in EXPRESSION_DIRECTIVES:
            return match.group(), end
        arguments = read_arguments(source, end)
        if arguments is None:
            return match.group(), end
        body, end = arguments
        return self._directive(name, body), end

    @staticmethod
    def _directive(name: str, arguments: str) -> str:
        if not arguments.strip():
            return _blank_lines(arguments)
        if name == 'lang':
            return f"<?php echo app('translator')->get({arguments}); ?>"
        if name == 'choice':
            return f"<?php echo app('translator')->choice({arguments}); ?>"
        if name == 'php':
            return f"<?php ({arguments}); ?>"
        if name in LOOP_DIRECTIVES:
            return f"<?php {LOOP_DIRECTIVES[name]} ({arguments}) {{}} ?>"
        return f"<?php blade_{name.lower()}({arguments}); ?>"
