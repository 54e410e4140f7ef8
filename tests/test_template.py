"""Tests for the Blade pre-compiler."""

from pathlib import Path

import pytest

from refcheck.analysis.call_sites import ROUTE_KIND, TRANSLATION_KIND, collect
from refcheck.analysis.parser import PhpParser
from refcheck.analysis.template import BladeCompiler, is_template_file, read_arguments

FIXTURES_DIR = Path(__file__).parent / 'fixtures' / 'blade'


@pytest.fixture
def compiler():
    return BladeCompiler()


class TestBladeCompiler:
    """Translation of template syntax to PHP."""

    def test_echoes(self, compiler):
        assert compiler.compile("<p>{{ $name }}</p>") == "<p><?php echo e($name); ?></p>"
        assert compiler.compile("{!! $html !!}") == "<?php echo $html; ?>"

    def test_comments_keep_line_count(self, compiler):
        assert compiler.compile("{{-- one\ntwo\nthree --}}x") == "\n\nx"

    def test_escaped_echo_stays_markup(self, compiler):
        assert compiler.compile("@{{ raw }}") == "{{ raw }}"

    def test_lang_and_choice_directives(self, compiler):
        assert compiler.compile("@lang('auth.failed')") == "<?php echo app('translator')->get('auth.failed'); ?>"
        assert compiler.compile("@choice('apples', 3)") == "<?php echo app('translator')->choice('apples', 3); ?>"

    def test_loops_and_generic_directives(self, compiler):
        assert compiler.compile("@foreach ($users as $user)") == "<?php foreach ($users as $user) {} ?>"
        assert compiler.compile("@include('partials.nav', ['a' => f(1)])") == (
            "<?php blade_include('partials.nav', ['a' => f(1)]); ?>"
        )

    def test_php_blocks(self, compiler):
        assert compiler.compile("@php\n$x = 1;\n@endphp") == "<?php\n$x = 1;\n?>"
        assert compiler.compile("@php($x = 1)") == "<?php ($x = 1); ?>"

    def test_unknown_directives_and_emails_stay_markup(self, compiler):
        source = "@media screen {}\nmail@example.com\n@endif\n@csrf"
        assert compiler.compile(source) == source

    def test_verbatim(self, compiler):
        assert compiler.compile("@verbatim{{ x }}@endverbatim") == "{{ x }}"

    def test_compiled_fixture_parses_and_keeps_lines(self, compiler):
        compiled = compiler.compile_file(FIXTURES_DIR / 'profile.blade.php')
        tree = PhpParser().parse(compiled)

        keys = collect(tree, TRANSLATION_KIND)
        assert [(r.text, r.line, r.origin) for r in keys] == [
            ('profile.title', 2, '__'),
            ('nav.admin', 5, 'translator::get'),
            ('messages.apples', 8, 'trans_choice'),
        ]
        assert [(r.text, r.line) for r in collect(tree, ROUTE_KIND)] == [('admin.dashboard', 5)]


class TestHelpers:
    """Template detection and argument reading."""

    def test_is_template_file(self):
        assert is_template_file('resources/views/home.blade.php')
        assert not is_template_file('app/Http/Kernel.php')

    def test_read_arguments_balances_parentheses_and_quotes(self):
        source = "@if (count($a) > 0 && $b === ')')rest"
        body, end = read_arguments(source, 3)
        assert body == "count($a) > 0 && $b === ')'"
        assert source[end:] == 'rest'

    def test_read_arguments_requires_parenthesis(self):
        assert read_arguments("@csrf <form>", 5) is None
