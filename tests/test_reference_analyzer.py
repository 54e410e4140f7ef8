"""Tests for class reference extraction.

Covers the three collectors (imports, code positions, doc comments), the
order they are merged in, namespace resolution and template support.
"""

from pathlib import Path

import pytest

from refcheck.analysis.imports import ImportCollector
from refcheck.analysis.parser import PhpParser
from refcheck.analysis.qualified_names import QualifiedNameCollector
from refcheck.analysis.reference_analyzer import ReferenceAnalyzer
from refcheck.analysis.template import BladeCompiler
from refcheck.analysis.traversal import traverse
from refcheck.exceptions import ParseError

FIXTURES_DIR = Path(__file__).parent / 'fixtures'


@pytest.fixture
def analyzer():
    """ReferenceAnalyzer without a template compiler."""
    return ReferenceAnalyzer()


def collect_with(collector_class, source):
    tree = PhpParser().parse(source)
    collector = collector_class()
    traverse(tree, [collector])
    return collector.names()


class TestImportCollector:
    """Class imports from use statements."""

    def test_plain_and_aliased_imports(self):
        source = "<?php\nuse App\\Models\\User;\nuse App\\Models\\Post as Article;\n"
        assert collect_with(ImportCollector, source) == ['App\\Models\\User', 'App\\Models\\Post']

    def test_group_use(self):
        source = "<?php\nuse App\\Services\\{Billing, Mailer as Mail};\n"
        assert collect_with(ImportCollector, source) == ['App\\Services\\Billing', 'App\\Services\\Mailer']

    def test_function_and_const_imports_are_skipped(self):
        source = (
            "<?php\n"
            "use function App\\Support\\helper;\n"
            "use const App\\Support\\VERSION;\n"
            "use App\\Support\\Str;\n"
        )
        assert collect_with(ImportCollector, source) == ['App\\Support\\Str']

    def test_leading_backslash_is_dropped(self):
        assert collect_with(ImportCollector, "<?php\nuse \\DateTime;\n") == ['DateTime']


class TestQualifiedNameCollector:
    """Class names in code positions."""

    def test_names_resolve_against_namespace(self):
        source = "<?php\nnamespace App;\n$a = new Widget();\n$b = new \\Other\\Thing();\n"
        assert collect_with(QualifiedNameCollector, source) == ['App\\Widget', 'Other\\Thing']

    def test_function_calls_and_constants_are_neutral(self):
        source = "<?php\nnamespace App;\nstrlen(PHP_EOL);\n\\array_map(null, []);\necho FOO;\n"
        assert collect_with(QualifiedNameCollector, source) == []

    def test_relative_class_keywords_are_skipped(self):
        source = (
            "<?php\n"
            "class A extends B {\n"
            "    public function f(): static { self::g(); static::h(); return parent::i(); }\n"
            "}\n"
        )
        assert collect_with(QualifiedNameCollector, source) == ['B']

    def test_static_access_and_instanceof(self):
        source = (
            "<?php\n"
            "use App\\Models\\User;\n"
            "if ($x instanceof User) { echo Config::KEY, Cache::$store; Log::info('x'); }\n"
        )
        assert collect_with(QualifiedNameCollector, source) == ['App\\Models\\User', 'Config', 'Cache', 'Log']

    def test_catch_and_parameter_types(self):
        source = (
            "<?php\n"
            "function f(int $a, Foo|Bar $b, ?Baz $c): void {\n"
            "    try {} catch (FirstException | SecondException $e) {}\n"
            "}\n"
        )
        assert collect_with(QualifiedNameCollector, source) == [
            'Foo', 'Bar', 'Baz', 'FirstException', 'SecondException',
        ]

    def test_braced_namespaces_reset_context(self):
        source = (
            "<?php\n"
            "namespace A { class X extends Base {} }\n"
            "namespace { class Y extends Base {} }\n"
        )
        assert collect_with(QualifiedNameCollector, source) == ['A\\Base', 'Base']

    def test_namespace_relative_name(self):
        source = "<?php\nnamespace App;\n$x = new namespace\\Sub\\Thing();\n"
        assert collect_with(QualifiedNameCollector, source) == ['App\\Sub\\Thing']

    def test_namespace_relative_names_in_type_positions(self, analyzer):
        source = (
            "<?php\n"
            "namespace App;\n"
            "function f(namespace\\Sub\\Thing $t): void {}\n"
            "$x = new namespace\\Sub\\Other();\n"
        )
        assert analyzer.analyze(source) == ['App\\Sub\\Thing', 'App\\Sub\\Other']


class TestReferenceAnalyzer:
    """Merged extraction over a realistic controller."""

    def test_fixture_references_in_merge_order(self, analyzer):
        names = analyzer.analyze_file(FIXTURES_DIR / 'php' / 'UserController.php')

        assert names == [
            # imports
            'App\\Models\\User',
            'App\\Services\\Billing',
            'App\\Services\\Mailer',
            # code positions
            'App\\Http\\Controllers\\Controller',
            'JsonSerializable',
            'App\\Http\\Controllers\\Concerns\\HandlesUsers',
            'App\\Http\\Controllers\\Response',
            'DateTimeImmutable',
            'App\\Http\\Controllers\\Admin',
            # doc comments
            'App\\Http\\Controllers\\Filter',
            'App\\Http\\Controllers\\Post',
            'RuntimeException',
        ]

    def test_name_from_all_three_sources_appears_once_at_import_position(self, analyzer):
        source = (
            "<?php\n"
            "use App\\Models\\User;\n"
            "/** @param User $user */\n"
            "function f(User $user) { return new Other(); }\n"
        )
        assert analyzer.analyze(source) == ['App\\Models\\User', 'Other']

    def test_collect_keeps_duplicates_and_origins(self, analyzer):
        source = (
            "<?php\n"
            "use App\\Models\\User;\n"
            "/** @param User $user */\n"
            "function f(User $user) {}\n"
        )
        refs = analyzer.collect(source)
        assert [(r.text, r.origin, r.line) for r in refs] == [
            ('App\\Models\\User', 'import', 2),
            ('App\\Models\\User', 'qualified-name', 4),
            ('App\\Models\\User', 'doc-type', 3),
        ]
        assert all(not r.is_dynamic for r in refs)

    def test_doc_comment_without_namespace(self, analyzer):
        source = "<?php\n/** @return Foo|null */\nfunction f() {}\n"
        assert analyzer.analyze(source) == ['Foo']

    def test_nullable_union_flattens_to_two_names(self, analyzer):
        source = "<?php\nnamespace App;\n/** @var ?Foo|Bar */\n$x = 1;\n"
        assert analyzer.analyze(source) == ['App\\Foo', 'App\\Bar']

    def test_analysis_is_deterministic(self, analyzer):
        path = FIXTURES_DIR / 'php' / 'UserController.php'
        assert analyzer.analyze_file(path) == ReferenceAnalyzer().analyze_file(path)

    def test_syntax_error_raises_parse_error(self, analyzer):
        with pytest.raises(ParseError) as exc_info:
            analyzer.analyze("<?php\n\nclass {\n")
        assert exc_info.value.line is not None
        assert 'Syntax error' in str(exc_info.value)


class TestTemplates:
    """Blade templates are compiled before extraction."""

    def test_template_references(self):
        analyzer = ReferenceAnalyzer(compiler=BladeCompiler())
        names = analyzer.analyze_file(FIXTURES_DIR / 'blade' / 'profile.blade.php')
        assert names == ['App\\Support\\Markdown']

    def test_plain_php_is_not_compiled(self, php_file):
        path = php_file("<?php\n$a = new Widget();\n")
        assert ReferenceAnalyzer(compiler=BladeCompiler()).read_source(path) == "<?php\n$a = new Widget();\n"
