"""Tests for translation and route call-site extraction."""

import pytest

from refcheck.analysis.call_sites import ROUTE_KIND, TRANSLATION_KIND, collect
from refcheck.analysis.parser import PhpParser


def translations(source):
    return collect(PhpParser().parse(source), TRANSLATION_KIND)


def routes(source):
    return collect(PhpParser().parse(source), ROUTE_KIND)


class TestTranslationCalls:
    """Recognized translation lookups."""

    def test_recognized_call_shapes(self):
        refs = translations(
            "<?php\n"
            "__('a.one');\n"
            "trans('a.two');\n"
            "trans_choice('a.three', 2);\n"
            "Lang::get('a.four');\n"
            "\\Illuminate\\Support\\Facades\\Lang::choice('a.five', 1);\n"
            "app('translator')->get('a.six');\n"
        )
        assert [(r.text, r.origin, r.line) for r in refs] == [
            ('a.one', '__', 2),
            ('a.two', 'trans', 3),
            ('a.three', 'trans_choice', 4),
            ('a.four', 'Lang::get', 5),
            ('a.five', 'Lang::choice', 6),
            ('a.six', 'translator::get', 7),
        ]

    def test_unrelated_calls_are_ignored(self):
        refs = translations(
            "<?php\n"
            "translate('x');\n"
            "Lang::has('x');\n"
            "app('cache')->get('x');\n"
            "$translator->get('x');\n"
        )
        assert refs == []

    def test_calls_without_arguments_emit_nothing(self):
        assert translations("<?php\n__();\n$f = trans(...);\n") == []

    def test_string_forms(self):
        refs = translations(
            "<?php\n"
            "__(\"double.quoted\");\n"
            "__('it\\'s');\n"
            "__('');\n"
            "__(('wrapped'));\n"
        )
        assert [r.text for r in refs] == ['double.quoted', "it's", '', 'wrapped']
        assert refs[2].is_empty

    def test_namespaced_key(self):
        ref = translations("<?php\n__('courier::messages.sent');\n")[0]
        assert ref.is_namespaced
        assert ref.namespace_prefix == 'courier'

    def test_named_argument(self):
        refs = translations("<?php\n__(key: 'named.key');\n")
        assert [r.text for r in refs] == ['named.key']


class TestDynamicReasons:
    """Explanations for arguments computed at runtime."""

    @pytest.mark.parametrize("argument,reason", [
        ("$key", "Variable used as key"),
        ("'prefix.' . $name", "String concatenation"),
        ("key_for($x)", "Function call used as key"),
        ("$this->key()", "Method call used as key"),
        ("Keys::get()", "Method call used as key"),
        ("$x ? 'a' : 'b'", "Ternary operator"),
        ("$x ?? 'fallback'", "Null coalescing operator"),
        ('"interpolated {$x}"', "dynamic"),
        ("['a', 'b']", "dynamic"),
        ("($key)", "Variable used as key"),
    ])
    def test_reason(self, argument, reason):
        refs = translations(f"<?php\n__({argument});\n")
        assert len(refs) == 1
        ref = refs[0]
        assert ref.is_dynamic
        assert ref.text is None
        assert ref.dynamic_reason == reason

    def test_route_noun(self):
        ref = routes("<?php\nroute($name);\n")[0]
        assert ref.dynamic_reason == "Variable used as route name"


class TestRouteCalls:
    """Recognized named-route lookups and their labels."""

    def test_labels(self):
        refs = routes(
            "<?php\n"
            "route('home');\n"
            "to_route('login');\n"
            "Route::has('dashboard');\n"
            "URL::route('profile');\n"
            "redirect()->route('settings');\n"
            "$redirector->route('billing');\n"
            "$this->redirect()->route('help');\n"
        )
        assert [(r.text, r.origin) for r in refs] == [
            ('home', 'route'),
            ('login', 'to_route'),
            ('dashboard', 'Route::has'),
            ('profile', 'URL::route'),
            ('settings', 'redirect()->route'),
            ('billing', '$redirector->route'),
            ('help', 'method()->route'),
        ]

    def test_every_reference_is_static_or_dynamic(self):
        refs = routes("<?php\nroute('a');\nroute($b);\nroute('c' . $d);\n")
        for ref in refs:
            assert ref.is_dynamic != (ref.text is not None)
