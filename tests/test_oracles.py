"""Tests for existence oracles and their on-disk cache."""

import json
import os
import subprocess
import threading
import time

import pytest

from conftest import StaticOracle
from refcheck.exceptions import EmptyClassNameError, OracleLoadError
from refcheck.oracles.base import OracleState
from refcheck.oracles.cache import OracleCache, cache_key, clear_cache_dir
from refcheck.oracles.routes import (
    RouteOracle,
    extract_route_names,
    first_success,
    names_from_route_table,
)
from refcheck.oracles.symbols import SymbolOracle, psr4_names
from refcheck.oracles.translations import TranslationOracle, flatten_translations


def write(path, content):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding='utf-8')
    return path


class TestOracleCache:
    """Validity rules of the cache file."""

    def test_path_is_derived_from_configuration(self, tmp_path):
        first = OracleCache('routes', 'a', tmp_path)
        second = OracleCache('routes', 'b', tmp_path)
        assert first.path != second.path
        assert first.path.name == f"refcheck-routes-{cache_key('a')}.cache"

    def test_round_trip(self, tmp_path):
        cache = OracleCache('routes', 'key', tmp_path)
        assert cache.read() is None
        cache.write(['home', 'login'])
        assert json.loads(cache.path.read_text()) == {'home': True, 'login': True}
        assert sorted(cache.read()) == ['home', 'login']

    def test_expired_cache_is_a_miss(self, tmp_path):
        cache = OracleCache('routes', 'key', tmp_path, ttl=60)
        cache.write(['home'])
        old = time.time() - 120
        os.utime(cache.path, (old, old))
        assert cache.read() is None

    def test_newer_source_invalidates(self, tmp_path):
        source = write(tmp_path / 'routes' / 'web.php', "<?php\n")
        cache = OracleCache('routes', 'key', tmp_path)
        cache.write(['home'])
        future = time.time() + 10
        os.utime(source, (future, future))
        assert cache.read([source]) is None

    @pytest.mark.parametrize("content", ["not json", "[1, 2]", "\"text\"", '{"Gone": false}', '{"a": true, "b": 1}'])
    def test_corrupt_cache_is_a_miss(self, tmp_path, content):
        cache = OracleCache('routes', 'key', tmp_path)
        write(cache.path, content)
        assert cache.read() is None

    def test_clear_cache_dir(self, tmp_path):
        OracleCache('routes', 'a', tmp_path).write(['x'])
        OracleCache('symbols', 'b', tmp_path).write(['y'])
        write(tmp_path / 'unrelated.cache', '{}')
        assert clear_cache_dir(tmp_path) == 2
        assert (tmp_path / 'unrelated.cache').exists()


class TestExistenceOracle:
    """Lifecycle shared by every oracle."""

    def test_loads_lazily_once(self):
        oracle = StaticOracle(['a', 'b'])
        assert oracle.state is OracleState.UNLOADED
        assert oracle.exists('a')
        assert not oracle.exists('c')
        assert oracle.state is OracleState.LOADED
        oracle.load()
        assert oracle.builds == 1
        assert len(oracle) == 2
        assert 'b' in oracle

    def test_concurrent_loads_build_once(self):
        oracle = StaticOracle(['a'])
        threads = [threading.Thread(target=oracle.load) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert oracle.builds == 1

    def test_cache_is_used_on_second_instance(self, tmp_path):
        first = StaticOracle(['a'], use_cache=True, cache_dir=tmp_path)
        first.load()
        second = StaticOracle(['changed'], use_cache=True, cache_dir=tmp_path)
        assert second.exists('a')
        assert second.builds == 0

    def test_touching_a_source_rebuilds(self, tmp_path):
        source = write(tmp_path / 'source.txt', 'x')

        class SourcedOracle(StaticOracle):
            def source_files(self):
                return [source]

        SourcedOracle(['old'], use_cache=True, cache_dir=tmp_path).load()
        future = time.time() + 10
        os.utime(source, (future, future))

        rebuilt = SourcedOracle(['new'], use_cache=True, cache_dir=tmp_path)
        assert rebuilt.exists('new')
        assert not rebuilt.exists('old')
        assert rebuilt.builds == 1

    def test_corrupt_cache_triggers_rebuild(self, tmp_path):
        oracle = StaticOracle(['a'], use_cache=True, cache_dir=tmp_path)
        write(oracle.cache.path, '{broken')
        assert oracle.exists('a')
        assert oracle.builds == 1

    def test_failed_load_can_be_retried(self):
        class FlakyOracle(StaticOracle):
            def _build(self):
                self.builds += 1
                if self.builds == 1:
                    raise OracleLoadError("boom")
                return self.names

        oracle = FlakyOracle(['a'])
        with pytest.raises(OracleLoadError):
            oracle.load()
        assert oracle.state is OracleState.UNLOADED
        assert oracle.exists('a')


@pytest.fixture
def lang_dir(tmp_path):
    """A Laravel lang directory with PHP groups, JSON keys and a vendor package."""
    lang = tmp_path / 'lang'
    write(lang / 'en' / 'auth.php', "<?php\nreturn ['failed' => 'Nope', 'throttle' => ['short' => 'Slow down']];\n")
    write(lang / 'en' / 'broken.php', "<?php\nreturn [\n")
    write(lang / 'en.json', json.dumps({"Welcome back": "Welcome back"}))
    write(lang / 'fr' / 'extra.php', "<?php\nreturn ['only_fr' => 'Oui'];\n")
    write(tmp_path / 'packages' / 'courier' / 'lang' / 'en' / 'mail.php', "<?php\nreturn ['sent' => 'Sent'];\n")
    write(tmp_path / 'resources' / 'lang' / 'en' / 'legacy.php', "<?php\nreturn ['old' => 'Old'];\n")
    return tmp_path


class TestTranslationOracle:
    """Keys loaded from a lang directory."""

    def test_flatten_translations(self):
        data = {'a': {'b': {'c': 'x'}, 'd': 'y'}, 0: 'z'}
        assert list(flatten_translations(data, 'group')) == ['group.a.b.c', 'group.a.d', 'group.0']

    def test_loads_every_source(self, lang_dir):
        oracle = TranslationOracle(lang_dir / 'lang', vendor_path=lang_dir / 'packages')
        assert oracle.exists('auth.failed')
        assert oracle.exists('auth.throttle.short')
        assert oracle.exists('Welcome back')
        assert oracle.exists('courier::mail.sent')
        assert oracle.exists('legacy.old')
        assert not oracle.exists('auth.throttle')
        assert not oracle.exists('extra.only_fr')

    def test_locales(self, lang_dir):
        oracle = TranslationOracle(lang_dir / 'lang', locales=('en', 'fr'))
        assert oracle.exists('extra.only_fr')

    def test_vendor_package_exists(self, lang_dir):
        oracle = TranslationOracle(lang_dir / 'lang', vendor_path=lang_dir / 'packages')
        assert oracle.vendor_package_exists('courier')
        assert not oracle.vendor_package_exists('missing')
        assert not TranslationOracle(lang_dir / 'lang').vendor_package_exists('courier')

    def test_missing_directory_is_an_empty_oracle(self, tmp_path):
        oracle = TranslationOracle(tmp_path / 'nowhere')
        assert oracle.known() == frozenset()
        assert oracle.state is OracleState.LOADED


ROUTES_FILE = """<?php

use Illuminate\\Support\\Facades\\Route;

Route::get('/', HomeController::class)->name('home');
Route::get('/login', [LoginController::class, 'show'])->name("login");
Route::post('/unnamed', UnnamedController::class);
Route::resource('photos', PhotoController::class)->names([
    'index' => 'photos.list',
    'show' => 'photos.view',
]);
"""


class TestRouteOracle:
    """Named routes from live tables, exports and route files."""

    def test_extract_route_names(self):
        assert extract_route_names(ROUTES_FILE) == ['home', 'login', 'photos.list', 'photos.view']

    def test_names_from_route_table(self):
        payload = [{'name': 'home', 'uri': '/'}, {'name': None, 'uri': '/x'}, {'uri': '/y'}]
        assert names_from_route_table(payload) == ['home']
        assert names_from_route_table({'not': 'a list'}) is None

    def test_first_success(self):
        calls = []

        def passing():
            calls.append('passing')
            return None

        def succeeding():
            calls.append('succeeding')
            return ['a']

        def never():
            calls.append('never')
            return ['b']

        assert first_success([passing, succeeding, never]) == ['a']
        assert calls == ['passing', 'succeeding']

    def test_first_success_raises_when_all_pass(self):
        with pytest.raises(OracleLoadError):
            first_success([lambda: None, lambda: None])

    def test_route_files_fallback(self, tmp_path):
        write(tmp_path / 'routes' / 'web.php', ROUTES_FILE)
        write(tmp_path / 'routes' / 'api.php', "<?php\nRoute::get('/ping')->name('api.ping');\n")
        oracle = RouteOracle(tmp_path / 'routes', use_cache=False)
        assert sorted(oracle.known()) == ['api.ping', 'home', 'login', 'photos.list', 'photos.view']

    def test_export_file_wins_over_route_files(self, tmp_path):
        write(tmp_path / 'routes' / 'web.php', ROUTES_FILE)
        export = write(tmp_path / 'routes.json', json.dumps([{'name': 'exported'}]))
        oracle = RouteOracle(tmp_path / 'routes', export_file=export, use_cache=False)
        assert oracle.known() == frozenset({'exported'})

    def test_artisan_strategy(self, tmp_path, monkeypatch):
        write(tmp_path / 'artisan', "#!/usr/bin/env php\n")
        seen = {}

        def fake_run(command, **kwargs):
            seen['command'] = command
            seen['cwd'] = kwargs['cwd']
            return subprocess.CompletedProcess(command, 0, stdout=json.dumps([{'name': 'live'}]), stderr='')

        monkeypatch.setattr(subprocess, 'run', fake_run)
        oracle = RouteOracle(tmp_path / 'routes', app_root=tmp_path, use_cache=False)
        assert oracle.known() == frozenset({'live'})
        assert seen['command'] == ['php', 'artisan', 'route:list', '--json']
        assert seen['cwd'] == str(tmp_path)

    def test_artisan_failure_falls_back(self, tmp_path, monkeypatch):
        write(tmp_path / 'artisan', "#!/usr/bin/env php\n")
        write(tmp_path / 'routes' / 'web.php', ROUTES_FILE)

        def missing_php(command, **kwargs):
            raise FileNotFoundError(command[0])

        monkeypatch.setattr(subprocess, 'run', missing_php)
        oracle = RouteOracle(tmp_path / 'routes', app_root=tmp_path, use_cache=False)
        assert oracle.exists('home')

    def test_cached_by_default(self, tmp_path):
        write(tmp_path / 'routes' / 'web.php', ROUTES_FILE)
        oracle = RouteOracle(tmp_path / 'routes', cache_dir=tmp_path / 'cache')
        oracle.load()
        assert oracle.cache.path.is_file()


@pytest.fixture
def composer_project(tmp_path):
    """A Composer project with a classmap, a PSR-4 package and app classes."""
    root = tmp_path / 'project'
    write(root / 'composer.json', json.dumps({
        'autoload': {'psr-4': {'App\\': 'app/'}},
        'autoload-dev': {'psr-4': {'Tests\\': 'tests/'}},
    }))
    write(root / 'app' / 'Models' / 'User.php', "<?php\nnamespace App\\Models;\nclass User {}\n")
    write(root / 'app' / 'Http' / 'Kernel.php', "<?php\nnamespace App\\Http;\nclass Kernel {}\n")
    write(root / 'tests' / 'TestCase.php', "<?php\nnamespace Tests;\nabstract class TestCase {}\n")
    write(root / 'vendor' / 'composer' / 'autoload_classmap.php', (
        "<?php\n"
        "$vendorDir = dirname(__DIR__);\n"
        "$baseDir = dirname($vendorDir);\n"
        "return array(\n"
        "    'Composer\\\\InstalledVersions' => $vendorDir . '/composer/InstalledVersions.php',\n"
        ");\n"
    ))
    write(root / 'vendor' / 'composer' / 'autoload_psr4.php', (
        "<?php\n"
        "$vendorDir = dirname(__DIR__);\n"
        "return array(\n"
        "    'Acme\\\\Toolkit\\\\' => array($vendorDir . '/acme/toolkit/src'),\n"
        ");\n"
    ))
    write(root / 'vendor' / 'acme' / 'toolkit' / 'src' / 'Support' / 'Str.php', "<?php\n")
    write(root / 'lib' / 'helpers.php', (
        "<?php\n"
        "namespace Lib;\n"
        "interface Contract {}\n"
        "trait Reusable {}\n"
        "enum Status { case Active; }\n"
    ))
    return root


class TestSymbolOracle:
    """Classes a Composer project can autoload."""

    def test_psr4_names(self, composer_project):
        names = sorted(psr4_names('App\\', composer_project / 'app'))
        assert names == ['App\\Http\\Kernel', 'App\\Models\\User']

    def test_autoload_sources(self, composer_project):
        oracle = SymbolOracle(composer_project)
        assert oracle.exists('Composer\\InstalledVersions')
        assert oracle.exists('Acme\\Toolkit\\Support\\Str')
        assert oracle.exists('App\\Models\\User')
        assert oracle.exists('Tests\\TestCase')
        assert not oracle.exists('App\\Models\\Ghost')

    def test_case_insensitive_and_leading_backslash(self, composer_project):
        oracle = SymbolOracle(composer_project)
        assert oracle.exists('\\app\\models\\USER')

    def test_builtins(self, composer_project):
        assert SymbolOracle(composer_project).exists('DateTimeImmutable')
        assert not SymbolOracle(composer_project, include_builtins=False).exists('DateTimeImmutable')

    def test_scan_paths(self, composer_project):
        oracle = SymbolOracle(composer_project, scan_paths=[composer_project / 'lib'])
        assert oracle.exists('Lib\\Contract')
        assert oracle.exists('Lib\\Reusable')
        assert oracle.exists('Lib\\Status')

    @pytest.mark.parametrize("name", ["", "0"])
    def test_empty_name_raises(self, composer_project, name):
        with pytest.raises(EmptyClassNameError):
            SymbolOracle(composer_project).exists(name)
