"""refcheck CLI - find references to classes, translation keys and routes that do not exist."""
import os
from pathlib import Path
from typing import List, Optional

import typer
from rich.markup import escape

from refcheck.analysis.template import BladeCompiler
from refcheck.analyzer import Analyzer, has_failures
from refcheck.config import AnalyzerConfig, Verbosity, __version__, get_config, processor_for, resolve_workers
from refcheck.exceptions import InvalidWorkerCountError, OracleLoadError
from refcheck.oracles.cache import clear_cache_dir
from refcheck.oracles.routes import RouteOracle
from refcheck.oracles.symbols import SymbolOracle
from refcheck.oracles.translations import TranslationOracle
from refcheck.reporters.agent import AgentReporter
from refcheck.reporters.console import ConsoleReporter
from refcheck.resolvers.base import AnalysisResolver
from refcheck.resolvers.classes import ClassAnalysisResolver
from refcheck.resolvers.routes import RouteAnalysisResolver
from refcheck.resolvers.translations import TranslationAnalysisResolver
from refcheck.utils.logger import configure_logging
from refcheck.utils.safe_console import SafeConsole

app = typer.Typer(
    name="refcheck",
    help="Find references to PHP classes, translation keys and route names that do not exist",
    add_completion=False
)
console = SafeConsole(force_terminal=True, highlight=False)

# Cache management sub-command
cache_app = typer.Typer(name="cache", help="Manage the refcheck oracle cache")

# Options shared by every analysis command
PathsArgument = typer.Argument(None, help="Files or directories to analyze (default: REFCHECK_PATHS)")
IgnoreOption = typer.Option(None, "--ignore", help="Glob of references to skip (repeatable)")
IncludeOption = typer.Option(None, "--include", help="Only check references matching this glob (repeatable)")
ExcludeOption = typer.Option(None, "--exclude", help="Glob of files to skip (repeatable)")
WorkersOption = typer.Option(None, "--workers", "-w", help="Worker threads, or 'auto' (default: REFCHECK_WORKERS)")
SerialOption = typer.Option(False, "--serial", help="Analyze files one at a time")
AgentOption = typer.Option(False, "--agent", help="Print an XML fix plan for coding agents")
CiOption = typer.Option(None, "--ci/--no-ci", help="Never prompt (default: on in CI environments)")
NoCacheOption = typer.Option(False, "--no-cache", help="Always rebuild the oracle")
CacheTtlOption = typer.Option(None, "--cache-ttl", help="Oracle cache lifetime in seconds")
VerboseOption = typer.Option(0, "--verbose", "-v", count=True, help="Increase verbosity (repeatable)")
DebugOption = typer.Option(False, "--debug", help="Debug output with full tracebacks")
NoDynamicOption = typer.Option(False, "--no-dynamic", help="Do not warn about dynamic references")
TemplatesOption = typer.Option(True, "--templates/--no-templates", help="Compile Blade templates before analysis")


def is_ci_environment() -> bool:
    """Detect if running in CI/CD environment (GitHub Actions, GitLab CI, etc.).

    Returns:
        True if running in CI, False otherwise
    """
    ci_indicators = [
        'GITHUB_ACTIONS',  # GitHub Actions
        'CI',              # Generic CI indicator
        'GITLAB_CI',       # GitLab CI
        'CIRCLECI',        # CircleCI
        'TRAVIS',          # Travis CI
        'JENKINS_HOME',    # Jenkins
    ]
    return any(os.getenv(indicator) for indicator in ci_indicators)


def verbosity_from(verbose: int, debug: bool) -> Verbosity:
    if debug:
        return Verbosity.DEBUG
    return Verbosity(min(verbose, Verbosity.DEBUG))


def cache_options(no_cache: bool, cache_ttl: Optional[int], default_on: bool) -> dict:
    config = get_config()
    return {
        'use_cache': default_on and not no_cache,
        'cache_dir': config.cache_dir,
        'cache_ttl': cache_ttl if cache_ttl is not None else config.cache_ttl,
    }


def select_paths(paths: Optional[List[str]], ci: Optional[bool], analyzer_paths) -> List[str]:
    """Report missing input paths and decide whether to continue.

    Raises:
        typer.Exit: If no path exists or the user declines to continue
    """
    requested = list(paths) if paths else get_config().paths
    missing = analyzer_paths.missing(requested)
    existing = analyzer_paths.resolve(requested)

    for path in missing:
        console.print(f"[yellow]⚠ Path does not exist:[/yellow] {escape(str(path))}")

    if not existing:
        console.print("[bold red]Error:[/bold red] None of the given paths exist")
        raise typer.Exit(1)

    if missing:
        non_interactive = is_ci_environment() if ci is None else ci
        if not non_interactive and not typer.confirm("Do you want to continue with the remaining paths?", default=False):
            console.print("[red]Aborted[/red]")
            raise typer.Exit(1)

    return [str(path) for path in existing]


def run_analysis(resolver: AnalysisResolver, paths: Optional[List[str]], *, exclude: Optional[List[str]],
                 workers: Optional[str], serial: bool, agent: bool, ci: Optional[bool],
                 verbose: int, debug: bool) -> None:
    """Build the run configuration, analyze, and exit 1 on any failure."""
    verbosity = verbosity_from(verbose, debug)
    configure_logging(verbosity)

    try:
        worker_count = 1 if serial else resolve_workers(workers or get_config().workers)
        processor = processor_for(worker_count)
    except (ValueError, InvalidWorkerCountError) as e:
        console.print(f"[bold red]Error:[/bold red] Invalid worker count: {escape(str(e))}")
        raise typer.Exit(1)

    reporter_class = AgentReporter if agent else ConsoleReporter
    reporter_kwargs = {} if agent else {'show_warnings': verbosity >= Verbosity.VERBOSE}
    reporter = reporter_class.for_resolver(resolver, **reporter_kwargs)

    config = AnalyzerConfig(
        resolver=resolver,
        exclude=tuple(exclude or ()),
        processor=processor,
        reporter=reporter,
        verbosity=verbosity,
    )
    config = config.with_paths(select_paths(paths, ci, config.path_resolver))

    try:
        results = Analyzer(config).analyze()
    except OracleLoadError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    if has_failures(results):
        raise typer.Exit(1)


@app.command()
def classes(
    paths: Optional[List[str]] = PathsArgument,
    project_root: Path = typer.Option(Path("."), "--project-root", help="Composer project root"),
    vendor: str = typer.Option(None, "--vendor", help="Vendor directory relative to the project root"),
    scan: Optional[List[Path]] = typer.Option(None, "--scan", help="Directory whose declarations count as existing (repeatable)"),
    ignore: Optional[List[str]] = IgnoreOption,
    include: Optional[List[str]] = IncludeOption,
    exclude: Optional[List[str]] = ExcludeOption,
    templates: bool = TemplatesOption,
    workers: Optional[str] = WorkersOption,
    serial: bool = SerialOption,
    agent: bool = AgentOption,
    ci: Optional[bool] = CiOption,
    no_cache: bool = NoCacheOption,
    cache_ttl: Optional[int] = CacheTtlOption,
    verbose: int = VerboseOption,
    debug: bool = DebugOption,
):
    """Check that every referenced class, interface, trait and enum exists."""
    config = get_config()
    oracle = SymbolOracle(
        project_root=project_root,
        vendor_dir=vendor or str(config.vendor_path),
        scan_paths=scan or (),
        **cache_options(no_cache, cache_ttl, default_on=True),
    )
    resolver = ClassAnalysisResolver(
        oracle,
        ignore=ignore if ignore else config.ignore,
        include=include or None,
        compiler=BladeCompiler() if templates else None,
    )
    run_analysis(resolver, paths, exclude=exclude, workers=workers, serial=serial, agent=agent,
                 ci=ci, verbose=verbose, debug=debug)


@app.command()
def translations(
    paths: Optional[List[str]] = PathsArgument,
    lang_path: Optional[Path] = typer.Option(None, "--lang-path", help="Translation directory (default: REFCHECK_LANG_PATH)"),
    locale: Optional[List[str]] = typer.Option(None, "--locale", "-l", help="Locale to load (repeatable, default: REFCHECK_LOCALES)"),
    vendor_path: Optional[Path] = typer.Option(None, "--vendor-path", help="Directory of vendor packages with lang/ folders"),
    ignore: Optional[List[str]] = IgnoreOption,
    include: Optional[List[str]] = IncludeOption,
    exclude: Optional[List[str]] = ExcludeOption,
    no_dynamic: bool = NoDynamicOption,
    templates: bool = TemplatesOption,
    workers: Optional[str] = WorkersOption,
    serial: bool = SerialOption,
    agent: bool = AgentOption,
    ci: Optional[bool] = CiOption,
    no_cache: bool = NoCacheOption,
    cache_ttl: Optional[int] = CacheTtlOption,
    verbose: int = VerboseOption,
    debug: bool = DebugOption,
):
    """Check that every translation key passed to trans(), __() and friends exists."""
    config = get_config()
    oracle = TranslationOracle(
        lang_path=lang_path or config.lang_path,
        locales=locale or config.locales,
        vendor_path=vendor_path,
        **cache_options(no_cache, cache_ttl, default_on=True),
    )
    resolver = TranslationAnalysisResolver(
        oracle,
        report_dynamic=not no_dynamic,
        ignore=ignore or (),
        include=include or None,
        compiler=BladeCompiler() if templates else None,
    )
    run_analysis(resolver, paths, exclude=exclude, workers=workers, serial=serial, agent=agent,
                 ci=ci, verbose=verbose, debug=debug)


@app.command()
def routes(
    paths: Optional[List[str]] = PathsArgument,
    routes_path: Optional[Path] = typer.Option(None, "--routes-path", help="Route file directory (default: REFCHECK_ROUTES_PATH)"),
    app_root: Optional[Path] = typer.Option(None, "--app-root", help="Laravel application root containing artisan"),
    export_file: Optional[Path] = typer.Option(None, "--export-file", help="JSON output of 'php artisan route:list --json'"),
    ignore: Optional[List[str]] = IgnoreOption,
    include: Optional[List[str]] = IncludeOption,
    exclude: Optional[List[str]] = ExcludeOption,
    no_dynamic: bool = NoDynamicOption,
    templates: bool = TemplatesOption,
    workers: Optional[str] = WorkersOption,
    serial: bool = SerialOption,
    agent: bool = AgentOption,
    ci: Optional[bool] = CiOption,
    no_cache: bool = NoCacheOption,
    cache_ttl: Optional[int] = CacheTtlOption,
    verbose: int = VerboseOption,
    debug: bool = DebugOption,
):
    """Check that every route name passed to route(), to_route() and friends is defined."""
    config = get_config()
    oracle = RouteOracle(
        routes_path=routes_path or config.routes_path,
        app_root=app_root,
        export_file=export_file,
        **cache_options(no_cache, cache_ttl, default_on=True),
    )
    resolver = RouteAnalysisResolver(
        oracle,
        report_dynamic=not no_dynamic,
        ignore=ignore or (),
        include=include or None,
        compiler=BladeCompiler() if templates else None,
    )
    run_analysis(resolver, paths, exclude=exclude, workers=workers, serial=serial, agent=agent,
                 ci=ci, verbose=verbose, debug=debug)


# =========================================================================
# CACHE MANAGEMENT COMMANDS
# =========================================================================

@cache_app.command("clear")
def cache_clear(
    cache_dir: Optional[Path] = typer.Option(None, "--cache-dir", help="Cache directory (default: REFCHECK_CACHE_DIR or the temp dir)"),
):
    """Delete every refcheck oracle cache file."""
    cache_dir = cache_dir or get_config().cache_dir
    if cache_dir is not None and not cache_dir.is_dir():
        console.print(f"[bold red]Error:[/bold red] Cache directory does not exist: {escape(str(cache_dir))}")
        raise typer.Exit(1)

    removed = clear_cache_dir(cache_dir)
    console.print(f"[green]✓ Removed {removed} cache file(s)[/green]")


# Register cache sub-command
app.add_typer(cache_app)


def version_callback(value: bool):
    if value:
        console.print(f"refcheck {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(False, "--version", callback=version_callback, is_eager=True,
                                 help="Show the version and exit"),
):
    """refcheck - static reference checks for Laravel/PHP code bases."""


if __name__ == "__main__":
    app()
