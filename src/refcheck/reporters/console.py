"""Human-readable terminal report built on rich."""
from collections import Counter
from pathlib import Path
from typing import List, Sequence

from rich.markup import escape
from rich.table import Table

from refcheck.results import AnalysisResult

from .base import Reporter

TOP_MISSING = 5
TOP_NAMESPACES = 3


class ConsoleReporter(Reporter):
    """Counts results while analysis runs, then prints a summary.

    On failures the summary lists the most frequently missing references,
    the namespaces with the most missing references, each failed file with
    its missing references, and a File / Missing table. Files that raised
    errors are listed with their error message.
    """

    def __init__(self, *args, show_warnings: bool = False, **kwargs):
        super().__init__(*args, **kwargs)
        self.show_warnings = show_warnings
        self.total = 0
        self.processed = 0
        self.passed = 0
        self.failed = 0
        self.errors = 0

    def start(self, files: Sequence[Path]) -> None:
        self.total = len(files)
        self.processed = self.passed = self.failed = self.errors = 0
        self.console.print(f"[bold blue]Analyzing {self.total} files...[/bold blue]")

    def progress(self, result: AnalysisResult) -> None:
        self.processed += 1
        if result.has_error():
            self.errors += 1
        elif result.success:
            self.passed += 1
        else:
            self.failed += 1

    def finish(self, results: Sequence[AnalysisResult]) -> None:
        console = self.console
        console.print()
        console.print(f"Analysis complete: {self.processed}/{self.total} files processed")
        console.print(f"[green]✓ {self.passed} passed[/green]")
        if self.failed:
            console.print(f"[red]✗ {self.failed} failed[/red]")
        if self.errors:
            console.print(f"[yellow]⚠ {self.errors} errors[/yellow]")
        console.print()

        if self.show_warnings:
            self._print_warnings(results)

        if not self.failed and not self.errors:
            console.print(f"[bold green]All {self.noun} references exist![/bold green]")
            return

        failures = [r for r in results if r.has_missing()]
        if failures:
            self._print_summary(failures)
            self._print_failures(failures)
        errors = [r for r in results if r.has_error()]
        if errors:
            self._print_errors(errors)

    def missing_counts(self, failures: Sequence[AnalysisResult]) -> Counter:
        return Counter(name for result in failures for name in result.missing)

    def namespace_counts(self, missing: Counter) -> Counter:
        """Count distinct missing references per namespace."""
        return Counter(self.namespace(name) for name in missing)

    def _print_summary(self, failures: Sequence[AnalysisResult]) -> None:
        console = self.console
        missing = self.missing_counts(failures)

        console.print("[bold cyan]Summary Statistics:[/bold cyan]")
        console.print(f"  Total missing references: {sum(missing.values())}")
        console.print(f"  Unique missing {self.plural}: {len(missing)}")
        console.print()

        console.print(f"[bold yellow]Top {TOP_MISSING} Most Referenced Missing {self.plural.title()}:[/bold yellow]")
        for name, count in missing.most_common(TOP_MISSING):
            console.print(f"  {count}x  {escape(name)}")
        console.print()

        console.print(f"[bold yellow]Top {TOP_NAMESPACES} Most Broken Namespaces:[/bold yellow]")
        for namespace, count in self.namespace_counts(missing).most_common(TOP_NAMESPACES):
            console.print(f"  {count}x  {escape(namespace)}")
        console.print()

    def _print_failures(self, failures: Sequence[AnalysisResult]) -> None:
        console = self.console
        console.print(f"[bold red]Missing {self.noun} references found:[/bold red]")
        console.print()

        rows: List[tuple] = []
        for result in failures:
            console.print(f"[yellow]{escape(str(result.file))}[/yellow]")
            for name in result.missing:
                console.print(f"  → {escape(name)}")
                rows.append((result.file.name, name))
            console.print()

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("File", style="cyan", no_wrap=False)
        table.add_column(f"Missing {self.noun.title()}", style="red")
        for file_name, name in rows:
            table.add_row(escape(file_name), escape(name))
        console.print(table)

    def _print_errors(self, errors: Sequence[AnalysisResult]) -> None:
        console = self.console
        console.print("[bold red]Files with analysis errors:[/bold red]")
        console.print()
        for result in errors:
            console.print(f"[yellow]{escape(str(result.file))}[/yellow]")
            console.print(f"  → {escape(result.error)}")
            console.print()

    def _print_warnings(self, results: Sequence[AnalysisResult]) -> None:
        with_warnings = [r for r in results if r.warnings]
        if not with_warnings:
            return
        table = Table(title="Warnings", show_header=True, header_style="bold magenta")
        table.add_column("File", style="cyan", no_wrap=False)
        table.add_column("Line", style="green", justify="right")
        table.add_column("Type", style="yellow")
        table.add_column("Detail")
        for result in with_warnings:
            for warning in result.warnings:
                detail = warning.reason or warning.message or warning.package or ''
                if warning.method:
                    detail = f"{detail} ({warning.method})"
                line = '' if warning.line is None else str(warning.line)
                table.add_row(escape(str(result.file)), line, warning.type, escape(detail))
        self.console.print(table)
        self.console.print()
