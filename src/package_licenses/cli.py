"""Command-line interface for package_licenses.

Provides the main entry point and subcommands for generating license
reports for a project, a package folder or every project of a solution.
"""

import asyncio
import logging
import shutil
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console

from package_licenses.cache import LicenseCache
from package_licenses.classifiers import BaseClassifier, WaterfallClassifier
from package_licenses.config import (
    DELIMITED_REPORT_NAME,
    GITHUB_QUERY_ENV,
    MARKDOWN_REPORT_NAME,
    default_output_dir,
    parse_github_query,
)
from package_licenses.pipeline import ReportPipeline
from package_licenses.reporters import DelimitedTextReporter, MarkdownReporter
from package_licenses.resolution import ErrorPolicy, LicenseResolutionChain
from package_licenses.scanners import find_project_files, get_scanner

app = typer.Typer(
    name="package-licenses",
    help="Inventory NuGet package licenses and save their license texts.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

# Configure logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
)
logger = logging.getLogger("package_licenses")

TRANSCRIPT_LOGGER = "package_licenses.transcript"


class _ConsoleHandler(logging.Handler):
    """Writes plain transcript lines to the stdout console."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            console.file.write(self.format(record) + "\n")
        except Exception:
            self.handleError(record)


def _setup_logging(verbose: bool) -> logging.Logger:
    """Configure logging levels and return the transcript logger."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.getLogger("package_licenses").setLevel(level)

    transcript = logging.getLogger(TRANSCRIPT_LOGGER)
    transcript.setLevel(logging.INFO)
    transcript.propagate = False
    if not transcript.handlers:
        handler = _ConsoleHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        transcript.addHandler(handler)
    return transcript


async def _generate(
    scan: Path,
    output: Path,
    classifier: BaseClassifier,
    template: Optional[Path],
    error_policy: ErrorPolicy,
    retries: int,
    transcript: logging.Logger,
) -> bool:
    """Scan one input and write its report into output.

    An output directory created here is removed again when no report was
    produced or the run failed.

    Returns:
        True if a report was produced, False if no packages were found.

    Raises:
        FileNotFoundError: If the scan path does not exist.
        ValueError: If the scan path is not a supported input.
    """
    scanner = get_scanner(scan)
    packages = scanner.scan()

    markdown = MarkdownReporter(
        output / MARKDOWN_REPORT_NAME,
        title=scanner.source_name,
        template_path=template,
    )
    reporters = [DelimitedTextReporter(output / DELIMITED_REPORT_NAME), markdown]

    created = not output.exists()
    output.mkdir(parents=True, exist_ok=True)

    pipeline = ReportPipeline(
        LicenseResolutionChain(classifier, error_policy=error_policy, retries=retries),
        transcript=transcript,
    )
    try:
        produced = await pipeline.run(packages, reporters, output)
    except Exception:
        if created:
            shutil.rmtree(output, ignore_errors=True)
        raise

    if not produced and created:
        shutil.rmtree(output, ignore_errors=True)
    return produced


def _build_classifier(github_query: Optional[str], use_cache: bool) -> WaterfallClassifier:
    credentials = parse_github_query(github_query)
    cache = LicenseCache() if use_cache else None
    return WaterfallClassifier(cache=cache, credentials=credentials)


async def _run_gen(
    scan: Path,
    output: Optional[Path],
    template: Optional[Path],
    github_query: Optional[str],
    use_cache: bool,
    strict: bool,
    retries: int,
    verbose: bool,
) -> int:
    """Async implementation of the gen command."""
    transcript = _setup_logging(verbose)
    output = output or default_output_dir(Path.cwd())
    error_policy = ErrorPolicy.RAISE if strict else ErrorPolicy.IGNORE

    try:
        async with _build_classifier(github_query, use_cache) as classifier:
            produced = await _generate(
                scan, output, classifier, template, error_policy, retries, transcript
            )
    except (FileNotFoundError, ValueError) as e:
        err_console.print(f"[red]Error:[/red] {e}")
        return 1
    except Exception as e:
        logger.debug("Report generation failed", exc_info=True)
        err_console.print(f"[red]Error generating report for {scan}:[/red] {e}")
        return 1

    if not produced:
        console.print("[yellow]No packages found[/yellow]")
        return 0

    console.print(f"[green]Generated:[/green] {output}")
    return 0


async def _run_solution(
    scan: Path,
    output: Optional[Path],
    template: Optional[Path],
    github_query: Optional[str],
    use_cache: bool,
    strict: bool,
    retries: int,
    verbose: bool,
) -> int:
    """Async implementation of the solution command."""
    transcript = _setup_logging(verbose)

    if not scan.is_dir():
        err_console.print(f"[red]Error:[/red] Not Found: '{scan}'")
        return 1

    projects = find_project_files(scan)
    if not projects:
        console.print("[yellow]No project files found[/yellow]")
        return 0

    output = output or default_output_dir(Path.cwd())
    error_policy = ErrorPolicy.RAISE if strict else ErrorPolicy.IGNORE
    failures = 0

    async with _build_classifier(github_query, use_cache) as classifier:
        for project in projects:
            relative = project.relative_to(scan)
            project_output = output / relative.parent / project.name
            try:
                produced = await _generate(
                    project, project_output, classifier, template, error_policy, retries, transcript
                )
            except Exception as e:
                logger.debug("Report generation failed for %s", project, exc_info=True)
                err_console.print(f"[red]Error generating report for {project}:[/red] {e}")
                failures += 1
                continue

            if produced:
                console.print(f"[green]Generated:[/green] {project_output}")
            else:
                console.print(f"[yellow]No packages in {relative.as_posix()}[/yellow]")

    return 1 if failures else 0


ScanOption = Annotated[
    Path,
    typer.Option(
        "--scan",
        "-s",
        help="Project file (*.csproj), package folder or solution directory",
    ),
]
OutputOption = Annotated[
    Optional[Path],
    typer.Option(
        "--output",
        "-o",
        help="Output directory (default: ./Licenses-<timestamp>)",
    ),
]
TemplateOption = Annotated[
    Optional[Path],
    typer.Option(
        "--template",
        "-t",
        help="Custom Jinja2 template for the Markdown report",
        exists=True,
        readable=True,
    ),
]
GitHubQueryOption = Annotated[
    Optional[str],
    typer.Option(
        "--github-query",
        envvar=GITHUB_QUERY_ENV,
        help="GitHub OAuth app credentials as 'client_id=...&client_secret=...'",
        show_default=False,
    ),
]
NoCacheOption = Annotated[
    bool,
    typer.Option(
        "--no-cache",
        help="Do not read or write the classification cache",
    ),
]
StrictOption = Annotated[
    bool,
    typer.Option(
        "--strict",
        help="Fail the run when a license lookup fails instead of reporting no license",
    ),
]
RetriesOption = Annotated[
    int,
    typer.Option(
        "--retries",
        min=0,
        help="Extra attempts for a failed license lookup",
    ),
]
VerboseOption = Annotated[
    bool,
    typer.Option(
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
]


@app.command()
def gen(
    scan: ScanOption,
    output: OutputOption = None,
    template: TemplateOption = None,
    github_query: GitHubQueryOption = None,
    no_cache: NoCacheOption = False,
    strict: StrictOption = False,
    retries: RetriesOption = 0,
    verbose: VerboseOption = False,
) -> None:
    """Generate the license report for a project or package folder.

    Writes Licenses.txt (tab-separated), Licenses.md and one text file per
    distinct license into the output directory.
    """
    exit_code = asyncio.run(
        _run_gen(
            scan=scan,
            output=output,
            template=template,
            github_query=github_query,
            use_cache=not no_cache,
            strict=strict,
            retries=retries,
            verbose=verbose,
        )
    )
    raise typer.Exit(code=exit_code)


@app.command()
def solution(
    scan: ScanOption,
    output: OutputOption = None,
    template: TemplateOption = None,
    github_query: GitHubQueryOption = None,
    no_cache: NoCacheOption = False,
    strict: StrictOption = False,
    retries: RetriesOption = 0,
    verbose: VerboseOption = False,
) -> None:
    """Generate one license report per project file under a directory.

    Each project's report is written to <output>/<project dir>/<project file name>/,
    where <project dir> is the project's folder relative to --scan.

    Exit codes:
        0 - Every project was processed
        1 - The directory was not found or a project failed
    """
    exit_code = asyncio.run(
        _run_solution(
            scan=scan,
            output=output,
            template=template,
            github_query=github_query,
            use_cache=not no_cache,
            strict=strict,
            retries=retries,
            verbose=verbose,
        )
    )
    raise typer.Exit(code=exit_code)


@app.command()
def cache(
    action: Annotated[
        str,
        typer.Argument(help="Cache action: 'show' or 'clear'"),
    ],
    url: Annotated[
        Optional[str],
        typer.Argument(help="Specific URL to clear (optional)"),
    ] = None,
) -> None:
    """Manage the license classification cache.

    Actions:
        show  - Display cache location, entry count, and size
        clear - Clear all cached entries (or a specific URL)
    """
    with LicenseCache() as cache_instance:
        if action == "show":
            info = cache_instance.info()
            console.print(f"[bold]Cache Location:[/bold] {info['path']}")
            console.print(f"[bold]Entries:[/bold] {info['count']}")
            console.print(f"[bold]Size:[/bold] {info['size_bytes'] / 1024:.1f} KB")

        elif action == "clear":
            if url:
                cache_instance.clear(url=url)
                console.print(f"[green]Cleared cache for:[/green] {url}")
            else:
                cache_instance.clear()
                console.print("[green]Cache cleared[/green]")

        else:
            err_console.print(f"[red]Unknown action:[/red] {action}")
            err_console.print("Valid actions: show, clear")
            raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
