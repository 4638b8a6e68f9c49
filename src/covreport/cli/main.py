"""covreport CLI - covreport command."""

from pathlib import Path
from typing import Any

import click

from covreport import __version__
from covreport.config.loader import load_config
from covreport.core.errors import (
    CovReportError,
    IOFailure,
    JobValidationError,
    ProcessingError,
)
from covreport.core.logging import configure_logging, get_log_file_path
from covreport.core.progress import pluralize, status
from covreport.domain.git import load_git_snapshot
from covreport.pipeline import run_report


def _parse_environment(
    ctx: click.Context,  # noqa: ARG001
    param: click.Parameter,  # noqa: ARG001
    values: tuple[str, ...],
) -> dict[str, str]:
    environment: dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {item!r}")
        environment[key] = value
    return environment


def _section(**values: Any) -> dict[str, Any]:
    """Keep only options given on the command line, so lower sources still apply."""
    return {k: v for k, v in values.items() if v is not None and v != () and v != {}}


def _failure_message(error: CovReportError) -> str:
    if isinstance(error, JobValidationError):
        return error.message
    if isinstance(error, ProcessingError):
        return "Processing of input or output data failed"
    if isinstance(error, IOFailure):
        return "I/O operation failed"
    return "Build error"


@click.group()
@click.version_option(version=__version__, prog_name="covreport")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """covreport - Coverage reports to Coveralls."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "INFO")


@cli.command("report")
@click.option(
    "--project-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    help="Project root (default: current directory)",
)
@click.option(
    "--config-file",
    type=click.Path(path_type=Path),
    help="YAML config to use instead of <project>/.covreport.yaml",
)
@click.option("--jacoco", "jacoco", multiple=True, help="JaCoCo XML report (repeatable)")
@click.option("--cobertura", "cobertura", multiple=True, help="Cobertura XML report (repeatable)")
@click.option("--saga", "saga", multiple=True, help="Saga coverage report (repeatable)")
@click.option("--lcov", "lcov", multiple=True, help="LCOV tracefile (repeatable)")
@click.option(
    "--relative-report-dir",
    "relative_dirs",
    multiple=True,
    help="Extra report directory inside each module's build and reporting dirs",
)
@click.option("--module", "modules", multiple=True, help="Module directory (repeatable)")
@click.option("--build-dir", help="Per-module build directory")
@click.option("--reporting-dir", help="Per-module reporting directory")
@click.option("--source-dir", "source_dirs", multiple=True, help="Source root (repeatable)")
@click.option("--source-encoding", help="Encoding used to read source files")
@click.option("--scan/--no-scan", default=None, help="Search the project tree for sources")
@click.option("--coveralls-file", help="Payload output file")
@click.option("--coveralls-url", help="Coveralls jobs endpoint")
@click.option("--timeout", type=float, help="Submission timeout in seconds")
@click.option(
    "--duplicates",
    type=click.Choice(["first-wins", "strict"]),
    help="Handling of source files covered by more than one report",
)
@click.option("--repo-token", envvar="COVERALLS_REPO_TOKEN", help="Coveralls repository token")
@click.option("--service-name", help="CI service name")
@click.option("--service-job-id", help="CI job id")
@click.option("--service-build-number", help="CI build number")
@click.option("--service-build-url", help="CI build URL")
@click.option(
    "--service-env",
    multiple=True,
    callback=_parse_environment,
    help="CI environment entry as KEY=VALUE (repeatable)",
)
@click.option("--branch", help="Branch name")
@click.option("--pull-request", help="Pull request number")
@click.option("--timestamp", type=click.DateTime(), help="Run timestamp")
@click.option(
    "--git-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON snapshot of the git head, branch and remotes",
)
@click.option("--dry-run/--no-dry-run", default=None, help="Write the payload but do not submit")
@click.option("--skip/--no-skip", default=None, help="Do nothing")
@click.pass_context
def report_command(
    ctx: click.Context,
    project_dir: Path,
    config_file: Path | None,
    git_file: Path | None,
    **options: Any,
) -> None:
    """Convert coverage reports into a Coveralls payload and submit it."""
    project_dir = project_dir.resolve()
    overrides = {
        "reports": _section(
            jacoco=options["jacoco"],
            cobertura=options["cobertura"],
            saga=options["saga"],
            lcov=options["lcov"],
            relative_dirs=options["relative_dirs"],
            modules=options["modules"],
            build_dir=options["build_dir"],
            reporting_dir=options["reporting_dir"],
        ),
        "sources": _section(
            directories=options["source_dirs"],
            encoding=options["source_encoding"],
            scan=options["scan"],
        ),
        "output": _section(coveralls_file=options["coveralls_file"]),
        "submission": _section(url=options["coveralls_url"], timeout_sec=options["timeout"]),
        "dedup": _section(duplicates=options["duplicates"]),
        "job": _section(
            repo_token=options["repo_token"],
            service_name=options["service_name"],
            service_job_id=options["service_job_id"],
            service_build_number=options["service_build_number"],
            service_build_url=options["service_build_url"],
            service_environment=options["service_env"],
            branch=options["branch"],
            pull_request=options["pull_request"],
            timestamp=options["timestamp"],
            dry_run=options["dry_run"],
            skip=options["skip"],
        ),
    }
    if ctx.obj and ctx.obj.get("verbose"):
        overrides["logging"] = {"level": "DEBUG"}

    try:
        config = load_config(
            project_dir,
            config_file=config_file,
            **{section: values for section, values in overrides.items() if values},
        )
        configure_logging(config=config.logging)
        git = load_git_snapshot(git_file) if git_file is not None else None
        result = run_report(config, project_dir, git=git)
    except CovReportError as e:
        status(str(e), style="error")
        if (log_file := get_log_file_path()) is not None:
            status(f"See {log_file} for details", indent=2)
        raise click.ClickException(_failure_message(e)) from e

    if result.skipped:
        status("Skipped", style="info")
    elif result.submitted and result.response is not None:
        status(f"Submitted {pluralize(result.source_files, 'source file')}", style="success")
        if result.response.url:
            status(result.response.url, style="info", indent=2)
    else:
        status(
            f"Wrote {pluralize(result.source_files, 'source file')} to {result.coveralls_file}",
            style="success",
        )


if __name__ == "__main__":
    cli()
