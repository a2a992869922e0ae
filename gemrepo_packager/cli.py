"""CLI entry point: gemrepo.

Subcommands:
    gemrepo package --artifact-id app --version 1.0   # build <out>/app-1.0-gemrepo.jar
    gemrepo entries target/app-1.0-gemrepo.jar        # list archive entries
"""

from __future__ import annotations

import sys
import zipfile
from pathlib import Path

import click

from gemrepo_packager.config import PackagerConfig
from gemrepo_packager.core.logging import setup_logging
from gemrepo_packager.exceptions import PackagerError
from gemrepo_packager.pruner import DEFAULT_PRUNE_TARGETS

_STATUS_ICONS = {
    "completed": "+",
    "failed": "!",
    "skipped": "-",
}


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
@click.option(
    "--log-format",
    type=click.Choice(["console", "json"]),
    default=None,
    help="Log rendering on stderr [default: $GEMREPO_LOG_FORMAT or console]",
)
def main(verbose: bool, log_format: str | None) -> None:
    """gemrepo: package a Gemfile's resolved gems into a single archive."""
    try:
        setup_logging("DEBUG" if verbose else None, log_format=log_format)
    except PackagerError as e:
        click.echo(f"Error [{e.stage}]: {e}", err=True)
        sys.exit(1)


@main.command("package")
@click.option(
    "--project-root",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Directory holding the Gemfile and Gemfile.lock",
)
@click.option(
    "--output-directory",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("target"),
    show_default=True,
    help="Where the archive is written",
)
@click.option("--artifact-id", required=True, help="Artifact name prefix")
@click.option("--version", "version", required=True, help="Artifact version")
@click.option("--extension", default="jar", show_default=True, help="Archive file extension")
@click.option("--resolver", default="bundler", show_default=True, help="Resolver backend")
@click.option("--include-bundler", is_flag=True, help="Also install the bundler gem into the archive")
@click.option("--timeout", type=float, default=None, help="Resolver timeout in seconds")
@click.option(
    "--prune",
    "prune_targets",
    multiple=True,
    default=DEFAULT_PRUNE_TARGETS,
    show_default=True,
    help="Top-level directory to drop before packaging (repeatable)",
)
def package(
    project_root: Path,
    output_directory: Path,
    artifact_id: str,
    version: str,
    extension: str,
    resolver: str,
    include_bundler: bool,
    timeout: float | None,
    prune_targets: tuple[str, ...],
) -> None:
    """Resolve the Gemfile and package the gem repository."""
    from gemrepo_packager.orchestrator import PackagingOrchestrator

    orchestrator = None
    try:
        config = PackagerConfig(
            project_root=project_root,
            output_directory=output_directory,
            artifact_id=artifact_id,
            version=version,
            archive_extension=extension,
            resolver=resolver,
            include_bundler=include_bundler,
            resolver_timeout=timeout,
            prune_targets=prune_targets,
        ).with_env_defaults()
        orchestrator = PackagingOrchestrator(config)
        result = orchestrator.run()
    except PackagerError as e:
        click.echo(f"Error [{e.stage}]: {e}", err=True)
        if orchestrator is not None:
            _echo_summary(orchestrator.progress.get_summary(), err=True)
        sys.exit(1)

    click.echo(f"Gem repository archive: {result.artifact_path}")
    click.echo(f"  Entries: {result.entry_count}")
    click.echo(f"  Pruned: {', '.join(result.pruned) or '(none)'}")
    _echo_summary(orchestrator.progress.get_summary())


@main.command("entries")
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def entries(archive: Path) -> None:
    """List the entries of a gem repository archive."""
    try:
        with zipfile.ZipFile(archive) as zf:
            for info in zf.infolist():
                size = "" if info.is_dir() else f"  {info.file_size}"
                click.echo(f"{info.filename}{size}")
    except zipfile.BadZipFile as e:
        click.echo(f"Error: {archive} is not a valid archive: {e}", err=True)
        sys.exit(1)


def _echo_summary(summary: dict, err: bool = False) -> None:
    click.echo(f"\nPipeline summary (total: {summary['total_duration']}s):", err=err)
    for p in summary["phases"]:
        icon = _STATUS_ICONS.get(p["status"], "?")
        duration = f" ({p['duration']}s)" if p["duration"] else ""
        detail = f" - {p['detail']}" if p["detail"] else ""
        error = f" ERROR: {p['error']}" if p["error"] else ""
        click.echo(f"  [{icon}] {p['phase']}{duration}{detail}{error}", err=err)


if __name__ == "__main__":
    main()
