#!/usr/bin/env python3

import os
import sys
from typing import Optional

import click

from . import __version__
from .config import CONFIG_FILENAME, get_config_path, load_config, setup_logging
from .domain.operation import RepoResult, Summary
from .exit_codes import (
    SUCCESS, INTERRUPTED, PARTIAL_SUCCESS,
    APIError, AuthError, ConfigError, DirectoryReadError,
    get_exit_code_for_exception,
)
from .infra.git_client import GitClient
from .infra.github_client import GitHubClient, resolve_token
from .render import Reporter, should_color
from .repo_filter import filter_repos
from .services.scan_service import scan_directory
from .services.sync_service import SyncService


def run_sync(
    directory: str,
    reporter: Reporter,
    jobs: int = 1,
    github_client: Optional[GitHubClient] = None,
    git_client: Optional[GitClient] = None
) -> int:
    """
    Run one sync of ``directory`` against its organization.

    Args:
        directory: Directory holding the ``.ghorgsync`` file and the clones
        reporter: Output for this run
        jobs: Repositories processed concurrently
        github_client: Inventory source (built from the resolved token if None)
        git_client: Git backend (GitClient() if None)

    Returns:
        Process exit code
    """
    directory = os.path.abspath(directory)

    config_path = get_config_path(directory)
    if not config_path.exists():
        reporter.missing_dotfile(CONFIG_FILENAME)
        return SUCCESS

    try:
        config = load_config(config_path)
        config.validate()
    except ConfigError as e:
        reporter.config_error(e)
        return e.exit_code

    client = github_client or GitHubClient(token=resolve_token())
    try:
        all_repos = client.list_org_repos(config.organization)
    except AuthError as e:
        reporter.auth_error(e)
        return e.exit_code
    except APIError as e:
        reporter.system_error("github", e)
        return e.exit_code

    included, excluded_names = filter_repos(all_repos, config)
    reporter.debug(
        f"Found {len(all_repos)} repositories "
        f"({len(included)} included, {len(excluded_names)} excluded)"
    )

    try:
        scan = scan_directory(directory, included, excluded_names, config)
    except DirectoryReadError as e:
        reporter.system_error("scan", e)
        return e.exit_code

    summary = Summary.from_scan(len(included), scan)
    service = SyncService(directory, git_client)

    # Sequential runs report as they go; parallel runs report in scan order
    # once everything has finished so the output does not depend on timing.
    stream = jobs <= 1

    def on_result(result: RepoResult) -> None:
        summary.add_result(result)
        if stream:
            reporter.repo_result(result)
        reporter.advance_progress()

    reporter.start_progress(len(scan.managed_missing) + len(scan.managed_found))
    try:
        results = service.run(scan, included, jobs=jobs, on_result=on_result)
    except KeyboardInterrupt:
        reporter.finish_progress()
        reporter.system_error("sync", KeyboardInterrupt("interrupted by user"))
        return INTERRUPTED
    reporter.finish_progress()

    if not stream:
        for result in results:
            reporter.repo_result(result)

    reporter.findings(scan.findings())
    reporter.summary(summary)

    return SUCCESS if summary.success else PARTIAL_SUCCESS


@click.command()
@click.version_option(version=__version__, prog_name="ghorgsync")
@click.option("-d", "--dir", "directory", default=".",
              type=click.Path(file_okay=False, dir_okay=True),
              help="Directory holding the .ghorgsync file and clones (default: current)")
@click.option("-j", "--jobs", default=1, type=click.IntRange(min=1),
              help="Number of repositories to sync concurrently")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("--no-color", is_flag=True, help="Disable color output")
@click.option("--json", "json_output", is_flag=True, help="Output JSONL records instead of text")
def cli(directory, jobs, verbose, no_color, json_output):
    """ghorgsync - Keep a directory of clones in sync with a GitHub organization.

    Reads the organization and include/exclude policy from a .ghorgsync
    YAML file, clones missing repositories, and fast-forwards clean clones
    on their default branch. Dirty working trees are reported, never touched.

    Examples:

    \b
        ghorgsync                   # sync the current directory
        ghorgsync -d ~/src/my-org   # sync another directory
        ghorgsync -j 8 --json       # 8 repos at a time, JSONL output
    """
    setup_logging(verbose)
    reporter = Reporter(
        verbose=verbose,
        json_output=json_output,
        color=should_color(no_color),
    )
    try:
        code = run_sync(directory, reporter, jobs=jobs)
    except KeyboardInterrupt:
        code = INTERRUPTED
    except OSError as e:
        reporter.system_error("ghorgsync", e)
        code = get_exit_code_for_exception(e)
    sys.exit(code)


def main():
    cli()

if __name__ == "__main__":
    main()
