"""
Handles the 'analyze' command for estimating unmerged branch weight.

This command follows our design principles:
- Report files are always written to the output directory
- Default stdout output is JSONL streaming of the full branch records
- --table renders a rich table instead (default on a terminal)
- --verbose/-v for progress output, --quiet/-q to suppress data output
- Thin CLI layer that connects the analysis service to output
"""

import os
import sys
import click

from ..config import load_config, configure_logging
from ..services.analysis_service import AnalysisService, AnalysisOptions
from ..services.report_service import build_summary, existing_reports, write_reports
from ..infra.git_client import SIZE_FORMATS
from ..render import render_branch_table, render_detail_table, render_summary
from ..cli_utils import standard_command, add_common_options


@click.command(name='analyze')
@click.option('-r', '--repo', default='.', show_default=True,
              type=click.Path(file_okay=False), help='Path to the git repository')
@click.option('-o', '--out', default=None, type=click.Path(file_okay=False),
              help='Report directory (default: <repo>/unmerged-branches-size-report)')
@click.option('-b', '--branch', 'baseline', default=None,
              help='Baseline ref to compare against (default: detect master/main)')
@click.option('-y', '--no-prompt', is_flag=True, help='Overwrite existing reports without asking')
@click.option('--details', 'top', type=click.IntRange(min=0), default=None,
              help='Break down the N heaviest branches per commit')
@click.option('-j', '--jobs', type=click.IntRange(min=1), default=None,
              help='Branches to analyze concurrently (default: CPU count)')
@click.option('--size-format', type=click.Choice(list(SIZE_FORMATS)), default=None,
              help='Count compressed on-disk size or logical content size')
@click.option('--no-remotes', is_flag=True, help='Only consider local branches')
@click.option('--table/--no-table', default=None, help='Display as formatted table (auto-detected by default)')
@add_common_options('verbose', 'quiet', 'format', 'fields')
@standard_command()
def analyze_handler(repo, out, baseline, no_prompt, top, jobs, size_format, no_remotes, table,
                    progress, verbose, quiet, **kwargs):
    """Estimate the storage weight of unmerged branches.

    \b
    Every branch not merged into the baseline is walked with
    git rev-list/cat-file. Blobs reachable from only one branch count
    as unique to it; blobs reachable from several count in full as
    shared for each of them.

    Writes branches.json, branches_full.json and summary.json (plus
    branch_details.json with --details) to the report directory.

    Examples:

    \b
        git-branch-weight analyze                        # Current repository
        git-branch-weight analyze -r ~/src/big-repo -y   # Overwrite old reports
        git-branch-weight analyze -b origin/develop      # Custom baseline
        git-branch-weight analyze --details 5            # Per-commit drill-down
        git-branch-weight analyze --no-table -f csv      # Machine-readable output
    """
    if table is None:
        table = sys.stdout.isatty()

    config = load_config()
    configure_logging(config, verbose=verbose)

    options = AnalysisOptions.from_config(
        config,
        baseline=baseline,
        max_workers=jobs,
        size_format=size_format,
        top=top,
        include_remotes=False if no_remotes else None,
    )

    report_dir = out or os.path.join(
        os.path.abspath(os.path.expanduser(repo)),
        config.get('general', {}).get('report_directory', 'unmerged-branches-size-report'),
    )
    stale = existing_reports(report_dir)
    if stale and not no_prompt and sys.stdin.isatty():
        if not click.confirm(f"Reports already exist in {report_dir}. Overwrite?", default=True, err=True):
            progress("Aborted, existing reports left untouched", force=True)
            return None

    service = AnalysisService(config=config)
    with progress.task("Analyzing unmerged branches"):
        for message in service.run(repo, options):
            progress(message)
    result = service.last_result

    written = write_reports(report_dir, result.weights, result.details)
    summary = build_summary(result.weights)

    if result.failed:
        progress.warning(f"Skipped {len(result.failed)} unreadable branches: {', '.join(result.failed)}")
    progress(f"Summary: {summary['totalBranches']} branches, "
             f"unique {summary['totalUniqueSizeMB']}, shared {summary['totalSharedSizeMB']}")
    progress.success(f"Reports saved to: {os.path.dirname(written['summary'])}")

    if table:
        if not quiet:
            render_branch_table(result.weights)
            for detail in result.details:
                render_detail_table(detail)
            render_summary(summary)
        return None

    return (weight.to_dict() for weight in result.weights)
