"""
Analysis service for branchweight.

Orchestrates a full run against one repository: baseline detection,
branch discovery, concurrent blob collection, weight aggregation and the
optional per-commit drill-down.
"""

import logging
import os
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Generator, List, Optional

from ..config import load_config
from ..domain import Branch, BranchDetail, BranchWeight
from ..exit_codes import BaselineNotFoundError, ConfigError, RepositoryNotFoundError
from ..infra.git_client import SIZE_FORMATS, GitClient
from .aggregator import WeightAggregator
from .detail_service import DetailService
from .pipeline import ObjectPipeline
from .scheduler import BranchScheduler

logger = logging.getLogger(__name__)


@dataclass
class AnalysisOptions:
    """Options for one analysis run."""
    baseline: Optional[str] = None  # None = detect from baseline_candidates
    baseline_candidates: List[str] = field(
        default_factory=lambda: ["refs/heads/master", "refs/heads/main"]
    )
    include_remotes: bool = True
    max_workers: Optional[int] = None  # None/0 = one per CPU
    size_format: str = "disk"
    top: int = 0  # branches to break down per commit
    progress_interval: int = 100

    @classmethod
    def from_config(cls, config: Dict[str, Any], **overrides) -> 'AnalysisOptions':
        """Build options from a config dict; None-valued overrides are ignored."""
        general = config.get('general', {})
        candidates = general.get('baseline_candidates', ["refs/heads/master", "refs/heads/main"])
        if isinstance(candidates, str):
            candidates = [c.strip() for c in candidates.split(',') if c.strip()]
        options = cls(
            baseline_candidates=list(candidates),
            include_remotes=bool(general.get('include_remotes', True)),
            max_workers=general.get('max_workers') or None,
            size_format=config.get('objects', {}).get('size_format', 'disk'),
            top=int(config.get('detail', {}).get('top_branches', 0) or 0),
            progress_interval=int(general.get('progress_interval', 100) or 100),
        )
        for key, value in overrides.items():
            if value is not None:
                setattr(options, key, value)
        return options


@dataclass
class AnalysisResult:
    """Outcome of an analysis run."""
    repo_path: str
    baseline: str
    branches: List[Branch] = field(default_factory=list)
    weights: List[BranchWeight] = field(default_factory=list)
    details: List[BranchDetail] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    object_count: int = 0
    elapsed: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'repo_path': self.repo_path,
            'baseline': self.baseline,
            'branches_scanned': len(self.branches),
            'branches_reported': len(self.weights),
            'branches_failed': list(self.failed),
            'unmerged_blobs': self.object_count,
            'elapsed_seconds': round(self.elapsed, 3),
        }


class AnalysisService:
    """
    Estimate the weight of unmerged branches in a repository.

    Example:
        service = AnalysisService()
        options = AnalysisOptions(top=5)

        for message in service.run("/path/to/repo", options):
            print(message)  # "Found 42 branches to analyze"

        result = service.last_result
        for weight in result.weights:
            print(weight.branch, weight.total_size)
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        git_client: Optional[GitClient] = None
    ):
        """
        Initialize AnalysisService.

        Args:
            config: Configuration dict (loads default if None)
            git_client: GitClient instance (creates new if None)
        """
        self.config = config or load_config()
        self.git = git_client or GitClient()
        self.last_result: Optional[AnalysisResult] = None

    def resolve_repository(self, repo_path: str) -> str:
        """
        Absolute path of the repository.

        Raises:
            RepositoryNotFoundError: If the path is missing or not a git repository
        """
        path = os.path.abspath(os.path.expanduser(repo_path))
        if not os.path.isdir(path) or not self.git.is_git_repo(path):
            raise RepositoryNotFoundError(repo_path)
        return path

    def resolve_baseline(self, repo_path: str, options: AnalysisOptions) -> str:
        """
        Baseline ref for the run: the explicit one if it resolves, else the
        first candidate that does.

        Raises:
            BaselineNotFoundError: If nothing resolves
        """
        if options.baseline:
            if not self.git.resolve(repo_path, options.baseline):
                raise BaselineNotFoundError(f"Baseline does not resolve: {options.baseline}")
            return options.baseline

        baseline = self.git.detect_baseline(repo_path, options.baseline_candidates)
        if baseline is None:
            names = "/".join(c.rsplit('/', 1)[-1] for c in options.baseline_candidates)
            raise BaselineNotFoundError(
                f"Could not detect default branch ({names}). Use --branch to specify."
            )
        return baseline

    def run(
        self,
        repo_path: str,
        options: Optional[AnalysisOptions] = None
    ) -> Generator[str, None, AnalysisResult]:
        """
        Analyze a repository, yielding progress messages.

        Args:
            repo_path: Path to the git repository
            options: Analysis options (from config if None)

        Yields:
            Progress messages

        Returns:
            AnalysisResult (also stored in ``last_result``)

        Raises:
            RepositoryNotFoundError: Repository path is not a git repository
            BaselineNotFoundError: No baseline could be determined
            ConfigError: The size format is not recognised
            GitError: Branch enumeration failed
        """
        options = options or AnalysisOptions.from_config(self.config)
        if options.size_format not in SIZE_FORMATS:
            raise ConfigError(
                f"Unknown size format {options.size_format!r} (expected one of: {', '.join(SIZE_FORMATS)})"
            )
        started = time.monotonic()

        path = self.resolve_repository(repo_path)
        yield f"Opening repository: {path}"

        baseline = self.resolve_baseline(path, options)
        yield f"Default branch: {baseline}"

        result = AnalysisResult(repo_path=path, baseline=baseline)
        self.last_result = result

        branches = self.git.list_unmerged_branches(
            path, merged_into=baseline, include_remotes=options.include_remotes
        )
        result.branches = branches
        yield f"Found {len(branches)} branches to analyze"

        if not branches:
            result.elapsed = time.monotonic() - started
            return result

        yield "Collecting unmerged objects from branches..."
        pipeline = ObjectPipeline(path, git_client=self.git, size_format=options.size_format)
        scheduler = BranchScheduler(pipeline.collect, max_workers=options.max_workers)
        aggregator = WeightAggregator()

        interval = max(options.progress_interval, 1)
        pending: List[str] = []

        def on_progress(done: int, total: int, name: str) -> None:
            if done % interval == 0 or done == total:
                pending.append(f"Collected {done}/{total} branches (last: {name})")

        merged = 0
        for index, blobs in scheduler.run(branches, baseline, on_progress):
            aggregator.add_branch(index, blobs)
            merged += 1
            yield from pending
            pending.clear()
            if merged % interval == 0:
                yield f"Merged {merged} branch results..."
        yield from pending

        result.failed = list(scheduler.failed)
        if result.failed:
            yield f"{len(result.failed)} branches could not be read and were skipped"

        yield f"Merged {merged} branch results"
        yield "Calculating branch weights..."
        result.object_count = len(aggregator)
        result.weights = aggregator.weights([b.name for b in branches])
        yield f"Found {len(result.weights)} branches with unmerged objects"

        if options.top > 0 and result.weights:
            yield f"Expanding commit detail for top {min(options.top, len(result.weights))} branches..."
            detail = DetailService(
                path,
                git_client=self.git,
                size_format=options.size_format,
                max_workers=options.max_workers,
            )
            tips = {b.name: b.tip for b in branches}
            result.details = detail.expand(result.weights, tips, baseline, options.top)

        result.elapsed = time.monotonic() - started
        return result

    def analyze(self, repo_path: str, options: Optional[AnalysisOptions] = None) -> AnalysisResult:
        """Run the analysis to completion, logging progress at DEBUG."""
        runner = self.run(repo_path, options)
        while True:
            try:
                logger.debug(next(runner))
            except StopIteration as stop:
                return stop.value
