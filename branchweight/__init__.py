"""
branchweight - Estimate the storage weight of unmerged git branches.

For every branch not merged into a baseline (master/main by default),
branchweight collects the blobs only that branch reaches and the blobs it
shares with other unmerged branches, and reports both totals.

Quick Start:
    from branchweight import AnalysisService, AnalysisOptions

    service = AnalysisService()
    result = service.analyze("/path/to/repo", AnalysisOptions(top=3))

    for weight in result.weights:
        print(weight.branch, weight.unique_size, weight.shared_size)

Domain Objects:
    Branch - Unmerged branch name and tip commit
    BranchWeight - Unique/shared totals for a branch
    BranchDetail - Per-commit breakdown of a branch

Services:
    AnalysisService - End-to-end run against one repository
    WeightAggregator - Unique/shared reduction over blob observations
"""

__version__ = "0.3.0"

# Domain objects
from .domain import (
    Branch,
    ObjectRecord,
    BranchWeight,
    CommitWeight,
    BranchDetail,
)

# Services
from .services import (
    AnalysisService,
    AnalysisOptions,
    AnalysisResult,
    BranchScheduler,
    DetailService,
    ObjectPipeline,
    WeightAggregator,
)

# Reports
from .services.report_service import build_summary, write_reports
from .format_utils import format_size_mb

# Configuration
from .config import load_config, save_config

__all__ = [
    "__version__",
    # Domain objects
    "Branch",
    "ObjectRecord",
    "BranchWeight",
    "CommitWeight",
    "BranchDetail",
    # Services
    "AnalysisService",
    "AnalysisOptions",
    "AnalysisResult",
    "BranchScheduler",
    "DetailService",
    "ObjectPipeline",
    "WeightAggregator",
    # Reports
    "build_summary",
    "write_reports",
    "format_size_mb",
    # Configuration
    "load_config",
    "save_config",
]
