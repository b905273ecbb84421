"""
Service layer for branchweight.

Contains the analysis engine, orchestrating domain objects and infrastructure:
- ObjectPipeline: Streams one branch's unmerged objects out of git
- BranchScheduler: Runs pipelines for many branches concurrently
- WeightAggregator: Turns blob observations into unique/shared weights
- DetailService: Per-commit breakdown of the heaviest branches
- AnalysisService: End-to-end run against one repository

Services are the primary API for commands to use.
"""

from .pipeline import ObjectPipeline, collect_blob_sizes
from .scheduler import BranchScheduler
from .aggregator import WeightAggregator
from .detail_service import DetailService
from .analysis_service import AnalysisService, AnalysisOptions, AnalysisResult

__all__ = [
    'ObjectPipeline',
    'collect_blob_sizes',
    'BranchScheduler',
    'WeightAggregator',
    'DetailService',
    'AnalysisService',
    'AnalysisOptions',
    'AnalysisResult',
]
