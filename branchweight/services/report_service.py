"""
Report writing for branchweight.

Writes the JSON report files for an analysis run:
- branches_full.json: every branch with byte sizes, formatted sizes and counts
- branches.json: every branch with formatted sizes only
- summary.json: branch count and aggregate unique/shared totals
- branch_details.json: per-commit breakdown (only when detail ran)
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..domain import BranchDetail, BranchWeight
from ..format_utils import format_size_mb

logger = logging.getLogger(__name__)

FULL_REPORT = "branches_full.json"
LIGHT_REPORT = "branches.json"
SUMMARY_REPORT = "summary.json"
DETAIL_REPORT = "branch_details.json"

REPORT_FILES = (FULL_REPORT, LIGHT_REPORT, SUMMARY_REPORT, DETAIL_REPORT)


def build_summary(weights: Sequence[BranchWeight]) -> Dict[str, Any]:
    """Aggregate totals across all reported branches."""
    total_unique = sum(w.unique_size for w in weights)
    total_shared = sum(w.shared_size for w in weights)
    return {
        'totalBranches': len(weights),
        'totalUniqueSize': total_unique,
        'totalUniqueSizeMB': format_size_mb(total_unique),
        'totalSharedSize': total_shared,
        'totalSharedSizeMB': format_size_mb(total_shared),
    }


def existing_reports(out_dir: Path) -> List[Path]:
    """Report files already present in ``out_dir``."""
    out_dir = Path(out_dir)
    return [out_dir / name for name in REPORT_FILES if (out_dir / name).exists()]


def _write_json(path: Path, data: Any) -> None:
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write('\n')


def write_reports(
    out_dir: Path,
    weights: Sequence[BranchWeight],
    details: Optional[Sequence[BranchDetail]] = None
) -> Dict[str, Path]:
    """
    Write the report files, creating ``out_dir`` if needed.

    A stale branch_details.json from an earlier run is removed when no
    detail is given.

    Args:
        out_dir: Output directory
        weights: Branch weights in report order
        details: Optional per-commit breakdowns

    Returns:
        Mapping of report name to written path
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    written = {
        'full': out_dir / FULL_REPORT,
        'light': out_dir / LIGHT_REPORT,
        'summary': out_dir / SUMMARY_REPORT,
    }
    _write_json(written['full'], [w.to_dict() for w in weights])
    _write_json(written['light'], [w.to_light_dict() for w in weights])
    _write_json(written['summary'], build_summary(weights))

    detail_path = out_dir / DETAIL_REPORT
    if details:
        _write_json(detail_path, [d.to_dict() for d in details])
        written['details'] = detail_path
    elif detail_path.exists():
        detail_path.unlink()

    logger.debug(f"Reports written to {out_dir}")
    return written
