"""
Output format utilities for branchweight CLI commands.

Provides the megabyte size formatting used in reports, and functions to
format records as CSV, TSV, YAML, JSON, and JSONL.
"""

import json
import csv
import io
import os
from typing import Dict, List, Any, Iterator, Optional
import yaml

BYTES_PER_MB = 1024 * 1024

OUTPUT_FORMATS = ('json', 'jsonl', 'csv', 'tsv', 'yaml')


def format_size_mb(size: int) -> str:
    """
    Format a byte count as megabytes for reports.

    Values of 0.1 MB and above get one decimal place, values between
    0.01 MB and 0.1 MB get two, anything smaller is reported as "0 MB".

    Example:
        format_size_mb(1024 * 512) -> '0.5 MB'
        format_size_mb(1024 * 15)  -> '0.01 MB'
    """
    mb = size / BYTES_PER_MB
    if mb >= 0.1:
        return f"{mb:.1f} MB"
    elif mb >= 0.01:
        return f"{mb:.2f} MB"
    return "0 MB"


def format_output(data: Iterator[Dict[str, Any]], format: str,
                 fields: Optional[List[str]] = None) -> Iterator[str]:
    """
    Format data according to the specified format.

    Args:
        data: Iterator of dictionaries to format
        format: Output format (json, jsonl, csv, tsv, yaml)
        fields: Optional list of fields to include (for CSV/TSV)

    Yields:
        Formatted strings for output
    """
    if format == "jsonl":
        yield from format_jsonl(data)
    elif format == "json":
        yield from format_json(data)
    elif format == "csv":
        yield from format_delimited(data, fields, delimiter=',')
    elif format == "tsv":
        yield from format_delimited(data, fields, delimiter='\t')
    elif format == "yaml":
        yield from format_yaml(data)
    else:
        raise ValueError(f"Unknown format: {format}")


def format_jsonl(data: Iterator[Dict[str, Any]]) -> Iterator[str]:
    """Format data as JSON Lines (one JSON object per line)."""
    for item in data:
        yield json.dumps(item, ensure_ascii=False)


def format_json(data: Iterator[Dict[str, Any]]) -> Iterator[str]:
    """Format data as a single JSON array."""
    all_data = list(data)
    yield json.dumps(all_data, ensure_ascii=False, indent=2)


def format_yaml(data: Iterator[Dict[str, Any]]) -> Iterator[str]:
    """Format data as YAML."""
    all_data = list(data)
    yield yaml.dump(all_data, default_flow_style=False, allow_unicode=True, sort_keys=False)


def format_delimited(data: Iterator[Dict[str, Any]], fields: Optional[List[str]] = None,
                     delimiter: str = ',') -> Iterator[str]:
    """
    Format data as CSV or TSV.

    Args:
        data: Iterator of dictionaries
        fields: Optional list of fields to include. If None, uses the keys of
                the first item in their original order.
        delimiter: Field separator
    """
    data_list = [flatten_dict(item) for item in data]
    if not data_list:
        return

    if fields is None:
        fields = list(data_list[0].keys())
        for item in data_list[1:]:
            fields.extend(k for k in item.keys() if k not in fields)

    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=fields, delimiter=delimiter,
                            extrasaction='ignore', lineterminator='\n')
    writer.writeheader()
    for item in data_list:
        writer.writerow(item)

    yield output.getvalue().rstrip('\n')


def flatten_dict(d: Dict[str, Any], parent_key: str = '', sep: str = '.') -> Dict[str, Any]:
    """
    Flatten a nested dictionary.

    Example:
        {'a': {'b': 1, 'c': 2}} -> {'a.b': 1, 'a.c': 2}
    """
    items: list[tuple[str, Any]] = []
    for k, v in d.items():
        new_key = f"{parent_key}{sep}{k}" if parent_key else k

        if isinstance(v, dict):
            items.extend(flatten_dict(v, new_key, sep=sep).items())
        elif isinstance(v, list):
            if v and not isinstance(v[0], (dict, list)):
                items.append((new_key, ', '.join(str(item) for item in v)))
            else:
                # For complex lists, just use the count
                items.append((new_key + '_count', len(v)))
        else:
            items.append((new_key, v))

    return dict(items)


def get_format_from_env(default: str = 'jsonl') -> str:
    """
    Get output format from the BRANCHWEIGHT_FORMAT environment variable.
    """
    format = os.environ.get('BRANCHWEIGHT_FORMAT', default).lower()
    if format not in OUTPUT_FORMATS + ('table',):
        return default
    return format
