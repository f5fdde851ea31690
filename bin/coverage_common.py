#!/usr/bin/env python3
"""
Shared coverage data structures and aggregation logic for the Lua profile
coverage tools.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from coverage_errors import SourceResolutionError


@dataclass
class FileCoverage:
    short_name: str
    canonical_path: str
    line_counts: dict = field(default_factory=dict)

    def add_hits(self, line_no: int, count: int):
        self.line_counts[line_no] = self.line_counts.get(line_no, 0) + count

    @property
    def max_count(self) -> int:
        return max(self.line_counts.values(), default=0)


@dataclass
class CoverageReport:
    files: dict = field(default_factory=dict)
    points: int = 0

    def add_record(self, record, source_root) -> FileCoverage:
        """Merge one decoded record into the file it resolves to."""
        path = resolve_source(source_root, record.path, record.tag)
        fc = self.files.get(path)
        if fc is None:
            fc = FileCoverage(short_name=display_name(path), canonical_path=path)
            self.files[path] = fc
        fc.add_hits(record.line, record.count)
        self.points += 1
        return fc

    def select(self, name: Optional[str] = None) -> List[FileCoverage]:
        """Files in first-seen order, optionally only those with a display name."""
        if not name:
            return list(self.files.values())
        return [fc for fc in self.files.values() if fc.short_name == name]


def display_name(path: str) -> str:
    return Path(path).stem


def resolve_source(source_root, rel_path: str, tag: Optional[str] = None) -> str:
    """Resolve a profiled path against the source root.

    The root and path are joined textually, so a tag path that starts with
    '/' still lands under the root.
    """
    tag = tag if tag is not None else rel_path
    try:
        path = os.path.abspath(f"{source_root}/{rel_path}")
    except (OSError, ValueError) as e:
        raise SourceResolutionError(f"cannot resolve {tag!r} under {source_root}: {e}") from e

    if not Path(path).is_file():
        raise SourceResolutionError(f"file not found {path} (tag {tag!r})")
    return path


def collect_coverage(records: Iterable, source_root) -> CoverageReport:
    """Aggregate all decoded records into a single report."""
    report = CoverageReport()
    for record in records:
        report.add_record(record, source_root)
    return report
