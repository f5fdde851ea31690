#!/usr/bin/env python3
"""
Coverage calculation and gcov-style console reporting.

A line is covered when the profiler recorded it (any count, including 0)
and the grammar agrees it hosts a statement.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Set

from coverage_common import FileCoverage
from coverage_errors import SourceParseError
from lua_grammar import LuaGrammar, statement_lines


@dataclass
class ReportOptions:
    show_code: bool = True
    show_total: bool = True
    # Reserved: accepted on the command line, no output yet.
    show_func: bool = True


@dataclass
class CoverageResult:
    covered_lines: int = 0
    executable_lines: int = 0

    @property
    def percentage(self) -> int:
        if self.executable_lines == 0:
            return 0
        return self.covered_lines * 100 // self.executable_lines

    @property
    def exact_percentage(self) -> float:
        if self.executable_lines == 0:
            return 0.0
        return self.covered_lines * 100 / self.executable_lines

    def __add__(self, other: "CoverageResult") -> "CoverageResult":
        return CoverageResult(
            covered_lines=self.covered_lines + other.covered_lines,
            executable_lines=self.executable_lines + other.executable_lines,
        )


@dataclass
class FileReport:
    coverage: FileCoverage
    statements: Set[int] = field(default_factory=set)
    result: CoverageResult = field(default_factory=CoverageResult)


def split_source_lines(text: str) -> List[str]:
    """Split without terminators; a final unterminated line is kept."""
    if not text:
        return []
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    return [line.rstrip("\r") for line in lines]


def read_source(filepath: str) -> str:
    try:
        return Path(filepath).read_bytes().decode("utf-8", errors="replace")
    except OSError as e:
        raise SourceParseError(f"cannot read {filepath}: {e}") from e


def compute_coverage(fc: FileCoverage, statements: Set[int]) -> CoverageResult:
    covered = sum(1 for line_no in fc.line_counts if line_no in statements)
    return CoverageResult(covered_lines=covered, executable_lines=len(statements))


def render_listing(fc: FileCoverage, source_lines: Iterable[str]) -> List[str]:
    """Annotate every source line with its recorded count, or a blank."""
    width = max(1, len(str(fc.max_count)))
    listing = []
    for line_no, text in enumerate(source_lines, 1):
        count = fc.line_counts.get(line_no)
        prefix = " " if count is None else str(count)
        listing.append(f"{prefix:<{width}} {text}")
    return listing


def format_summary(path: str, result: CoverageResult) -> str:
    summary = (f"{path} total coverage {result.percentage}% "
               f"{result.covered_lines}/{result.executable_lines}")
    if result.executable_lines == 0:
        summary += " (no executable lines)"
    return summary


def report_file(fc: FileCoverage, options: ReportOptions, grammar=None) -> Optional[FileReport]:
    """Print the report for one file; returns None if the file was skipped."""
    grammar = grammar or LuaGrammar()
    print(f"coverage of {fc.canonical_path}:")

    try:
        text = read_source(fc.canonical_path)
        statements = statement_lines(text, grammar)
    except SourceParseError as e:
        print(f"Warning: skipping {fc.canonical_path}: {e}")
        return None

    if options.show_code:
        for line in render_listing(fc, split_source_lines(text)):
            print(line)

    result = compute_coverage(fc, statements)
    if options.show_total:
        print(format_summary(fc.canonical_path, result))

    return FileReport(coverage=fc, statements=statements, result=result)
