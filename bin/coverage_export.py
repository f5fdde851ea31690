#!/usr/bin/env python3
"""
Machine-readable exports of a coverage run: LCOV tracefiles and
Cobertura XML.

Only executable lines (per the grammar) are exported. A line the profiler
never recorded exports 0 hits; a recorded line exports its count, at least 1,
so LH and lines-covered agree with the per-line hits.
"""

import os
import xml.etree.ElementTree as ET
from datetime import datetime
from pathlib import Path
from typing import List

from coverage_calc import CoverageResult, FileReport


def total_result(reports: List[FileReport]) -> CoverageResult:
    total = CoverageResult()
    for fr in reports:
        total = total + fr.result
    return total


def rate(result: CoverageResult) -> str:
    if result.executable_lines == 0:
        return "0.0000"
    return f"{result.covered_lines / result.executable_lines:.4f}"


def exported_hits(fc, line_no: int) -> int:
    # Recorded lines are touched, so they never export as 0 hits.
    if line_no not in fc.line_counts:
        return 0
    return max(fc.line_counts[line_no], 1)


def relative_to_root(path: str, source_root) -> str:
    root = os.path.abspath(str(source_root))
    if path.startswith(root + os.sep):
        return path[len(root) + 1:]
    return path


def write_lcov(reports: List[FileReport], output_path: Path):
    """Write an LCOV tracefile with one record per reported file."""
    out = []
    for fr in reports:
        fc = fr.coverage
        out.append(f"SF:{fc.canonical_path}")
        for line_no in sorted(fr.statements):
            out.append(f"DA:{line_no},{exported_hits(fc, line_no)}")
        out.append(f"LF:{fr.result.executable_lines}")
        out.append(f"LH:{fr.result.covered_lines}")
        out.append("end_of_record")
    Path(output_path).write_text("\n".join(out) + "\n" if out else "")


def generate_cobertura_xml(reports: List[FileReport], output_path: Path, source_root):
    """Generate Cobertura XML format coverage report."""
    total = total_result(reports)

    coverage = ET.Element("coverage")
    coverage.set("version", "1.0")
    coverage.set("timestamp", str(int(datetime.now().timestamp() * 1000)))
    coverage.set("lines-valid", str(total.executable_lines))
    coverage.set("lines-covered", str(total.covered_lines))
    coverage.set("line-rate", rate(total))
    coverage.set("branches-valid", "0")
    coverage.set("branches-covered", "0")
    coverage.set("branch-rate", "0")
    coverage.set("complexity", "0")

    sources = ET.SubElement(coverage, "sources")
    source = ET.SubElement(sources, "source")
    source.text = os.path.abspath(str(source_root))

    packages = ET.SubElement(coverage, "packages")
    lua_pkg = ET.SubElement(packages, "package")
    lua_pkg.set("name", "lua")
    lua_pkg.set("line-rate", rate(total))
    lua_pkg.set("branch-rate", "0")
    lua_pkg.set("complexity", "0")
    classes = ET.SubElement(lua_pkg, "classes")

    for fr in sorted(reports, key=lambda r: r.coverage.canonical_path):
        fc = fr.coverage
        cls = ET.SubElement(classes, "class")
        cls.set("name", fc.short_name)
        cls.set("filename", relative_to_root(fc.canonical_path, source_root))
        cls.set("line-rate", rate(fr.result))
        cls.set("branch-rate", "0")
        cls.set("complexity", "0")

        ET.SubElement(cls, "methods")
        lines_elem = ET.SubElement(cls, "lines")
        for line_no in sorted(fr.statements):
            line_elem = ET.SubElement(lines_elem, "line")
            line_elem.set("number", str(line_no))
            line_elem.set("hits", str(exported_hits(fc, line_no)))

    tree = ET.ElementTree(coverage)
    ET.indent(tree, space="  ")
    tree.write(output_path, encoding="utf-8", xml_declaration=True)
