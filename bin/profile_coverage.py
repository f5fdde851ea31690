#!/usr/bin/env python3
"""
Lua statement coverage from a binary execution-count profile.

Decodes the profile, merges hit counts per source file, parses each file to
find its executable statements and prints a gcov-style listing plus a
coverage summary.

Usage:
  profile_coverage.py -i lua.prof                      # All files
  profile_coverage.py -i lua.prof -path ./src          # Resolve tags under ./src
  profile_coverage.py -i lua.prof -f player            # Only player.lua
  profile_coverage.py -i lua.prof -showcode=false      # Summaries only
  profile_coverage.py -i lua.prof -lcov cov.info -xml coverage.xml
  profile_coverage.py -i lua.prof -min 80              # Fail below 80%

Exit code 0 = pass, 1 = fatal error or coverage below -min
"""

import argparse
import sys

from coverage_calc import ReportOptions, report_file
from coverage_common import collect_coverage
from coverage_errors import CoverageError
from coverage_export import generate_cobertura_xml, total_result, write_lcov
from lua_grammar import LuaGrammar
from profile_decoder import decode_profile, read_profile

TRUE_VALUES = {"1", "t", "true", "yes", "on"}
FALSE_VALUES = {"0", "f", "false", "no", "off"}


def parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    raise argparse.ArgumentTypeError(f"invalid boolean value: {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lua-profile-coverage",
        description="Report Lua statement coverage from a binary profile",
    )
    parser.add_argument("-i", "--input", dest="input", default="", help="input profile file")
    parser.add_argument("-path", "--path", dest="path", default="./", help="source code path (default: ./)")
    parser.add_argument("-f", "--filter", dest="filter", default="", help="only report files with this name (no extension)")
    for flag, help_text in (("showcode", "show annotated source"),
                            ("showtotal", "show coverage summary"),
                            ("showfunc", "show functions (reserved, no output)")):
        parser.add_argument(
            f"-{flag}", f"--{flag}",
            dest=flag,
            type=parse_bool,
            nargs="?",
            const=True,
            default=True,
            metavar="BOOL",
            help=f"{help_text} (default: true)",
        )
    parser.add_argument("-lcov", "--lcov", dest="lcov", help="also write an LCOV tracefile")
    parser.add_argument("-xml", "--xml", dest="xml", help="also write a Cobertura XML report")
    parser.add_argument("-min", "--min", dest="min_coverage", type=float,
                        help="fail when overall coverage is below this percentage")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.input:
        parser.print_help()
        return 0

    options = ReportOptions(
        show_code=args.showcode,
        show_total=args.showtotal,
        show_func=args.showfunc,
    )

    try:
        data = read_profile(args.input)
        report = collect_coverage(decode_profile(data), args.path)
    except CoverageError as e:
        print(f"Error: {e}")
        return 1

    print(f"total points = {report.points}, files = {len(report.files)}")

    grammar = LuaGrammar()
    reports = []
    for fc in report.select(args.filter):
        fr = report_file(fc, options, grammar)
        if fr is not None:
            reports.append(fr)

    total = total_result(reports)
    if options.show_total and reports:
        print(f"overall coverage {total.percentage}% {total.covered_lines}/{total.executable_lines}")

    try:
        if args.lcov:
            write_lcov(reports, args.lcov)
            print(f"LCOV: {args.lcov}")
        if args.xml:
            generate_cobertura_xml(reports, args.xml, args.path)
            print(f"XML: {args.xml}")
    except OSError as e:
        print(f"Error: cannot write report: {e}")
        return 1

    if args.min_coverage is not None:
        if total.exact_percentage < args.min_coverage:
            print(f"FAILED: coverage {total.exact_percentage:.1f}% is below {args.min_coverage:g}%")
            return 1
        print(f"PASSED: coverage {total.exact_percentage:.1f}% meets {args.min_coverage:g}%")

    return 0


if __name__ == "__main__":
    sys.exit(main())
