#!/usr/bin/env python3
import os
import shutil
import tempfile
import unittest

from coverage_common import CoverageReport, collect_coverage, display_name, resolve_source
from coverage_errors import SourceResolutionError
from profile_decoder import ProfileRecord, decode_profile
from profile_fixtures import encode_profile, write_file


def record(path, line, count):
    return ProfileRecord(tag=f"{path}:{line}", path=path, line=line, count=count)


class TestAggregation(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.a_lua = write_file(self.temp_dir, "src/a.lua", "local x = 1\n")
        self.b_lua = write_file(self.temp_dir, "src/lib/b.lua", "return {}\n")

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_at_prefixed_and_plain_tags_merge(self):
        data = encode_profile([("@src/a.lua:3", 5), ("src/a.lua:3", 2)])
        report = collect_coverage(decode_profile(data), self.temp_dir)
        self.assertEqual(list(report.files), [self.a_lua])
        self.assertEqual(report.files[self.a_lua].line_counts, {3: 7})
        self.assertEqual(report.points, 2)

    def test_path_spellings_merge(self):
        records = [
            record("src/a.lua", 1, 1),
            record("./src/a.lua", 1, 2),
            record("src/lib/../a.lua", 1, 3),
            record("src//a.lua", 2, 4),
        ]
        report = collect_coverage(records, self.temp_dir)
        self.assertEqual(len(report.files), 1)
        self.assertEqual(report.files[self.a_lua].line_counts, {1: 6, 2: 4})

    def test_merge_is_order_independent(self):
        records = [record("src/a.lua", 1, 1), record("src/lib/b.lua", 2, 3), record("src/a.lua", 1, 10)]
        forward = collect_coverage(records, self.temp_dir)
        backward = collect_coverage(list(reversed(records)), self.temp_dir)
        for path in (self.a_lua, self.b_lua):
            self.assertEqual(forward.files[path].line_counts, backward.files[path].line_counts)

    def test_same_tag_resolves_to_same_entry(self):
        report = CoverageReport()
        first = report.add_record(record("src/a.lua", 1, 1), self.temp_dir)
        second = report.add_record(record("src/a.lua", 1, 1), self.temp_dir)
        self.assertIs(first, second)
        self.assertEqual(len(report.files), 1)

    def test_zero_count_is_recorded(self):
        report = collect_coverage([record("src/a.lua", 4, 0)], self.temp_dir)
        self.assertEqual(report.files[self.a_lua].line_counts, {4: 0})

    def test_display_name(self):
        report = collect_coverage([record("src/lib/b.lua", 1, 1)], self.temp_dir)
        self.assertEqual(report.files[self.b_lua].short_name, "b")

    def test_missing_file_is_fatal(self):
        with self.assertRaises(SourceResolutionError) as ctx:
            collect_coverage([record("src/missing.lua", 1, 1)], self.temp_dir)
        self.assertIn("src/missing.lua:1", str(ctx.exception))

    def test_directory_is_rejected(self):
        with self.assertRaises(SourceResolutionError):
            collect_coverage([record("src/lib", 1, 1)], self.temp_dir)

    def test_select_by_display_name(self):
        report = collect_coverage(
            [record("src/a.lua", 1, 1), record("src/lib/b.lua", 1, 1)], self.temp_dir
        )
        self.assertEqual([fc.canonical_path for fc in report.select()], [self.a_lua, self.b_lua])
        self.assertEqual([fc.canonical_path for fc in report.select("b")], [self.b_lua])
        self.assertEqual(report.select("b.lua"), [])
        self.assertEqual(report.select("nothing"), [])


class TestResolveSource(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_leading_slash_stays_under_root(self):
        path = write_file(self.temp_dir, "game/main.lua")
        self.assertEqual(resolve_source(self.temp_dir, "/game/main.lua"), path)

    def test_relative_root(self):
        path = write_file(self.temp_dir, "main.lua")
        cwd = os.getcwd()
        os.chdir(self.temp_dir)
        try:
            self.assertEqual(resolve_source("./", "main.lua"), os.path.realpath(path))
        finally:
            os.chdir(cwd)

    def test_display_name_strips_last_extension(self):
        self.assertEqual(display_name("/x/y/mod.test.lua"), "mod.test")
