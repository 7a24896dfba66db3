"""
Tests for PathHelper path utilities.
"""

from pathlib import Path

import pytest

from parquetstudio.utility.path_helper import SCHEMA_SUFFIXES, PathHelper


class TestPathHelperNormalize:
    def test_resolves_dot_segments(self, tmp_path):
        spelled = tmp_path / "a" / ".." / "file.parquet"
        assert PathHelper.normalize(spelled) == (tmp_path / "file.parquet").resolve()

    def test_accepts_strings(self, tmp_path):
        assert PathHelper.normalize(str(tmp_path)) == tmp_path.resolve()

    def test_relative_paths_become_absolute(self):
        assert PathHelper.normalize("data/users.parquet").is_absolute()


class TestPathHelperSuffix:
    def test_appends_missing_suffix(self):
        assert PathHelper.ensure_suffix("out/users") == Path("out/users.parquet")

    def test_keeps_existing_suffix(self):
        assert PathHelper.ensure_suffix("users.parquet") == Path("users.parquet")

    def test_suffix_check_is_case_insensitive(self):
        assert PathHelper.ensure_suffix("USERS.PARQUET") == Path("USERS.PARQUET")

    def test_other_extension_is_kept(self):
        assert PathHelper.ensure_suffix("users.csv") == Path("users.csv.parquet")

    def test_has_suffix(self):
        assert PathHelper.has_suffix("a/b.schema", SCHEMA_SUFFIXES)
        assert PathHelper.has_suffix("b.json", SCHEMA_SUFFIXES)
        assert not PathHelper.has_suffix("b.yaml", SCHEMA_SUFFIXES)


class TestPathHelperSchemaFile:
    @pytest.mark.parametrize("name", ["users.schema", "users.json"])
    def test_existing_schema_file(self, tmp_path, name):
        path = tmp_path / name
        path.write_text("{}")
        assert PathHelper.is_schema_file(path)

    def test_wrong_extension(self, tmp_path):
        path = tmp_path / "users.txt"
        path.write_text("{}")
        assert not PathHelper.is_schema_file(path)

    def test_missing_file(self, tmp_path):
        assert not PathHelper.is_schema_file(tmp_path / "users.schema")

    def test_none(self):
        assert not PathHelper.is_schema_file(None)


class TestPathHelperMisc:
    def test_get_filename(self):
        assert PathHelper.get_filename("data/lake/users.parquet") == "users.parquet"
        assert PathHelper.get_filename(None) == ""

    def test_sql_literal_escapes_quotes(self):
        assert PathHelper.sql_literal("/tmp/o'brien.parquet") == "'/tmp/o''brien.parquet'"
