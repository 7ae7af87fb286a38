"""Unit tests for table and log I/O."""

import json
import logging

import pandas as pd
import pytest
import yaml

from isomirseq.core.ingest import from_raw_table
from isomirseq.io import (
    load_raw_table,
    load_sample_table,
    load_whitelist,
    log_json,
    log_yaml,
    write_count_matrix,
)


class TestSampleTable:
    """Tests for load_sample_table."""

    def test_first_column_is_index(self, tmp_path):
        """Test sample ids come from the first column as strings."""
        path = tmp_path / "coldata.csv"
        path.write_text("sample,condition\n001,a\n002,b\n")
        coldata = load_sample_table(path)
        assert list(coldata.index) == ["001", "002"]
        assert list(coldata.columns) == ["condition"]

    def test_tsv_and_named_column(self, tmp_path):
        """Test TSV input and an explicit id column."""
        path = tmp_path / "coldata.tsv"
        path.write_text("condition\tid\na\ts1\nb\ts2\n")
        coldata = load_sample_table(path, sample_id_col="id")
        assert list(coldata.index) == ["s1", "s2"]

    def test_duplicates(self, tmp_path):
        """Test duplicated sample ids are rejected."""
        path = tmp_path / "coldata.csv"
        path.write_text("sample,condition\ns1,a\ns1,b\n")
        with pytest.raises(ValueError):
            load_sample_table(path)

    def test_missing(self, tmp_path):
        """Test a missing file raises."""
        with pytest.raises(FileNotFoundError):
            load_sample_table(tmp_path / "absent.csv")


class TestWriteCountMatrix:
    """Tests for write_count_matrix and load_raw_table."""

    def test_artifacts(self, raw_table, coldata, tmp_output_dir):
        """Test every artifact is written."""
        matrix = from_raw_table(raw_table, coldata).count_matrix
        paths = write_count_matrix(matrix, tmp_output_dir)
        assert set(paths) == {"counts", "row_data", "coldata", "raw_data"}
        for path in paths.values():
            assert path.exists()

    def test_raw_table_reload(self, raw_table, coldata, tmp_output_dir):
        """Test a written raw table rebuilds the same matrix."""
        first = from_raw_table(raw_table, coldata).count_matrix
        paths = write_count_matrix(first, tmp_output_dir)

        reloaded = load_raw_table(paths["raw_data"])
        assert reloaded.loc[0, "mism"] == ""
        assert reloaded.loc[0, "t5"] == "0"

        second = from_raw_table(reloaded, coldata).count_matrix
        pd.testing.assert_frame_equal(first.counts, second.counts)

    def test_raw_table_missing_columns(self, tmp_path):
        """Test tables without identity columns are rejected."""
        path = tmp_path / "raw.tsv"
        path.write_text("seq\ts1\nAAGCTT\t3\n")
        with pytest.raises(ValueError):
            load_raw_table(path)


class TestWhitelist:
    """Tests for load_whitelist."""

    def test_comments_and_blanks(self, tmp_path):
        """Test comments and blank lines are skipped."""
        path = tmp_path / "keep.txt"
        path.write_text("# keep these\nAAGCTT\n\n  GGCATT  \n")
        assert load_whitelist(path) == ["AAGCTT", "GGCATT"]


class TestRunLogs:
    """Tests for JSON lines and YAML run logs."""

    def test_log_json_appends(self, tmp_path):
        """Test one line per record, appended across calls."""
        path = tmp_path / "logs" / "samples.jsonl"
        log_json(path, [{"sample_id": "s1"}])
        log_json(path, [{"sample_id": "s2"}, {"sample_id": "s3"}])
        lines = path.read_text().splitlines()
        assert [json.loads(line)["sample_id"] for line in lines] == ["s1", "s2", "s3"]

    def test_log_yaml(self, tmp_path):
        """Test YAML summary is written and replaced."""
        path = tmp_path / "summary.yaml"
        log_yaml(path, {"n_isomirs": 3})
        log_yaml(path, {"n_isomirs": 5})
        assert yaml.safe_load(path.read_text()) == {"n_isomirs": 5}

    def test_log_yaml_to_logger(self, caplog):
        """Test the summary goes to a logger instead of a file."""
        logger = logging.getLogger("isomirseq.run_summary")
        with caplog.at_level(logging.INFO, logger="isomirseq.run_summary"):
            log_yaml(None, {"n_isomirs": 3}, logger=logger)
        assert "n_isomirs: 3" in caplog.text
