"""Unit tests for the noise cleaner and the SNV cap."""

import numpy as np
import pandas as pd
import pytest

from isomirseq.core.ingest import (
    aggregate_samples,
    clean_noise,
    compute_importance,
    remove_excess_snv,
)
from tests.fixtures import create_raw_table, create_records


class TestComputeImportance:
    """Tests for compute_importance."""

    def test_share_within_mirna(self, raw_table):
        """Test shares are taken against the miRNA total per sample."""
        share = compute_importance(raw_table)
        assert share.loc[0, "s1"] == pytest.approx(0.9)
        assert share.loc[1, "s2"] == pytest.approx(0.5)
        assert share.loc[4, "s3"] == pytest.approx(0.7)

    def test_zero_total_gives_zero(self, raw_table):
        """Test groups without reads have zero share."""
        share = compute_importance(raw_table)
        assert share.loc[0, "s3"] == 0.0
        assert not share.isna().to_numpy().any()


class TestCleanNoise:
    """Tests for clean_noise."""

    def test_mismatch_below_group_share_removed(self):
        """Test a rare variant is judged against its miRNA's total reads."""
        raw = aggregate_samples({
            "A": create_records([
                ("AAGCTT", "mir-1", "", "", "0", "0", 10),
                ("AAGCTT", "mir-1", "1T>C", "", "0", "0", 1),
            ]),
            "B": create_records([
                ("AAGCTT", "mir-1", "", "", "0", "0", 6),
            ]),
        })
        cleaned = clean_noise(raw, pct=0.5)
        assert len(cleaned) == 1
        row = cleaned.iloc[0]
        assert row["mism"] == ""
        assert row[["A", "B"]].tolist() == [10, 6]

    def test_all_zero_row_removed(self, raw_table):
        """Test rows without reads in any sample never pass."""
        cleaned = clean_noise(raw_table, pct=0.0)
        assert "AAGCTC" not in set(cleaned["seq"])
        assert len(cleaned) == 4

    def test_share_equal_to_pct_kept(self):
        """Test the threshold is inclusive."""
        raw = create_raw_table(
            [
                ("AAGCTT", "mir-1", "", "", "0", "0", 90),
                ("AAGCTTA", "mir-1", "", "A", "0", "0", 10),
            ],
            samples=["s1"],
        )
        assert len(clean_noise(raw, pct=0.1)) == 2
        assert len(clean_noise(raw, pct=0.11)) == 1

    def test_any_sample_suffices(self, raw_table):
        """Test one sample above pct keeps the row."""
        cleaned = clean_noise(raw_table, pct=0.55)
        assert sorted(cleaned["seq"]) == ["AAGCTT", "GGCATA"]

    def test_whitelist(self, raw_table):
        """Test whitelisted sequences are kept regardless of share."""
        cleaned = clean_noise(raw_table, pct=0.55, whitelist=["GGCATT", "AAGCTC"])
        assert sorted(cleaned["seq"]) == ["AAGCTC", "AAGCTT", "GGCATA", "GGCATT"]

    @pytest.mark.parametrize("container", [pd.Series, np.array, tuple])
    def test_whitelist_vector(self, raw_table, container):
        """Test whitelists given as a Series, array or tuple."""
        whitelist = container(["GGCATT", "AAGCTC"])
        cleaned = clean_noise(raw_table, pct=0.55, whitelist=whitelist)
        assert sorted(cleaned["seq"]) == ["AAGCTC", "AAGCTT", "GGCATA", "GGCATT"]

    def test_empty_whitelist(self, raw_table):
        """Test an empty whitelist protects nothing."""
        cleaned = clean_noise(raw_table, pct=0.55, whitelist=pd.Series([], dtype=object))
        assert sorted(cleaned["seq"]) == ["AAGCTT", "GGCATA"]

    def test_idempotent(self, raw_table):
        """Test cleaning twice gives the same table."""
        once = clean_noise(raw_table, pct=0.2)
        twice = clean_noise(once, pct=0.2)
        assert once.equals(twice)

    def test_fresh_index(self, raw_table):
        """Test the result has a contiguous index."""
        cleaned = clean_noise(raw_table, pct=0.55)
        assert list(cleaned.index) == list(range(len(cleaned)))


class TestRemoveExcessSNV:
    """Tests for remove_excess_snv."""

    @pytest.mark.parametrize(
        "n_snv,expected",
        [
            (0, 3),
            (1, 4),
            (2, 5),
            (None, 5),
        ],
    )
    def test_cap(self, raw_table, n_snv, expected):
        """Test rows with more than n_snv substitutions are removed."""
        assert len(remove_excess_snv(raw_table, n_snv=n_snv)) == expected

    def test_only_substitutions_count(self):
        """Test trimming and additions do not count as substitutions."""
        raw = create_raw_table(
            [("GAAGCTTAA", "mir-1", "", "AA", "G", "tt", 5)],
            samples=["s1"],
        )
        assert len(remove_excess_snv(raw, n_snv=0)) == 1
