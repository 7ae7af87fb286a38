"""Unit tests for ingestion configuration."""

import yaml

from isomirseq.core.ingest import (
    IngestConfig,
    LoaderConfig,
    MIRALIGNER_COLUMNS,
    SampleFilterConfig,
)


class TestDefaults:
    """Tests for default configuration values."""

    def test_sample_filter_defaults(self):
        """Test per-sample filter defaults."""
        cfg = SampleFilterConfig()
        assert cfg.rate == 0.0
        assert cfg.canonical_add
        assert cfg.unique_mism
        assert not cfg.unique_hits
        assert cfg.min_hits == 1
        assert cfg.min_rows == 2

    def test_stage_defaults(self):
        """Test cross-sample stage defaults."""
        cfg = IngestConfig.default()
        assert cfg.noise.pct == 0.1
        assert cfg.noise.whitelist == []
        assert cfg.snv.n_snv == 1
        assert not cfg.matrix.include_missing
        assert cfg.matrix.design == "~1"
        assert cfg.n_jobs == 1

    def test_loader_defaults(self):
        """Test loader reads miraligner layout."""
        cfg = LoaderConfig()
        assert cfg.columns == MIRALIGNER_COLUMNS
        assert cfg.columns[cfg.freq_position] == "freq"


class TestFromYaml:
    """Tests for IngestConfig.from_yaml."""

    def test_nested_section(self, sample_ingest_config):
        """Test loading a config with an ingest section."""
        cfg = IngestConfig.from_yaml(sample_ingest_config)
        assert cfg.sample_filter.unique_hits
        assert cfg.sample_filter.min_hits == 2
        assert cfg.noise.pct == 0.05
        assert cfg.noise.whitelist == ["AAGCTT"]
        assert cfg.snv.n_snv == 2
        assert cfg.matrix.include_missing
        assert cfg.n_jobs == 2

    def test_flat_and_partial(self, tmp_path):
        """Test a flat file with only some sections."""
        path = tmp_path / "flat.yaml"
        path.write_text(yaml.safe_dump({"snv": {"n_snv": None}}))
        cfg = IngestConfig.from_yaml(path)
        assert cfg.snv.n_snv is None
        assert cfg.noise.pct == 0.1

    def test_empty_file(self, tmp_path):
        """Test an empty file gives defaults."""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert IngestConfig.from_yaml(path).to_dict() == IngestConfig().to_dict()

    def test_round_trip(self, tmp_path, sample_ingest_config):
        """Test to_dict output can be loaded again."""
        cfg = IngestConfig.from_yaml(sample_ingest_config)
        path = tmp_path / "dumped.yaml"
        path.write_text(yaml.safe_dump(cfg.to_dict()))
        assert IngestConfig.from_yaml(path).to_dict() == cfg.to_dict()
