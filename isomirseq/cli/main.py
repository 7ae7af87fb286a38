"""Command-line interface for isomirseq.

Provides CLI commands for building and re-filtering isomiR count matrices.
"""

from pathlib import Path
from typing import Optional, Tuple

import click

from isomirseq import __version__


def _log_level(verbose: bool, debug: bool) -> str:
    return "DEBUG" if debug else ("INFO" if verbose else "WARNING")


def _whitelist(path: Optional[str]):
    from isomirseq.io import load_whitelist

    return load_whitelist(path) if path else None


def _write_outputs(result, out_dir: Path, plog) -> None:
    from isomirseq.io import log_yaml, write_count_matrix

    write_count_matrix(result.count_matrix, out_dir)
    log_yaml(out_dir / "summary.yaml", result.count_matrix.to_dict())
    plog.log_sample_summary(result.count_matrix.summary)
    click.echo(
        f"{result.count_matrix.shape[0]} isomiRs x {result.count_matrix.shape[1]} samples "
        f"written to {out_dir}"
    )


@click.group()
@click.version_option(version=__version__, prog_name="isomirseq")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("--debug", is_flag=True, help="Enable debug output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, debug: bool) -> None:
    """isomirseq: isomiR count matrices from per-sample annotation files.

    Examples:

        # Build a count matrix from miraligner output
        isomirseq build --coldata samples.csv --out out/ s1.mirna s2.mirna

        # Re-filter a previous run with stricter settings
        isomirseq refilter --raw out/raw_data.tsv --coldata samples.csv --out strict/ --pct 0.3

        # Import a mirtop isomir table
        isomirseq import-table --table mirtop.tsv --coldata samples.csv --out out/
    """
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = _log_level(verbose, debug)


@cli.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True))
@click.option("--coldata", required=True, type=click.Path(exists=True),
              help="Sample table (CSV/TSV); first column holds sample ids in file order")
@click.option("--out", "-o", "output_path", required=True, type=click.Path(),
              help="Output directory")
@click.option("--config", "-c", type=click.Path(exists=True),
              help="Ingestion configuration file (YAML); overrides filter options")
@click.option("--rate", type=float, default=0.2, show_default=True,
              help="Minimum isomiR importance within its miRNA")
@click.option("--canonical-add/--no-canonical-add", default=True, show_default=True,
              help="Keep only A/T non-templated additions")
@click.option("--unique-mism/--no-unique-mism", default=True, show_default=True,
              help="Drop mismatch isomiRs of multi-mapping sequences")
@click.option("--unique-hits/--no-unique-hits", default=False, show_default=True,
              help="Drop every isomiR of multi-mapping sequences")
@click.option("--min-hits", type=int, default=1, show_default=True,
              help="Minimum isomiRs for a sample to be kept")
@click.option("--n-snv", type=int, default=1, show_default=True,
              help="Maximum substitutions per isomiR")
@click.option("--whitelist", type=click.Path(exists=True),
              help="File with sequences that are never removed")
@click.option("--no-header", is_flag=True, help="Input files have no header line")
@click.option("--skip", type=int, default=0, help="Lines to skip before the header")
@click.option("--include-missing", is_flag=True,
              help="Keep samples without data as all-zero columns")
@click.option("--n-jobs", type=int, default=1, show_default=True,
              help="Parallel workers for reading samples")
@click.option("--log-dir", type=click.Path(), help="Directory for the run log")
@click.pass_context
def build(
    ctx: click.Context,
    files: Tuple[str, ...],
    coldata: str,
    output_path: str,
    config: Optional[str],
    rate: float,
    canonical_add: bool,
    unique_mism: bool,
    unique_hits: bool,
    min_hits: int,
    n_snv: int,
    whitelist: Optional[str],
    no_header: bool,
    skip: int,
    include_missing: bool,
    n_jobs: int,
    log_dir: Optional[str],
) -> None:
    """Build an isomiR count matrix from per-sample annotation FILES."""
    # Import here to avoid slow startup
    from isomirseq.core.ingest import (
        IngestConfig,
        LoaderConfig,
        SampleFilterConfig,
        from_config,
    )
    from isomirseq.io import load_sample_table, log_json
    from isomirseq.pipeline import PipelineLogger

    plog = PipelineLogger(log_dir, log_level=ctx.obj["log_level"])
    plog.setup()
    out_dir = Path(output_path)

    if config:
        cfg = IngestConfig.from_yaml(Path(config))
    else:
        cfg = IngestConfig(
            loader=LoaderConfig(header=not no_header, skip=skip),
            sample_filter=SampleFilterConfig(
                canonical_add=canonical_add,
                unique_mism=unique_mism,
                unique_hits=unique_hits,
                min_hits=min_hits,
            ),
            n_jobs=n_jobs,
        )
        cfg.noise.pct = rate
        cfg.noise.whitelist = _whitelist(whitelist) or []
        cfg.snv.n_snv = n_snv
        cfg.matrix.include_missing = include_missing

    samples = load_sample_table(coldata)
    if len(samples) != len(files):
        raise click.BadParameter(
            f"{len(files)} files given for {len(samples)} samples in {coldata}"
        )

    with plog.stage("build", "Read, filter and aggregate samples; build count matrix"):
        result = from_config(list(files), samples, cfg)

    log_json(out_dir / "samples.jsonl", result.count_matrix.summary.reports)
    _write_outputs(result, out_dir, plog)


@cli.command()
@click.option("--raw", "raw_path", required=True, type=click.Path(exists=True),
              help="Wide isomiR table from a previous run (raw_data.tsv)")
@click.option("--coldata", required=True, type=click.Path(exists=True),
              help="Sample table (CSV/TSV); first column holds sample ids")
@click.option("--out", "-o", "output_path", required=True, type=click.Path(),
              help="Output directory")
@click.option("--pct", type=float, default=0.1, show_default=True,
              help="Minimum isomiR importance within its miRNA")
@click.option("--n-snv", type=int, default=1, show_default=True,
              help="Maximum substitutions per isomiR")
@click.option("--whitelist", type=click.Path(exists=True),
              help="File with sequences that are never removed")
@click.option("--include-missing", is_flag=True,
              help="Keep samples without data as all-zero columns")
@click.pass_context
def refilter(
    ctx: click.Context,
    raw_path: str,
    coldata: str,
    output_path: str,
    pct: float,
    n_snv: int,
    whitelist: Optional[str],
    include_missing: bool,
) -> None:
    """Re-filter a wide isomiR table from a previous run."""
    from isomirseq.core.ingest import from_raw_table
    from isomirseq.io import load_raw_table, load_sample_table
    from isomirseq.pipeline import PipelineLogger

    plog = PipelineLogger(log_level=ctx.obj["log_level"])
    plog.setup()

    with plog.stage("refilter", "Re-filter wide isomiR table"):
        result = from_raw_table(
            load_raw_table(raw_path),
            load_sample_table(coldata),
            pct=pct,
            n_snv=n_snv,
            whitelist=_whitelist(whitelist),
            include_missing=include_missing,
        )
    _write_outputs(result, Path(output_path), plog)


@cli.command("import-table")
@click.option("--table", "table_path", required=True, type=click.Path(exists=True),
              help="mirtop 'export --format isomir' table")
@click.option("--coldata", required=True, type=click.Path(exists=True),
              help="Sample table (CSV/TSV); first column holds sample ids")
@click.option("--out", "-o", "output_path", required=True, type=click.Path(),
              help="Output directory")
@click.option("--drop-column", "drop_columns", multiple=True,
              help="Annotation column to ignore (repeatable)")
@click.option("--pct", type=float, default=0.1, show_default=True,
              help="Minimum isomiR importance within its miRNA")
@click.option("--n-snv", type=int, default=1, show_default=True,
              help="Maximum substitutions per isomiR")
@click.pass_context
def import_table(
    ctx: click.Context,
    table_path: str,
    coldata: str,
    output_path: str,
    drop_columns: Tuple[str, ...],
    pct: float,
    n_snv: int,
) -> None:
    """Import an external isomiR table and build the count matrix."""
    from isomirseq.core.ingest import from_external_tool_table
    from isomirseq.io import load_raw_table, load_sample_table
    from isomirseq.pipeline import PipelineLogger

    plog = PipelineLogger(log_level=ctx.obj["log_level"])
    plog.setup()

    with plog.stage("import", "Import external isomiR table"):
        result = from_external_tool_table(
            load_raw_table(table_path),
            load_sample_table(coldata),
            drop_columns=list(drop_columns),
            pct=pct,
            n_snv=n_snv,
        )
    _write_outputs(result, Path(output_path), plog)


def main() -> None:
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
