"""Command-line interface for Xenium transcript tiling."""

import click
from pathlib import Path
import logging
import sys

from . import __version__
from .config import TilingConfig
from .pipeline import TilingPipeline


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def _run_pipeline(config: TilingConfig) -> None:
    logger = logging.getLogger(__name__)

    # Validate configuration
    try:
        config.validate()
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        raise click.ClickException(str(e))

    # Run pipeline
    pipeline = TilingPipeline(config)
    try:
        written = pipeline.run()
        logger.info(f"Wrote {len(written)} tiles to {config.output_dir}")
    except Exception as e:
        logger.error(f"Pipeline failed: {e}")
        raise click.ClickException(str(e))


@click.group()
@click.version_option(version=__version__)
def main():
    """Xenium transcript tiling CLI.

    Remove control probes from a Xenium transcripts table, decode cell ids
    and split the transcripts into overlapping tiles.
    """
    pass


@main.command()
@click.argument(
    "input_path",
    type=click.Path(path_type=Path),
)
@click.option(
    "--min-qv",
    default=20.0,
    type=float,
    help="Minimum Q-Score (only applied with --apply-qv-filter; default: 20.0)",
)
@click.option(
    "--apply-qv-filter",
    is_flag=True,
    default=False,
    help="Drop transcripts with qv below --min-qv",
)
@click.option(
    "--width",
    default=4000.0,
    type=float,
    help="Width of the tiles (default: 4000)",
)
@click.option(
    "--height",
    default=4000.0,
    type=float,
    help="Height of the tiles (default: 4000)",
)
@click.option(
    "--overlap",
    default=500.0,
    type=float,
    help="Overlap between the tiles (default: 500)",
)
@click.option(
    "--minimal-transcripts",
    default=100000,
    type=int,
    help="Minimal number of transcripts per tile. Sparser tiles are expanded "
    "by the overlap in all directions (default: 100000)",
)
@click.option(
    "--nucleus-only",
    is_flag=True,
    default=False,
    help="Only keep cell assignments of transcripts that overlap the nucleus",
)
@click.option(
    "--out-dir", "-o",
    "output_dir",
    default=".",
    type=click.Path(path_type=Path),
    help="Output directory. Tiles are named "
    "X{x-min}-{x-max}_Y{y-min}-{y-max}_filtered_transcripts.csv",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose logging",
)
def run(
    input_path: Path,
    min_qv: float,
    apply_qv_filter: bool,
    width: float,
    height: float,
    overlap: float,
    minimal_transcripts: int,
    nucleus_only: bool,
    output_dir: Path,
    verbose: bool,
):
    """Tile a transcripts.csv or transcripts.parquet file.

    Example:
        tile-xenium run transcripts.parquet -o ./tiles --width 4000 --overlap 500
    """
    setup_logging(verbose)
    logger = logging.getLogger(__name__)

    logger.info("Starting tiling")
    logger.info(f"Input: {input_path}")
    logger.info(f"Output: {output_dir}")

    config = TilingConfig(
        input_path=input_path,
        output_dir=output_dir,
        min_qv=min_qv,
        apply_qv_filter=apply_qv_filter,
        width=width,
        height=height,
        overlap=overlap,
        minimal_transcripts=minimal_transcripts,
        nucleus_only=nucleus_only,
    )
    _run_pipeline(config)


@main.command()
@click.option(
    "--config", "-c",
    "config_path",
    required=True,
    type=click.Path(exists=True, path_type=Path),
    help="Path to YAML configuration file",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose logging",
)
def from_config(config_path: Path, verbose: bool):
    """Run tiling from a YAML configuration file.

    Example:
        tile-xenium from-config -c config.yaml
    """
    setup_logging(verbose)
    logger = logging.getLogger(__name__)

    logger.info(f"Loading configuration from: {config_path}")

    try:
        config = TilingConfig.from_yaml(config_path)
    except (TypeError, ValueError) as e:
        raise click.ClickException(f"Invalid configuration file: {e}")

    _run_pipeline(config)


@main.command()
@click.option(
    "--output", "-o",
    "output_path",
    required=True,
    type=click.Path(path_type=Path),
    help="Output path for example configuration",
)
def init_config(output_path: Path):
    """Generate an example configuration file.

    Example:
        tile-xenium init-config -o config.yaml
    """
    config = TilingConfig(
        input_path=Path("transcripts.parquet"),
        output_dir=Path("./tiles"),
    )
    config.to_yaml(output_path)
    click.echo(f"Configuration saved to: {output_path}")


@main.command()
@click.argument(
    "input_path",
    type=click.Path(exists=True, path_type=Path),
)
@click.option("--width", default=4000.0, type=float, help="Width of the tiles")
@click.option("--height", default=4000.0, type=float, help="Height of the tiles")
@click.option("--overlap", default=500.0, type=float, help="Overlap between the tiles")
def info(input_path: Path, width: float, height: float, overlap: float):
    """Summarize a transcript table and the tile grid it would produce.

    No tiles are written.

    Example:
        tile-xenium info transcripts.parquet --width 2000
    """
    from .io.reader import read_transcripts
    from .tiling.bounds import compute_bounds
    from .tiling.partitioner import TilePartitioner
    from .transcripts.filters import control_probe_mask

    try:
        transcripts = read_transcripts(input_path)
        is_control = control_probe_mask(transcripts["feature_name"])
        genes = transcripts.loc[~is_control]
        bounds = compute_bounds(genes)
        partitioner = TilePartitioner(
            genes, bounds, width=width, height=height, overlap=overlap, minimal_transcripts=0
        )
        requests = partitioner.plan()
    except Exception as e:
        raise click.ClickException(str(e))

    n_cols = sum(1 for r in requests if r.start_y == requests[0].start_y)
    click.echo(f"Transcripts:      {len(transcripts):,}")
    click.echo(f"Control probes:   {int(is_control.sum()):,}")
    click.echo(f"Gene transcripts: {len(genes):,}")
    click.echo(f"Genes:            {genes['feature_name'].nunique():,}")
    click.echo(f"Bounds:           x {bounds.x_min:g} - {bounds.x_max:g}, y {bounds.y_min:g} - {bounds.y_max:g}")
    click.echo(f"Tile grid:        {n_cols} x {len(requests) // n_cols} ({len(requests)} tiles)")
    for request in requests:
        click.echo(f"  {request.name}: {partitioner.count(request):,} transcripts")


if __name__ == "__main__":
    main()
