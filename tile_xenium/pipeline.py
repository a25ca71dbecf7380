"""Main tiling pipeline for Xenium transcript tables."""

import logging
from pathlib import Path
from typing import Optional

import pandas as pd
from tqdm import tqdm

from .config import TilingConfig
from .io.reader import read_transcripts
from .io.writer import TileWriter
from .tiling.bounds import Bounds, compute_bounds
from .tiling.partitioner import TilePartitioner
from .transcripts.cell_ids import clear_non_nuclear, decode_cell_ids, normalize_unassigned
from .transcripts.filters import filter_by_qv, remove_control_probes

logger = logging.getLogger(__name__)


class InsufficientTranscriptsError(ValueError):
    """Raised when too few transcripts remain after filtering."""


class TilingPipeline:
    """Filter a transcript table, decode cell ids and write overlapping tiles."""

    def __init__(self, config: TilingConfig):
        """Initialize the tiling pipeline.

        Args:
            config: Tiling configuration
        """
        self.config = config
        self.transcripts: Optional[pd.DataFrame] = None
        self.n_loaded: int = 0
        self.bounds: Optional[Bounds] = None
        self.written: list[Path] = []

    def run(self) -> list[Path]:
        """Execute the full pipeline and return the written tile paths."""
        logger.info("Starting tiling pipeline")
        self.config.validate()

        # Step 1: Load and project the transcript table
        self._load_data()

        # Step 2: Remove control probes (and low-quality transcripts if enabled)
        self._filter_transcripts()

        # Step 3: Fail fast if the dataset cannot fill a single tile
        self._check_transcript_count()

        # Step 4: Decode cell assignments
        self._assign_cells()

        # Step 5: Get limits
        self._compute_bounds()

        # Step 6: Create tiles, then dump parameters
        self._write_tiles()

        logger.info("Pipeline completed successfully")
        return self.written

    def _load_data(self) -> None:
        logger.info(f"Reading transcripts from: {self.config.input_path}")
        self.transcripts = read_transcripts(self.config.input_path)
        self.n_loaded = len(self.transcripts)

    def _filter_transcripts(self) -> None:
        logger.info("Removing non-gene features")
        self.transcripts = remove_control_probes(self.transcripts)
        if self.config.apply_qv_filter:
            self.transcripts = filter_by_qv(self.transcripts, self.config.min_qv)

    def _check_transcript_count(self) -> None:
        n_transcripts = len(self.transcripts)
        if n_transcripts < self.config.minimal_transcripts:
            raise InsufficientTranscriptsError(
                f"Only {n_transcripts:,} transcripts remain after excluding non-gene "
                f"transcripts, fewer than the required minimal transcript number per "
                f"tile ({self.config.minimal_transcripts:,}). "
                f"Please consider adjusting that value."
            )

    def _assign_cells(self) -> None:
        logger.info("Decoding cell ids")
        transcripts = self.transcripts.copy()
        cell_ids = normalize_unassigned(transcripts["cell_id"])

        if self.config.nucleus_only:
            cell_ids = clear_non_nuclear(cell_ids, transcripts["overlaps_nucleus"])
            logger.info("Nucleus-only mode: unassigned transcripts outside nuclei")

        transcripts["cell_id"] = decode_cell_ids(cell_ids)
        n_assigned = int((transcripts["cell_id"] != 0).sum())
        logger.info(f"{n_assigned:,} of {len(transcripts):,} transcripts assigned to cells")
        self.transcripts = transcripts

    def _compute_bounds(self) -> None:
        logger.info("Getting limits")
        self.bounds = compute_bounds(self.transcripts)
        logger.info(f"... x: {self.bounds.x_min} - {self.bounds.x_max}")
        logger.info(f"... y: {self.bounds.y_min} - {self.bounds.y_max}")

    def _write_tiles(self) -> None:
        partitioner = TilePartitioner(
            self.transcripts,
            self.bounds,
            width=self.config.width,
            height=self.config.height,
            overlap=self.config.overlap,
            minimal_transcripts=self.config.minimal_transcripts,
        )
        requests = partitioner.plan()
        logger.info(f"Creating {len(requests)} tiles")

        writer = TileWriter(self.config.output_dir)
        for request in tqdm(requests, desc="Writing tiles"):
            tile = partitioner.materialize(request)
            path = writer.write_tile(tile)
            self.written.append(path)
            if tile.expansions:
                logger.info(
                    f"... {tile.filename}: {tile.n_transcripts:,} transcripts "
                    f"(requested {request.name}, expanded {tile.expansions}x)"
                )
            else:
                logger.info(f"... {tile.filename}: {tile.n_transcripts:,} transcripts")

        writer.write_params(self.config)
        writer.write_tile_index(
            self.bounds,
            n_transcripts_total=len(self.transcripts),
            extra={"n_transcripts_loaded": self.n_loaded},
        )
