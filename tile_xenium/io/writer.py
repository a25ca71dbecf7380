"""Writers for tile tables and run manifests."""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from ..config import TilingConfig
from ..tiling.bounds import Bounds
from ..tiling.partitioner import Tile

logger = logging.getLogger(__name__)

PARAMS_FILENAME = "params.txt"
TILE_INDEX_FILENAME = "tiles.json"


class TileWriter:
    """Writes tiles as CSV files into one output directory."""

    def __init__(self, output_dir: Path):
        """Initialize the writer.

        Args:
            output_dir: Output directory, created if absent
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.entries: list[dict[str, Any]] = []

    def write_tile(self, tile: Tile) -> Path:
        """Write one tile; an existing file with the same bounds is overwritten."""
        path = self.output_dir / tile.filename
        tile.data.to_csv(path, index=False)
        self.entries.append(
            {
                "file": tile.filename,
                "requested": tile.requested.as_dict(),
                "bounds": tile.bounds.as_dict(),
                "n_transcripts": tile.n_transcripts,
                "expansions": tile.expansions,
            }
        )
        return path

    def write_params(self, config: TilingConfig) -> Path:
        """Dump the effective configuration to params.txt."""
        path = self.output_dir / PARAMS_FILENAME
        with open(path, "w") as f:
            f.write(config.to_text())
        logger.info(f"Parameters written to: {path}")
        return path

    def write_tile_index(
        self,
        bounds: Bounds,
        n_transcripts_total: int,
        extra: Optional[dict[str, Any]] = None,
    ) -> Path:
        """Write tiles.json describing every tile written so far."""
        path = self.output_dir / TILE_INDEX_FILENAME
        index = {
            "n_transcripts": n_transcripts_total,
            "n_tiles": len(self.entries),
            "bounds": bounds._asdict(),
            "tiles": self.entries,
        }
        if extra:
            index.update(extra)

        with open(path, "w") as f:
            json.dump(index, f, indent=2)

        logger.info(f"Tile index written to: {path}")
        return path
