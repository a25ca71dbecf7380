"""Tiling module: dataset bounds and overlapping tile partitioning."""

from .bounds import Bounds, compute_bounds
from .partitioner import Tile, TileExpansionError, TilePartitioner, TileRequest

__all__ = ["Bounds", "compute_bounds", "Tile", "TileExpansionError", "TilePartitioner", "TileRequest"]
