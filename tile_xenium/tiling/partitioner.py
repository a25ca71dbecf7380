"""Overlapping rectangular tiling with adaptive growth of sparse tiles.

Tiles are laid out on a regular grid starting at the lower-left corner of the
dataset bounds, with stride ``width - overlap`` along x and
``height - overlap`` along y. A tile holding fewer than
``minimal_transcripts`` rows is grown by ``overlap`` on all four sides until
it holds enough.

Growth always terminates: each step pushes every edge outwards by a positive
increment, so after finitely many steps the rectangle encloses the dataset
bounds and therefore every row. A tile that encloses everything and is still
under-populated cannot be satisfied and raises :class:`TileExpansionError`.
"""

import logging
import math
from dataclasses import dataclass, replace

import numpy as np
import pandas as pd

from .bounds import Bounds

logger = logging.getLogger(__name__)


class TileExpansionError(RuntimeError):
    """Raised when an under-populated tile cannot be grown any further."""


def format_coordinate(value: float) -> str:
    """Format a tile edge for file names (``4000.0`` -> ``"4000"``)."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


@dataclass
class TileRequest:
    """A mutable tile rectangle; edges are inclusive."""

    start_x: float
    end_x: float
    start_y: float
    end_y: float

    def expand(self, increment: float) -> None:
        """Grow the rectangle by ``increment`` on all four sides."""
        self.start_x -= increment
        self.end_x += increment
        self.start_y -= increment
        self.end_y += increment

    def covers(self, bounds: Bounds) -> bool:
        return (
            self.start_x <= bounds.x_min
            and self.end_x >= bounds.x_max
            and self.start_y <= bounds.y_min
            and self.end_y >= bounds.y_max
        )

    def contains(self, other: "TileRequest") -> bool:
        return (
            self.start_x <= other.start_x
            and self.end_x >= other.end_x
            and self.start_y <= other.start_y
            and self.end_y >= other.end_y
        )

    @property
    def name(self) -> str:
        return (
            f"X{format_coordinate(self.start_x)}-{format_coordinate(self.end_x)}"
            f"_Y{format_coordinate(self.start_y)}-{format_coordinate(self.end_y)}"
        )

    def as_dict(self) -> dict[str, float]:
        return {
            "start_x": self.start_x,
            "end_x": self.end_x,
            "start_y": self.start_y,
            "end_y": self.end_y,
        }


@dataclass(frozen=True)
class Tile:
    """Rows selected for one tile, with the rectangle that selected them."""

    requested: TileRequest
    bounds: TileRequest
    data: pd.DataFrame
    expansions: int = 0

    @property
    def n_transcripts(self) -> int:
        return len(self.data)

    @property
    def filename(self) -> str:
        return f"{self.bounds.name}_filtered_transcripts.csv"


class TilePartitioner:
    """Partition a transcript table into overlapping tiles.

    The table is treated as read-only; each tile is an independent row
    selection of it.
    """

    def __init__(
        self,
        transcripts: pd.DataFrame,
        bounds: Bounds,
        width: float,
        height: float,
        overlap: float,
        minimal_transcripts: int,
        x_col: str = "x_location",
        y_col: str = "y_location",
    ):
        """Initialize the partitioner.

        Args:
            transcripts: Filtered transcript table
            bounds: Envelope of the table (see :func:`compute_bounds`)
            width: Tile width
            height: Tile height
            overlap: Overlap between neighbouring tiles, also the growth step
            minimal_transcripts: Minimal number of rows per tile

        Raises:
            ValueError: If the width or height does not exceed the overlap
        """
        if width <= overlap:
            raise ValueError(
                f"The width of a tile ({width}) must be greater than the overlap ({overlap})"
            )
        if height <= overlap:
            raise ValueError(
                f"The height of a tile ({height}) must be greater than the overlap ({overlap})"
            )

        self.transcripts = transcripts
        self.bounds = bounds
        self.width = width
        self.height = height
        self.overlap = overlap
        self.minimal_transcripts = minimal_transcripts

        self._x = transcripts[x_col].to_numpy(dtype=np.float64)
        self._y = transcripts[y_col].to_numpy(dtype=np.float64)

    def plan(self) -> list[TileRequest]:
        """Lay out the initial tile rectangles, row by row from ``y_min``."""
        requests = []
        y = self.bounds.y_min
        while y <= self.bounds.y_max:
            x = self.bounds.x_min
            while x <= self.bounds.x_max:
                requests.append(TileRequest(x, x + self.width, y, y + self.height))
                x = x + self.width - self.overlap
            y = y + self.height - self.overlap
        return requests

    def _mask(self, request: TileRequest) -> np.ndarray:
        return (
            (self._x >= request.start_x)
            & (self._x <= request.end_x)
            & (self._y >= request.start_y)
            & (self._y <= request.end_y)
        )

    def count(self, request: TileRequest) -> int:
        """Number of transcripts inside a rectangle."""
        return int(np.count_nonzero(self._mask(request)))

    def max_expansions(self, request: TileRequest) -> int:
        """Growth steps after which ``request`` encloses the dataset bounds."""
        if request.covers(self.bounds):
            return 0
        if self.overlap <= 0:
            raise TileExpansionError(
                f"Tile {request.name} needs to grow but the overlap is {self.overlap}"
            )
        gap = max(
            request.start_x - self.bounds.x_min,
            self.bounds.x_max - request.end_x,
            request.start_y - self.bounds.y_min,
            self.bounds.y_max - request.end_y,
        )
        return math.ceil(gap / self.overlap)

    def materialize(self, request: TileRequest) -> Tile:
        """Select the rows of one tile, growing it until it is populated enough.

        Raises:
            TileExpansionError: If the tile encloses the whole dataset and still
                holds fewer than ``minimal_transcripts`` rows
        """
        rect = replace(request)
        mask = self._mask(rect)
        count = int(np.count_nonzero(mask))
        expansions = 0

        while count < self.minimal_transcripts:
            if rect.covers(self.bounds):
                raise TileExpansionError(
                    f"Tile {request.name} covers the whole dataset but holds only "
                    f"{count:,} transcripts (< {self.minimal_transcripts:,})"
                )
            if expansions == 0:
                limit = self.max_expansions(rect)
                logger.debug(
                    f"Tile {rect.name}: {count:,} transcripts, growing by up to "
                    f"{limit} steps of {self.overlap}"
                )
            rect.expand(self.overlap)
            expansions += 1
            mask = self._mask(rect)
            count = int(np.count_nonzero(mask))
            logger.debug(f"... expanded to {rect.name}: {count:,} transcripts")

        return Tile(
            requested=replace(request),
            bounds=rect,
            data=self.transcripts.loc[mask],
            expansions=expansions,
        )

    def tiles(self):
        """Yield every planned tile in order."""
        for request in self.plan():
            yield self.materialize(request)
