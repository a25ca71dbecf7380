"""Coordinate envelope of a transcript table."""

import math
from typing import NamedTuple

import pandas as pd


class Bounds(NamedTuple):
    """Integer-aligned envelope ``(x_min, x_max, y_min, y_max)``."""

    x_min: float
    x_max: float
    y_min: float
    y_max: float

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min


def compute_bounds(
    transcripts: pd.DataFrame,
    x_col: str = "x_location",
    y_col: str = "y_location",
) -> Bounds:
    """Get the minimal and maximal x/y values of the transcripts.

    Minima are rounded down and maxima rounded up, so tile edges start on
    integer coordinates and the envelope encloses every transcript.

    Raises:
        ValueError: If the table is empty
    """
    if transcripts.empty:
        raise ValueError("Cannot compute bounds of an empty transcript table")

    x = transcripts[x_col]
    y = transcripts[y_col]
    return Bounds(
        float(math.floor(x.min())),
        float(math.ceil(x.max())),
        float(math.floor(y.min())),
        float(math.ceil(y.max())),
    )
