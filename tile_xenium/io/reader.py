"""Reader for Xenium transcript tables (CSV or Parquet)."""

import logging
from pathlib import Path

import numpy as np
import pandas as pd
import pyarrow.parquet as pq

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = [
    "transcript_id",
    "cell_id",
    "overlaps_nucleus",
    "feature_name",
    "x_location",
    "y_location",
    "z_location",
    "qv",
]

FLOAT_COLUMNS = ["x_location", "y_location", "z_location", "qv"]


class MissingColumnsError(KeyError):
    """Raised when the input table lacks required columns."""

    def __init__(self, missing: list[str], available: list[str]):
        self.missing = missing
        self.available = available
        super().__init__(
            f"Missing required columns {missing}. Available columns: {available}"
        )

    def __str__(self) -> str:
        return self.args[0]


def _check_columns(columns: list[str], path: Path) -> None:
    missing = [c for c in REQUIRED_COLUMNS if c not in columns]
    if missing:
        logger.error(f"{path} lacks columns: {', '.join(missing)}")
        raise MissingColumnsError(missing, list(columns))


def _read_csv(path: Path) -> pd.DataFrame:
    header = pd.read_csv(path, nrows=0).columns.tolist()
    _check_columns(header, path)
    return pd.read_csv(
        path,
        usecols=REQUIRED_COLUMNS,
        dtype={"cell_id": str, "feature_name": str},
    )


def _read_parquet(path: Path) -> pd.DataFrame:
    schema = pq.read_schema(str(path))
    _check_columns(schema.names, path)
    table = pq.read_table(str(path), columns=REQUIRED_COLUMNS)
    return table.to_pandas()


def _as_text(values: pd.Series) -> pd.Series:
    """Decode binary values as UTF-8, leaving strings and nulls untouched."""
    return values.astype(object).map(
        lambda v: v.decode("utf-8") if isinstance(v, bytes) else v
    )


def normalize_types(transcripts: pd.DataFrame) -> pd.DataFrame:
    """Normalize the column types of a projected transcript table.

    - ``feature_name`` and ``cell_id`` become text (binary values are decoded);
      missing cell ids become ``"0"`` (unassigned)
    - ``overlaps_nucleus`` becomes a 0/1 integer flag
    - coordinates and ``qv`` become float64
    """
    out = transcripts.copy()
    out["feature_name"] = _as_text(out["feature_name"])
    cell_ids = _as_text(out["cell_id"])
    out["cell_id"] = cell_ids.where(cell_ids.notna(), "0").astype(str)
    out["overlaps_nucleus"] = out["overlaps_nucleus"].astype(bool).astype(np.uint8)
    for col in FLOAT_COLUMNS:
        out[col] = out[col].astype(np.float64)
    return out


def read_transcripts(path: Path) -> pd.DataFrame:
    """Load a transcript table and project it onto the required columns.

    The format is chosen from the file extension (``.csv`` or ``.parquet``).

    Args:
        path: Path to transcripts.csv or transcripts.parquet

    Returns:
        DataFrame with exactly :data:`REQUIRED_COLUMNS`, in that order

    Raises:
        ValueError: If the extension is not supported
        MissingColumnsError: If a required column is absent
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".parquet":
        transcripts = _read_parquet(path)
    elif suffix == ".csv":
        transcripts = _read_csv(path)
    else:
        raise ValueError(f"Input file should be either CSV or Parquet, got: {path.name}")

    transcripts = normalize_types(transcripts[REQUIRED_COLUMNS])
    logger.info(f"Loaded {len(transcripts):,} transcripts from {path}")
    return transcripts
