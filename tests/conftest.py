"""Shared pytest fixtures for the tile_xenium test suite.

Transcript tables are synthetic: uniformly scattered gene transcripts with
Xenium-style composite cell ids, plus optional control probes.
"""

import numpy as np
import pandas as pd
import pytest

from tile_xenium.config import TilingConfig


def encode_cell_id(value: int, suffix: int = 1) -> str:
    """Inverse of the cell id decoding, used to build fixtures."""
    return "".join(chr(ord("a") + int(c, 16)) for c in f"{value:08x}") + f"-{suffix}"


def make_transcripts(n: int, extent: float = 1000.0, seed: int = 0, n_controls: int = 0) -> pd.DataFrame:
    """Build a transcript table with ``n`` gene rows spread over ``[0, extent)``."""
    rng = np.random.default_rng(seed)
    total = n + n_controls
    cell_values = rng.integers(1, 2**31, size=50)
    cell_ids = [encode_cell_id(int(v)) for v in cell_values]

    features = [f"Gene{i}" for i in rng.integers(0, 20, size=n)]
    controls = ["NegControlProbe_A", "antisense_B", "NegControlCodeword_C", "BLANK_D"]
    features += [controls[i % len(controls)] for i in range(n_controls)]

    assigned = rng.random(total) < 0.8
    return pd.DataFrame(
        {
            "transcript_id": np.arange(total, dtype=np.int64) + 281474976710656,
            "cell_id": np.where(assigned, rng.choice(cell_ids, size=total), "UNASSIGNED"),
            "overlaps_nucleus": rng.integers(0, 2, size=total),
            "feature_name": features,
            "x_location": rng.random(total) * extent,
            "y_location": rng.random(total) * extent,
            "z_location": rng.random(total) * 20.0,
            "qv": rng.random(total) * 40.0,
        }
    )


@pytest.fixture
def transcripts():
    """Small transcript table: 2,000 genes + 40 control probes over 1000x1000."""
    return make_transcripts(2000, extent=1000.0, n_controls=40)


@pytest.fixture
def csv_input(tmp_path, transcripts):
    path = tmp_path / "transcripts.csv"
    transcripts.to_csv(path, index=False)
    return path


@pytest.fixture
def parquet_input(tmp_path, transcripts):
    path = tmp_path / "transcripts.parquet"
    transcripts.to_parquet(path, engine="pyarrow", index=False)
    return path


@pytest.fixture
def make_config(csv_input, tmp_path):
    """Factory fixture for configs reading the CSV fixture.

    Defaults are scaled to the small fixture table; pass keyword arguments to
    override any field.
    """
    def _make(**overrides):
        params = dict(
            input_path=csv_input,
            output_dir=tmp_path / "tiles",
            width=400.0,
            height=400.0,
            overlap=50.0,
            minimal_transcripts=100,
        )
        params.update(overrides)
        return TilingConfig(**params)

    return _make


@pytest.fixture
def transcript_factory():
    """The :func:`make_transcripts` builder, for tests needing custom tables."""
    return make_transcripts


@pytest.fixture
def cell_id_encoder():
    return encode_cell_id
