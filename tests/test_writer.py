import json

import pandas as pd

from tile_xenium.io.writer import TileWriter
from tile_xenium.tiling.bounds import Bounds
from tile_xenium.tiling.partitioner import Tile, TileRequest


def make_tile(expansions=0):
    data = pd.DataFrame({"transcript_id": [1, 2], "cell_id": [0, 1437536272]})
    requested = TileRequest(0.0, 4000.0, 0.0, 4000.0)
    grow = 500.0 * expansions
    bounds = TileRequest(-grow, 4000.0 + grow, -grow, 4000.0 + grow)
    return Tile(requested=requested, bounds=bounds, data=data, expansions=expansions)


def test_writer_creates_output_dir(tmp_path):
    out = tmp_path / "nested" / "tiles"
    TileWriter(out)
    assert out.is_dir()


def test_write_tile_named_by_final_bounds(tmp_path):
    writer = TileWriter(tmp_path)

    path = writer.write_tile(make_tile(expansions=1))

    assert path.name == "X-500-4500_Y-500-4500_filtered_transcripts.csv"
    written = pd.read_csv(path)
    assert written["cell_id"].tolist() == [0, 1437536272]
    assert list(written.columns) == ["transcript_id", "cell_id"]


def test_write_tile_overwrites_existing_file(tmp_path):
    writer = TileWriter(tmp_path)
    path = tmp_path / "X0-4000_Y0-4000_filtered_transcripts.csv"
    path.write_text("stale\n")

    writer.write_tile(make_tile())

    assert path.read_text().startswith("transcript_id,cell_id")


def test_tile_index(tmp_path):
    writer = TileWriter(tmp_path)
    writer.write_tile(make_tile())
    writer.write_tile(make_tile(expansions=2))

    path = writer.write_tile_index(Bounds(0.0, 10.0, 0.0, 20.0), n_transcripts_total=2)

    index = json.loads(path.read_text())
    assert index["n_tiles"] == 2
    assert index["bounds"] == {"x_min": 0.0, "x_max": 10.0, "y_min": 0.0, "y_max": 20.0}
    assert index["tiles"][1]["expansions"] == 2
    assert index["tiles"][1]["requested"]["start_x"] == 0.0
    assert index["tiles"][1]["bounds"]["start_x"] == -1000.0
