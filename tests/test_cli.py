import yaml
from click.testing import CliRunner

from tile_xenium.cli import main


def test_run_writes_tiles(tmp_path, csv_input):
    out = tmp_path / "tiles"
    result = CliRunner().invoke(
        main,
        [
            "run", str(csv_input),
            "--width", "400", "--height", "400", "--overlap", "50",
            "--minimal-transcripts", "100",
            "--out-dir", str(out),
        ],
    )

    assert result.exit_code == 0, result.output
    assert (out / "params.txt").exists()
    assert list(out.glob("X*_Y*_filtered_transcripts.csv"))


def test_run_rejects_overlap_not_smaller_than_width(tmp_path, csv_input):
    result = CliRunner().invoke(
        main,
        ["run", str(csv_input), "--width", "500", "--overlap", "500", "--out-dir", str(tmp_path / "tiles")],
    )

    assert result.exit_code == 1
    assert "greater than the overlap" in result.output
    assert not (tmp_path / "tiles").exists()


def test_run_rejects_unsupported_extension(tmp_path):
    path = tmp_path / "transcripts.json"
    path.write_text("{}")

    result = CliRunner().invoke(main, ["run", str(path)])

    assert result.exit_code == 1
    assert "CSV or Parquet" in result.output


def test_run_fails_on_too_few_transcripts(tmp_path, csv_input):
    result = CliRunner().invoke(
        main,
        ["run", str(csv_input), "--out-dir", str(tmp_path / "tiles")],
    )

    # the default minimum of 100000 exceeds the 2000 gene transcripts
    assert result.exit_code == 1
    assert "minimal transcript number" in result.output
    assert not (tmp_path / "tiles").exists()


def test_init_config_then_from_config(tmp_path, csv_input):
    runner = CliRunner()
    config_path = tmp_path / "config.yaml"

    result = runner.invoke(main, ["init-config", "-o", str(config_path)])
    assert result.exit_code == 0

    data = yaml.safe_load(config_path.read_text())
    assert data["width"] == 4000.0
    data.update(
        input_path=str(csv_input),
        output_dir=str(tmp_path / "tiles"),
        width=400.0,
        height=400.0,
        overlap=50.0,
        minimal_transcripts=100,
        nucleus_only=True,
    )
    config_path.write_text(yaml.dump(data))

    result = runner.invoke(main, ["from-config", "-c", str(config_path)])

    assert result.exit_code == 0, result.output
    assert "nucleus_only: True" in (tmp_path / "tiles" / "params.txt").read_text()


def test_from_config_rejects_unknown_keys(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.dump({"input_path": "x.csv", "tile_size": 3}))

    result = CliRunner().invoke(main, ["from-config", "-c", str(config_path)])

    assert result.exit_code == 1
    assert "Invalid configuration file" in result.output


def test_info_reports_grid_without_writing(tmp_path, csv_input):
    result = CliRunner().invoke(
        main, ["info", str(csv_input), "--width", "400", "--height", "400", "--overlap", "50"]
    )

    assert result.exit_code == 0, result.output
    assert "Control probes:   40" in result.output
    assert "Gene transcripts: 2,000" in result.output
    assert "Tile grid:        3 x 3 (9 tiles)" in result.output
    assert not list(tmp_path.glob("*_filtered_transcripts.csv"))
