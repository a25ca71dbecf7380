"""Configuration schema for the tiling pipeline."""

from dataclasses import dataclass, fields
from pathlib import Path

import yaml

SUPPORTED_SUFFIXES = (".csv", ".parquet")


@dataclass
class TilingConfig:
    """Configuration for the tiling pipeline."""

    # Input/Output
    input_path: Path
    output_dir: Path = Path(".")

    # Quality settings
    min_qv: float = 20.0  # Recorded in params.txt; only applied with apply_qv_filter
    apply_qv_filter: bool = False

    # Tile geometry
    width: float = 4000.0
    height: float = 4000.0
    overlap: float = 500.0  # Also the growth step for under-populated tiles

    # Minimal number of transcripts per tile (and in the filtered dataset)
    minimal_transcripts: int = 100000

    # Drop cell assignment for transcripts outside the nucleus
    nucleus_only: bool = False

    def __post_init__(self) -> None:
        self.input_path = Path(self.input_path)
        self.output_dir = Path(self.output_dir)

    @classmethod
    def from_yaml(cls, path: Path) -> "TilingConfig":
        """Load configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)

        # Convert path strings to Path objects
        if "input_path" in data:
            data["input_path"] = Path(data["input_path"])
        if "output_dir" in data:
            data["output_dir"] = Path(data["output_dir"])

        return cls(**data)

    def to_dict(self) -> dict:
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            data[f.name] = str(value) if isinstance(value, Path) else value
        return data

    def to_yaml(self, path: Path) -> None:
        """Save configuration to a YAML file."""
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def to_text(self) -> str:
        """Render the effective configuration, one `key: value` line per field."""
        return "".join(f"{key}: {value}\n" for key, value in self.to_dict().items())

    def validate(self) -> None:
        """Validate configuration parameters."""
        if not self.input_path.exists():
            raise FileNotFoundError(f"Input file not found: {self.input_path}")

        if self.input_path.suffix.lower() not in SUPPORTED_SUFFIXES:
            raise ValueError(
                f"Input file should be either CSV or Parquet, got: {self.input_path.name}"
            )

        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Tile width and height must be positive, got {self.width} x {self.height}"
            )

        if self.overlap < 0:
            raise ValueError(f"overlap must be >= 0, got {self.overlap}")

        if self.width <= self.overlap:
            raise ValueError(
                f"The width of a tile ({self.width}) must be greater than the overlap ({self.overlap})"
            )

        if self.height <= self.overlap:
            raise ValueError(
                f"The height of a tile ({self.height}) must be greater than the overlap ({self.overlap})"
            )

        if self.minimal_transcripts < 0:
            raise ValueError(
                f"minimal_transcripts must be >= 0, got {self.minimal_transcripts}"
            )
