"""Xenium transcript tiling.

Remove control probes from a Xenium transcript table, decode cell ids and
split the transcripts into overlapping tiles with a minimal number of
transcripts each.
"""

__version__ = "0.1.0"

from .pipeline import TilingPipeline
from .config import TilingConfig

__all__ = ["TilingPipeline", "TilingConfig", "__version__"]
