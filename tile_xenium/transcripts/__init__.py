"""Transcript-level transforms: control-probe filtering and cell-id decoding."""

from .cell_ids import CellIdDecodeError, DecodeResult, decode_cell_id, decode_cell_ids, try_decode_cell_id
from .filters import CONTROL_PREFIXES, is_gene_feature, remove_control_probes

__all__ = [
    "CONTROL_PREFIXES",
    "CellIdDecodeError",
    "DecodeResult",
    "decode_cell_id",
    "decode_cell_ids",
    "is_gene_feature",
    "remove_control_probes",
    "try_decode_cell_id",
]
