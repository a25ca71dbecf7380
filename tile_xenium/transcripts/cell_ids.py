"""Decoding of Xenium cell identifiers into integers.

Xenium writes cell ids as ``<shifted-hex>-<dataset suffix>``, e.g.
``"ffkpbaba-1"``. Every character of the shifted-hex part encodes one hex
nibble as an offset from ``'a'`` (``'a'`` -> 0, ..., ``'p'`` -> 15). The
nibbles, read in order, form a 32-bit unsigned integer. The dataset suffix
must be numeric but does not contribute to the value.
"""

import logging
import re
from typing import NamedTuple, Optional

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

UINT32_MAX = 0xFFFFFFFF
UNASSIGNED = "UNASSIGNED"

_NUMERIC_RE = re.compile(r"\+?[0-9]+")


class CellIdDecodeError(ValueError):
    """Raised when one or more cell identifiers cannot be decoded."""

    def __init__(self, message: str, failures: Optional[dict[str, str]] = None):
        super().__init__(message)
        self.failures = failures or {}


class DecodeResult(NamedTuple):
    """Outcome of decoding one identifier: exactly one field is set."""

    value: Optional[int]
    error: Optional[str]

    @property
    def ok(self) -> bool:
        return self.error is None


def _shifted_hex_to_nibbles(shifted_hex_digits: str) -> list[int]:
    nibbles = []
    for char in shifted_hex_digits:
        nibble = ord(char) - ord("a")
        if not 0 <= nibble <= 15:
            raise CellIdDecodeError(
                f"invalid character {char!r} in shifted hex digits {shifted_hex_digits!r}"
            )
        nibbles.append(nibble)
    return nibbles


def decode_cell_id(cell_id: str) -> int:
    """Decode a single cell identifier into an unsigned 32-bit integer.

    Numeric identifiers (including the unassigned sentinel ``"0"``) are
    returned unchanged.

    Args:
        cell_id: Identifier as written by the instrument

    Returns:
        Decoded integer in ``[0, 2**32)``

    Raises:
        CellIdDecodeError: If the identifier is malformed or out of range
    """
    if _NUMERIC_RE.fullmatch(cell_id):
        value = int(cell_id)
        if value > UINT32_MAX:
            raise CellIdDecodeError(f"cell id {cell_id!r} does not fit in 32 bits")
        return value

    shifted_hex_digits, sep, dataset_suffix = cell_id.partition("-")
    if not sep:
        raise CellIdDecodeError(f"cell id {cell_id!r} has no dataset suffix")
    if not _NUMERIC_RE.fullmatch(dataset_suffix):
        raise CellIdDecodeError(
            f"cell id {cell_id!r} has a non-numeric dataset suffix {dataset_suffix!r}"
        )
    if not shifted_hex_digits:
        raise CellIdDecodeError(f"cell id {cell_id!r} has no hex digits")

    nibbles = _shifted_hex_to_nibbles(shifted_hex_digits)
    hex_string = "".join(f"{nibble:X}" for nibble in nibbles)
    value = int(hex_string, 16)
    if value > UINT32_MAX:
        raise CellIdDecodeError(f"cell id {cell_id!r} does not fit in 32 bits")
    return value


def try_decode_cell_id(cell_id: str) -> DecodeResult:
    """Decode a cell identifier, returning the error instead of raising."""
    try:
        return DecodeResult(decode_cell_id(cell_id), None)
    except CellIdDecodeError as e:
        return DecodeResult(None, str(e))


def normalize_unassigned(cell_ids: pd.Series) -> pd.Series:
    """Replace the ``UNASSIGNED`` marker with the numeric sentinel ``"0"``."""
    return cell_ids.where(cell_ids != UNASSIGNED, "0")


def clear_non_nuclear(cell_ids: pd.Series, overlaps_nucleus: pd.Series) -> pd.Series:
    """Unassign transcripts that were not detected inside a nucleus."""
    return cell_ids.where(overlaps_nucleus.astype(int) != 0, "0")


def decode_cell_ids(cell_ids: pd.Series, max_reported: int = 5) -> pd.Series:
    """Decode a column of cell identifiers into ``uint32`` values.

    Each distinct identifier is decoded once. All failures are collected
    before a single :class:`CellIdDecodeError` is raised, so the error names
    every bad value (up to ``max_reported``) and the number of affected rows.
    """
    unique_ids = pd.unique(cell_ids)
    results = {cell_id: try_decode_cell_id(cell_id) for cell_id in unique_ids}

    failures = {cell_id: res.error for cell_id, res in results.items() if not res.ok}
    if failures:
        n_rows = int(cell_ids.isin(list(failures)).sum())
        sample = ", ".join(repr(c) for c in list(failures)[:max_reported])
        raise CellIdDecodeError(
            f"Failed to decode {len(failures):,} distinct cell ids "
            f"({n_rows:,} transcripts), e.g. {sample}",
            failures,
        )

    logger.debug(f"Decoded {len(unique_ids):,} distinct cell ids")
    mapping = {cell_id: res.value for cell_id, res in results.items()}
    return cell_ids.map(mapping).astype(np.uint32)
