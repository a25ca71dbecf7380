"""Row filters applied to the transcript table before tiling."""

import logging

import pandas as pd

logger = logging.getLogger(__name__)

# Negative controls and background codewords, not real genes.
CONTROL_PREFIXES = (
    "NegControlProbe_",
    "antisense_",
    "NegControlCodeword_",
    "BLANK_",
)


def is_gene_feature(feature_name: str) -> bool:
    """Return True if a feature should be kept (i.e. is not a control probe)."""
    return not feature_name.startswith(CONTROL_PREFIXES)


def control_probe_mask(feature_names: pd.Series) -> pd.Series:
    """Boolean mask of rows whose feature name is a control probe.

    Null feature names count as control probes so they are dropped too.
    """
    return feature_names.str.startswith(CONTROL_PREFIXES, na=True).astype(bool)


def remove_control_probes(transcripts: pd.DataFrame) -> pd.DataFrame:
    """Exclude control probes, keeping row order and all other columns."""
    keep = ~control_probe_mask(transcripts["feature_name"])
    filtered = transcripts.loc[keep]
    logger.info(
        f"Removed {int((~keep).sum()):,} control probe transcripts, "
        f"{len(filtered):,} remaining"
    )
    return filtered


def filter_by_qv(transcripts: pd.DataFrame, min_qv: float) -> pd.DataFrame:
    """Keep transcripts with ``qv >= min_qv``."""
    keep = transcripts["qv"] >= min_qv
    filtered = transcripts.loc[keep]
    logger.info(
        f"Removed {int((~keep).sum()):,} transcripts with qv < {min_qv}, "
        f"{len(filtered):,} remaining"
    )
    return filtered
