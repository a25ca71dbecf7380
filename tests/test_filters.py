import numpy as np
import pandas as pd

from tile_xenium.transcripts.filters import (
    filter_by_qv,
    is_gene_feature,
    remove_control_probes,
)


def test_remove_control_probes():
    df = pd.DataFrame(
        {
            "feature_name": ["NegControlProbe_", "antisense_", "NegControlCodeword_", "BLANK_", "Gene"],
            "other_col": [False, False, True, False, True],
        }
    )

    result = remove_control_probes(df)

    assert result["feature_name"].tolist() == ["Gene"]
    assert result["other_col"].tolist() == [True]


def test_filter_preserves_order_and_columns():
    df = pd.DataFrame(
        {
            "feature_name": ["CD3E", "BLANK_0001", "ACTB", "NegControlProbe_00042", "MS4A1"],
            "x_location": [1.0, 2.0, 3.0, 4.0, 5.0],
        }
    )

    result = remove_control_probes(df)

    assert result["feature_name"].tolist() == ["CD3E", "ACTB", "MS4A1"]
    assert result["x_location"].tolist() == [1.0, 3.0, 5.0]
    assert list(result.columns) == ["feature_name", "x_location"]


def test_prefix_match_only_at_start():
    assert is_gene_feature("Gene_BLANK_1")
    assert is_gene_feature("Antisense_1")
    assert not is_gene_feature("antisense_PTPRC")


def test_null_feature_names_are_dropped():
    df = pd.DataFrame({"feature_name": ["ACTB", None, "CD3E"]})
    assert remove_control_probes(df)["feature_name"].tolist() == ["ACTB", "CD3E"]


def test_filter_by_qv_keeps_threshold():
    df = pd.DataFrame({"qv": [19.9, 20.0, 35.0, np.nan]})
    assert filter_by_qv(df, 20.0)["qv"].tolist() == [20.0, 35.0]


def test_fixture_table_has_no_controls_after_filter(transcripts):
    result = remove_control_probes(transcripts)

    assert len(result) == 2000
    assert result["feature_name"].map(is_gene_feature).all()
