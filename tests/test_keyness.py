"""
Tests for log-likelihood key term extraction.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest
from scipy import sparse

from speech_mining.analysis.keyness import keyness_for_group, log_likelihood_keyness


def test_log_likelihood_keyness_values_and_order():
    target = pd.Series({"war": 10, "peace": 0, "the": 5})
    reference = pd.Series({"war": 0, "peace": 10, "the": 5})

    out = log_likelihood_keyness(target, reference)

    assert out.columns.tolist() == ["term", "target", "reference", "log_likelihood", "direction"]
    # Equal scores are ordered alphabetically.
    assert out["term"].tolist() == ["peace", "war", "the"]
    assert out.loc[out["term"] == "war", "log_likelihood"].iloc[0] == pytest.approx(20 * np.log(2))
    assert out.loc[out["term"] == "the", "log_likelihood"].iloc[0] == pytest.approx(0.0)
    assert out.set_index("term")["direction"].to_dict() == {
        "peace": "underuse",
        "war": "overuse",
        "the": "underuse",
    }


def test_log_likelihood_keyness_requires_tokens():
    with pytest.raises(ValueError):
        log_likelihood_keyness(pd.Series({"a": 0}), pd.Series({"a": 3}))


def test_keyness_for_group():
    dtm = sparse.csr_matrix(np.array([[4, 0], [3, 1], [0, 5]]))
    out = keyness_for_group(dtm, ["war", "tax"], ["A", "A", "B"], "A", top_n=1)

    assert len(out) == 1
    assert out["direction"].iloc[0] == "overuse"
    assert out["term"].iloc[0] in {"war", "tax"}


def test_keyness_for_group_compares_labels_as_strings():
    dtm = sparse.csr_matrix(np.array([[1, 0], [0, 1]]))
    out = keyness_for_group(dtm, ["a", "b"], [1961, 1962], "1961")
    assert set(out["term"]) == {"a", "b"}


def test_keyness_for_group_invalid_target():
    dtm = sparse.csr_matrix(np.array([[1, 0], [0, 1]]))
    with pytest.raises(ValueError, match="not found"):
        keyness_for_group(dtm, ["a", "b"], ["A", "B"], "C")
    with pytest.raises(ValueError, match="no reference"):
        keyness_for_group(dtm, ["a", "b"], ["A", "A"], "A")
