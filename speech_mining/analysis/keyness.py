"""
Key term extraction by log-likelihood (Dunning's G²).

A target sub-corpus (e.g. all speeches of one president) is compared to
a reference sub-corpus (all other speeches). Terms whose relative
frequency in the target deviates most from the reference get the
highest scores.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

import numpy as np
import pandas as pd
from scipy import sparse

KEYNESS_COLUMNS = ["term", "target", "reference", "log_likelihood", "direction"]


def _xlogy_ratio(observed: np.ndarray, expected: np.ndarray) -> np.ndarray:
    # 0 * log(0 / e) is taken as 0.
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.where(observed > 0, observed * np.log(observed / expected), 0.0)


def log_likelihood_keyness(
    target_counts: pd.Series,
    reference_counts: pd.Series,
) -> pd.DataFrame:
    """
    Compute G² keyness for every term occurring in either corpus.

    Parameters
    ----------
    target_counts : pd.Series
        Term counts of the target corpus, indexed by term.
    reference_counts : pd.Series
        Term counts of the reference corpus, indexed by term.

    Returns
    -------
    pd.DataFrame
        Columns ["term", "target", "reference", "log_likelihood",
        "direction"], sorted by log_likelihood descending (ties by term).
        direction is "overuse" when the term is relatively more frequent
        in the target, "underuse" otherwise.
    """
    both = pd.concat(
        [target_counts.rename("target"), reference_counts.rename("reference")], axis=1
    ).fillna(0.0)
    both = both[(both["target"] + both["reference"]) > 0]

    a = both["target"].to_numpy(dtype=float)
    b = both["reference"].to_numpy(dtype=float)
    c = float(target_counts.sum())
    d = float(reference_counts.sum())
    if c <= 0 or d <= 0:
        raise ValueError("Both target and reference corpora must contain tokens.")

    e1 = c * (a + b) / (c + d)
    e2 = d * (a + b) / (c + d)
    g2 = 2.0 * (_xlogy_ratio(a, e1) + _xlogy_ratio(b, e2))

    out = pd.DataFrame(
        {
            "term": both.index.astype(str).to_numpy(),
            "target": a,
            "reference": b,
            "log_likelihood": g2,
            "direction": np.where(a / c > b / d, "overuse", "underuse"),
        }
    )
    out = out.sort_values("term").sort_values("log_likelihood", ascending=False, kind="mergesort")
    return out.reset_index(drop=True)[KEYNESS_COLUMNS]


def keyness_for_group(
    dtm: sparse.spmatrix,
    vocab: Sequence[str],
    groups: Sequence[Any],
    target_group: Any,
    top_n: Optional[int] = None,
) -> pd.DataFrame:
    """
    Key terms of the documents in target_group against all other documents.

    Group labels are compared as strings, so a YAML value of 1961 matches
    an integer or string group 1961.
    """
    labels = np.asarray([str(g) for g in groups])
    if len(labels) != dtm.shape[0]:
        raise ValueError(
            f"Number of group labels ({len(labels)}) does not match number of documents ({dtm.shape[0]})."
        )

    mask = labels == str(target_group)
    if not mask.any():
        raise ValueError(f"Target group {target_group!r} not found among groups.")
    if mask.all():
        raise ValueError(f"Target group {target_group!r} covers every document; no reference left.")

    dtm = sparse.csr_matrix(dtm)
    index = pd.Index(vocab, name="term")
    target = pd.Series(np.asarray(dtm[mask].sum(axis=0)).ravel(), index=index)
    reference = pd.Series(np.asarray(dtm[~mask].sum(axis=0)).ravel(), index=index)

    out = log_likelihood_keyness(target, reference)
    if top_n is not None:
        out = out.head(int(top_n))
    return out
