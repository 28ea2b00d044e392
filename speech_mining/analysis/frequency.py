"""
Frequency analysis over a document-term matrix.

These helpers take a sparse DTM (documents x terms, as produced by
speech_mining.features.dtm.build_dtm) together with its vocabulary and
return pandas objects that are easy to inspect or write to CSV:

- corpus-wide term and document frequencies
- term counts aggregated by an arbitrary document grouping (president,
  party, decade, ...) in absolute or relative terms
- tracked terms over time, binned by year
- type/token statistics and vocabulary growth (Heaps' law curve)
- most distinctive terms per group after weighting
- distribution of (predicted) labels per group
"""

from __future__ import annotations

from typing import Any, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from scipy import sparse

from speech_mining.features.dtm import weight_dtm


def _as_csr(dtm: sparse.spmatrix) -> sparse.csr_matrix:
    return sparse.csr_matrix(dtm)


def _column_sums(dtm: sparse.spmatrix) -> np.ndarray:
    return np.asarray(dtm.sum(axis=0)).ravel()


def _sorted_series(values: np.ndarray, vocab: Sequence[str], name: str) -> pd.Series:
    # Alphabetical first, then a stable sort on the value keeps ties alphabetical.
    series = pd.Series(values, index=pd.Index(vocab, name="term"), name=name)
    return series.sort_index().sort_values(ascending=False, kind="mergesort")


def _check_vocab(dtm: sparse.spmatrix, vocab: Sequence[str]) -> None:
    if dtm.shape[1] != len(vocab):
        raise ValueError(
            f"Vocabulary size ({len(vocab)}) does not match DTM columns ({dtm.shape[1]})."
        )


def group_indicator(
    groups: Sequence[Any], n_docs: int
) -> Tuple[sparse.csr_matrix, pd.Index]:
    """
    Build a sparse (n_groups x n_docs) indicator matrix for a grouping.

    Multiplying it with a DTM sums the document rows of each group.
    Groups are returned in sorted order.
    """
    groups = list(groups)
    if len(groups) != n_docs:
        raise ValueError(
            f"Number of group labels ({len(groups)}) does not match number of documents ({n_docs})."
        )

    codes, uniques = pd.factorize(pd.Series(groups), sort=True)
    if (codes < 0).any():
        raise ValueError("Group labels must not contain missing values.")

    indicator = sparse.csr_matrix(
        (np.ones(n_docs), (codes, np.arange(n_docs))),
        shape=(len(uniques), n_docs),
    )
    return indicator, pd.Index(uniques, name="group")


def _term_indices(vocab: Sequence[str], terms: Iterable[str]) -> List[int]:
    lookup = {t: i for i, t in enumerate(vocab)}
    terms = list(terms)
    missing = [t for t in terms if t not in lookup]
    if missing:
        raise ValueError(f"Term(s) not in vocabulary: {missing}")
    return [lookup[t] for t in terms]


# ---------------------------------------------------------------------------
# Corpus-wide frequencies
# ---------------------------------------------------------------------------


def term_frequencies(dtm: sparse.spmatrix, vocab: Sequence[str]) -> pd.Series:
    """
    Total count of each term over the corpus, most frequent first.
    """
    _check_vocab(dtm, vocab)
    return _sorted_series(_column_sums(dtm), vocab, "frequency")


def document_frequencies(dtm: sparse.spmatrix, vocab: Sequence[str]) -> pd.Series:
    """
    Number of documents each term occurs in, most widespread first.
    """
    _check_vocab(dtm, vocab)
    counts = np.asarray((_as_csr(dtm) > 0).sum(axis=0)).ravel()
    return _sorted_series(counts, vocab, "doc_frequency")


def top_terms(dtm: sparse.spmatrix, vocab: Sequence[str], n: int = 50) -> pd.DataFrame:
    """
    The n most frequent terms with their corpus and document frequencies.

    Returns
    -------
    pd.DataFrame
        Columns ["term", "frequency", "doc_frequency"].
    """
    if n < 1:
        raise ValueError(f"n must be positive, got {n}")

    tf = term_frequencies(dtm, vocab).head(n)
    df = document_frequencies(dtm, vocab)
    out = tf.to_frame().reset_index()
    out["doc_frequency"] = df.reindex(out["term"]).values
    return out


# ---------------------------------------------------------------------------
# Grouped frequencies
# ---------------------------------------------------------------------------


def term_frequencies_by_group(
    dtm: sparse.spmatrix,
    vocab: Sequence[str],
    groups: Sequence[Any],
    terms: Optional[Iterable[str]] = None,
    relative: bool = False,
) -> pd.DataFrame:
    """
    Aggregate term counts by a document grouping.

    Parameters
    ----------
    dtm : sparse matrix
        Document-term count matrix.
    vocab : Sequence[str]
        Vocabulary in column order.
    groups : Sequence[Any]
        One group label per document (e.g. president or decade).
    terms : Optional[Iterable[str]]
        Terms to report; all terms if None.
    relative : bool
        If True, divide each group's counts by the group's total number
        of tokens (over the full vocabulary). Empty groups yield 0.

    Returns
    -------
    pd.DataFrame
        Rows are groups (sorted), columns are terms.
    """
    _check_vocab(dtm, vocab)
    indicator, group_index = group_indicator(groups, dtm.shape[0])
    grouped = _as_csr(indicator @ _as_csr(dtm))

    if terms is None:
        columns = list(vocab)
        selected = grouped.toarray()
    else:
        columns = list(terms)
        selected = grouped[:, _term_indices(vocab, columns)].toarray()

    if relative:
        totals = np.asarray(grouped.sum(axis=1)).ravel()
        with np.errstate(divide="ignore", invalid="ignore"):
            selected = np.where(totals[:, None] > 0, selected / totals[:, None], 0.0)

    return pd.DataFrame(selected, index=group_index, columns=pd.Index(columns, name="term"))


def term_frequencies_over_time(
    dtm: sparse.spmatrix,
    vocab: Sequence[str],
    years: Sequence[int],
    terms: Iterable[str],
    bin_size: int = 10,
    relative: bool = False,
) -> pd.DataFrame:
    """
    Frequencies of selected terms per time bin.

    Years are binned as ``year // bin_size * bin_size``, so bin_size=10
    groups by decade and bin_size=1 by year.
    """
    if bin_size < 1:
        raise ValueError(f"bin_size must be >= 1, got {bin_size}")

    bins = (np.asarray(years, dtype=int) // bin_size) * bin_size
    out = term_frequencies_by_group(dtm, vocab, bins, terms=terms, relative=relative)
    out.index.name = "period"
    return out


def top_terms_per_group(
    dtm: sparse.spmatrix,
    vocab: Sequence[str],
    groups: Sequence[Any],
    n: int = 10,
    weighting: str = "tfidf",
) -> pd.DataFrame:
    """
    Most characteristic terms per group.

    Document rows are summed per group, the resulting group-term matrix
    is weighted (TF-IDF by default, treating each group as one document)
    and the n highest-weighted terms of each group are returned.

    Returns
    -------
    pd.DataFrame
        Long format with columns ["group", "rank", "term", "weight"].
    """
    if n < 1:
        raise ValueError(f"n must be positive, got {n}")

    _check_vocab(dtm, vocab)
    indicator, group_index = group_indicator(groups, dtm.shape[0])
    weighted = weight_dtm(indicator @ _as_csr(dtm), weighting).toarray()

    vocab_arr = np.asarray(vocab)
    alpha = np.argsort(vocab_arr, kind="mergesort")

    records = []
    for row, group in enumerate(group_index):
        weights = weighted[row, alpha]
        order = alpha[np.argsort(-weights, kind="mergesort")]
        rank = 0
        for col in order:
            if weighted[row, col] <= 0 or rank >= n:
                break
            rank += 1
            records.append(
                {"group": group, "rank": rank, "term": vocab_arr[col], "weight": float(weighted[row, col])}
            )

    return pd.DataFrame(records, columns=["group", "rank", "term", "weight"])


# ---------------------------------------------------------------------------
# Type/token statistics
# ---------------------------------------------------------------------------


def type_token_statistics(
    token_lists: Sequence[Sequence[str]],
    doc_ids: Optional[Sequence[Any]] = None,
) -> pd.DataFrame:
    """
    Number of tokens, number of distinct types, and type/token ratio per
    document. Empty documents get a ratio of 0.
    """
    token_lists = list(token_lists)
    if doc_ids is None:
        doc_ids = list(range(len(token_lists)))
    elif len(doc_ids) != len(token_lists):
        raise ValueError("doc_ids and token_lists must have the same length.")

    records = []
    for doc_id, tokens in zip(doc_ids, token_lists):
        n_tokens = len(tokens)
        n_types = len(set(tokens))
        records.append(
            {
                "doc_id": doc_id,
                "n_tokens": n_tokens,
                "n_types": n_types,
                "type_token_ratio": n_types / n_tokens if n_tokens else 0.0,
            }
        )
    return pd.DataFrame(records, columns=["doc_id", "n_tokens", "n_types", "type_token_ratio"])


def vocabulary_growth(token_lists: Sequence[Sequence[str]]) -> pd.DataFrame:
    """
    Cumulative corpus size vs. vocabulary size, one row per document in
    the given order (Heaps' law curve).
    """
    seen = set()
    n_tokens = 0
    records = []
    for tokens in token_lists:
        n_tokens += len(tokens)
        seen.update(tokens)
        records.append({"n_tokens": n_tokens, "n_types": len(seen)})
    return pd.DataFrame(records, columns=["n_tokens", "n_types"])


# ---------------------------------------------------------------------------
# Label distributions
# ---------------------------------------------------------------------------


def label_distribution_by_group(
    labels: Sequence[Any],
    groups: Sequence[Any],
    relative: bool = False,
) -> pd.DataFrame:
    """
    Cross-tabulate labels per group, e.g. predicted categories per decade.
    With relative=True each row sums to 1.
    """
    if len(labels) != len(groups):
        raise ValueError(
            f"labels ({len(labels)}) and groups ({len(groups)}) must have the same length."
        )
    table = pd.crosstab(
        pd.Series(list(groups), name="group"),
        pd.Series(list(labels), name="label"),
        normalize="index" if relative else False,
    )
    return table.sort_index()
