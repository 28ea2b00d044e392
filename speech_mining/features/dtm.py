"""
Document-term matrix (DTM) construction and feature extraction.

This module provides helpers to:
- preprocess raw text using the shared preprocessing pipeline
- build a sparse document-term count matrix with scikit-learn's
  CountVectorizer (unigrams or n-grams, frequency pruning)
- re-weight a DTM (raw counts, binary presence, or TF-IDF)
- fit, persist, and reload a feature extractor so that a classifier
  trained on annotated passages can score the whole corpus in the same
  feature space

DTM settings live in the "dtm" section of config/data.yaml. Persisted
extractors are stored under the artifacts directory defined in
config/train.yaml.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

import joblib
import numpy as np
import pandas as pd
from scipy import sparse
from sklearn.feature_extraction.text import CountVectorizer, TfidfTransformer
from sklearn.pipeline import Pipeline

from speech_mining.data.corpus import DEFAULT_DATA_CONFIG_PATH, load_data_config
from speech_mining.features.preprocessing import preprocess_series_to_string
from speech_mining.utils.training_utils import load_train_config, ensure_dir_exists


DEFAULT_EXTRACTOR_FILENAME = "feature_extractor.joblib"

WEIGHTINGS = ("tf", "binary", "tfidf")


def _get_dtm_cfg(config_path: str = DEFAULT_DATA_CONFIG_PATH) -> Dict[str, Any]:
    cfg = load_data_config(config_path)
    return cfg["dtm"] or {}


def _check_weighting(weighting: str) -> str:
    weighting = (weighting or "tf").lower()
    if weighting not in WEIGHTINGS:
        raise ValueError(f"Unknown weighting: {weighting!r} (expected one of {WEIGHTINGS})")
    return weighting


def build_count_vectorizer(
    dtm_cfg: Dict[str, Any],
    min_df: Optional[Any] = None,
    ngram_range: Optional[Sequence[int]] = None,
) -> CountVectorizer:
    """
    Construct an unfitted CountVectorizer for pre-tokenized strings.

    Tokenization, stopword removal, and stemming happen in the
    preprocessing pipeline, so the vectorizer only splits on whitespace
    and assembles n-grams.

    Parameters
    ----------
    dtm_cfg : Dict[str, Any]
        The "dtm" section of the data config.
    min_df : Optional[Any]
        Overrides dtm_cfg["min_df"] when given.
    ngram_range : Optional[Sequence[int]]
        Overrides dtm_cfg["ngram_range"] when given.

    Returns
    -------
    CountVectorizer
        Unfitted vectorizer.
    """
    ngrams = tuple(ngram_range or dtm_cfg.get("ngram_range", (1, 1)))
    if len(ngrams) != 2 or ngrams[0] < 1 or ngrams[0] > ngrams[1]:
        raise ValueError(f"Invalid ngram_range: {ngrams}")

    max_features = dtm_cfg.get("max_features")
    return CountVectorizer(
        tokenizer=str.split,
        token_pattern=None,
        preprocessor=None,
        lowercase=False,  # already handled in preprocessing
        ngram_range=(int(ngrams[0]), int(ngrams[1])),
        min_df=min_df if min_df is not None else dtm_cfg.get("min_df", 1),
        max_df=dtm_cfg.get("max_df", 1.0),
        max_features=int(max_features) if max_features else None,
        binary=False,
    )


def build_dtm(
    texts: Iterable[str],
    config_path: str = DEFAULT_DATA_CONFIG_PATH,
    min_df: Optional[Any] = None,
    ngram_range: Optional[Sequence[int]] = None,
) -> Tuple[sparse.csr_matrix, CountVectorizer]:
    """
    Preprocess raw texts and build a document-term count matrix.

    Parameters
    ----------
    texts : Iterable[str]
        Raw document texts; row i of the DTM corresponds to texts[i].
    config_path : str
        Path to the data YAML configuration.
    min_df, ngram_range :
        Optional overrides for the configured values.

    Returns
    -------
    Tuple[csr_matrix, CountVectorizer]
        The (n_documents, n_terms) count matrix and the fitted vectorizer.

    Raises
    ------
    ValueError
        If no terms survive preprocessing and frequency pruning.
    """
    series = pd.Series(list(texts), dtype=object)
    processed = preprocess_series_to_string(series, config_path=config_path)

    vectorizer = build_count_vectorizer(
        _get_dtm_cfg(config_path), min_df=min_df, ngram_range=ngram_range
    )
    try:
        dtm = vectorizer.fit_transform(processed.values)
    except ValueError as exc:
        # sklearn raises for an empty vocabulary or contradictory df bounds.
        raise ValueError(f"Could not build document-term matrix: {exc}") from exc

    return sparse.csr_matrix(dtm), vectorizer


def get_vocabulary(vectorizer: CountVectorizer) -> np.ndarray:
    """Return the fitted vocabulary in column order."""
    return vectorizer.get_feature_names_out()


def weight_dtm(dtm: sparse.spmatrix, weighting: str = "tf") -> sparse.csr_matrix:
    """
    Re-weight a count DTM.

    Parameters
    ----------
    dtm : sparse matrix
        Raw term counts.
    weighting : str
        "tf" returns counts unchanged, "binary" marks presence with 1,
        "tfidf" applies scikit-learn's TfidfTransformer (l2-normalized).

    Returns
    -------
    csr_matrix
        Weighted matrix of the same shape.
    """
    weighting = _check_weighting(weighting)
    dtm = sparse.csr_matrix(dtm, dtype=float)

    if weighting == "tf":
        return dtm
    if weighting == "binary":
        out = dtm.copy()
        out.data = (out.data > 0).astype(float)
        out.eliminate_zeros()
        return out
    return sparse.csr_matrix(TfidfTransformer(norm="l2", use_idf=True, smooth_idf=True).fit_transform(dtm))


# ---------------------------------------------------------------------------
# Feature extractor for classification
# ---------------------------------------------------------------------------


def _build_feature_extractor(dtm_cfg: Dict[str, Any]) -> Pipeline:
    weighting = _check_weighting(dtm_cfg.get("weighting", "tf"))
    vectorizer = build_count_vectorizer(dtm_cfg)
    if weighting == "binary":
        vectorizer.set_params(binary=True)

    steps = [("counts", vectorizer)]
    if weighting == "tfidf":
        steps.append(("tfidf", TfidfTransformer(norm="l2", use_idf=True, smooth_idf=True)))
    return Pipeline(steps)


def _resolve_artifacts_dir(artifacts_dir: Optional[str]) -> str:
    if artifacts_dir is None:
        train_cfg = load_train_config()
        artifacts_dir = train_cfg["paths"]["artifacts_dir"]
    return artifacts_dir


def fit_feature_extractor(
    texts: Iterable[str],
    data_config_path: str = DEFAULT_DATA_CONFIG_PATH,
    artifacts_dir: Optional[str] = None,
    save: bool = True,
    filename: str = DEFAULT_EXTRACTOR_FILENAME,
) -> Tuple[sparse.csr_matrix, Pipeline]:
    """
    Fit a feature extractor on raw training texts and return the
    training feature matrix together with the fitted extractor.

    This function:
    - applies the preprocessing pipeline to the texts
    - fits counts (plus TF-IDF when configured) on the processed strings
    - optionally saves the fitted extractor to disk

    Parameters
    ----------
    texts : Iterable[str]
        Raw training texts.
    data_config_path : str
        Path to the data YAML configuration.
    artifacts_dir : Optional[str]
        Directory where the extractor should be saved. If None, this
        is determined from config/train.yaml.
    save : bool
        Whether to persist the fitted extractor to disk.
    filename : str
        File name for the saved extractor.

    Returns
    -------
    Tuple[csr_matrix, Pipeline]
        Training features and the fitted extractor.
    """
    series = pd.Series(list(texts), dtype=object)
    processed = preprocess_series_to_string(series, config_path=data_config_path)

    extractor = _build_feature_extractor(_get_dtm_cfg(data_config_path))
    try:
        features = extractor.fit_transform(processed.values)
    except ValueError as exc:
        raise ValueError(f"Could not build feature matrix: {exc}") from exc

    if save:
        artifacts_dir = _resolve_artifacts_dir(artifacts_dir)
        ensure_dir_exists(artifacts_dir)
        joblib.dump(extractor, os.path.join(artifacts_dir, filename))

    return sparse.csr_matrix(features), extractor


def load_feature_extractor(
    artifacts_dir: Optional[str] = None,
    filename: str = DEFAULT_EXTRACTOR_FILENAME,
) -> Pipeline:
    """
    Load a previously saved feature extractor from disk.

    Raises
    ------
    FileNotFoundError
        If the extractor file does not exist.
    """
    path = os.path.join(_resolve_artifacts_dir(artifacts_dir), filename)
    if not os.path.exists(path):
        raise FileNotFoundError(f"Feature extractor not found at: {path}")
    return joblib.load(path)


def transform_texts(
    texts: Iterable[str],
    extractor: Pipeline,
    data_config_path: str = DEFAULT_DATA_CONFIG_PATH,
) -> sparse.csr_matrix:
    """
    Transform raw texts into features using a fitted extractor. Terms not
    seen during fitting are ignored.
    """
    series = pd.Series(list(texts), dtype=object)
    processed = preprocess_series_to_string(series, config_path=data_config_path)
    return sparse.csr_matrix(extractor.transform(processed.values))
