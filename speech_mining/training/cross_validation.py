"""
k-fold cross-validation and cost-parameter sweep for the linear SVM.

Folds are assigned by stride: with k folds, fold j holds out the
examples at positions j, j + k, j + 2k, ... of the annotated data. Each
fold trains a model on the remaining examples, predicts the held-out
ones, and scores them with the F-measure of the positive class. The
mean over folds is the score of one cost value; the sweep repeats this
for every cost and the best-scoring cost is used for the final model.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from speech_mining.evaluation.metrics import f_measure
from speech_mining.models.svm import predict_labels, train_svm


logger = logging.getLogger(__name__)


def get_k_fold_indices(fold: int, k: int, n: int) -> np.ndarray:
    """
    Boolean mask of the examples held out in the given fold.

    Parameters
    ----------
    fold : int
        Zero-based fold number, 0 <= fold < k.
    k : int
        Number of folds, at least 2.
    n : int
        Number of examples, at least k.

    Returns
    -------
    np.ndarray
        Boolean array of length n; True at positions fold, fold + k, ...
    """
    if k < 2:
        raise ValueError(f"k must be at least 2, got {k}")
    if not 0 <= fold < k:
        raise ValueError(f"fold must be in [0, {k}), got {fold}")
    if n < k:
        raise ValueError(f"Need at least k={k} examples for k-fold cross-validation, got {n}")

    mask = np.zeros(n, dtype=bool)
    mask[fold::k] = True
    return mask


def _check_k(k: int) -> None:
    if k < 2:
        raise ValueError(f"k must be at least 2, got {k}")


def k_fold_cross_validation(
    features,
    labels: Sequence[Any],
    cost: float,
    k: int,
    positive_class: Any,
    cfg: Dict[str, Any],
    log: Optional[logging.Logger] = None,
) -> Dict[str, Any]:
    """
    Run k-fold cross-validation for one cost value.

    Parameters
    ----------
    features : array-like or sparse matrix, shape (n, n_features)
    labels : Sequence[Any]
        Gold labels in the same order as the feature rows.
    cost : float
        SVM cost C.
    k : int
        Number of folds, at least 2.
    positive_class : Any
        Class whose F-measure is averaged.
    cfg : Dict[str, Any]
        Classification config passed to the SVM builder.
    log : Optional[logging.Logger]
        Logger receiving per-fold and per-cost scores; the module logger
        if None.

    Returns
    -------
    Dict[str, Any]
        {"cost": float, "fold_scores": List[float], "mean_f1": float}
    """
    _check_k(k)
    log = log or logger

    labels = np.asarray(labels)
    n = labels.shape[0]
    if features.shape[0] != n:
        raise ValueError(f"features has {features.shape[0]} rows but labels has {n} entries.")

    fold_scores: List[float] = []
    for fold in range(k):
        test_mask = get_k_fold_indices(fold, k, n)
        model = train_svm(features[~test_mask], labels[~test_mask], cost, cfg)
        predicted = predict_labels(model, features[test_mask])
        score = f_measure(predicted, labels[test_mask], positive_class)
        log.info("C=%g fold %d/%d: F1=%.4f", cost, fold + 1, k, score)
        fold_scores.append(score)

    mean_f1 = float(np.mean(fold_scores))
    log.info("C=%g: mean F1 over %d folds = %.4f", cost, k, mean_f1)
    return {"cost": float(cost), "fold_scores": fold_scores, "mean_f1": mean_f1}


def c_parameter_sweep(
    features,
    labels: Sequence[Any],
    costs: Sequence[float],
    k: int,
    positive_class: Any,
    cfg: Dict[str, Any],
    log: Optional[logging.Logger] = None,
) -> pd.DataFrame:
    """
    Cross-validate every cost value in order.

    Returns
    -------
    pd.DataFrame
        One row per cost, in the given order, with columns
        ["cost", "mean_f1", "fold_1", ..., "fold_k"].
    """
    _check_k(k)
    costs = list(costs)
    if not costs:
        raise ValueError("At least one cost value is required.")

    records = []
    for cost in costs:
        result = k_fold_cross_validation(features, labels, cost, k, positive_class, cfg, log=log)
        row = {"cost": result["cost"], "mean_f1": result["mean_f1"]}
        for i, score in enumerate(result["fold_scores"], start=1):
            row[f"fold_{i}"] = score
        records.append(row)

    return pd.DataFrame(records)


def select_best_cost(results: pd.DataFrame) -> float:
    """
    Cost with the highest mean F-measure. On ties the earliest row wins;
    NaN scores are never selected.
    """
    if results.empty:
        raise ValueError("No sweep results to select from.")
    scores = results["mean_f1"].to_numpy(dtype=float)
    if np.isnan(scores).all():
        raise ValueError("Every mean F-measure in the sweep results is NaN.")
    best_row = int(np.nanargmax(scores))
    return float(results["cost"].iloc[best_row])
