"""
Evaluation metrics for passage classification.

This module centralizes the computation of the classification metrics
used by the cross-validation loop and the final model report:

- F-measure for a chosen positive class (one-vs-rest)
- accuracy, precision, recall
- confusion matrix

The helper functions here are used by:
- speech_mining.training.cross_validation
- speech_mining.training.train_classifier
"""

from __future__ import annotations

from typing import Any, Dict, Sequence, Union

import numpy as np
from sklearn.metrics import (
    accuracy_score,
    confusion_matrix,
    f1_score,
    precision_recall_fscore_support,
)


ArrayLike = Union[Sequence[Any], np.ndarray]


def _one_vs_rest(y_true: ArrayLike, y_pred: ArrayLike, positive_class: Any):
    y_true_arr = np.asarray(y_true)
    y_pred_arr = np.asarray(y_pred)
    if y_true_arr.shape != y_pred_arr.shape:
        raise ValueError(
            f"Shape mismatch between truth {y_true_arr.shape} and predictions {y_pred_arr.shape}."
        )
    return y_true_arr == positive_class, y_pred_arr == positive_class


def f_measure(predicted: ArrayLike, truth: ArrayLike, positive_class: Any) -> float:
    """
    Harmonic mean of precision and recall for positive_class.

    All other labels count as negative. If the positive class never
    occurs in either truth or predictions, the score is 0.

    Parameters
    ----------
    predicted : ArrayLike
        Predicted labels.
    truth : ArrayLike
        Ground-truth labels, same length as predicted.
    positive_class : Any
        Label treated as positive.

    Returns
    -------
    float
        F-measure in [0, 1].
    """
    true_pos, pred_pos = _one_vs_rest(truth, predicted, positive_class)
    return float(f1_score(true_pos, pred_pos, pos_label=True, zero_division=0))


def compute_classification_metrics(
    y_true: ArrayLike,
    y_pred: ArrayLike,
    positive_class: Any,
    output_confusion_matrix: bool = True,
) -> Dict[str, Any]:
    """
    Compute standard classification metrics with respect to one class.

    Parameters
    ----------
    y_true : ArrayLike
        Ground-truth labels.
    y_pred : ArrayLike
        Predicted labels, same shape as y_true.
    positive_class : Any
        Label treated as positive; all other labels are negative.
    output_confusion_matrix : bool
        If True, also include the 2x2 confusion matrix with rows/columns
        ordered [positive, rest].

    Returns
    -------
    Dict[str, Any]
        Dictionary with the keys "accuracy", "precision", "recall", "f1"
        and optionally "confusion_matrix". Accuracy is computed on the
        original (possibly multi-class) labels.
    """
    true_pos, pred_pos = _one_vs_rest(y_true, y_pred, positive_class)

    acc = accuracy_score(np.asarray(y_true), np.asarray(y_pred))
    prec, rec, f1, _ = precision_recall_fscore_support(
        true_pos,
        pred_pos,
        average="binary",
        pos_label=True,
        zero_division=0,
    )

    metrics: Dict[str, Any] = {
        "accuracy": float(acc),
        "precision": float(prec),
        "recall": float(rec),
        "f1": float(f1),
    }

    if output_confusion_matrix:
        cm = confusion_matrix(true_pos, pred_pos, labels=[True, False])
        # Plain lists for JSON friendliness.
        metrics["confusion_matrix"] = cm.tolist()

    return metrics
