"""
Tests for the SVM wrapper, the F-measure, and the cross-validation loop.
"""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd
import pytest
from scipy import sparse

from speech_mining.evaluation.metrics import compute_classification_metrics, f_measure
from speech_mining.models.svm import build_linear_svm, predict_labels, train_svm
from speech_mining.training.cross_validation import (
    c_parameter_sweep,
    get_k_fold_indices,
    k_fold_cross_validation,
    select_best_cost,
)


CFG = {
    "general": {"random_state": 0},
    "svm": {"max_iter": 10000},
    "cross_validation": {"k": 5, "costs": [1.0]},
}


@pytest.fixture
def separable():
    """Twenty alternating examples, one informative feature per class."""
    rows, labels = [], []
    for i in range(20):
        scale = 1.0 + 0.05 * i
        if i % 2 == 0:
            rows.append([scale, 0.0, 0.1])
            labels.append("FOREIGN")
        else:
            rows.append([0.0, scale, 0.1])
            labels.append("DOMESTIC")
    return sparse.csr_matrix(np.array(rows)), np.array(labels)


# ---------------------------------------------------------------------------
# Folds
# ---------------------------------------------------------------------------


def test_get_k_fold_indices_stride():
    mask = get_k_fold_indices(1, 3, 8)
    assert np.flatnonzero(mask).tolist() == [1, 4, 7]


def test_k_fold_indices_partition_the_data():
    k, n = 4, 10
    masks = [get_k_fold_indices(j, k, n) for j in range(k)]
    counts = np.sum(masks, axis=0)
    assert counts.tolist() == [1] * n
    assert [int(m.sum()) for m in masks] == [3, 3, 2, 2]


@pytest.mark.parametrize(
    "fold,k,n",
    [(0, 1, 10), (3, 3, 10), (-1, 3, 10), (0, 5, 4)],
)
def test_get_k_fold_indices_invalid(fold, k, n):
    with pytest.raises(ValueError):
        get_k_fold_indices(fold, k, n)


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------


def test_f_measure_basic():
    predicted = ["F", "F", "O", "O"]
    truth = ["F", "O", "F", "O"]
    assert f_measure(predicted, truth, "F") == pytest.approx(0.5)


def test_f_measure_treats_other_labels_as_negative():
    predicted = ["F", "X", "Y", "F"]
    truth = ["F", "Y", "X", "F"]
    assert f_measure(predicted, truth, "F") == pytest.approx(1.0)


def test_f_measure_absent_class_is_zero():
    assert f_measure(["O", "O"], ["O", "O"], "F") == 0.0


def test_f_measure_shape_mismatch():
    with pytest.raises(ValueError):
        f_measure(["F"], ["F", "O"], "F")


def test_compute_classification_metrics():
    metrics = compute_classification_metrics(
        y_true=["F", "O", "F", "O"], y_pred=["F", "F", "O", "O"], positive_class="F"
    )
    assert metrics["accuracy"] == pytest.approx(0.5)
    assert metrics["precision"] == pytest.approx(0.5)
    assert metrics["recall"] == pytest.approx(0.5)
    assert metrics["f1"] == pytest.approx(0.5)
    assert metrics["confusion_matrix"] == [[1, 1], [1, 1]]


# ---------------------------------------------------------------------------
# SVM wrapper
# ---------------------------------------------------------------------------


def test_build_linear_svm_rejects_non_positive_cost():
    with pytest.raises(ValueError):
        build_linear_svm(0, CFG)
    assert build_linear_svm(0.5, CFG).C == 0.5


def test_train_and_predict(separable):
    features, labels = separable
    model = train_svm(features, labels, 1.0, CFG)
    predicted = predict_labels(model, features)
    assert predicted.tolist() == labels.tolist()


def test_train_svm_validates_inputs(separable):
    features, labels = separable
    with pytest.raises(ValueError, match="rows"):
        train_svm(features, labels[:-1], 1.0, CFG)
    with pytest.raises(ValueError, match="two distinct labels"):
        train_svm(features, np.array(["F"] * 20), 1.0, CFG)


# ---------------------------------------------------------------------------
# Cross-validation and sweep
# ---------------------------------------------------------------------------


def test_k_fold_cross_validation_separable(separable):
    features, labels = separable
    result = k_fold_cross_validation(features, labels, 1.0, 5, "FOREIGN", CFG)

    assert result["cost"] == 1.0
    assert len(result["fold_scores"]) == 5
    assert result["mean_f1"] == pytest.approx(1.0)


def test_k_fold_cross_validation_single_class_training_fold():
    features = sparse.csr_matrix(np.eye(4))
    labels = np.array(["F", "O", "F", "O"])
    # Fold 0 holds out indices 0 and 2, leaving only "O" for training.
    with pytest.raises(ValueError, match="two distinct labels"):
        k_fold_cross_validation(features, labels, 1.0, 2, "F", CFG)


def test_c_parameter_sweep_keeps_cost_order(separable):
    features, labels = separable
    costs = [10.0, 0.1, 1.0]
    results = c_parameter_sweep(features, labels, costs, 4, "FOREIGN", CFG)

    assert results["cost"].tolist() == costs
    assert results.columns.tolist() == ["cost", "mean_f1", "fold_1", "fold_2", "fold_3", "fold_4"]
    assert results["mean_f1"].between(0.0, 1.0).all()


def test_c_parameter_sweep_requires_costs(separable):
    features, labels = separable
    with pytest.raises(ValueError):
        c_parameter_sweep(features, labels, [], 4, "FOREIGN", CFG)


def test_select_best_cost_prefers_earliest_on_tie():
    results = pd.DataFrame({"cost": [0.1, 1.0, 10.0], "mean_f1": [0.8, 0.9, 0.9]})
    assert select_best_cost(results) == 1.0


def test_select_best_cost_empty():
    with pytest.raises(ValueError):
        select_best_cost(pd.DataFrame(columns=["cost", "mean_f1"]))


@pytest.mark.parametrize("k", [1, 0, -1])
def test_k_fold_cross_validation_rejects_small_k(separable, k):
    features, labels = separable
    with pytest.raises(ValueError, match="k must be at least 2"):
        k_fold_cross_validation(features, labels, 1.0, k, "FOREIGN", CFG)


@pytest.mark.parametrize("k", [0, -1])
def test_c_parameter_sweep_rejects_small_k(separable, k):
    features, labels = separable
    with pytest.raises(ValueError, match="k must be at least 2"):
        c_parameter_sweep(features, labels, [0.1, 1.0], k, "FOREIGN", CFG)


def test_select_best_cost_skips_nan():
    results = pd.DataFrame({"cost": [0.1, 1.0, 10.0], "mean_f1": [np.nan, 0.4, 0.7]})
    assert select_best_cost(results) == 10.0


def test_select_best_cost_all_nan():
    results = pd.DataFrame({"cost": [0.1, 1.0], "mean_f1": [np.nan, np.nan]})
    with pytest.raises(ValueError, match="NaN"):
        select_best_cost(results)


def test_k_fold_cross_validation_logs_to_given_logger(separable, caplog):
    features, labels = separable
    log = logging.getLogger("cv_test_logger")

    with caplog.at_level(logging.INFO, logger="cv_test_logger"):
        k_fold_cross_validation(features, labels, 1.0, 4, "FOREIGN", CFG, log=log)

    messages = [r.getMessage() for r in caplog.records if r.name == "cv_test_logger"]
    assert [m for m in messages if "fold" in m and "F1=" in m][0].startswith("C=1 fold 1/4")
    assert any("mean F1 over 4 folds" in m for m in messages)
