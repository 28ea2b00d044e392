"""
Linear SVM wrapper for passage classification.

This module exposes the two operations the cross-validation loop relies
on:

- train(features, labels, cost) -> model      (train_svm)
- predict(model, features) -> labels          (predict_labels)

Both wrap scikit-learn's LinearSVC (liblinear). Hyperparameters other
than the cost C are read from config/classify.yaml so they can be tuned
without modifying code.
"""

from __future__ import annotations

import os
from typing import Any, Dict

import numpy as np
import yaml
from sklearn.svm import LinearSVC


DEFAULT_CLASSIFY_CONFIG_PATH = "config/classify.yaml"


# ---------------------------------------------------------------------------
# Config loading
# ---------------------------------------------------------------------------


def load_classify_config(config_path: str = DEFAULT_CLASSIFY_CONFIG_PATH) -> Dict[str, Any]:
    """
    Load and return the classification configuration dictionary.

    Parameters
    ----------
    config_path : str
        Path to the classification YAML configuration file.

    Returns
    -------
    Dict[str, Any]
        Parsed configuration with "general", "svm", and
        "cross_validation" sections.

    Raises
    ------
    FileNotFoundError
        If the YAML file does not exist.
    ValueError
        If the YAML file is empty or cannot be parsed.
    KeyError
        If required sections are missing.
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Classification config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f)

    if cfg is None:
        raise ValueError(f"Classification config file is empty or invalid: {config_path}")

    for section in ("general", "svm", "cross_validation"):
        if section not in cfg:
            raise KeyError(f'Missing "{section}" section in classification config: {config_path}')

    return cfg


# ---------------------------------------------------------------------------
# Model builder
# ---------------------------------------------------------------------------


def build_linear_svm(cost: float, cfg: Dict[str, Any]) -> LinearSVC:
    """
    Build an unfitted LinearSVC with the given cost.

    Parameters
    ----------
    cost : float
        Regularization parameter C; must be positive.
    cfg : Dict[str, Any]
        Full classification config.
    """
    cost = float(cost)
    if not cost > 0:
        raise ValueError(f"Cost C must be positive, got {cost}")

    mcfg = cfg.get("svm", {}) or {}
    return LinearSVC(
        C=cost,
        loss=str(mcfg.get("loss", "squared_hinge")),
        class_weight=mcfg.get("class_weight", None),
        max_iter=int(mcfg.get("max_iter", 10000)),
        tol=float(mcfg.get("tol", 1e-4)),
        fit_intercept=bool(mcfg.get("fit_intercept", True)),
        random_state=int((cfg.get("general", {}) or {}).get("random_state", 42)),
    )


# ---------------------------------------------------------------------------
# train / predict contract
# ---------------------------------------------------------------------------


def train_svm(features, labels, cost: float, cfg: Dict[str, Any]) -> LinearSVC:
    """
    Fit a linear SVM on a feature matrix and its labels.

    Parameters
    ----------
    features : array-like or sparse matrix, shape (n_samples, n_features)
    labels : array-like, shape (n_samples,)
    cost : float
        Regularization parameter C.
    cfg : Dict[str, Any]
        Full classification config.

    Returns
    -------
    LinearSVC
        Fitted model.

    Raises
    ------
    ValueError
        If features and labels differ in length, or fewer than two
        distinct labels are present.
    """
    labels = np.asarray(labels)
    if features.shape[0] != labels.shape[0]:
        raise ValueError(
            f"features has {features.shape[0]} rows but labels has {labels.shape[0]} entries."
        )
    if np.unique(labels).size < 2:
        raise ValueError(
            "Training data must contain at least two distinct labels; "
            f"got {np.unique(labels).tolist()}"
        )

    model = build_linear_svm(cost, cfg)
    model.fit(features, labels)
    return model


def predict_labels(model: LinearSVC, features) -> np.ndarray:
    """Predict a label for every row of the feature matrix."""
    return np.asarray(model.predict(features))
