"""
Training and application pipeline for the passage classifier.

This module runs the supervised classification workflow end to end:

- loading the annotated passages (text + label)
- extracting DTM features from preprocessed text
- sweeping the SVM cost C with k-fold cross-validation, scored by the
  F-measure of the positive class
- training the final linear SVM on all annotated passages with the best C
- optionally labelling every speech in the corpus and counting the
  predicted labels per decade
- saving the sweep table, predictions, model, and a JSON summary

This module is designed to be callable both as a library function and
as a standalone script (via `python -m speech_mining.training.train_classifier`).
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional

import joblib
import pandas as pd

from speech_mining.analysis.frequency import label_distribution_by_group
from speech_mining.data.corpus import (
    DEFAULT_DATA_CONFIG_PATH,
    get_positive_class,
    load_annotated_corpus,
    load_speech_corpus,
)
from speech_mining.evaluation.metrics import compute_classification_metrics
from speech_mining.features.dtm import fit_feature_extractor, transform_texts
from speech_mining.models.svm import (
    DEFAULT_CLASSIFY_CONFIG_PATH,
    load_classify_config,
    predict_labels,
    train_svm,
)
from speech_mining.training.cross_validation import c_parameter_sweep, select_best_cost
from speech_mining.utils.training_utils import (
    DEFAULT_TRAIN_CONFIG_PATH,
    ensure_dir_exists,
    get_logger,
    load_train_config,
    seed_everything,
)


def _resolve_positive_class(classify_cfg: Dict[str, Any], data_config_path: str) -> str:
    override = (classify_cfg.get("cross_validation", {}) or {}).get("positive_class")
    if override is not None:
        return str(override)
    return get_positive_class(data_config_path)


def _save_model(model: object, train_cfg: Dict[str, Any], logger) -> Optional[str]:
    save_cfg = train_cfg.get("save", {}) or {}
    if not bool(save_cfg.get("save_models", True)):
        return None

    models_dir = train_cfg["paths"]["models_dir"]
    ensure_dir_exists(models_dir)
    model_path = os.path.join(models_dir, "linear_svm.joblib")

    overwrite = bool(save_cfg.get("overwrite_existing", False))
    if os.path.exists(model_path) and not overwrite:
        logger.info(
            "Model file already exists and overwrite_existing is False: %s", model_path
        )
        return model_path

    joblib.dump(model, model_path)
    logger.info("Saved final model to %s", model_path)
    return model_path


def train_and_evaluate_classifier(
    data_config_path: str = DEFAULT_DATA_CONFIG_PATH,
    classify_config_path: str = DEFAULT_CLASSIFY_CONFIG_PATH,
    train_config_path: str = DEFAULT_TRAIN_CONFIG_PATH,
    predict_corpus: bool = True,
) -> Dict[str, Any]:
    """
    End-to-end pipeline: C sweep, final model, corpus prediction.

    Parameters
    ----------
    data_config_path : str
        Path to config/data.yaml.
    classify_config_path : str
        Path to config/classify.yaml.
    train_config_path : str
        Path to config/train.yaml.
    predict_corpus : bool
        If True, label every document of the speech corpus with the final
        model and tabulate the predictions by decade.

    Returns
    -------
    Dict[str, Any]
        Keys: "positive_class", "best_cost", "best_mean_f1",
        "train_metrics", "results" (sweep DataFrame), "predictions"
        (DataFrame or None), "distribution" (DataFrame or None).
    """
    train_cfg = load_train_config(train_config_path)
    classify_cfg = load_classify_config(classify_config_path)

    seed_everything(int(train_cfg["general"].get("random_state", 42)))

    logger = get_logger(name="train_classifier", config=train_cfg, log_file_suffix="classify")

    annotated_df = load_annotated_corpus(config_path=data_config_path)
    positive_class = _resolve_positive_class(classify_cfg, data_config_path)
    labels = annotated_df["label"].to_numpy()

    logger.info("Loaded %d annotated passages.", len(annotated_df))
    logger.info("Label counts: %s", annotated_df["label"].value_counts().to_dict())
    logger.info("Positive class: %s", positive_class)

    logger.info("Fitting feature extractor...")
    features, extractor = fit_feature_extractor(
        annotated_df["text"],
        data_config_path=data_config_path,
        artifacts_dir=train_cfg["paths"]["artifacts_dir"],
        save=True,
    )
    logger.info("Feature matrix shape: %s", features.shape)

    cv_cfg = classify_cfg["cross_validation"]
    k = int(cv_cfg.get("k", 10))
    costs = [float(c) for c in cv_cfg.get("costs", [1.0])]

    logger.info("=" * 80)
    logger.info("Running %d-fold cross-validation over C in %s", k, costs)
    results = c_parameter_sweep(
        features, labels, costs, k, positive_class, classify_cfg, log=logger
    )
    best_cost = select_best_cost(results)
    best_mean_f1 = float(results.loc[results["cost"] == best_cost, "mean_f1"].iloc[0])
    logger.info("Best C=%g with mean F1=%.4f", best_cost, best_mean_f1)

    results_dir = train_cfg["paths"]["results_dir"]
    ensure_dir_exists(results_dir)
    cv_path = os.path.join(results_dir, "cv_results.csv")
    results.to_csv(cv_path, index=False)
    logger.info("Saved cross-validation results to %s", cv_path)

    model = train_svm(features, labels, best_cost, classify_cfg)
    train_metrics = compute_classification_metrics(
        y_true=labels,
        y_pred=predict_labels(model, features),
        positive_class=positive_class,
    )
    logger.info(
        "Final model on training data - acc: %.4f, prec: %.4f, rec: %.4f, f1: %.4f",
        train_metrics["accuracy"],
        train_metrics["precision"],
        train_metrics["recall"],
        train_metrics["f1"],
    )
    _save_model(model, train_cfg, logger)

    predictions: Optional[pd.DataFrame] = None
    distribution: Optional[pd.DataFrame] = None
    if predict_corpus:
        corpus_df = load_speech_corpus(config_path=data_config_path)
        logger.info("Labelling %d corpus documents.", len(corpus_df))

        corpus_features = transform_texts(corpus_df["text"], extractor, data_config_path)
        predictions = corpus_df.drop(columns=["text"]).copy()
        predictions["predicted_label"] = predict_labels(model, corpus_features)

        pred_path = os.path.join(results_dir, "corpus_predictions.csv")
        predictions.to_csv(pred_path, index=False)
        logger.info("Saved corpus predictions to %s", pred_path)

        if "decade" in predictions.columns:
            distribution = label_distribution_by_group(
                predictions["predicted_label"], predictions["decade"]
            )
            dist_path = os.path.join(results_dir, "predicted_labels_by_decade.csv")
            distribution.to_csv(dist_path)
            logger.info("Saved predicted label distribution to %s", dist_path)

    summary = {
        "positive_class": positive_class,
        "k": k,
        "costs": costs,
        "best_cost": best_cost,
        "best_mean_f1": best_mean_f1,
        "n_annotated": int(len(annotated_df)),
        "n_features": int(features.shape[1]),
        "train_metrics": train_metrics,
    }
    summary_path = os.path.join(results_dir, "classification_summary.json")
    with open(summary_path, "w", encoding="utf-8") as f:
        json.dump(summary, f, indent=2)
    logger.info("Saved classification summary to %s", summary_path)

    return {
        **summary,
        "results": results,
        "predictions": predictions,
        "distribution": distribution,
    }


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """
    Main entry point when running this module as a script.
    """
    _ = train_and_evaluate_classifier()


if __name__ == "__main__":
    main()
