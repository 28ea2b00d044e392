"""
Run the passage classification workflow.

This script is a convenience wrapper around
`speech_mining.training.train_classifier.train_and_evaluate_classifier`,
which:

- loads the annotated passages
- builds DTM features
- sweeps the SVM cost C with k-fold cross-validation
- trains the final model with the best C
- labels the whole speech corpus (unless --no-predict is given)
- writes results under experiments/results/ and the model under
  experiments/models/

Usage (from project root):

    python -m scripts.run_classification
    # or
    python scripts/run_classification.py --no-predict
"""

from __future__ import annotations

import argparse
from typing import List, Optional

from speech_mining.data.corpus import DEFAULT_DATA_CONFIG_PATH
from speech_mining.models.svm import DEFAULT_CLASSIFY_CONFIG_PATH
from speech_mining.training.train_classifier import train_and_evaluate_classifier
from speech_mining.utils.training_utils import DEFAULT_TRAIN_CONFIG_PATH, get_logger, load_train_config


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Cross-validate and train the linear SVM passage classifier.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--data-config", default=DEFAULT_DATA_CONFIG_PATH)
    parser.add_argument("--classify-config", default=DEFAULT_CLASSIFY_CONFIG_PATH)
    parser.add_argument("--train-config", default=DEFAULT_TRAIN_CONFIG_PATH)
    parser.add_argument(
        "--no-predict",
        action="store_true",
        help="only run the C sweep and final fit; do not label the speech corpus",
    )
    return parser.parse_args(argv)


def main() -> None:
    args = parse_args()

    train_cfg = load_train_config(args.train_config)
    logger = get_logger(
        name="run_classification",
        config=train_cfg,
        log_file_suffix="run_classification",
    )

    logger.info("=" * 80)
    logger.info("Starting passage classification.")
    logger.info(
        "Configs: data=%s, classify=%s, train=%s",
        args.data_config,
        args.classify_config,
        args.train_config,
    )

    outcome = train_and_evaluate_classifier(
        data_config_path=args.data_config,
        classify_config_path=args.classify_config,
        train_config_path=args.train_config,
        predict_corpus=not args.no_predict,
    )

    logger.info("Cross-validation results:")
    logger.info("\n%s", outcome["results"][["cost", "mean_f1"]])
    logger.info(
        "Selected C=%g (mean F1=%.4f) for class %r.",
        outcome["best_cost"],
        outcome["best_mean_f1"],
        outcome["positive_class"],
    )
    if outcome["distribution"] is not None:
        logger.info("Predicted labels by decade:\n%s", outcome["distribution"])

    logger.info("Passage classification run completed.")


if __name__ == "__main__":
    main()
