"""
Run the frequency analysis of the speech corpus.

This script is a convenience wrapper around
`speech_mining.analysis.frequency_report.run_frequency_analysis`, which
builds the document-term matrix and writes frequency tables (top terms,
grouped and time-binned counts, type/token statistics, key terms) under
experiments/results/.

Usage (from project root):

    python -m scripts.run_frequency_analysis
    # or
    python scripts/run_frequency_analysis.py --analysis-config config/analysis.yaml
"""

from __future__ import annotations

import argparse
from typing import List, Optional

from speech_mining.analysis.frequency_report import (
    DEFAULT_ANALYSIS_CONFIG_PATH,
    run_frequency_analysis,
)
from speech_mining.data.corpus import DEFAULT_DATA_CONFIG_PATH
from speech_mining.utils.training_utils import DEFAULT_TRAIN_CONFIG_PATH, get_logger, load_train_config


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run frequency analysis over the speech corpus.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--data-config", default=DEFAULT_DATA_CONFIG_PATH)
    parser.add_argument("--analysis-config", default=DEFAULT_ANALYSIS_CONFIG_PATH)
    parser.add_argument("--train-config", default=DEFAULT_TRAIN_CONFIG_PATH)
    return parser.parse_args(argv)


def main() -> None:
    args = parse_args()

    train_cfg = load_train_config(args.train_config)
    logger = get_logger(
        name="run_frequency_analysis",
        config=train_cfg,
        log_file_suffix="run_frequency",
    )

    logger.info("=" * 80)
    logger.info("Starting frequency analysis.")

    tables = run_frequency_analysis(
        data_config_path=args.data_config,
        analysis_config_path=args.analysis_config,
        train_config_path=args.train_config,
    )

    logger.info("Top terms:\n%s", tables["top_terms"].head(20))
    logger.info("Produced tables: %s", sorted(tables))
    logger.info("Frequency analysis completed.")


if __name__ == "__main__":
    main()
