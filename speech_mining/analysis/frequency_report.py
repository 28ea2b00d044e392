"""
Frequency analysis pipeline for the speech corpus.

This module:

- loads the speech corpus and builds its document-term matrix
- computes the most frequent terms of the corpus
- aggregates term counts per configured grouping column (e.g. president)
- tracks selected terms over time (binned years)
- reports type/token statistics and vocabulary growth
- extracts key terms for a target group against the rest of the corpus
- saves every table as CSV under experiments/results/

This module is designed to be callable both as a library function and
as a standalone script (via `python -m speech_mining.analysis.frequency_report`).
"""

from __future__ import annotations

import os
from typing import Any, Dict, List

import pandas as pd
import yaml

from speech_mining.analysis.frequency import (
    term_frequencies_by_group,
    term_frequencies_over_time,
    top_terms,
    top_terms_per_group,
    type_token_statistics,
    vocabulary_growth,
)
from speech_mining.analysis.keyness import keyness_for_group
from speech_mining.data.corpus import DEFAULT_DATA_CONFIG_PATH, load_speech_corpus
from speech_mining.features.dtm import build_dtm, get_vocabulary
from speech_mining.features.preprocessing import (
    preprocess_series_to_tokens,
    preprocess_text_to_string,
)
from speech_mining.utils.training_utils import (
    DEFAULT_TRAIN_CONFIG_PATH,
    ensure_dir_exists,
    get_logger,
    load_train_config,
)


DEFAULT_ANALYSIS_CONFIG_PATH = "config/analysis.yaml"


def load_analysis_config(config_path: str = DEFAULT_ANALYSIS_CONFIG_PATH) -> Dict[str, Any]:
    """
    Load and return the analysis configuration dictionary.

    Raises
    ------
    FileNotFoundError
        If the YAML file does not exist.
    ValueError
        If the YAML file is empty or cannot be parsed.
    KeyError
        If the "frequency" section is missing.
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Analysis config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f)

    if cfg is None:
        raise ValueError(f"Analysis config file is empty or invalid: {config_path}")
    if "frequency" not in cfg:
        raise KeyError(f'Missing "frequency" section in analysis config: {config_path}')

    return cfg


def _normalize_terms(raw_terms: List[str], vocab_set: set, data_config_path: str, logger) -> List[str]:
    """
    Map raw tracked words onto DTM terms by running them through the
    corpus preprocessing. Words that vanish (stopwords) or never occur are
    dropped with a warning.
    """
    terms: List[str] = []
    for word in raw_terms:
        term = preprocess_text_to_string(str(word), config_path=data_config_path)
        if not term:
            logger.warning("Tracked word %r is removed by preprocessing; skipping.", word)
        elif term not in vocab_set:
            logger.warning("Tracked word %r (term %r) not in vocabulary; skipping.", word, term)
        elif term not in terms:
            terms.append(term)
    return terms


def run_frequency_analysis(
    data_config_path: str = DEFAULT_DATA_CONFIG_PATH,
    analysis_config_path: str = DEFAULT_ANALYSIS_CONFIG_PATH,
    train_config_path: str = DEFAULT_TRAIN_CONFIG_PATH,
) -> Dict[str, pd.DataFrame]:
    """
    End-to-end frequency analysis of the speech corpus.

    Parameters
    ----------
    data_config_path : str
        Path to config/data.yaml.
    analysis_config_path : str
        Path to config/analysis.yaml.
    train_config_path : str
        Path to config/train.yaml (paths and logging).

    Returns
    -------
    Dict[str, pd.DataFrame]
        Tables keyed by name: "top_terms", "type_token", "vocabulary_growth",
        "by_<column>" and "top_terms_by_<column>" for each grouping column,
        "over_time" when the corpus is dated and terms are tracked, and
        "keyness" when a keyness target group is configured. Each table is
        also written to results_dir/frequency_<name>.csv.
    """
    train_cfg = load_train_config(train_config_path)
    freq_cfg = load_analysis_config(analysis_config_path)["frequency"] or {}

    logger = get_logger(name="frequency_analysis", config=train_cfg, log_file_suffix="frequency")

    corpus_df = load_speech_corpus(config_path=data_config_path)
    logger.info("Loaded corpus with %d documents.", len(corpus_df))

    dtm, vectorizer = build_dtm(corpus_df["text"], config_path=data_config_path)
    vocab = get_vocabulary(vectorizer)
    logger.info("DTM shape: %s (documents x terms)", dtm.shape)

    top_n = int(freq_cfg.get("top_n", 50))
    relative = bool(freq_cfg.get("relative", False))

    tables: Dict[str, pd.DataFrame] = {}
    tables["top_terms"] = top_terms(dtm, vocab, n=top_n)

    tokens = preprocess_series_to_tokens(corpus_df["text"], config_path=data_config_path)
    tables["type_token"] = type_token_statistics(tokens.tolist(), corpus_df["doc_id"].tolist())
    tables["vocabulary_growth"] = vocabulary_growth(tokens.tolist())

    tracked = _normalize_terms(
        list(freq_cfg.get("tracked_terms") or []), set(vocab), data_config_path, logger
    )

    for column in freq_cfg.get("group_columns") or []:
        if column not in corpus_df.columns:
            raise ValueError(
                f"Group column '{column}' not in corpus. Available columns: {list(corpus_df.columns)}"
            )
        groups = corpus_df[column].astype(str)
        tables[f"by_{column}"] = term_frequencies_by_group(
            dtm, vocab, groups, terms=tracked or None, relative=relative
        )
        tables[f"top_terms_by_{column}"] = top_terms_per_group(dtm, vocab, groups, n=min(top_n, 20))

    time_column = freq_cfg.get("time_column", "year")
    if tracked and time_column in corpus_df.columns:
        tables["over_time"] = term_frequencies_over_time(
            dtm,
            vocab,
            corpus_df[time_column],
            tracked,
            bin_size=int(freq_cfg.get("time_bin_size", 10)),
            relative=relative,
        )

    key_cfg = freq_cfg.get("keyness", {}) or {}
    target_group = key_cfg.get("target_group")
    if target_group is not None:
        key_column = key_cfg.get("group_column", "president")
        if key_column not in corpus_df.columns:
            raise ValueError(
                f"Keyness column '{key_column}' not in corpus. Available columns: {list(corpus_df.columns)}"
            )
        tables["keyness"] = keyness_for_group(
            dtm,
            vocab,
            corpus_df[key_column].tolist(),
            target_group,
            top_n=key_cfg.get("top_n"),
        )
        logger.info("Computed keyness for %s=%r.", key_column, target_group)

    results_dir = train_cfg["paths"]["results_dir"]
    ensure_dir_exists(results_dir)
    for name, table in tables.items():
        path = os.path.join(results_dir, f"frequency_{name}.csv")
        keep_index = name.startswith("by_") or name == "over_time"
        table.to_csv(path, index=keep_index)
        logger.info("Saved %s table to %s", name, path)

    return tables


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """
    Main entry point when running this module as a script.
    """
    _ = run_frequency_analysis()


if __name__ == "__main__":
    main()
