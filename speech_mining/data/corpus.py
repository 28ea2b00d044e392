"""
Corpus loading utilities for the presidential speeches data.

This module is responsible for:
- reading the data configuration from config/data.yaml
- loading the speech corpus CSV into a pandas DataFrame
- normalizing id, text, and date columns to standard names
  ("doc_id", "text", "date") and deriving "year" and "decade"
- loading the annotated passages used to train the classifier

The resulting DataFrames are ready to be used by:
- DTM construction and frequency analysis
- SVM cross-validation and corpus-wide prediction
"""

from __future__ import annotations

import os
from typing import Any, Dict, Iterable

import pandas as pd
import yaml


DEFAULT_DATA_CONFIG_PATH = "config/data.yaml"


def _load_yaml(path: str) -> Dict[str, Any]:
    """
    Load a YAML configuration file and return it as a dictionary.

    Raises
    ------
    FileNotFoundError
        If the YAML file does not exist.
    ValueError
        If the YAML file is empty or cannot be parsed.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f)

    if cfg is None:
        raise ValueError(f"Config file is empty or invalid: {path}")

    return cfg


def load_data_config(config_path: str = DEFAULT_DATA_CONFIG_PATH) -> Dict[str, Any]:
    """
    Load and return the full data configuration dictionary.

    Parameters
    ----------
    config_path : str, optional
        Path to the data YAML configuration file.

    Returns
    -------
    Dict[str, Any]
        Dictionary containing the "dataset", "annotated", "preprocessing",
        and "dtm" sections.
    """
    cfg = _load_yaml(config_path)

    for section in ("dataset", "annotated", "preprocessing", "dtm"):
        if section not in cfg:
            raise KeyError(f'Missing "{section}" section in data config: {config_path}')

    return cfg


def _read_csv_checked(csv_path: str, required: Iterable[str]) -> pd.DataFrame:
    if not os.path.exists(csv_path):
        raise FileNotFoundError(f"Corpus CSV not found at: {csv_path}")

    df = pd.read_csv(csv_path)

    missing_cols = [col for col in required if col not in df.columns]
    if missing_cols:
        raise ValueError(
            f"Missing required column(s) in corpus CSV: {missing_cols}. "
            f"Available columns: {list(df.columns)}"
        )
    return df


def load_speech_corpus(
    config_path: str = DEFAULT_DATA_CONFIG_PATH,
) -> pd.DataFrame:
    """
    Load the speech corpus according to the configuration.

    This function:
    - reads the CSV specified in the "dataset" section
    - ensures the text (and, if configured, id and date) columns exist
    - optionally drops rows with missing text
    - normalizes columns to standard names: "doc_id", "text", "date"
    - adds integer "year" and "decade" columns when a date column exists

    Parameters
    ----------
    config_path : str, optional
        Path to the data YAML configuration file.

    Returns
    -------
    pd.DataFrame
        DataFrame with columns ["doc_id", "text", ...] plus "date", "year"
        and "decade" when the corpus is dated. Other columns (e.g.
        "president", "party") are passed through unchanged.

    Raises
    ------
    FileNotFoundError
        If the corpus CSV cannot be found.
    ValueError
        If required columns are missing or dates cannot be parsed.
    """
    cfg = load_data_config(config_path)
    dataset_cfg = cfg["dataset"]

    csv_path = dataset_cfg.get("path", "data/raw/sotu.csv")
    id_column = dataset_cfg.get("id_column")
    text_column = dataset_cfg.get("text_column", "text")
    date_column = dataset_cfg.get("date_column")
    drop_na_text = bool(dataset_cfg.get("drop_na_text", True))

    required = [c for c in (id_column, text_column, date_column) if c]
    df = _read_csv_checked(csv_path, required)

    if drop_na_text:
        df = df.dropna(subset=[text_column])

    renames = {text_column: "text"}
    if id_column:
        renames[id_column] = "doc_id"
    if date_column:
        renames[date_column] = "date"
    df = df.rename(columns=renames).reset_index(drop=True)

    if not id_column:
        df.insert(0, "doc_id", [f"doc_{i + 1}" for i in range(len(df))])

    df["doc_id"] = df["doc_id"].astype(str)
    df["text"] = df["text"].fillna("").astype(str)

    if date_column:
        dates = pd.to_datetime(df["date"].astype(str), errors="coerce")
        if dates.isna().any():
            bad = df.loc[dates.isna(), "date"].head(5).tolist()
            raise ValueError(f"Unparseable values in date column '{date_column}': {bad}")
        df["year"] = dates.dt.year.astype(int)
        df["decade"] = (df["year"] // 10) * 10

    return df


def load_annotated_corpus(
    config_path: str = DEFAULT_DATA_CONFIG_PATH,
) -> pd.DataFrame:
    """
    Load the annotated passages used for classifier training.

    Row order is preserved: cross-validation assigns folds by row
    position, so shuffling here would change fold membership.

    Returns
    -------
    pd.DataFrame
        DataFrame with columns ["text", "label", ...]; labels are strings.
    """
    cfg = load_data_config(config_path)
    ann_cfg = cfg["annotated"]

    csv_path = ann_cfg.get("path", "data/raw/sotu_paragraphs_annotated.csv")
    text_column = ann_cfg.get("text_column", "text")
    label_column = ann_cfg.get("label_column", "label")

    df = _read_csv_checked(csv_path, [text_column, label_column])

    df = df.dropna(subset=[label_column])
    df = df.rename(columns={text_column: "text", label_column: "label"})
    df["text"] = df["text"].fillna("").astype(str)
    df["label"] = df["label"].astype(str)

    df = df.reset_index(drop=True)
    if df.empty:
        raise ValueError(f"No annotated rows with a label in: {csv_path}")

    return df


def get_positive_class(config_path: str = DEFAULT_DATA_CONFIG_PATH) -> str:
    """Return the positive class used for F-measure computation."""
    cfg = load_data_config(config_path)
    positive = cfg["annotated"].get("positive_class")
    if positive is None:
        raise KeyError(f'No "annotated.positive_class" set in data config: {config_path}')
    return str(positive)
