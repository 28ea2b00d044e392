"""
Text preprocessing utilities for speech analysis.

This module implements the normalization applied before building a
document-term matrix:

- lowercasing
- punctuation removal
- number removal
- extra whitespace normalization
- tokenization
- stopword removal
- stemming

We provide helpers that operate on individual strings as well as on
pandas Series. Configuration is driven by the "preprocessing" section of
config/data.yaml, so the pipeline can be tweaked without changing this
code.
"""

from __future__ import annotations

import logging
import re
import string
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Optional, Set

import pandas as pd
from nltk.corpus import stopwords as nltk_stopwords
from nltk.stem import PorterStemmer, SnowballStemmer
from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS as SKLEARN_EN_STOPWORDS

from speech_mining.data.corpus import load_data_config, DEFAULT_DATA_CONFIG_PATH


logger = logging.getLogger(__name__)

_PUNCT_TABLE = str.maketrans({ch: " " for ch in string.punctuation + "‘’“”–—"})

STEMMING_ALGORITHMS = ("snowball", "porter")


# ---------------------------------------------------------------------------
# Basic text cleaning
# ---------------------------------------------------------------------------


def clean_text(
    text: str,
    lowercase: bool = True,
    remove_punctuation: bool = True,
    remove_numbers: bool = True,
    strip_whitespace: bool = True,
) -> str:
    """
    Apply basic normalization to a raw text string.

    Parameters
    ----------
    text : str
        Raw input text.
    lowercase : bool
        Convert text to lowercase if True.
    remove_punctuation : bool
        Remove punctuation characters if True.
    remove_numbers : bool
        Remove numeric characters if True.
    strip_whitespace : bool
        Collapse multiple spaces and strip leading/trailing spaces.

    Returns
    -------
    str
        Cleaned text string.
    """
    if not isinstance(text, str):
        text = str(text)

    if lowercase:
        text = text.lower()

    if remove_punctuation:
        # Replace with space so we don't accidentally join words.
        text = text.translate(_PUNCT_TABLE)

    if remove_numbers:
        text = re.sub(r"\d+", " ", text)

    if strip_whitespace:
        text = re.sub(r"\s+", " ", text).strip()

    return text


# ---------------------------------------------------------------------------
# Tokenization
# ---------------------------------------------------------------------------


def tokenize_text(text: str) -> List[str]:
    """
    Whitespace tokenizer for pre-cleaned text.

    Parameters
    ----------
    text : str
        Text string (assumed to be cleaned).

    Returns
    -------
    List[str]
        List of tokens.
    """
    if not text:
        return []
    return text.split()


# ---------------------------------------------------------------------------
# Stopwords
# ---------------------------------------------------------------------------


@lru_cache(maxsize=8)
def _nltk_stopwords(language: str) -> frozenset:
    # Only successful lookups are cached; LookupError propagates uncached.
    return frozenset(nltk_stopwords.words(language))


def _base_stopwords(source: str, language: str) -> frozenset:
    if source == "nltk":
        try:
            return _nltk_stopwords(language)
        except LookupError:
            # Corpus not downloaded; users may need nltk.download("stopwords").
            logger.warning(
                "NLTK stopwords for %r not available; using scikit-learn English list.",
                language,
            )
            return frozenset(SKLEARN_EN_STOPWORDS)
    if source == "sklearn":
        return frozenset(SKLEARN_EN_STOPWORDS)
    raise ValueError(f"Unknown stopword source: {source!r} (expected 'sklearn' or 'nltk')")


def get_stopword_set(
    source: str = "sklearn",
    language: str = "english",
    extra: Optional[Iterable[str]] = None,
) -> Set[str]:
    """
    Build a set of stopwords.

    Parameters
    ----------
    source : str
        "sklearn" for scikit-learn's English list, or "nltk" for the NLTK
        stopwords corpus in the given language.
    language : str
        Language name for NLTK, e.g. "english".
    extra : Optional[Iterable[str]]
        Additional words to treat as stopwords (lowercased).

    Returns
    -------
    Set[str]
        Set of stopwords.
    """
    words = set(_base_stopwords((source or "sklearn").lower(), (language or "english").lower()))
    if extra:
        words.update(str(w).lower() for w in extra)
    return words


def remove_stopwords(tokens: Iterable[str], stopword_set: Set[str]) -> List[str]:
    """
    Remove stopwords from a list of tokens.
    """
    if not stopword_set:
        return list(tokens)
    return [t for t in tokens if t not in stopword_set]


# ---------------------------------------------------------------------------
# Stemming
# ---------------------------------------------------------------------------


@lru_cache(maxsize=4)
def _build_stemmer(algorithm: str):
    algo = (algorithm or "snowball").lower()
    if algo == "snowball":
        return SnowballStemmer("english")
    if algo == "porter":
        return PorterStemmer()
    raise ValueError(
        f"Unknown stemming algorithm: {algorithm!r} (expected one of {STEMMING_ALGORITHMS})"
    )


def stem_tokens(tokens: Iterable[str], algorithm: str = "snowball") -> List[str]:
    """
    Apply stemming to a list of tokens.

    Parameters
    ----------
    tokens : Iterable[str]
        Input tokens.
    algorithm : str
        Stemming algorithm ("snowball" or "porter").

    Returns
    -------
    List[str]
        Stemmed tokens.
    """
    stemmer = _build_stemmer(algorithm)
    return [stemmer.stem(t) for t in tokens]


# ---------------------------------------------------------------------------
# High-level preprocessing functions
# ---------------------------------------------------------------------------


def _get_preprocessing_cfg(
    config_path: str = DEFAULT_DATA_CONFIG_PATH,
) -> Dict[str, Any]:
    cfg = load_data_config(config_path)
    return cfg["preprocessing"] or {}


def tokens_from_config(text: str, cfg: Dict[str, Any]) -> List[str]:
    """
    Run the preprocessing pipeline on one text using an already-loaded
    "preprocessing" config section.
    """
    text_clean = clean_text(
        text=text,
        lowercase=bool(cfg.get("lowercase", True)),
        remove_punctuation=bool(cfg.get("remove_punctuation", True)),
        remove_numbers=bool(cfg.get("remove_numbers", True)),
        strip_whitespace=bool(cfg.get("strip_whitespace", True)),
    )
    tokens = tokenize_text(text_clean)
    if not tokens:
        return []

    sw_cfg = cfg.get("stopwords", {}) or {}
    if bool(sw_cfg.get("enabled", True)):
        sw_set = get_stopword_set(
            source=sw_cfg.get("source", "sklearn"),
            language=sw_cfg.get("language", "english"),
            extra=sw_cfg.get("extra") or None,
        )
        tokens = remove_stopwords(tokens, sw_set)

    if not tokens:
        return []

    stem_cfg = cfg.get("stemming", {}) or {}
    if bool(stem_cfg.get("enabled", True)):
        tokens = stem_tokens(tokens, algorithm=stem_cfg.get("algorithm", "snowball"))

    return tokens


def preprocess_text_to_tokens(
    text: str,
    config_path: str = DEFAULT_DATA_CONFIG_PATH,
) -> List[str]:
    """
    Full preprocessing pipeline, returning tokens.

    The pipeline is controlled via the 'preprocessing' section in
    config/data.yaml and includes cleaning, whitespace tokenization,
    stopword removal (if enabled) and stemming (if enabled).

    Parameters
    ----------
    text : str
        Raw input text.
    config_path : str
        Path to the data YAML configuration.

    Returns
    -------
    List[str]
        Preprocessed tokens.
    """
    return tokens_from_config(text, _get_preprocessing_cfg(config_path))


def preprocess_text_to_string(
    text: str,
    config_path: str = DEFAULT_DATA_CONFIG_PATH,
) -> str:
    """
    Preprocess a text string and return the tokens joined by single
    spaces, suitable for a whitespace-tokenizing vectorizer.
    """
    return " ".join(preprocess_text_to_tokens(text, config_path=config_path))


def preprocess_series_to_tokens(
    series: pd.Series,
    config_path: str = DEFAULT_DATA_CONFIG_PATH,
) -> pd.Series:
    """
    Apply the preprocessing pipeline to a pandas Series of text and return
    a Series of token lists. The config is read once for the whole Series.
    """
    cfg = _get_preprocessing_cfg(config_path)
    return series.astype(str).apply(lambda x: tokens_from_config(x, cfg))


def preprocess_series_to_string(
    series: pd.Series,
    config_path: str = DEFAULT_DATA_CONFIG_PATH,
) -> pd.Series:
    """
    Apply the preprocessing pipeline to a pandas Series of text and return
    a new Series of processed strings.
    """
    return preprocess_series_to_tokens(series, config_path=config_path).apply(" ".join)
