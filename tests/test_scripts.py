"""
Tests for the command-line wrappers and the run helpers they rely on.
"""

from __future__ import annotations

import logging

from scripts import run_classification, run_frequency_analysis
from speech_mining.utils.training_utils import _parse_log_level


def test_classification_args_default_to_config_dir():
    args = run_classification.parse_args([])
    assert args.data_config == "config/data.yaml"
    assert args.classify_config == "config/classify.yaml"
    assert args.train_config == "config/train.yaml"
    assert args.no_predict is False


def test_classification_args_overrides():
    args = run_classification.parse_args(["--no-predict", "--classify-config", "c.yaml"])
    assert args.no_predict is True
    assert args.classify_config == "c.yaml"


def test_frequency_args_defaults():
    args = run_frequency_analysis.parse_args(["--train-config", "t.yaml"])
    assert args.analysis_config == "config/analysis.yaml"
    assert args.train_config == "t.yaml"


def test_parse_log_level():
    assert _parse_log_level("debug") == logging.DEBUG
    assert _parse_log_level(None) == logging.INFO
    assert _parse_log_level("verbose") == logging.INFO
