"""
Shared run helpers for the frequency and classification pipelines.

config/train.yaml holds everything that is not about the text itself:
output directories, the random seed, logging, and model saving. The
helpers here read that file and turn its "logging" section into a
configured logger.
"""

from __future__ import annotations

import logging
import os
import random
from typing import Any, Dict, Optional

import numpy as np
import yaml


DEFAULT_TRAIN_CONFIG_PATH = "config/train.yaml"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def load_train_config(config_path: str = DEFAULT_TRAIN_CONFIG_PATH) -> Dict[str, Any]:
    """
    Read config/train.yaml.

    Raises FileNotFoundError for a missing file and ValueError for an
    empty one. Sections are not validated here; each pipeline looks up
    the keys it uses.
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Train config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f)

    if cfg is None:
        raise ValueError(f"Train config file is empty or invalid: {config_path}")
    return cfg


def ensure_dir_exists(path: str) -> None:
    if path:
        os.makedirs(path, exist_ok=True)


def seed_everything(seed: int = 42) -> None:
    """Seed `random` and NumPy so fold training is repeatable."""
    random.seed(seed)
    np.random.seed(seed)


def _parse_log_level(level_str: Optional[str]) -> int:
    name = str(level_str or "INFO").upper()
    return getattr(logging, name) if name in _LEVELS else logging.INFO


def _log_file_path(config: Dict[str, Any], suffix: Optional[str]) -> str:
    logging_cfg = config.get("logging", {}) or {}
    logs_dir = (config.get("paths", {}) or {}).get("logs_dir", "experiments/logs")
    ensure_dir_exists(logs_dir)

    stem = logging_cfg.get("file_prefix", "speech_mining")
    if suffix:
        stem = f"{stem}_{suffix}"
    return os.path.join(logs_dir, f"{stem}.log")


def get_logger(
    name: str,
    config: Dict[str, Any],
    log_file_suffix: Optional[str] = None,
) -> logging.Logger:
    """
    Logger writing to stderr and, when logging.to_file is set, to
    <logs_dir>/<file_prefix>_<log_file_suffix>.log.

    A logger that already has handlers is returned unchanged, so calling
    this twice with the same name never duplicates output.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logging_cfg = config.get("logging", {}) or {}
    level = _parse_log_level(logging_cfg.get("level"))
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    handlers = [logging.StreamHandler()]
    if bool(logging_cfg.get("to_file", True)):
        handlers.append(
            logging.FileHandler(_log_file_path(config, log_file_suffix), encoding="utf-8")
        )

    logger.setLevel(level)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.propagate = False
    return logger
