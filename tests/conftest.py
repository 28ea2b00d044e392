"""
Shared fixtures: small synthetic corpora and config files written to a
temporary directory, so the suite runs without downloaded data.
"""

from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest
import yaml


REPO_ROOT = Path(__file__).resolve().parents[1]

SPEECHES = [
    ("d1", "A", "1961-01-20", "War and peace. The war abroad must end; peace with our allies."),
    ("d2", "A", "1962-01-11", "Taxes and jobs for the economy. Jobs, jobs, jobs in 1962!"),
    ("d3", "B", "1981-01-20", "The economy needs lower taxes. Taxes hurt jobs."),
    ("d4", "B", "1982-01-26", "Peace through strength. Our troops keep the peace."),
    ("d5", "C", "1993-01-20", "Jobs and the economy. Schools and the budget."),
    ("d6", "C", "1994-01-25", "Health care for every family. Health care today."),
]

FOREIGN_TEXTS = [
    "Our troops abroad defend allies and treaty partners.",
    "The treaty with foreign allies secures peace abroad.",
    "Diplomacy and troops protect allies overseas.",
    "Foreign treaty partners and allies trust our diplomacy.",
]

DOMESTIC_TEXTS = [
    "The budget cuts taxes for schools and workers.",
    "Lower taxes help workers and local schools.",
    "Schools need budget support and fair taxes.",
    "Workers pay taxes that fund the budget and schools.",
]


def _write_yaml(path: Path, data: dict) -> str:
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    return str(path)


@pytest.fixture
def speech_csv(tmp_path: Path) -> Path:
    path = tmp_path / "speeches.csv"
    pd.DataFrame(SPEECHES, columns=["id", "president", "date", "speech"]).to_csv(path, index=False)
    return path


@pytest.fixture
def annotated_csv(tmp_path: Path) -> Path:
    rows = []
    for i in range(20):
        if i % 2 == 0:
            rows.append({"passage": FOREIGN_TEXTS[(i // 2) % 4], "code": "FOREIGN"})
        else:
            rows.append({"passage": DOMESTIC_TEXTS[(i // 2) % 4], "code": "DOMESTIC"})
    path = tmp_path / "annotated.csv"
    pd.DataFrame(rows).to_csv(path, index=False)
    return path


@pytest.fixture
def data_config(tmp_path: Path, speech_csv: Path, annotated_csv: Path) -> str:
    cfg = {
        "dataset": {
            "path": str(speech_csv),
            "id_column": "id",
            "text_column": "speech",
            "date_column": "date",
            "drop_na_text": True,
        },
        "annotated": {
            "path": str(annotated_csv),
            "text_column": "passage",
            "label_column": "code",
            "positive_class": "FOREIGN",
        },
        "preprocessing": {
            "lowercase": True,
            "remove_punctuation": True,
            "remove_numbers": True,
            "strip_whitespace": True,
            "stopwords": {"enabled": True, "source": "sklearn", "language": "english", "extra": []},
            "stemming": {"enabled": True, "algorithm": "snowball"},
        },
        "dtm": {
            "ngram_range": [1, 1],
            "min_df": 1,
            "max_df": 1.0,
            "max_features": None,
            "weighting": "tf",
        },
    }
    return _write_yaml(tmp_path / "data.yaml", cfg)


@pytest.fixture
def classify_config(tmp_path: Path) -> str:
    cfg = {
        "general": {"random_state": 42},
        "svm": {"class_weight": None, "loss": "squared_hinge", "max_iter": 10000, "tol": 1e-4, "fit_intercept": True},
        "cross_validation": {"k": 5, "costs": [0.1, 1, 10], "positive_class": None},
    }
    return _write_yaml(tmp_path / "classify.yaml", cfg)


@pytest.fixture
def analysis_config(tmp_path: Path) -> str:
    cfg = {
        "frequency": {
            "top_n": 10,
            "group_columns": ["president"],
            "time_column": "year",
            "time_bin_size": 10,
            "tracked_terms": ["war", "jobs", "taxes", "the", "zebra"],
            "relative": False,
            "keyness": {"group_column": "president", "target_group": "A", "top_n": 5},
        }
    }
    return _write_yaml(tmp_path / "analysis.yaml", cfg)


@pytest.fixture
def train_config(tmp_path: Path) -> str:
    out = tmp_path / "experiments"
    cfg = {
        "general": {"random_state": 42},
        "paths": {
            "artifacts_dir": str(out / "artifacts"),
            "results_dir": str(out / "results"),
            "models_dir": str(out / "models"),
            "logs_dir": str(out / "logs"),
        },
        "logging": {"level": "INFO", "to_file": False, "file_prefix": "test"},
        "save": {"save_models": True, "overwrite_existing": True},
    }
    return _write_yaml(tmp_path / "train.yaml", cfg)


@pytest.fixture
def write_yaml(tmp_path: Path):
    """Write an arbitrary dict as YAML under tmp_path and return the path."""

    def _write(name: str, data: dict) -> str:
        return _write_yaml(tmp_path / name, data)

    return _write
