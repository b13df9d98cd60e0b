"""Configuration loading for the analysis pipeline."""

import copy
from pathlib import Path

import yaml

from src.config.constants import (
    DEFAULT_NEIGHBORS,
    DEFAULT_SEED,
    DEFAULT_TRAIN_FRACTION,
    MODEL_NAMES,
    ZERO_IMPUTE_COLUMNS,
)
from src.config.errors import ConfigurationError

DEFAULT_CONFIG = {
    "data": {
        "raw_path": "data/raw/diabetes.csv",
        "train_fraction": DEFAULT_TRAIN_FRACTION,
        "random_seed": DEFAULT_SEED,
    },
    "preprocessing": {
        "zero_as_missing_columns": list(ZERO_IMPUTE_COLUMNS),
    },
    "imputation": {
        "neighbors": DEFAULT_NEIGHBORS,
    },
    "models": list(MODEL_NAMES),
    "tuning": {
        "enabled": False,
        "n_trials": 20,
        "cv_folds": 5,
        "neighbor_range": [1, 30],
    },
    "output": {
        "dir": "reports/analysis",
        "save_models": True,
        "save_plots": False,
    },
    "mlflow": {
        "enabled": False,
        "tracking_uri": "sqlite:///mlflow.db",
        "experiment_name": "pima-diabetes-comparison",
    },
    "logging": {
        "log_level": "INFO",
    },
}


def _merge(base: dict, override: dict) -> dict:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def build_config(overrides: dict = None) -> dict:
    """Return the default configuration with ``overrides`` merged on top."""
    config = _merge(DEFAULT_CONFIG, overrides or {})
    validate_config(config)
    return config


def load_config(config_path: Path) -> dict:
    """Load analysis configuration, filling omitted keys with defaults."""
    with open(config_path, "r") as f:
        loaded = yaml.safe_load(f) or {}
    if not isinstance(loaded, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")
    return build_config(loaded)


def validate_config(config: dict) -> None:
    """Check the values the pipeline cannot run without.

    Raises:
        ConfigurationError: On an out-of-range fraction or neighbour count,
            or an unknown model name.
    """
    from src.models.harness import MODEL_REGISTRY

    fraction = config["data"]["train_fraction"]
    if not 0 < fraction < 1:
        raise ConfigurationError(f"train_fraction must be in (0, 1), got {fraction}")

    neighbors = config["imputation"]["neighbors"]
    if not isinstance(neighbors, int) or neighbors < 1:
        raise ConfigurationError(f"imputation.neighbors must be a positive integer, got {neighbors}")

    unknown = [name for name in config["models"] if name not in MODEL_REGISTRY]
    if unknown:
        raise ConfigurationError(
            f"Unknown models: {unknown}. Available: {sorted(MODEL_REGISTRY)}"
        )

    tuning = config["tuning"]
    neighbor_range = tuning["neighbor_range"]
    if not isinstance(neighbor_range, (list, tuple)) or len(neighbor_range) != 2:
        raise ConfigurationError(f"tuning.neighbor_range must be a [low, high] pair, got {neighbor_range}")

    low, high = neighbor_range
    if not 1 <= low <= high:
        raise ConfigurationError(f"tuning.neighbor_range must satisfy 1 <= low <= high, got {[low, high]}")

    if not isinstance(tuning["cv_folds"], int) or tuning["cv_folds"] < 2:
        raise ConfigurationError(f"tuning.cv_folds must be an integer >= 2, got {tuning['cv_folds']}")

    if not isinstance(tuning["n_trials"], int) or tuning["n_trials"] < 1:
        raise ConfigurationError(f"tuning.n_trials must be a positive integer, got {tuning['n_trials']}")
