"""Shared fixtures: a small synthetic table shaped like the Pima dataset."""

import numpy as np
import pandas as pd
import pytest

from src.config.settings import build_config

# Zero counts planted in the synthetic table; every row missing one of the
# other columns also misses Insulin
PLANTED_ZEROS = {
    "Glucose": [7],
    "BloodPressure": [0, 1, 2, 3, 4],
    "SkinThickness": list(range(25)),
    "Insulin": list(range(40)),
    "BMI": [5, 6],
}


@pytest.fixture
def diabetes_df():
    rng = np.random.default_rng(7)
    n = 120

    glucose = np.clip(rng.normal(120, 30, n), 50, 200).round()
    bmi = np.clip(rng.normal(32, 6, n), 18, 60).round(1)
    score = glucose / 30 + bmi / 6 + rng.normal(0, 1, n)

    df = pd.DataFrame({
        "Pregnancies": rng.integers(0, 11, n),
        "Glucose": glucose,
        "BloodPressure": np.clip(rng.normal(70, 10, n), 40, 110).round(),
        "SkinThickness": np.clip(rng.normal(25, 8, n), 7, 60).round(),
        "Insulin": np.clip(rng.normal(100, 40, n), 15, 400).round(),
        "BMI": bmi,
        "DiabetesPedigreeFunction": rng.uniform(0.08, 1.5, n).round(3),
        "Age": rng.integers(21, 70, n),
        "Outcome": (score > np.median(score)).astype(int),
    })

    for col, rows in PLANTED_ZEROS.items():
        df.loc[rows, col] = 0.0

    return df


@pytest.fixture
def analysis_config(tmp_path):
    return build_config({
        "data": {"train_fraction": 0.7, "random_seed": 42},
        "output": {"dir": str(tmp_path / "reports"), "save_plots": False},
        "mlflow": {"tracking_uri": f"sqlite:///{tmp_path / 'mlflow.db'}"},
        "logging": {"log_level": "WARNING"},
    })


@pytest.fixture
def planted_zeros():
    return PLANTED_ZEROS
