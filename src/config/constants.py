"""Shared constants for the diabetes missingness and model comparison analysis."""

# Predictor columns, in file order
REQUIRED_COLUMNS = [
    "Pregnancies",
    "Glucose",
    "BloodPressure",
    "SkinThickness",
    "Insulin",
    "BMI",
    "DiabetesPedigreeFunction",
    "Age",
]

# Target column name
TARGET_COLUMN = "Outcome"

ALL_COLUMNS = REQUIRED_COLUMNS + [TARGET_COLUMN]

# Columns where zero values should be treated as missing (biological impossibility)
ZERO_IMPUTE_COLUMNS = [
    "Glucose",
    "BloodPressure",
    "SkinThickness",
    "Insulin",
    "BMI",
]

POSITIVE_LABEL = 1
NEGATIVE_LABEL = 0

DEFAULT_SEED = 123
DEFAULT_TRAIN_FRACTION = 0.7
DEFAULT_NEIGHBORS = 5

# Model variants compared by default
MODEL_NAMES = [
    "decision_tree",
    "random_forest",
    "knn",
    "logistic_regression",
]
