"""Uniform fit/predict interface over the compared classifiers."""

import logging
from abc import ABC, abstractmethod

import numpy as np
import pandas as pd
from lightgbm import LGBMClassifier
from sklearn.ensemble import RandomForestClassifier
from sklearn.linear_model import LogisticRegression
from sklearn.neighbors import KNeighborsClassifier
from sklearn.tree import DecisionTreeClassifier

from src.config.constants import DEFAULT_SEED, TARGET_COLUMN
from src.config.errors import ConfigurationError, DataShapeError

logger = logging.getLogger(__name__)


class ModelVariant(ABC):
    """One classifier behind the fit/predict contract.

    ``fit`` takes a table holding the features and the target column and
    returns an opaque fitted model; ``predict`` returns labels aligned with
    the rows of the table it is given.
    """

    name = None
    requires_complete_data = True

    def __init__(self, target_column=TARGET_COLUMN, **params):
        self.target_column = target_column
        self.params = params

    @abstractmethod
    def build_estimator(self):
        """Return an unfitted estimator."""

    def _features(self, table: pd.DataFrame) -> pd.DataFrame:
        features = table.drop(columns=[self.target_column], errors="ignore")
        if self.requires_complete_data and features.isna().any().any():
            nan_cols = features.columns[features.isna().any()].tolist()
            raise DataShapeError(
                f"{self.name} cannot handle missing values; found NaN in {nan_cols}"
            )
        return features

    def fit(self, train: pd.DataFrame):
        """Fit on a table containing the target column."""
        if self.target_column not in train.columns:
            raise DataShapeError(f"Training table has no target column '{self.target_column}'")

        estimator = self.build_estimator()
        estimator.fit(self._features(train), train[self.target_column])

        logger.info(f"Fitted {self.name} on {len(train)} rows")
        return estimator

    def predict(self, model, test: pd.DataFrame) -> np.ndarray:
        """Predict labels for every row of ``test``."""
        return np.asarray(model.predict(self._features(test)))


class DecisionTreeVariant(ModelVariant):
    """Single classification tree; routes missing values itself."""

    name = "decision_tree"
    requires_complete_data = False

    def build_estimator(self):
        params = {"random_state": DEFAULT_SEED, "min_samples_leaf": 5}
        params.update(self.params)
        return DecisionTreeClassifier(**params)


class RandomForestVariant(ModelVariant):
    name = "random_forest"

    def build_estimator(self):
        params = {"n_estimators": 500, "random_state": DEFAULT_SEED}
        params.update(self.params)
        return RandomForestClassifier(**params)


class KNNVariant(ModelVariant):
    """k-nearest-neighbour vote; expects standardized features."""

    name = "knn"

    def build_estimator(self):
        params = {"n_neighbors": 5}
        params.update(self.params)
        return KNeighborsClassifier(**params)


class LogisticRegressionVariant(ModelVariant):
    name = "logistic_regression"

    def build_estimator(self):
        params = {"max_iter": 1000}
        params.update(self.params)
        return LogisticRegression(**params)


class LightGBMVariant(ModelVariant):
    """Gradient-boosted trees."""

    name = "lightgbm"

    def build_estimator(self):
        params = {"random_state": DEFAULT_SEED, "verbose": -1}
        params.update(self.params)
        return LGBMClassifier(**params)


MODEL_REGISTRY = {
    variant.name: variant
    for variant in (
        DecisionTreeVariant,
        RandomForestVariant,
        KNNVariant,
        LogisticRegressionVariant,
        LightGBMVariant,
    )
}


def build_variant(name: str, target_column: str = TARGET_COLUMN, **params) -> ModelVariant:
    """Instantiate a registered variant by name.

    Raises:
        ConfigurationError: If ``name`` is not registered
    """
    try:
        variant_cls = MODEL_REGISTRY[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown model '{name}'. Available: {sorted(MODEL_REGISTRY)}"
        ) from None
    return variant_cls(target_column=target_column, **params)
