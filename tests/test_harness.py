"""Tests for the model fit/predict interface."""

import numpy as np
import pytest

from src.config.errors import ConfigurationError, DataShapeError
from src.data.missingness import normalize_missing
from src.data.split import make_random_state, split_aligned
from src.features.preprocess import impute_knn
from src.models.harness import MODEL_REGISTRY, DecisionTreeVariant, ModelVariant, build_variant

FAST_PARAMS = {
    "random_forest": {"n_estimators": 20},
    "lightgbm": {"n_estimators": 20, "min_child_samples": 5},
}


@pytest.fixture
def splits(diabetes_df):
    normalized = normalize_missing(diabetes_df)
    features = [col for col in normalized.columns if col != "Outcome"]
    imputed = impute_knn(normalized, 5, features)
    return split_aligned([normalized, imputed], 0.7, make_random_state(0))


class TestModelVariants:
    """Test every registered variant against the same contract."""

    @pytest.mark.parametrize("name", sorted(MODEL_REGISTRY))
    def test_predictions_aligned_with_test_rows(self, name, splits):
        """Test one binary label per test row."""
        _, imputed = splits
        variant = build_variant(name, **FAST_PARAMS.get(name, {}))

        model = variant.fit(imputed.train)
        predictions = variant.predict(model, imputed.test)

        assert isinstance(variant, ModelVariant)
        assert len(predictions) == len(imputed.test)
        assert set(np.unique(predictions)) <= {0, 1}

    def test_decision_tree_accepts_missing_values(self, splits):
        """Test that the tree trains on the table with NaN kept."""
        raw, _ = splits
        assert raw.train.isna().any().any()

        variant = DecisionTreeVariant()
        predictions = variant.predict(variant.fit(raw.train), raw.test)

        assert len(predictions) == len(raw.test)

    @pytest.mark.parametrize("name", ["random_forest", "knn", "logistic_regression"])
    def test_complete_data_variants_reject_missing(self, name, splits):
        """Test that NaN input is refused before reaching the estimator."""
        raw, _ = splits

        with pytest.raises(DataShapeError, match="missing values"):
            build_variant(name).fit(raw.train)

    def test_missing_target_raises(self, splits):
        """Test that fitting needs the target column."""
        _, imputed = splits

        with pytest.raises(DataShapeError, match="target"):
            build_variant("knn").fit(imputed.train.drop(columns=["Outcome"]))

    def test_params_forwarded(self):
        """Test that keyword params reach the estimator."""
        estimator = build_variant("knn", n_neighbors=11).build_estimator()

        assert estimator.n_neighbors == 11

    def test_unknown_model_raises(self):
        """Test that unregistered names are a configuration error."""
        with pytest.raises(ConfigurationError, match="Unknown model"):
            build_variant("svm")
