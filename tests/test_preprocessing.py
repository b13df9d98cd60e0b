"""Tests for nearest-neighbour imputation."""

import numpy as np
import pandas as pd
import pytest

from src.config.constants import REQUIRED_COLUMNS
from src.config.errors import ConfigurationError, DataShapeError
from src.data.missingness import normalize_missing
from src.features.preprocess import NeighborImputer, _partial_distances, impute_knn


class TestNeighborImputer:
    """Test NeighborImputer transformer."""

    def test_uses_nearest_row(self):
        """Test that k=1 copies the standardized value of the closest row."""
        X = pd.DataFrame({"a": [1.0, 2.0, 3.0, 10.0], "b": [1.0, 2.0, np.nan, 10.0]})

        imputed = NeighborImputer(n_neighbors=1, columns=["a", "b"]).fit_transform(X)

        assert imputed.loc[2, "b"] == pytest.approx(imputed.loc[1, "b"])

    def test_averages_k_nearest_rows(self):
        """Test that k=2 averages the two closest rows."""
        X = pd.DataFrame({"a": [1.0, 2.0, 3.0, 10.0], "b": [1.0, 2.0, np.nan, 10.0]})

        imputed = NeighborImputer(n_neighbors=2, columns=["a", "b"]).fit_transform(X)

        expected = (imputed.loc[0, "b"] + imputed.loc[1, "b"]) / 2
        assert imputed.loc[2, "b"] == pytest.approx(expected)

    def test_all_other_rows_as_donors(self):
        """Test k = N-1: present columns round-trip, missing cell gets the column mean."""
        X = pd.DataFrame({
            "a": [4.0, 8.0, 15.0, 16.0, 23.0, 42.0],
            "b": [1.0, np.nan, 3.0, 5.0, 7.0, 9.0],
        })

        imputer = NeighborImputer(n_neighbors=len(X) - 1, columns=["a", "b"])
        restored = imputer.inverse_transform(imputer.fit_transform(X))

        pd.testing.assert_series_equal(restored["a"], X["a"])
        assert restored.loc[1, "b"] == pytest.approx(X["b"].mean())

    def test_output_is_standardized(self, diabetes_df):
        """Test that a fully present column has zero mean and unit variance."""
        imputed = impute_knn(normalize_missing(diabetes_df), n_neighbors=5)

        assert imputed["Age"].mean() == pytest.approx(0.0, abs=1e-9)
        assert imputed["Age"].std(ddof=0) == pytest.approx(1.0)

    def test_no_missing_left(self, diabetes_df):
        """Test that every missing cell is filled."""
        imputed = impute_knn(normalize_missing(diabetes_df), n_neighbors=5)

        assert not imputed.isna().any().any()

    def test_target_passes_through(self, diabetes_df):
        """Test that columns outside the imputed set are untouched."""
        normalized = normalize_missing(diabetes_df)

        imputed = impute_knn(normalized, n_neighbors=5, columns=REQUIRED_COLUMNS)

        pd.testing.assert_series_equal(imputed["Outcome"], normalized["Outcome"])
        pd.testing.assert_index_equal(imputed.index, normalized.index)

    def test_deterministic(self, diabetes_df):
        """Test that repeated runs give identical tables."""
        normalized = normalize_missing(diabetes_df)

        pd.testing.assert_frame_equal(impute_knn(normalized, 3), impute_knn(normalized, 3))

    def test_input_not_mutated(self, diabetes_df):
        """Test that the input keeps its missing markers."""
        normalized = normalize_missing(diabetes_df)
        before = normalized.copy()

        impute_knn(normalized, 5)

        pd.testing.assert_frame_equal(normalized, before)

    def test_too_many_neighbors_raises(self):
        """Test that k beyond the donor count is a configuration error."""
        X = pd.DataFrame({"a": [1.0, 2.0, 3.0, 4.0], "b": [1.0, np.nan, 3.0, 4.0]})

        with pytest.raises(ConfigurationError, match="donor rows"):
            NeighborImputer(n_neighbors=4, columns=["a", "b"]).fit_transform(X)

    def test_non_positive_neighbors_raises(self):
        """Test that k must be positive."""
        X = pd.DataFrame({"a": [1.0, 2.0]})

        with pytest.raises(ConfigurationError):
            NeighborImputer(n_neighbors=0, columns=["a"]).fit(X)

    def test_unknown_column_raises(self):
        """Test that imputing a column the table lacks is a shape error."""
        X = pd.DataFrame({"a": [1.0, 2.0]})

        with pytest.raises(DataShapeError):
            NeighborImputer(columns=["a", "z"]).fit(X)


class TestPartialDistances:
    """Test distances over mutually present columns."""

    def test_ignores_columns_missing_on_either_side(self):
        """Test that only shared columns contribute."""
        row = np.array([0.0, np.nan, 1.0])
        donors = np.array([[3.0, 5.0, np.nan], [0.0, 1.0, 2.0]])

        distances = _partial_distances(row, donors)

        np.testing.assert_allclose(distances, [3.0, 1.0])

    def test_no_shared_columns_ranks_last(self):
        """Test that a donor sharing nothing is infinitely far."""
        row = np.array([np.nan, 1.0])
        donors = np.array([[2.0, np.nan], [np.nan, 3.0]])

        distances = _partial_distances(row, donors)

        assert np.isinf(distances[0])
        assert distances[1] == pytest.approx(2.0)
