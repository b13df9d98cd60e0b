"""Nearest-neighbour imputation on standardized features."""

import logging

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator, TransformerMixin
from sklearn.preprocessing import StandardScaler

from src.config.constants import DEFAULT_NEIGHBORS, REQUIRED_COLUMNS
from src.config.errors import ConfigurationError, DataShapeError

logger = logging.getLogger(__name__)


class NeighborImputer(BaseEstimator, TransformerMixin):
    """Fill missing cells with the mean of the nearest rows, on standardized columns.

    Distances are Euclidean over the standardized columns present in both
    rows; there is no minimum overlap, and a donor sharing no column with
    the target row ranks last. The output keeps the standardized scale.
    Columns outside ``columns`` pass through unchanged.
    """

    def __init__(self, n_neighbors=DEFAULT_NEIGHBORS, columns=None):
        """Initialize imputer.

        Args:
            n_neighbors: Number of donor rows averaged per missing cell
            columns: Numeric columns to standardize and impute
        """
        self.n_neighbors = n_neighbors
        self.columns = columns

    def _columns(self, X):
        columns = list(REQUIRED_COLUMNS if self.columns is None else self.columns)
        missing_cols = [col for col in columns if col not in X.columns]
        if missing_cols:
            raise DataShapeError(f"Columns not found in table: {missing_cols}")
        return columns

    def fit(self, X, y=None):
        """Fit imputer by learning per-column mean and scale.

        Args:
            X: Input features (DataFrame, NaN marks missing)
            y: Target (unused)

        Returns:
            self
        """
        if self.n_neighbors < 1:
            raise ConfigurationError(f"n_neighbors must be positive, got {self.n_neighbors}")

        self.columns_ = self._columns(X)
        self.scaler_ = StandardScaler()
        self.scaler_.fit(X[self.columns_].astype(float))
        return self

    def transform(self, X):
        """Standardize and fill every missing cell.

        Args:
            X: Input features (DataFrame, NaN marks missing)

        Returns:
            New DataFrame, standardized and without missing values in the
            imputed columns

        Raises:
            ConfigurationError: If a column has fewer donor rows than n_neighbors
        """
        standardized = self.scaler_.transform(X[self.columns_].astype(float))
        filled = self._impute(standardized)

        result = X.copy()
        result[self.columns_] = filled
        return result

    def inverse_transform(self, X):
        """Return the imputed columns to their original scale."""
        result = X.copy()
        result[self.columns_] = self.scaler_.inverse_transform(X[self.columns_].astype(float))
        return result

    def _impute(self, Z):
        present = ~np.isnan(Z)
        filled = Z.copy()

        for col_idx, col in enumerate(self.columns_):
            targets = np.flatnonzero(~present[:, col_idx])
            if len(targets) == 0:
                continue

            donors = np.flatnonzero(present[:, col_idx])
            if self.n_neighbors > len(donors):
                raise ConfigurationError(
                    f"n_neighbors={self.n_neighbors} exceeds the {len(donors)} "
                    f"donor rows available for column '{col}'"
                )

            donor_values = Z[donors]
            for row in targets:
                distances = _partial_distances(Z[row], donor_values)
                nearest = np.argsort(distances, kind="stable")[: self.n_neighbors]
                filled[row, col_idx] = donor_values[nearest, col_idx].mean()

            logger.debug(f"Imputed {len(targets)} values in '{col}'")

        return filled


def _partial_distances(row, donors):
    """Euclidean distance from ``row`` to each donor over mutually present columns."""
    diff = donors - row
    shared = ~np.isnan(diff)
    squared = np.where(shared, diff, 0.0) ** 2
    distances = np.sqrt(squared.sum(axis=1))
    distances[~shared.any(axis=1)] = np.inf
    return distances


def impute_knn(df: pd.DataFrame, n_neighbors: int = DEFAULT_NEIGHBORS, columns=None) -> pd.DataFrame:
    """Standardize ``columns`` of ``df`` and fill their missing cells.

    Args:
        df: Table with NaN as the missing marker
        n_neighbors: Donor rows averaged per missing cell
        columns: Columns to standardize and impute, defaults to the predictors

    Returns:
        New standardized, fully filled table
    """
    imputer = NeighborImputer(n_neighbors=n_neighbors, columns=columns)
    imputed = imputer.fit_transform(df)

    logger.info(
        f"Imputed {int(df[imputer.columns_].isna().sum().sum())} missing values "
        f"with {n_neighbors} neighbours"
    )
    return imputed
