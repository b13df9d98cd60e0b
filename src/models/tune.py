"""Neighbour-count tuning for the k-NN classifier."""

import logging
import math

import optuna
import pandas as pd
from sklearn.model_selection import StratifiedKFold, cross_val_score
from sklearn.neighbors import KNeighborsClassifier

from src.config.constants import TARGET_COLUMN
from src.config.errors import ConfigurationError

logger = logging.getLogger(__name__)


class NeighborCountObjective:
    """Optuna objective: cross-validated accuracy as a function of k."""

    def __init__(self, X_train, y_train, config, max_neighbors):
        """Initialize objective.

        Args:
            X_train, y_train: Imputed, standardized training data
            config: Analysis configuration
            max_neighbors: Largest neighbour count every CV training fold can serve
        """
        self.X_train = X_train
        self.y_train = y_train
        self.config = config
        self.max_neighbors = max_neighbors

    def __call__(self, trial):
        """Optuna objective function.

        Args:
            trial: Optuna trial

        Returns:
            Mean cross-validated accuracy
        """
        tuning = self.config["tuning"]
        low, high = tuning["neighbor_range"]

        n_neighbors = trial.suggest_int("n_neighbors", low, min(high, self.max_neighbors))

        cv = StratifiedKFold(
            n_splits=tuning["cv_folds"],
            shuffle=True,
            random_state=self.config["data"]["random_seed"],
        )
        scores = cross_val_score(
            KNeighborsClassifier(n_neighbors=n_neighbors),
            self.X_train,
            self.y_train,
            cv=cv,
            scoring="accuracy",
        )
        return scores.mean()


def tune_knn_neighbors(train: pd.DataFrame, config: dict, target_column: str = TARGET_COLUMN) -> int:
    """Search the neighbour count maximizing cross-validated accuracy.

    Args:
        train: Imputed training table including the target column
        config: Analysis configuration

    Returns:
        Best neighbour count

    Raises:
        ConfigurationError: If the smallest neighbour count in the search
            range exceeds the rows of a cross-validation training fold
    """
    X_train = train.drop(columns=[target_column])
    y_train = train[target_column]

    cv_folds = config["tuning"]["cv_folds"]
    low = config["tuning"]["neighbor_range"][0]
    max_neighbors = len(X_train) - math.ceil(len(X_train) / cv_folds)
    if low > max_neighbors:
        raise ConfigurationError(
            f"neighbor_range starts at {low} but a {cv_folds}-fold training split "
            f"of {len(X_train)} rows holds only {max_neighbors} donor rows"
        )

    objective = NeighborCountObjective(X_train, y_train, config, max_neighbors)

    sampler = optuna.samplers.TPESampler(seed=config["data"]["random_seed"])
    study = optuna.create_study(direction="maximize", sampler=sampler)
    study.optimize(objective, n_trials=config["tuning"]["n_trials"])

    best_k = study.best_params["n_neighbors"]
    logger.info(f"Best k-NN accuracy: {study.best_value:.4f} with n_neighbors={best_k}")
    return best_k
