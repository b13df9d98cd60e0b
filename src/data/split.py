"""Seeded train/test partitioning."""

import logging
import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np
import pandas as pd
from sklearn.model_selection import train_test_split

from src.config.errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Split:
    """Train and test subsets of one table."""

    train: pd.DataFrame
    test: pd.DataFrame


def make_random_state(seed: int) -> np.random.RandomState:
    """Create the random source handed to the splitter."""
    return np.random.RandomState(seed)


def sample_train_indices(
    n_rows: int, train_fraction: float, random_state: np.random.RandomState
) -> Tuple[np.ndarray, np.ndarray]:
    """Sample floor(n_rows * train_fraction) row positions for training.

    Args:
        n_rows: Number of rows in the table
        train_fraction: Share of rows sent to training, in (0, 1)
        random_state: Random source; consumed by the call

    Returns:
        Tuple of (train_positions, test_positions), each sorted ascending

    Raises:
        ConfigurationError: If the fraction is out of range or leaves the
            training set empty
    """
    if not 0 < train_fraction < 1:
        raise ConfigurationError(f"train_fraction must be in (0, 1), got {train_fraction}")

    n_train = math.floor(n_rows * train_fraction)
    if n_train < 1:
        raise ConfigurationError(
            f"train_fraction {train_fraction} of {n_rows} rows leaves the training set empty"
        )

    train_idx, test_idx = train_test_split(
        np.arange(n_rows),
        train_size=n_train,
        test_size=n_rows - n_train,
        random_state=random_state,
        shuffle=True,
    )
    return np.sort(train_idx), np.sort(test_idx)


def split_table(df: pd.DataFrame, train_fraction: float, random_state: np.random.RandomState) -> Split:
    """Partition one table into train and test subsets."""
    return split_aligned([df], train_fraction, random_state)[0]


def split_aligned(
    tables: Sequence[pd.DataFrame], train_fraction: float, random_state: np.random.RandomState
) -> List[Split]:
    """Partition several row-aligned tables with a single index sample.

    Every table must hold the same logical observations in the same order,
    e.g. the raw and the imputed version of the dataset; the same positions
    go to training in each.

    Raises:
        ConfigurationError: If the tables differ in length
    """
    lengths = {len(table) for table in tables}
    if len(lengths) != 1:
        raise ConfigurationError(f"Tables to split must have equal length, got {sorted(lengths)}")

    n_rows = lengths.pop()
    train_idx, test_idx = sample_train_indices(n_rows, train_fraction, random_state)

    logger.info(f"Train size: {len(train_idx)}, Test size: {len(test_idx)}")

    return [Split(train=table.iloc[train_idx], test=table.iloc[test_idx]) for table in tables]
