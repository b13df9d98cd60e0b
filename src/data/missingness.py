"""Sentinel-zero normalization and missingness diagnostics."""

import logging
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from src.config.constants import ZERO_IMPUTE_COLUMNS
from src.config.errors import DataShapeError

logger = logging.getLogger(__name__)


def _check_columns(df: pd.DataFrame, columns: List[str]) -> None:
    missing_cols = [col for col in columns if col not in df.columns]
    if missing_cols:
        raise DataShapeError(f"Columns not found in table: {missing_cols}")


def normalize_missing(df: pd.DataFrame, columns: Optional[List[str]] = None) -> pd.DataFrame:
    """Replace literal zeros with NaN in columns where zero is implausible.

    Args:
        df: Input table (left untouched)
        columns: Zero-implausible columns, defaults to ZERO_IMPUTE_COLUMNS

    Returns:
        New table with zeros in ``columns`` replaced by NaN
    """
    columns = list(ZERO_IMPUTE_COLUMNS if columns is None else columns)
    _check_columns(df, columns)

    normalized = df.copy()
    for col in columns:
        normalized[col] = normalized[col].astype(float).mask(normalized[col] == 0)

    return normalized


def missingness_mask(df: pd.DataFrame, columns: Optional[List[str]] = None) -> pd.DataFrame:
    """Boolean table, True where a value is missing."""
    columns = list(df.columns if columns is None else columns)
    _check_columns(df, columns)
    return df[columns].isna()


def missing_counts(df: pd.DataFrame) -> pd.Series:
    """Number of missing entries per column, in column order."""
    return df.isna().sum().astype(int)


def missing_table(df: pd.DataFrame) -> pd.DataFrame:
    """Per-column missing counts and percentages, most missing first."""
    total = len(df)
    counts = missing_counts(df)
    table = pd.DataFrame(
        {
            "column": counts.index,
            "missing_count": counts.values,
            "missing_percent": (counts.values / total * 100).round(3) if total else 0.0,
        }
    )
    return table.sort_values("missing_percent", ascending=False, kind="stable").reset_index(drop=True)


def sorted_missingness(
    df: pd.DataFrame, sort_column: str, columns: Optional[List[str]] = None
) -> pd.DataFrame:
    """Missingness mask with rows ordered by ``sort_column``.

    Rows are sorted stably with missing sort values last, so blocks of
    co-missing columns line up when the mask is drawn as an image.
    """
    _check_columns(df, [sort_column])
    order = df[sort_column].sort_values(kind="stable", na_position="last").index
    return missingness_mask(df, columns).loc[order]


def co_missing_counts(df: pd.DataFrame, columns: Optional[List[str]] = None) -> pd.DataFrame:
    """Count of rows missing both columns, for every pair of columns.

    The diagonal holds the per-column missing counts.
    """
    mask = missingness_mask(df, columns).astype(int)
    return mask.T.dot(mask)


def is_missing_superset(
    df: pd.DataFrame, superset_column: str, subset_columns: List[str]
) -> Dict[str, bool]:
    """Check whether rows missing each subset column also miss ``superset_column``.

    Args:
        df: Table with NaN as the missing marker
        superset_column: Column expected to be missing whenever the others are
        subset_columns: Columns to test for containment

    Returns:
        Mapping of subset column to whether containment holds
    """
    _check_columns(df, [superset_column] + list(subset_columns))
    superset_missing = df[superset_column].isna()
    return {
        col: bool((~df[col].isna() | superset_missing).all())
        for col in subset_columns
    }


def missingness_by_outcome(df: pd.DataFrame, target_column: str) -> pd.DataFrame:
    """Missing rate per column within each outcome class."""
    _check_columns(df, [target_column])
    features = df.drop(columns=target_column)
    return features.isna().groupby(df[target_column]).mean()


def save_missingness_report(df: pd.DataFrame, output_dir: Path, filename: str = "missing_report.csv") -> Path:
    """Write the missing table and co-missing counts as CSV."""
    output_dir.mkdir(parents=True, exist_ok=True)

    report_path = output_dir / filename
    missing_table(df).to_csv(report_path, index=False)

    co_missing = co_missing_counts(df, [col for col in df.columns if df[col].isna().any()])
    co_missing.to_csv(output_dir / f"co_{filename}")

    logger.info(f"Missingness report saved to: {report_path}")
    return report_path


def plot_missingness(df: pd.DataFrame, sort_column: str, output_path: Path, columns: Optional[List[str]] = None):
    """Save a heatmap of the missingness mask sorted by ``sort_column``."""
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    mask = sorted_missingness(df, sort_column, columns)

    fig, ax = plt.subplots(figsize=(12, 5))
    ax.imshow(mask.T.to_numpy(dtype=np.uint8), cmap="RdYlGn_r", aspect="auto", interpolation="nearest")
    ax.set_yticks(range(mask.shape[1]))
    ax.set_yticklabels(mask.columns)
    ax.set_xlabel(f"Rows sorted by {sort_column}")
    ax.set_title("Missing Data Pattern (Red = Missing)", fontsize=14, fontweight="bold")

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches="tight")
    plt.close(fig)

    logger.info(f"Missingness plot saved to: {output_path}")
