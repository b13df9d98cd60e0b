"""Confusion-matrix metrics and the model comparison table."""

import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Iterable, Tuple

import numpy as np
import pandas as pd
from sklearn.metrics import confusion_matrix

from src.config.constants import NEGATIVE_LABEL, POSITIVE_LABEL
from src.config.errors import ConfigurationError, DataShapeError, DegenerateMetricError

logger = logging.getLogger(__name__)

METRIC_COLUMNS = ["accuracy", "kappa", "sensitivity", "specificity"]


@dataclass(frozen=True)
class ConfusionMatrix:
    """2x2 counts for the positive class."""

    tp: int
    fp: int
    fn: int
    tn: int

    @property
    def total(self) -> int:
        return self.tp + self.fp + self.fn + self.tn

    @classmethod
    def from_labels(cls, actual, predicted, positive_label=POSITIVE_LABEL, negative_label=NEGATIVE_LABEL):
        """Count outcomes from aligned actual and predicted labels.

        Raises:
            ConfigurationError: If the sequences differ in length
            DataShapeError: If a label is neither the positive nor the negative one
        """
        actual = np.asarray(actual)
        predicted = np.asarray(predicted)
        if actual.shape != predicted.shape:
            raise ConfigurationError(
                f"Predicted and actual labels differ in length: {len(predicted)} vs {len(actual)}"
            )

        known = {positive_label, negative_label}
        unexpected = (set(actual.tolist()) | set(predicted.tolist())) - known
        if unexpected:
            raise DataShapeError(f"Labels {sorted(map(str, unexpected))} are not in {sorted(map(str, known))}")

        if len(actual) == 0:
            return cls(tp=0, fp=0, fn=0, tn=0)

        (tn, fp), (fn, tp) = confusion_matrix(actual, predicted, labels=[negative_label, positive_label])
        return cls(tp=int(tp), fp=int(fp), fn=int(fn), tn=int(tn))

    def to_array(self) -> np.ndarray:
        """Counts laid out as rows=actual, columns=predicted, negative first."""
        return np.array([[self.tn, self.fp], [self.fn, self.tp]])


@dataclass(frozen=True)
class EvaluationRecord:
    model: str
    accuracy: float
    kappa: float
    sensitivity: float
    specificity: float


def _ratio(numerator, denominator, metric):
    if denominator == 0:
        raise DegenerateMetricError(metric)
    return numerator / denominator


def accuracy(cm: ConfusionMatrix) -> float:
    return _ratio(cm.tp + cm.tn, cm.total, "accuracy")


def sensitivity(cm: ConfusionMatrix) -> float:
    return _ratio(cm.tp, cm.tp + cm.fn, "sensitivity")


def specificity(cm: ConfusionMatrix) -> float:
    return _ratio(cm.tn, cm.tn + cm.fp, "specificity")


def cohens_kappa(cm: ConfusionMatrix) -> float:
    """Agreement corrected for the agreement expected from the label marginals."""
    n = cm.total
    if n == 0:
        raise DegenerateMetricError("kappa")

    observed = (cm.tp + cm.tn) / n
    expected = ((cm.tp + cm.fp) * (cm.tp + cm.fn) + (cm.fn + cm.tn) * (cm.fp + cm.tn)) / n**2
    return _ratio(observed - expected, 1 - expected, "kappa")


def _guarded(metric_fn, cm, fallback, model_name):
    try:
        return metric_fn(cm)
    except DegenerateMetricError as e:
        logger.warning(f"{model_name}: {e}; reporting {fallback}")
        return fallback


def evaluate_confusion(model_name: str, cm: ConfusionMatrix) -> EvaluationRecord:
    """Compute the four metrics for one model.

    Zero denominators do not raise: sensitivity and specificity fall back
    to 0.0, and kappa to 1.0 when expected agreement is 1 (every label,
    actual and predicted, is the same class, so agreement is perfect).

    Raises:
        ConfigurationError: If the confusion matrix is empty
    """
    if cm.total == 0:
        raise ConfigurationError(f"{model_name}: cannot evaluate an empty prediction set")

    return EvaluationRecord(
        model=model_name,
        accuracy=accuracy(cm),
        kappa=_guarded(cohens_kappa, cm, 1.0, model_name),
        sensitivity=_guarded(sensitivity, cm, 0.0, model_name),
        specificity=_guarded(specificity, cm, 0.0, model_name),
    )


def evaluate_predictions(
    model_name: str, actual, predicted, positive_label=POSITIVE_LABEL, negative_label=NEGATIVE_LABEL
) -> EvaluationRecord:
    """Evaluate aligned predicted labels against actual labels."""
    cm = ConfusionMatrix.from_labels(actual, predicted, positive_label, negative_label)
    return evaluate_confusion(model_name, cm)


def comparison_table(results: Iterable[Tuple[str, ConfusionMatrix]]) -> pd.DataFrame:
    """Assemble one metrics row per (model name, confusion matrix) pair."""
    records = [asdict(evaluate_confusion(name, cm)) for name, cm in results]
    if not records:
        return pd.DataFrame(columns=METRIC_COLUMNS, index=pd.Index([], name="model"))
    return pd.DataFrame(records).set_index("model")[METRIC_COLUMNS]


def plot_comparison(table: pd.DataFrame, output_path: Path):
    """Save a grouped bar chart of the comparison table."""
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
    import seaborn as sns

    long_form = table.reset_index().melt(id_vars="model", var_name="metric", value_name="value")

    fig, ax = plt.subplots(figsize=(10, 6))
    sns.barplot(data=long_form, x="metric", y="value", hue="model", ax=ax)

    ax.set_title("Model Comparison", fontsize=14, fontweight="bold")
    ax.set_xlabel("")
    ax.set_ylabel("Score", fontsize=12)
    ax.set_ylim(min(0.0, long_form["value"].min()), 1.0)
    ax.legend(loc="lower right", fontsize=10)
    ax.grid(axis="y", alpha=0.3)

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches="tight")
    plt.close(fig)

    logger.info(f"Comparison chart saved to: {output_path}")


def plot_confusion_matrix(cm: ConfusionMatrix, model_name: str, output_path: Path):
    """Save a confusion matrix heatmap for one model."""
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
    import seaborn as sns

    fig, ax = plt.subplots(figsize=(6, 5))
    sns.heatmap(cm.to_array(), annot=True, fmt="d", cmap="Blues", cbar=False, ax=ax)

    ax.set_title(f"Confusion Matrix: {model_name}", fontsize=14, fontweight="bold")
    ax.set_xlabel("Predicted", fontsize=12)
    ax.set_ylabel("Actual", fontsize=12)
    ax.set_xticklabels(["Negative", "Positive"])
    ax.set_yticklabels(["Negative", "Positive"])

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches="tight")
    plt.close(fig)
