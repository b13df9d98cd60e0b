"""Missingness handling, imputation and four-model comparison for diabetes diagnosis."""

import argparse
import json
import logging
import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict

import joblib
import mlflow
from mlflow.exceptions import MlflowException
import pandas as pd

from src.config.constants import TARGET_COLUMN
from src.config.errors import AnalysisError
from src.config.settings import build_config, load_config
from src.data.missingness import (
    is_missing_superset,
    missing_counts,
    normalize_missing,
    plot_missingness,
    save_missingness_report,
)
from src.data.split import Split, make_random_state, split_aligned
from src.data.validate_input import load_dataset
from src.features.preprocess import impute_knn
from src.models.evaluate import (
    ConfusionMatrix,
    comparison_table,
    plot_comparison,
    plot_confusion_matrix,
)
from src.models.harness import build_variant
from src.models.tune import tune_knn_neighbors

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """Outputs of one analysis run."""

    missing_counts: pd.Series
    raw_split: Split
    imputed_split: Split
    confusion_matrices: Dict[str, ConfusionMatrix]
    comparison: pd.DataFrame
    models: Dict[str, object] = field(default_factory=dict)
    params: Dict[str, dict] = field(default_factory=dict)


def prepare_tables(df: pd.DataFrame, config: dict):
    """Derive the normalized and the imputed tables from the raw table.

    Returns:
        Tuple of (normalized, imputed); the imputed table is standardized
    """
    zero_columns = config["preprocessing"]["zero_as_missing_columns"]
    normalized = normalize_missing(df, zero_columns)

    counts = missing_counts(normalized)
    for col, count in counts[counts > 0].items():
        logger.info(f"Missing values in {col}: {count}")

    if "Insulin" in zero_columns:
        others = [col for col in zero_columns if col != "Insulin"]
        containment = is_missing_superset(normalized, "Insulin", others)
        for col, holds in containment.items():
            if not holds:
                logger.warning(f"Rows missing {col} are not all missing Insulin")

    features = [col for col in normalized.columns if col != TARGET_COLUMN]
    imputed = impute_knn(normalized, n_neighbors=config["imputation"]["neighbors"], columns=features)

    return normalized, imputed


def fit_and_evaluate(raw_split: Split, imputed_split: Split, config: dict):
    """Fit every configured variant on the table it tolerates and score it.

    Variants that handle missing values themselves see the normalized,
    unstandardized table; the rest see the imputed one.
    """
    confusion_matrices = {}
    models = {}
    params = {}

    for name in config["models"]:
        model_params = {}
        if name == "knn" and config["tuning"]["enabled"]:
            model_params["n_neighbors"] = tune_knn_neighbors(imputed_split.train, config)

        variant = build_variant(name, **model_params)
        split = imputed_split if variant.requires_complete_data else raw_split

        model = variant.fit(split.train)
        predictions = variant.predict(model, split.test)

        cm = ConfusionMatrix.from_labels(split.test[TARGET_COLUMN], predictions)
        confusion_matrices[name] = cm
        models[name] = model
        params[name] = model.get_params()

        logger.info(f"{name}: TP={cm.tp} FP={cm.fp} FN={cm.fn} TN={cm.tn}")

    return confusion_matrices, models, params


def run_analysis(config: dict, df: pd.DataFrame = None) -> AnalysisResult:
    """Run the full analysis.

    Args:
        config: Analysis configuration
        df: Raw table; read from ``config["data"]["raw_path"]`` when omitted

    Returns:
        AnalysisResult with splits, fitted models and the comparison table
    """
    if df is None:
        df = load_dataset(Path(config["data"]["raw_path"]))

    normalized, imputed = prepare_tables(df, config)

    random_state = make_random_state(config["data"]["random_seed"])
    raw_split, imputed_split = split_aligned(
        [normalized, imputed], config["data"]["train_fraction"], random_state
    )

    confusion_matrices, models, params = fit_and_evaluate(raw_split, imputed_split, config)
    comparison = comparison_table(confusion_matrices.items())

    return AnalysisResult(
        missing_counts=missing_counts(normalized),
        raw_split=raw_split,
        imputed_split=imputed_split,
        confusion_matrices=confusion_matrices,
        comparison=comparison,
        models=models,
        params=params,
    )


def save_outputs(result: AnalysisResult, config: dict, output_dir: Path) -> Path:
    """Write the comparison table, summary, models and figures.

    Returns:
        Directory holding this run's outputs
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    run_dir = output_dir / f"run_{timestamp}"
    run_dir.mkdir(parents=True, exist_ok=True)

    result.comparison.to_csv(run_dir / "comparison.csv")

    normalized = pd.concat([result.raw_split.train, result.raw_split.test]).sort_index()
    save_missingness_report(normalized, run_dir)

    summary = {
        "run_date": datetime.now().isoformat(),
        "data_path": str(config["data"]["raw_path"]),
        "train_size": len(result.raw_split.train),
        "test_size": len(result.raw_split.test),
        "missing_counts": {col: int(n) for col, n in result.missing_counts.items()},
        "confusion_matrices": {
            name: {"tp": cm.tp, "fp": cm.fp, "fn": cm.fn, "tn": cm.tn}
            for name, cm in result.confusion_matrices.items()
        },
        "metrics": {
            name: {metric: float(value) for metric, value in row.items()}
            for name, row in result.comparison.iterrows()
        },
        "config": config,
    }
    with open(run_dir / "summary.json", "w") as f:
        json.dump(summary, f, indent=2)

    if config["output"]["save_models"]:
        joblib.dump(
            {"models": result.models, "params": result.params, "config": config},
            run_dir / "model_artifacts.pkl",
        )

    if config["output"]["save_plots"]:
        zero_columns = config["preprocessing"]["zero_as_missing_columns"]
        sort_column = "Insulin" if "Insulin" in zero_columns else TARGET_COLUMN
        plot_missingness(normalized, sort_column, run_dir / "missingness.png", zero_columns)
        plot_comparison(result.comparison, run_dir / "comparison.png")
        for name, cm in result.confusion_matrices.items():
            plot_confusion_matrix(cm, name, run_dir / f"confusion_matrix_{name}.png")

    logger.info(f"Outputs saved to: {run_dir}")
    return run_dir


def log_to_mlflow(result: AnalysisResult, config: dict, run_dir: Path = None) -> str:
    """Record parameters and per-model metrics in an MLflow run.

    Returns:
        The MLflow run ID
    """
    mlflow.set_tracking_uri(config["mlflow"]["tracking_uri"])
    mlflow.set_experiment(config["mlflow"]["experiment_name"])

    with mlflow.start_run() as run:
        mlflow.log_params(config["data"])
        mlflow.log_param("imputation_neighbors", config["imputation"]["neighbors"])
        mlflow.log_param("models", ",".join(config["models"]))

        for name, row in result.comparison.iterrows():
            mlflow.log_metrics({f"{name}_{metric}": float(value) for metric, value in row.items()})

        if run_dir is not None:
            mlflow.log_artifact(str(run_dir / "comparison.csv"))

        return run.info.run_id


def main():
    """CLI entry point for the analysis."""
    parser = argparse.ArgumentParser(description="Compare diabetes classifiers on imputed Pima data")
    parser.add_argument(
        "--config", type=Path, default=Path("configs/analysis_config.yaml"), help="Config file path"
    )
    parser.add_argument("--data", type=Path, default=None, help="Override data.raw_path")
    parser.add_argument("--output-dir", type=Path, default=None, help="Override output.dir")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        config = load_config(args.config) if args.config.exists() else build_config()
        if args.data is not None:
            config["data"]["raw_path"] = str(args.data)
        if args.output_dir is not None:
            config["output"]["dir"] = str(args.output_dir)

        log_level = config["logging"]["log_level"]
        logging.getLogger().setLevel(getattr(logging, log_level.upper(), logging.INFO))

        result = run_analysis(config)
        run_dir = save_outputs(result, config, Path(config["output"]["dir"]))

        if config["mlflow"]["enabled"]:
            run_id = log_to_mlflow(result, config, run_dir)
            logger.info(f"MLflow run ID: {run_id}")
    except (AnalysisError, FileNotFoundError, MlflowException) as e:
        logger.error(f"Analysis failed: {e}")
        return 1

    logger.info("\nModel Comparison:\n" + result.comparison.to_string(float_format="{:.4f}".format))
    return 0


if __name__ == "__main__":
    sys.exit(main())
