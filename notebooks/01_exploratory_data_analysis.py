"""Missingness Analysis and Model Comparison for the Pima Indians Diabetes Dataset.

This marimo notebook walks through the analysis stage by stage:
- Zero-as-missing normalization and missingness patterns
- k-NN imputation on standardized features
- Seeded train/test split shared by raw and imputed tables
- Decision tree, random forest, k-NN and logistic regression comparison
"""

import marimo

__generated_with = "0.17.7"
app = marimo.App()


@app.cell
def _():
    import marimo as mo
    import matplotlib.pyplot as plt
    import seaborn as sns
    from pathlib import Path

    from src.config.settings import build_config
    from src.data.validate_input import load_dataset

    plt.style.use('seaborn-v0_8-darkgrid')
    sns.set_palette("husl")

    mo.md(
        """
        # Pima Indians Diabetes: Missing Data and Model Comparison

        **Objective**: Decide how to treat physiologically impossible zeros, then
        compare four classifiers on a shared 70/30 split.
        """
    )
    return Path, build_config, load_dataset, mo, plt, sns


@app.cell
def _(Path, build_config, load_dataset):
    notebook_dir = Path(__file__).parent
    config = build_config(
        {"data": {"raw_path": str(notebook_dir.parent / "data" / "raw" / "diabetes.csv")}}
    )
    df = load_dataset(Path(config["data"]["raw_path"]))
    return config, df


@app.cell
def _(config, df, mo):
    from src.data.missingness import missing_table, normalize_missing

    zero_columns = config["preprocessing"]["zero_as_missing_columns"]
    normalized = normalize_missing(df, zero_columns)

    mo.md(f"""
    ## 1. Zeros as Missing

    Zeros in {", ".join(zero_columns)} cannot be real measurements.

    {missing_table(normalized).to_markdown(index=False)}
    """)
    return normalized, zero_columns


@app.cell
def _(mo, normalized, plt, zero_columns):
    from src.data.missingness import is_missing_superset, sorted_missingness

    mask = sorted_missingness(normalized, "Insulin", zero_columns)

    _fig, _ax = plt.subplots(figsize=(14, 5))
    _ax.imshow(mask.T.to_numpy(dtype=int), cmap='RdYlGn_r', aspect='auto', interpolation='nearest')
    _ax.set_yticks(range(len(zero_columns)))
    _ax.set_yticklabels(zero_columns)
    _ax.set_xlabel('Rows sorted by Insulin')
    _ax.set_title('Missing Data Pattern (Red = Missing)')
    plt.tight_layout()

    containment = is_missing_superset(
        normalized, "Insulin", [col for col in zero_columns if col != "Insulin"]
    )
    mo.vstack([
        _fig,
        mo.md(f"**Rows missing each column also miss Insulin**: {containment}"),
    ])
    return


@app.cell
def _(mo, normalized, sns, zero_columns):
    from src.data.missingness import co_missing_counts, missingness_by_outcome

    _ax = sns.heatmap(co_missing_counts(normalized, zero_columns), annot=True, fmt="d", cmap="Blues")
    _ax.set_title("Rows Missing Both Columns")

    mo.vstack([
        _ax.figure,
        mo.md("### Missing Rate by Outcome"),
        mo.md(missingness_by_outcome(normalized, "Outcome").to_markdown()),
    ])
    return


@app.cell
def _(config, mo, normalized):
    from src.data.split import make_random_state, split_aligned
    from src.features.preprocess import impute_knn

    _features = [col for col in normalized.columns if col != "Outcome"]
    imputed = impute_knn(normalized, config["imputation"]["neighbors"], _features)

    raw_split, imputed_split = split_aligned(
        [normalized, imputed],
        config["data"]["train_fraction"],
        make_random_state(config["data"]["random_seed"]),
    )

    mo.md(f"""
    ## 2. Imputation and Split

    k-NN imputation with k = {config["imputation"]["neighbors"]} on standardized columns.

    **Train**: {len(raw_split.train)} rows, **Test**: {len(raw_split.test)} rows.
    The decision tree uses the table with missing values kept; the other models
    use the imputed, standardized table.
    """)
    return imputed_split, raw_split


@app.cell
def _(config, imputed_split, mo, raw_split):
    from src.models.evaluate import comparison_table
    from src.models.train import fit_and_evaluate

    confusion_matrices, _models, _params = fit_and_evaluate(raw_split, imputed_split, config)
    comparison = comparison_table(confusion_matrices.items())

    mo.md(f"""
    ## 3. Model Comparison

    {comparison.round(4).to_markdown()}
    """)
    return (comparison,)


if __name__ == "__main__":
    app.run()
