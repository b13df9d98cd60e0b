"""Data loading and validation for the Pima diabetes dataset."""

import logging
from pathlib import Path
from typing import List, Tuple

import pandas as pd
import pandera as pa
from pandera import Column, DataFrameSchema

from src.config.constants import ALL_COLUMNS, REQUIRED_COLUMNS, TARGET_COLUMN
from src.config.errors import DataShapeError

logger = logging.getLogger(__name__)


class DiabetesDataValidator:
    """Validates raw records before any missingness handling.

    Zeros are accepted in every predictor: they are the dataset's own
    missing-value marker and are only reinterpreted downstream.
    """

    REQUIRED_COLUMNS = ALL_COLUMNS

    def __init__(self):
        """Initialize validator with schema."""
        self.schema = DataFrameSchema(
            {
                "Pregnancies": Column(int, checks=[pa.Check.ge(0)], nullable=False),
                "Glucose": Column(float, checks=[pa.Check.ge(0)], nullable=False, coerce=True),
                "BloodPressure": Column(float, checks=[pa.Check.ge(0)], nullable=False, coerce=True),
                "SkinThickness": Column(float, checks=[pa.Check.ge(0)], nullable=False, coerce=True),
                "Insulin": Column(float, checks=[pa.Check.ge(0)], nullable=False, coerce=True),
                "BMI": Column(float, checks=[pa.Check.ge(0)], nullable=False, coerce=True),
                "DiabetesPedigreeFunction": Column(
                    float, checks=[pa.Check.ge(0)], nullable=False, coerce=True
                ),
                "Age": Column(int, checks=[pa.Check.ge(0), pa.Check.le(120)], nullable=False),
                TARGET_COLUMN: Column(int, checks=[pa.Check.isin([0, 1])], nullable=False),
            },
            strict=False,
        )

    def validate_schema(self, df: pd.DataFrame) -> Tuple[bool, List[str]]:
        """Validate dataframe schema against required columns and data types.

        Checks for:
        - Missing required columns
        - Data type mismatches
        - Value constraints (non-negative values, age <= 120, binary outcome)

        Args:
            df: Input dataframe

        Returns:
            Tuple of (is_valid, error_messages)
        """
        errors = []

        missing_cols = [col for col in self.REQUIRED_COLUMNS if col not in df.columns]
        if missing_cols:
            errors.append(f"Missing required columns: {missing_cols}")
            return False, errors

        try:
            self.schema.validate(df[self.REQUIRED_COLUMNS], lazy=True)
            return True, []
        except pa.errors.SchemaErrors as e:
            for _, row in e.failure_cases.iterrows():
                errors.append(
                    f"Column '{row['column']}' failed check '{row['check']}' "
                    f"at index {row['index']}"
                )
            return False, errors


def load_dataset(data_path: Path) -> pd.DataFrame:
    """Read and validate the raw dataset.

    Args:
        data_path: Path to a delimited file with the 9 declared columns

    Returns:
        DataFrame holding exactly the declared columns, in declared order

    Raises:
        DataShapeError: If the file fails schema validation
    """
    df = pd.read_csv(data_path)

    is_valid, errors = DiabetesDataValidator().validate_schema(df)
    if not is_valid:
        raise DataShapeError(f"Invalid dataset {data_path}: " + "; ".join(errors))

    df = df[ALL_COLUMNS].copy()
    df[REQUIRED_COLUMNS] = df[REQUIRED_COLUMNS].astype(float)
    df[TARGET_COLUMN] = df[TARGET_COLUMN].astype(int)

    logger.info(
        f"Loaded {len(df)} records from {data_path} "
        f"(positive rate {df[TARGET_COLUMN].mean():.3f})"
    )
    return df
