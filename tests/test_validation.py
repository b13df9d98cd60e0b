"""Tests for data validation and loading."""

import pandas as pd
import pytest

from src.config.constants import ALL_COLUMNS
from src.config.errors import DataShapeError
from src.data.validate_input import DiabetesDataValidator, load_dataset


def _record(**overrides):
    record = {
        "Pregnancies": [1, 2],
        "Glucose": [100.0, 120.0],
        "BloodPressure": [70.0, 80.0],
        "SkinThickness": [20.0, 30.0],
        "Insulin": [80.0, 100.0],
        "BMI": [25.0, 30.0],
        "DiabetesPedigreeFunction": [0.5, 0.6],
        "Age": [35, 45],
        "Outcome": [0, 1],
    }
    record.update(overrides)
    return pd.DataFrame(record)


class TestDiabetesDataValidator:
    """Test schema validation."""

    def test_valid_data_passes(self):
        """Test that valid data passes validation."""
        validator = DiabetesDataValidator()
        is_valid, errors = validator.validate_schema(_record())

        assert is_valid, f"Validation failed with errors: {errors}"
        assert len(errors) == 0

    def test_zero_sentinels_accepted(self):
        """Test that zeros in measurement columns are not rejected at load time."""
        df = _record(Glucose=[0.0, 120.0], Insulin=[0.0, 0.0])

        is_valid, errors = DiabetesDataValidator().validate_schema(df)

        assert is_valid, errors

    def test_missing_columns_rejected(self):
        """Test that missing required columns are rejected."""
        df = pd.DataFrame({
            "Pregnancies": [1, 2],
            "Glucose": [100, 120],
        })

        is_valid, errors = DiabetesDataValidator().validate_schema(df)

        assert not is_valid
        assert "Missing required columns" in errors[0]
        assert "Outcome" in errors[0]

    def test_negative_values_rejected(self):
        """Test that negative values are rejected."""
        is_valid, _ = DiabetesDataValidator().validate_schema(_record(Pregnancies=[1, -1]))

        assert not is_valid

    def test_age_validation(self):
        """Test age validation (must be <= 120)."""
        is_valid, _ = DiabetesDataValidator().validate_schema(_record(Age=[35, 150]))

        assert not is_valid

    def test_non_binary_outcome_rejected(self):
        """Test that outcome values other than 0/1 are rejected."""
        is_valid, errors = DiabetesDataValidator().validate_schema(_record(Outcome=[0, 2]))

        assert not is_valid
        assert any("Outcome" in error for error in errors)


class TestLoadDataset:
    """Test CSV loading."""

    def test_loads_declared_columns_in_order(self, diabetes_df, tmp_path):
        """Test that extra columns are dropped and order is fixed."""
        path = tmp_path / "diabetes.csv"
        shuffled = diabetes_df[list(reversed(ALL_COLUMNS))].assign(patient_id=range(len(diabetes_df)))
        shuffled.to_csv(path, index=False)

        df = load_dataset(path)

        assert list(df.columns) == ALL_COLUMNS
        assert len(df) == len(diabetes_df)
        assert df["Glucose"].dtype == float

    def test_invalid_file_raises(self, tmp_path):
        """Test that schema failures surface as DataShapeError."""
        path = tmp_path / "bad.csv"
        _record(Age=[35, 150]).to_csv(path, index=False)

        with pytest.raises(DataShapeError, match="Invalid dataset"):
            load_dataset(path)
