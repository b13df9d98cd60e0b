"""Error types raised by the analysis pipeline."""


class AnalysisError(Exception):
    """Base class for all analysis errors."""


class ConfigurationError(AnalysisError, ValueError):
    """Invalid parameters: split fraction, neighbour count, mismatched lengths."""


class DataShapeError(AnalysisError, ValueError):
    """Input table is missing a column or holds values of the wrong type."""


class DegenerateMetricError(AnalysisError, ZeroDivisionError):
    """A metric denominator is zero."""

    def __init__(self, metric: str, message: str = ""):
        self.metric = metric
        super().__init__(message or f"Denominator of '{metric}' is zero")
