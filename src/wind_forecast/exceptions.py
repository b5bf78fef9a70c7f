"""Exception taxonomy for the forecasting engine."""


class WindForecastError(Exception):
    """Base exception for the wind forecasting engine."""

    pass


class InsufficientData(WindForecastError):
    """Window plus horizon exceeds the available observations."""

    pass


class InvalidObservation(WindForecastError):
    """Malformed observation or observation series."""

    pass


class ModelNotTrained(WindForecastError):
    """Prediction requested without a usable trained model."""

    pass


class TrainingDivergence(WindForecastError):
    """Loss became NaN/Inf during fitting."""

    pass


class TrainingCancelled(WindForecastError):
    """A run was cancelled through its cancellation token."""

    pass


class DataFetchError(WindForecastError):
    """Observation provider could not deliver data."""

    pass


class ForecastError(WindForecastError):
    """Numeric failure during forecast rollout."""

    pass
