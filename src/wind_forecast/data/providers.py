"""Observation provider interfaces and the Open-Meteo implementation."""

import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd
import requests
from loguru import logger

from ..config import HTTP_TIMEOUT, OPEN_METEO_MARINE_URL, OPEN_METEO_URL
from ..exceptions import DataFetchError, InvalidObservation
from .observation import Observation

WEATHER_VARIABLES = {
    "temperature_2m": "temperature",
    "relative_humidity_2m": "humidity",
    "wind_speed_10m": "wind_speed",
    "wind_gusts_10m": "wind_gusts",
    "wind_direction_10m": "wind_direction",
}
MARINE_VARIABLES = {
    "wave_height": "wave_height",
    "wave_period": "wave_period",
    "wave_direction": "swell_direction",
}


class IWeatherProvider(ABC):
    """Interface for observation providers. Implement this to add new data sources."""

    @abstractmethod
    def fetch_observations(self, latitude: float, longitude: float) -> List[Observation]:
        """
        Fetch hourly observations around now for a location.

        Args:
            latitude: Decimal degrees
            longitude: Decimal degrees

        Returns:
            Valid observations sorted by timestamp (historical and forecast hours)
        """
        pass


class OpenMeteoProvider(IWeatherProvider):
    """
    Hourly weather + marine data from Open-Meteo.

    Free, no API key required. The marine feed only covers sea points; on
    land the wave fields stay None.
    """

    def __init__(
        self,
        past_days: int = 7,
        forecast_days: int = 2,
        weather_url: str = OPEN_METEO_URL,
        marine_url: str = OPEN_METEO_MARINE_URL,
        timeout: float = HTTP_TIMEOUT,
    ):
        self.past_days = past_days
        self.forecast_days = forecast_days
        self.weather_url = weather_url
        self.marine_url = marine_url
        self.timeout = timeout
        logger.info(
            f"Initialized Open-Meteo provider: past_days={past_days}, forecast_days={forecast_days}"
        )

    def fetch_observations(self, latitude: float, longitude: float) -> List[Observation]:
        if not (-90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0):
            raise ValueError(f"Invalid coordinates: lat={latitude}, lon={longitude}")

        logger.info(f"Fetching Open-Meteo data for lat={latitude:.4f}, lon={longitude:.4f}")

        params = {
            "latitude": latitude,
            "longitude": longitude,
            "past_days": self.past_days,
            "forecast_days": self.forecast_days,
            "timezone": "UTC",
            "wind_speed_unit": "kmh",
        }
        weather = self._get_json(
            self.weather_url, {**params, "hourly": ",".join(WEATHER_VARIABLES)}
        )
        weather_df = self._hourly_frame(weather, WEATHER_VARIABLES)
        if weather_df.empty:
            raise DataFetchError("Invalid weather data format - missing hourly data")

        try:
            marine = self._get_json(
                self.marine_url, {**params, "hourly": ",".join(MARINE_VARIABLES)}
            )
            marine_df = self._hourly_frame(marine, MARINE_VARIABLES)
        except DataFetchError as e:
            # Inland points have no marine coverage
            logger.warning(f"Marine data unavailable, continuing without waves: {e}")
            marine_df = pd.DataFrame(
                {
                    "timestamp": pd.Series(dtype="int64"),
                    **{c: pd.Series(dtype="float64") for c in MARINE_VARIABLES.values()},
                }
            )

        df = weather_df.merge(marine_df, on="timestamp", how="left")
        observations = frame_to_observations(df)

        logger.info(
            f"Fetched {len(observations)} valid hourly observations "
            f"({sum(o.has_marine for o in observations)} with wave data)"
        )
        return observations

    def _get_json(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = requests.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            raise DataFetchError(f"Request to {url} failed: {e}") from e
        except ValueError as e:
            raise DataFetchError(f"Invalid JSON from {url}: {e}") from e

    @staticmethod
    def _hourly_frame(payload: Dict[str, Any], variables: Dict[str, str]) -> pd.DataFrame:
        hourly = payload.get("hourly") or {}
        times = hourly.get("time") or []
        if not times:
            raise DataFetchError("Response has no hourly time axis")

        df = pd.DataFrame({"time": times})
        for source, target in variables.items():
            values = hourly.get(source)
            if values is None or len(values) != len(times):
                raise DataFetchError(f"Response is missing hourly '{source}' values")
            df[target] = pd.to_numeric(pd.Series(values), errors="coerce")

        times_utc = pd.to_datetime(df["time"], utc=True)
        df["timestamp"] = (
            (times_utc - pd.Timestamp(0, tz="UTC")) // pd.Timedelta(milliseconds=1)
        ).astype("int64")
        return df.drop(columns=["time"])


def frame_to_observations(df: pd.DataFrame) -> List[Observation]:
    """
    Convert a merged hourly frame into Observations, dropping invalid rows.

    Rows with NaN core values or out-of-range values are logged and skipped.
    Partial wave data (some marine fields NaN) is dropped to None.
    """
    df = df.drop_duplicates(subset=["timestamp"]).sort_values("timestamp").reset_index(drop=True)
    marine_cols = list(MARINE_VARIABLES.values())
    for col in marine_cols:
        if col not in df.columns:
            df[col] = float("nan")

    observations = []
    dropped = 0
    for row in df.to_dict(orient="records"):
        if any(pd.isna(row[c]) for c in marine_cols):
            for c in marine_cols:
                row[c] = None
        try:
            observations.append(Observation.from_dict(row))
        except InvalidObservation as e:
            dropped += 1
            logger.debug(f"Dropping invalid row: {e}")

    if dropped:
        logger.warning(f"Filtered {dropped} invalid hourly rows")
    return observations


def split_observations(
    observations: Sequence[Observation],
    now_ms: Optional[int] = None,
) -> Tuple[List[Observation], List[Observation]]:
    """
    Split into (historical, forecast) at now_ms, both sorted.

    Observations at or before now_ms are historical.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    ordered = sorted(observations, key=lambda o: o.timestamp)
    historical = [o for o in ordered if o.timestamp <= now_ms]
    forecast = [o for o in ordered if o.timestamp > now_ms]
    logger.info(f"Split observations: historical={len(historical)}, forecast={len(forecast)}")
    return historical, forecast


def get_provider(name: str = "open-meteo", **kwargs) -> IWeatherProvider:
    """
    Factory function to get an observation provider.

    Args:
        name: Provider name ('open-meteo')
        **kwargs: Provider-specific arguments

    Returns:
        Configured IWeatherProvider instance
    """
    if name.lower() in ("open-meteo", "openmeteo"):
        return OpenMeteoProvider(**kwargs)
    raise ValueError(f"Unknown provider: {name}. Use 'open-meteo'")
