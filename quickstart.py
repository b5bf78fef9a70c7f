"""Quick start script for Wind Forecast.

Demonstrates the complete workflow: fetch -> train -> forecast -> evaluate
"""

from loguru import logger

from wind_forecast import ForecastSession, ModelConfig
from wind_forecast.config import HOUR_MS
from wind_forecast.data import get_provider, split_observations
from wind_forecast.evaluation import compute_variable_metrics
from wind_forecast.features import compass_point

# Configuration
LATITUDE = 36.72  # Malaga
LONGITUDE = -4.42
PRESET = "balanced"
HORIZON = 24
PAST_DAYS = 7


def log_progress(progress):
    if progress.stage == "training":
        logger.info(
            f"  epoch {progress.current_epoch}/{progress.total_epochs} loss={progress.loss:.5f}"
        )


def main():
    """Run complete demo workflow."""

    # Step 1: Fetch observations
    logger.info("=" * 80)
    logger.info("STEP 1: DATA FETCH")
    logger.info("=" * 80)

    provider = get_provider("open-meteo", past_days=PAST_DAYS)
    observations = provider.fetch_observations(LATITUDE, LONGITUDE)
    historical, upcoming = split_observations(observations)
    include_marine = bool(historical) and all(o.has_marine for o in historical)
    logger.info(f"Historical: {len(historical)}, provider forecast: {len(upcoming)}, marine={include_marine}")

    config = ModelConfig.from_preset(PRESET, include_marine=include_marine)

    with ForecastSession(config) as session:
        # Step 2: Train model
        logger.info("=" * 80)
        logger.info("STEP 2: MODEL TRAINING")
        logger.info("=" * 80)

        result = session.train(historical, on_progress=log_progress)
        logger.info(f"Training complete. Final val loss: {result.validation_loss[-1]:.6f}")

        # Step 3: Generate forecasts
        logger.info("=" * 80)
        logger.info("STEP 3: FORECASTING")
        logger.info("=" * 80)

        chunks = session.predict(historical, HORIZON)
        reference = {o.timestamp: o for o in upcoming}
        for chunk in chunks:
            line = (
                f"  +{(chunk.start_time - historical[-1].timestamp) // HOUR_MS:>2}h "
                f"wind {chunk.wind_speed:5.1f} km/h gusts {chunk.wind_gusts:5.1f} "
                f"from {compass_point(chunk.wind_direction):>3} "
                f"conf {chunk.confidence:.2f} ({chunk.confidence_label})"
            )
            if chunk.start_time in reference:
                line += f" | provider {reference[chunk.start_time].wind_speed:5.1f} km/h"
            logger.info(line)

        # Step 4: Evaluate
        logger.info("=" * 80)
        logger.info("STEP 4: EVALUATION")
        logger.info("=" * 80)

        metrics = session.evaluate(result)
        logger.info(f"Wind speed: RMSE={metrics.rmse:.3f}, MAE={metrics.mae:.3f}, R2={metrics.r2_score:.3f}")
        for name, value in metrics.confidence_intervals.items():
            logger.info(f"  95% interval {name}: +/-{value:.2f}")

        for name, variable_metrics in compute_variable_metrics(result.variable_pairs).items():
            logger.info(f"  {name}: RMSE={variable_metrics.rmse:.3f}, MAE={variable_metrics.mae:.3f}")

    logger.info("=" * 80)
    logger.info("DEMO COMPLETE!")
    logger.info("=" * 80)

    logger.info(
        """
    Next steps:
    1. Use the FastAPI: uvicorn wind_forecast.app_api.main:app --reload
    2. Run tests: pytest tests/ -v
    """
    )


if __name__ == "__main__":
    main()
