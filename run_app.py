"""
Launch script for the forecasting API.
Run this file to start the HTTP service.
"""

import os
import sys

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "wind_forecast.app_api.main:app",
        host=os.getenv("WIND_FORECAST_HOST", "localhost"),
        port=int(os.getenv("WIND_FORECAST_PORT", 8000)),
    )
