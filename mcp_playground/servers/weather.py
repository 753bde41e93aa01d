# Weather MCP server using the US National Weather Service API
import logging
import sys
from typing import Annotated, Any, Optional

import httpx
from mcp.server.fastmcp import FastMCP
from pydantic import Field

from mcp_playground.config import configure_logging

logger = logging.getLogger(__name__)

mcp = FastMCP("weather")

NWS_API_BASE = "https://api.weather.gov"
USER_AGENT = "weather-app/1.0"

# Replaced in tests with an httpx.MockTransport
http_transport: Optional[httpx.AsyncBaseTransport] = None


async def make_nws_request(url: str) -> Optional[dict[str, Any]]:
    """GET a NWS endpoint, returning None on any HTTP or network error"""
    headers = {
        "User-Agent": USER_AGENT,
        "Accept": "application/geo+json",
    }
    async with httpx.AsyncClient(transport=http_transport, follow_redirects=True, timeout=30.0) as client:
        try:
            response = await client.get(url, headers=headers)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error making NWS request to {url}: {e}")
            return None


def format_alert(feature: dict[str, Any]) -> str:
    props = feature.get("properties") or {}
    return "\n".join(
        [
            f"Event: {props.get('event') or 'Unknown'}",
            f"Area: {props.get('areaDesc') or 'Unknown'}",
            f"Severity: {props.get('severity') or 'Unknown'}",
            f"Status: {props.get('status') or 'Unknown'}",
            f"Headline: {props.get('headline') or 'No headline available'}",
            "---",
        ]
    )


def format_period(period: dict[str, Any]) -> str:
    return "\n".join(
        [
            f"{period.get('name') or 'Unknown'}:",
            f"Temperature: {period.get('temperature') or 'Unknown'}{period.get('temperatureUnit') or 'F'}",
            f"Wind: {period.get('windSpeed') or 'Unknown'} {period.get('windDirection') or ''}",
            f"{period.get('shortForecast') or 'No forecast available'}",
            "---",
        ]
    )


@mcp.tool()
async def get_alerts(
    state: Annotated[str, Field(min_length=2, max_length=2, description="Two-letter state code (e.g. CA, NY)")],
) -> str:
    """Get weather alerts for a state"""
    state_code = state.upper()
    alert_data = await make_nws_request(f"{NWS_API_BASE}/alerts?area={state_code}")
    if not alert_data:
        return "Failed to retrieve alerts data"

    formatted_alerts = "\n".join(format_alert(f) for f in alert_data.get("features", []))
    return f"Active alerts for {state_code}:\n\n{formatted_alerts or 'No active alerts.'}"


@mcp.tool()
async def get_forecast(
    latitude: Annotated[float, Field(ge=-90, le=90, description="Latitude of the location")],
    longitude: Annotated[float, Field(ge=-180, le=180, description="Longitude of the location")],
) -> str:
    """Get weather forecast for a location"""
    # Resolve the forecast grid point first
    points_data = await make_nws_request(f"{NWS_API_BASE}/points/{latitude:.4f},{longitude:.4f}")
    if not points_data:
        return f"Failed to retrieve grid point data for ({latitude}, {longitude})"

    forecast_url = (points_data.get("properties") or {}).get("forecast")
    if not forecast_url:
        return "Failed to get forecast URL from the grid point data"

    forecast_data = await make_nws_request(forecast_url)
    if not forecast_data:
        return "Failed to retrieve forecast data"

    periods = (forecast_data.get("properties") or {}).get("periods") or []
    if not periods:
        return "No forecast periods available"

    formatted_forecast = "\n".join(format_period(p) for p in periods)
    return f"Forecast for {latitude}, {longitude}:\n\n{formatted_forecast}"


def main() -> None:
    configure_logging("INFO")
    # Valid options: stdio, sse, streamable-http
    transport = sys.argv[1] if len(sys.argv) > 1 else "stdio"
    logger.info(f"Starting weather server ({transport})")
    mcp.run(transport=transport)


if __name__ == "__main__":
    main()
