"""modules/tool_usage — geometry and weather lookups shared by the planning stages."""

from tripsmith.modules.tool_usage.distance_tool import (
    DistanceTool, TravelLeg, coordinate_distance, haversine_km, midpoint, path_length_km,
)
from tripsmith.modules.tool_usage.weather_tool import (
    FallbackWeatherProvider, FixedWeatherProvider, RandomWeatherProvider,
    WeatherTool, pad_forecast, parse_forecast, weather_code_to_condition,
)

__all__ = [
    "DistanceTool",
    "TravelLeg",
    "coordinate_distance",
    "haversine_km",
    "midpoint",
    "path_length_km",
    "FallbackWeatherProvider",
    "FixedWeatherProvider",
    "RandomWeatherProvider",
    "WeatherTool",
    "pad_forecast",
    "parse_forecast",
    "weather_code_to_condition",
]
