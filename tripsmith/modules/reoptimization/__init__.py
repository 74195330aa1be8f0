"""modules/reoptimization — weather adaptation and budget savings suggestions."""

from tripsmith.modules.reoptimization.weather_adapter import (
    Place, WeatherAdapter, WeatherAdaptResult,
)
from tripsmith.modules.reoptimization.alternative_generator import (
    BudgetAlternative, BudgetAlternativeGenerator, SavingsSuggestion,
)

__all__ = [
    "Place",
    "WeatherAdapter",
    "WeatherAdaptResult",
    "BudgetAlternative",
    "BudgetAlternativeGenerator",
    "SavingsSuggestion",
]
