"""modules/planning — routing, scheduling, costing and budget allocation."""

from tripsmith.modules.planning.route_planner import RouteOptimizer
from tripsmith.modules.planning.scheduler import TemporalScheduler
from tripsmith.modules.planning.cost_estimator import CostEstimator
from tripsmith.modules.planning.budget_planner import BudgetAllocator

__all__ = [
    "RouteOptimizer",
    "TemporalScheduler",
    "CostEstimator",
    "BudgetAllocator",
]
