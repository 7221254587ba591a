"""Order-to-driver assignment services."""

from .engine import AssignmentResult, MatchingWeights, MatchTier, assign_orders
from .models import AssignmentRun, ExportOutcome
from .service import AssignmentService, RunSupersededError

__all__ = [
    "AssignmentResult",
    "AssignmentRun",
    "AssignmentService",
    "ExportOutcome",
    "MatchTier",
    "MatchingWeights",
    "RunSupersededError",
    "assign_orders",
]
