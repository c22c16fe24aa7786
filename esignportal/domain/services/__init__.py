"""Domain services."""

from esignportal.domain.services.gate import GateDecision, RouteRequirements, evaluate
from esignportal.domain.services.lifecycle import effective_status, is_signable

__all__ = [
    "GateDecision",
    "RouteRequirements",
    "effective_status",
    "evaluate",
    "is_signable",
]
