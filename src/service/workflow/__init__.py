"""
Status Workflow Module for credit applications
"""

from .engine import (
    TransitionResult,
    apply_transition,
    apply_transitions,
    authorize,
    can_transition,
    coerce_status,
    validate_state,
    workflow_stage,
)
from .transitions import TRANSITION_TABLES

__all__ = [
    "TRANSITION_TABLES",
    "TransitionResult",
    "apply_transition",
    "apply_transitions",
    "authorize",
    "can_transition",
    "coerce_status",
    "validate_state",
    "workflow_stage",
]
