"""
Status workflow engine for credit applications.

Validates and applies transitions over the composite state of an
application. A transition must be present in its axis table, must be
requested by a role that owns it, and must satisfy the cross-axis
preconditions evaluated on the whole state.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional, Tuple
from uuid import UUID

from src.domain.entities import (
    Actor,
    AdminStatus,
    ApplicationStatus,
    FinancialStatus,
    PreAnalysisStatus,
    StatusAxis,
    StatusChange,
    WorkflowState,
)
from src.domain.exceptions import (
    ActorNotAuthorizedException,
    DataIntegrityException,
    IllegalTransitionException,
)

from .transitions import (
    APPLICATION_TARGET_ROLES,
    AXIS_ENUMS,
    AXIS_ROLES,
    TERMINAL_APPLICATION_STATUSES,
    TRANSITION_TABLES,
)


@dataclass(frozen=True)
class TransitionResult:
    """New state plus the attributed changes that produced it."""

    state: WorkflowState
    changes: Tuple[StatusChange, ...]


def coerce_status(axis: StatusAxis, value) -> Enum:
    """
    Convert a raw value to the axis enum.

    Raises:
        DataIntegrityException: If the value is not in the axis's closed set
    """
    enum_cls = AXIS_ENUMS[axis]
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise DataIntegrityException(f"Unknown {axis.value} status: {value!r}")


def can_transition(axis: StatusAxis, from_status, to_status) -> bool:
    """Whether the edge exists in the axis table (ignores preconditions)."""
    table = TRANSITION_TABLES[axis]
    source = coerce_status(axis, from_status)
    target = coerce_status(axis, to_status)
    return target in table.get(source, frozenset())


def _precondition_failure(
    state: WorkflowState,
    axis: StatusAxis,
    target: Enum,
) -> Optional[str]:
    """Return the unmet cross-axis precondition, or None."""
    if state.application in TERMINAL_APPLICATION_STATUSES:
        return f"application is {state.application.value}"

    if axis == StatusAxis.PRE_ANALYSIS:
        if state.application != ApplicationStatus.UNDER_REVIEW:
            return "pre-analysis requires application status under_review"

    elif axis == StatusAxis.FINANCIAL:
        if state.pre_analysis != PreAnalysisStatus.SUBMITTED_TO_FINANCIAL:
            return "financial review requires pre-analysis status submitted_to_financial"

    elif axis == StatusAxis.ADMIN:
        if state.financial != FinancialStatus.APPROVED:
            return "admin finalization requires financial status approved"

    elif axis == StatusAxis.APPLICATION and target == ApplicationStatus.APPROVED:
        if state.admin != AdminStatus.ADMIN_FINALIZED:
            return "application approval requires admin status admin_finalized"

    return None


def validate_state(state: WorkflowState) -> None:
    """
    Check the structural invariant of a composite state.

    admin_finalized requires financial approved, which requires pre-analysis
    submitted_to_financial.

    Raises:
        DataIntegrityException: If the state combines incompatible values
    """
    if state.admin == AdminStatus.ADMIN_FINALIZED and state.financial != FinancialStatus.APPROVED:
        raise DataIntegrityException(
            f"admin_finalized with financial status {state.financial.value}"
        )
    if (
        state.financial != FinancialStatus.PENDING_FINANCIAL
        and state.pre_analysis != PreAnalysisStatus.SUBMITTED_TO_FINANCIAL
    ):
        raise DataIntegrityException(
            f"financial status {state.financial.value} with pre-analysis status "
            f"{state.pre_analysis.value}"
        )
    if state.application == ApplicationStatus.APPROVED and state.admin != AdminStatus.ADMIN_FINALIZED:
        raise DataIntegrityException("application approved before admin finalization")


def authorize(actor: Actor, axis: StatusAxis, target: Enum) -> None:
    """
    Check that the actor's role owns the requested move.

    Raises:
        ActorNotAuthorizedException: If the role may not perform the move
    """
    if axis == StatusAxis.APPLICATION:
        allowed = APPLICATION_TARGET_ROLES.get(target, frozenset())
    else:
        allowed = AXIS_ROLES[axis]

    if actor.role not in allowed:
        raise ActorNotAuthorizedException(
            actor.role.value,
            f"move {axis.value} status to {target.value}",
        )


def apply_transition(
    application_id: UUID,
    state: WorkflowState,
    axis: StatusAxis,
    to_status,
    actor: Actor,
    at: Optional[datetime] = None,
) -> TransitionResult:
    """
    Apply a single transition to a composite state.

    Args:
        application_id: The application being moved
        state: Current composite state (not mutated)
        axis: Axis to move
        to_status: Target status on that axis
        actor: Who is performing the move
        at: Timestamp of the move (defaults to now)

    Returns:
        TransitionResult with the new state and the recorded change

    Raises:
        IllegalTransitionException: Edge not in the table or precondition unmet
        ActorNotAuthorizedException: Role does not own the move
    """
    return apply_transitions(application_id, state, [(axis, to_status)], actor, at)


def apply_transitions(
    application_id: UUID,
    state: WorkflowState,
    moves: Iterable[Tuple[StatusAxis, object]],
    actor: Actor,
    at: Optional[datetime] = None,
) -> TransitionResult:
    """
    Apply a group of coupled transitions, all or nothing.

    Each move is validated against the state produced by the previous one.
    If any move fails, the exception propagates and no state is returned.
    """
    at = at or datetime.utcnow()
    current = state
    changes: List[StatusChange] = []

    for axis, to_status in moves:
        source = current.get(axis)
        target = coerce_status(axis, to_status)

        if not can_transition(axis, source, target):
            raise IllegalTransitionException(
                axis.value,
                source.value,
                target.value,
                "transition not allowed from current status",
            )

        reason = _precondition_failure(current, axis, target)
        if reason is not None:
            raise IllegalTransitionException(axis.value, source.value, target.value, reason)

        authorize(actor, axis, target)

        current = replace(current, **{axis.value: target})
        changes.append(
            StatusChange(
                application_id=application_id,
                axis=axis,
                from_status=source.value,
                to_status=target.value,
                actor_id=actor.user_id,
                actor_role=actor.role,
                changed_at=at,
            )
        )

    validate_state(current)
    return TransitionResult(state=current, changes=tuple(changes))


def workflow_stage(state: WorkflowState) -> str:
    """Summarize the composite state as a single reporting stage."""
    if state.application == ApplicationStatus.DRAFT:
        return "draft"
    if state.application in TERMINAL_APPLICATION_STATUSES:
        return "rejected"
    if state.financial == FinancialStatus.REJECTED:
        return "rejected"
    if state.admin == AdminStatus.ADMIN_FINALIZED:
        return "completed"
    if state.financial == FinancialStatus.APPROVED:
        return "pending_final_admin"
    if state.pre_analysis == PreAnalysisStatus.SUBMITTED_TO_FINANCIAL:
        return "pending_financial"
    return "pending_admin"
