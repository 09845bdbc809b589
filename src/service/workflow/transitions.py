"""
Transition tables for the credit application status axes.

Each table maps a status to the statuses it may move to. Terminal states map
to an empty set.
"""

from typing import Dict, FrozenSet, Type

from src.domain.entities import (
    ActorRole,
    AdminStatus,
    ApplicationStatus,
    FinancialStatus,
    PreAnalysisStatus,
    StatusAxis,
)

APPLICATION_TRANSITIONS: Dict[ApplicationStatus, FrozenSet[ApplicationStatus]] = {
    ApplicationStatus.DRAFT: frozenset({ApplicationStatus.PENDING, ApplicationStatus.CANCELLED}),
    ApplicationStatus.PENDING: frozenset({ApplicationStatus.UNDER_REVIEW, ApplicationStatus.CANCELLED}),
    ApplicationStatus.UNDER_REVIEW: frozenset({ApplicationStatus.APPROVED, ApplicationStatus.REJECTED}),
    ApplicationStatus.APPROVED: frozenset(),
    ApplicationStatus.REJECTED: frozenset(),
    ApplicationStatus.CANCELLED: frozenset(),
}

PRE_ANALYSIS_TRANSITIONS: Dict[PreAnalysisStatus, FrozenSet[PreAnalysisStatus]] = {
    PreAnalysisStatus.PENDING: frozenset({
        PreAnalysisStatus.UNDER_REVIEW,
        PreAnalysisStatus.NEEDS_DOCUMENTS,
        PreAnalysisStatus.NEEDS_CLARIFICATION,
    }),
    PreAnalysisStatus.UNDER_REVIEW: frozenset({
        PreAnalysisStatus.PRE_APPROVED,
        PreAnalysisStatus.NEEDS_DOCUMENTS,
        PreAnalysisStatus.NEEDS_CLARIFICATION,
    }),
    PreAnalysisStatus.PRE_APPROVED: frozenset({PreAnalysisStatus.SUBMITTED_TO_FINANCIAL}),
    PreAnalysisStatus.NEEDS_DOCUMENTS: frozenset({PreAnalysisStatus.UNDER_REVIEW}),
    PreAnalysisStatus.NEEDS_CLARIFICATION: frozenset({PreAnalysisStatus.UNDER_REVIEW}),
    PreAnalysisStatus.SUBMITTED_TO_FINANCIAL: frozenset(),
}

FINANCIAL_TRANSITIONS: Dict[FinancialStatus, FrozenSet[FinancialStatus]] = {
    FinancialStatus.PENDING_FINANCIAL: frozenset({FinancialStatus.UNDER_REVIEW_FINANCIAL}),
    FinancialStatus.UNDER_REVIEW_FINANCIAL: frozenset({
        FinancialStatus.APPROVED,
        FinancialStatus.REJECTED,
        FinancialStatus.NEEDS_DOCUMENTS_FINANCIAL,
    }),
    FinancialStatus.APPROVED: frozenset(),
    FinancialStatus.REJECTED: frozenset(),
    FinancialStatus.NEEDS_DOCUMENTS_FINANCIAL: frozenset({FinancialStatus.UNDER_REVIEW_FINANCIAL}),
}

ADMIN_TRANSITIONS: Dict[AdminStatus, FrozenSet[AdminStatus]] = {
    AdminStatus.PENDING_ADMIN: frozenset({AdminStatus.ADMIN_FINALIZED}),
    AdminStatus.ADMIN_FINALIZED: frozenset(),
}

TRANSITION_TABLES = {
    StatusAxis.APPLICATION: APPLICATION_TRANSITIONS,
    StatusAxis.PRE_ANALYSIS: PRE_ANALYSIS_TRANSITIONS,
    StatusAxis.FINANCIAL: FINANCIAL_TRANSITIONS,
    StatusAxis.ADMIN: ADMIN_TRANSITIONS,
}

AXIS_ENUMS: Dict[StatusAxis, Type] = {
    StatusAxis.APPLICATION: ApplicationStatus,
    StatusAxis.PRE_ANALYSIS: PreAnalysisStatus,
    StatusAxis.FINANCIAL: FinancialStatus,
    StatusAxis.ADMIN: AdminStatus,
}

_INTERNAL_TEAM = frozenset({ActorRole.REVIEWER, ActorRole.ADMIN})

# Who may move each axis. Keys are (axis, target) for the application axis,
# where importer and reviewer own different targets.
APPLICATION_TARGET_ROLES: Dict[ApplicationStatus, FrozenSet[ActorRole]] = {
    ApplicationStatus.PENDING: frozenset({ActorRole.IMPORTER}),
    ApplicationStatus.CANCELLED: frozenset({ActorRole.IMPORTER}),
    ApplicationStatus.UNDER_REVIEW: _INTERNAL_TEAM,
    ApplicationStatus.APPROVED: _INTERNAL_TEAM,
    ApplicationStatus.REJECTED: _INTERNAL_TEAM,
}

AXIS_ROLES: Dict[StatusAxis, FrozenSet[ActorRole]] = {
    StatusAxis.PRE_ANALYSIS: _INTERNAL_TEAM,
    StatusAxis.FINANCIAL: frozenset({ActorRole.FINANCIAL_INSTITUTION}),
    StatusAxis.ADMIN: frozenset({ActorRole.ADMIN}),
}

TERMINAL_APPLICATION_STATUSES = frozenset({
    ApplicationStatus.REJECTED,
    ApplicationStatus.CANCELLED,
})
