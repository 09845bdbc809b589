"""Repository interfaces for data persistence."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from src.domain.entities import (
    CreditApplication,
    ImportOrder,
    ImportStage,
    LedgerBalance,
    LedgerEntry,
    OutboundEvent,
    PaymentScheduleEntry,
    PaymentStatus,
    StatusChange,
)


class CreditApplicationRepository(ABC):
    """
    Abstract repository for CreditApplication persistence.

    Updates are optimistic: `update` only succeeds if the stored version
    still matches the entity's version.
    """

    @abstractmethod
    async def save(self, application: CreditApplication) -> CreditApplication:
        """Persist a new application."""
        ...

    @abstractmethod
    async def get_by_id(
        self,
        application_id: UUID,
        for_update: bool = False,
    ) -> Optional[CreditApplication]:
        """
        Retrieve an application by ID.

        Args:
            application_id: The application's unique identifier
            for_update: Lock the row for the rest of the transaction

        Returns:
            The application if found, None otherwise
        """
        ...

    @abstractmethod
    async def update(self, application: CreditApplication) -> CreditApplication:
        """
        Persist status and term changes of an existing application.

        Returns:
            The application with its version incremented

        Raises:
            ConcurrencyConflictException: If the row changed since it was read
        """
        ...

    @abstractmethod
    async def get_by_importer(self, importer_id: str) -> List[CreditApplication]:
        """Retrieve all applications of an importer, newest first."""
        ...

    @abstractmethod
    async def add_status_changes(self, changes: List[StatusChange]) -> None:
        """Append entries to the application's status history."""
        ...

    @abstractmethod
    async def get_status_history(self, application_id: UUID) -> List[StatusChange]:
        """Retrieve the status history of an application, oldest first."""
        ...


class CreditLedgerRepository(ABC):
    """
    Abstract repository for the credit ledger.

    The running usage total lives on the application row; reserve and
    release adjust it with conditional updates so that the check and the
    write happen as one statement.
    """

    @abstractmethod
    async def try_increase_usage(self, application_id: UUID, amount_cents: int) -> bool:
        """
        Add to the usage total only if it stays within the final limit.

        Returns:
            True if the usage was increased, False if the limit would be exceeded
        """
        ...

    @abstractmethod
    async def decrease_usage(self, application_id: UUID, amount_cents: int) -> None:
        """Subtract from the usage total."""
        ...

    @abstractmethod
    async def get_balance(self, application_id: UUID) -> Optional[LedgerBalance]:
        """Read the current limit and usage, or None if the application is unknown."""
        ...

    @abstractmethod
    async def add_entry(self, entry: LedgerEntry) -> LedgerEntry:
        """Persist a new active reservation."""
        ...

    @abstractmethod
    async def mark_released(
        self,
        application_id: UUID,
        import_id: UUID,
        released_at: datetime,
    ) -> Optional[LedgerEntry]:
        """
        Flip an active reservation to released.

        Returns:
            The released entry, or None if there was no active reservation
        """
        ...

    @abstractmethod
    async def get_entry(self, application_id: UUID, import_id: UUID) -> Optional[LedgerEntry]:
        """Retrieve the reservation held by an import."""
        ...

    @abstractmethod
    async def adjust_entry(self, entry_id: UUID, amount_cents: int) -> None:
        """Change the reserved amount of an active entry."""
        ...

    @abstractmethod
    async def get_entries(self, application_id: UUID) -> List[LedgerEntry]:
        """Retrieve all reservations of an application, oldest first."""
        ...


class ImportRepository(ABC):
    """Abstract repository for ImportOrder persistence."""

    @abstractmethod
    async def save(self, import_order: ImportOrder) -> ImportOrder:
        ...

    @abstractmethod
    async def get_by_id(
        self,
        import_id: UUID,
        for_update: bool = False,
    ) -> Optional[ImportOrder]:
        ...

    @abstractmethod
    async def update(
        self,
        import_order: ImportOrder,
        expected_stage: ImportStage,
    ) -> ImportOrder:
        """Persist stage and snapshot changes, provided the stored stage is still `expected_stage`."""
        ...

    @abstractmethod
    async def get_by_application(self, application_id: UUID) -> List[ImportOrder]:
        ...


class PaymentScheduleRepository(ABC):
    """Abstract repository for PaymentScheduleEntry persistence."""

    @abstractmethod
    async def save_all(self, entries: List[PaymentScheduleEntry]) -> List[PaymentScheduleEntry]:
        ...

    @abstractmethod
    async def get_by_id(self, entry_id: UUID) -> Optional[PaymentScheduleEntry]:
        ...

    @abstractmethod
    async def get_by_import(self, import_id: UUID) -> List[PaymentScheduleEntry]:
        """Retrieve an import's schedule ordered by due date."""
        ...

    @abstractmethod
    async def update(
        self,
        entry: PaymentScheduleEntry,
        expected_status: PaymentStatus,
    ) -> PaymentScheduleEntry:
        """Persist an entry, provided its stored status is still `expected_status`."""
        ...

    @abstractmethod
    async def cancel_open(self, import_id: UUID) -> int:
        """
        Cancel every pending entry of an import.

        Returns:
            Number of entries cancelled
        """
        ...


class EventRepository(ABC):
    """
    Abstract repository for OutboundEvent persistence.

    Events are persisted to enable delivery tracking and retry of failed
    deliveries.
    """

    @abstractmethod
    async def save(self, event: OutboundEvent) -> OutboundEvent:
        ...

    @abstractmethod
    async def update(self, event: OutboundEvent) -> OutboundEvent:
        ...

    @abstractmethod
    async def get_pending(self, limit: int = 100) -> List[OutboundEvent]:
        """Retrieve undelivered events, oldest first."""
        ...
