"""SQLAlchemy ORM models for credit, import and payment records."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Type
from uuid import uuid4

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from src.domain.entities import (
    AdminStatus,
    ApplicationStatus,
    FinancialStatus,
    ImportStage,
    LedgerEntryStatus,
    PaymentType,
    PreAnalysisStatus,
    STORED_PAYMENT_STATUSES,
)


def _in_enum(column: str, values) -> str:
    allowed = ", ".join(f"'{v.value}'" for v in sorted(values, key=lambda e: e.value))
    return f"{column} IN ({allowed})"


def _enum_check(column: str, enum_cls: Type[Enum]) -> CheckConstraint:
    return CheckConstraint(_in_enum(column, list(enum_cls)), name=f"ck_{column}_values")


class Base(DeclarativeBase):
    pass


class CreditApplicationModel(Base):
    """Persisted credit application with its four status axes."""

    __tablename__ = "credit_applications"
    __table_args__ = (
        _enum_check("application_status", ApplicationStatus),
        _enum_check("pre_analysis_status", PreAnalysisStatus),
        _enum_check("financial_status", FinancialStatus),
        _enum_check("admin_status", AdminStatus),
        CheckConstraint("credit_used_cents >= 0", name="ck_credit_used_non_negative"),
        CheckConstraint(
            "final_credit_limit_cents IS NULL OR credit_used_cents <= final_credit_limit_cents",
            name="ck_credit_used_within_limit",
        ),
    )

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    importer_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    requested_amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)

    application_status: Mapped[str] = mapped_column(String(50), nullable=False)
    pre_analysis_status: Mapped[str] = mapped_column(String(50), nullable=False)
    financial_status: Mapped[str] = mapped_column(String(50), nullable=False)
    admin_status: Mapped[str] = mapped_column(String(50), nullable=False)

    pre_analysis_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    approved_amount_cents: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    approved_terms: Mapped[list | None] = mapped_column(JSON, nullable=True)
    financial_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    final_credit_limit_cents: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    final_down_payment_rate: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    final_admin_fee_rate: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    final_approved_terms: Mapped[list | None] = mapped_column(JSON, nullable=True)

    credit_used_cents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
    )


class StatusChangeModel(Base):
    """Attributed, timestamped record of one applied status transition."""

    __tablename__ = "credit_status_history"

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    application_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("credit_applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    axis: Mapped[str] = mapped_column(String(50), nullable=False)
    from_status: Mapped[str] = mapped_column(String(50), nullable=False)
    to_status: Mapped[str] = mapped_column(String(50), nullable=False)
    actor_id: Mapped[str] = mapped_column(String(255), nullable=False)
    actor_role: Mapped[str] = mapped_column(String(50), nullable=False)
    changed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class ImportModel(Base):
    """Persisted import with its financial snapshot."""

    __tablename__ = "imports"
    __table_args__ = (_enum_check("stage", ImportStage),)

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    application_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("credit_applications.id"),
        nullable=False,
        index=True,
    )
    importer_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    stage: Mapped[str] = mapped_column(String(50), nullable=False)

    fob_value_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    down_payment_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    admin_fee_rate: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    terms: Mapped[list] = mapped_column(JSON, nullable=False)
    down_payment_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    financed_amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    admin_fee_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    total_cost_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    installment_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)

    delivered_to_agent_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
    )


class LedgerEntryModel(Base):
    """Credit reservation held by one import against its application."""

    __tablename__ = "credit_ledger_entries"
    __table_args__ = (
        UniqueConstraint("application_id", "import_id", name="uq_ledger_application_import"),
        _enum_check("status", LedgerEntryStatus),
        CheckConstraint("amount_reserved_cents >= 0", name="ck_amount_reserved_non_negative"),
    )

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    application_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("credit_applications.id"),
        nullable=False,
        index=True,
    )
    import_id: Mapped[str] = mapped_column(Uuid(as_uuid=False), nullable=False, index=True)
    amount_reserved_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    reserved_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
    )
    released_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class PaymentScheduleModel(Base):
    """Persisted payment schedule entry of an import."""

    __tablename__ = "payment_schedules"
    __table_args__ = (
        CheckConstraint(_in_enum("status", STORED_PAYMENT_STATUSES), name="ck_status_values"),
        _enum_check("payment_type", PaymentType),
        CheckConstraint("amount_cents >= 0", name="ck_amount_non_negative"),
    )

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    import_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("imports.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    payment_type: Mapped[str] = mapped_column(String(20), nullable=False)
    amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    installment_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    total_installments: Mapped[int | None] = mapped_column(Integer, nullable=True)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
    )


class OutboundEventModel(Base):
    """Persisted outbound event record for tracking delivery."""

    __tablename__ = "outbound_event"

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    event_type: Mapped[str] = mapped_column(String(100), nullable=False)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)
    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="pending",
    )
    last_attempt_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=datetime.utcnow,
    )
