"""SQLAlchemy async database models for BOQCalc.

Maps to PostgreSQL schema; also runs on SQLite for local development and tests.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class ProjectModel(Base):
    """Customer project that owns one BOQ and at most one quotation."""

    __tablename__ = "projects"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    client_name: Mapped[str | None] = mapped_column(Text)
    address: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class BOQModel(Base):
    """Bill of quantities header; one per project."""

    __tablename__ = "boqs"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    project_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    status: Mapped[str] = mapped_column(Text, nullable=False, default="draft", server_default="draft")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        CheckConstraint("status IN ('draft', 'approved')", name="check_boq_status"),
    )


class BOQJobModel(Base):
    """Job line item on a BOQ.

    Per-unit rates (labor_cost, estimated_price) sit next to the line amounts
    (total_labor_cost, total_estimated_price). Material, selling and total
    columns stay NULL until priced.
    """

    __tablename__ = "boq_jobs"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    boq_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("boqs.id", ondelete="CASCADE"), nullable=False, index=True
    )

    name: Mapped[str] = mapped_column(Text, nullable=False)
    unit: Mapped[str] = mapped_column(Text, nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False)

    labor_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_labor_cost: Mapped[Decimal] = mapped_column(Numeric(16, 4), nullable=False)

    estimated_price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    total_estimated_price: Mapped[Decimal | None] = mapped_column(Numeric(16, 4))
    selling_price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    total: Mapped[Decimal | None] = mapped_column(Numeric(16, 4))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        CheckConstraint("quantity > 0", name="check_job_quantity_positive"),
        CheckConstraint("labor_cost >= 0", name="check_job_labor_non_negative"),
        Index("idx_boq_jobs_boq_created", "boq_id", "created_at"),
    )


class GeneralCostModel(Base):
    """Overhead cost category on a BOQ; estimated_cost NULL means not estimated."""

    __tablename__ = "boq_general_costs"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    boq_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("boqs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type_name: Mapped[str] = mapped_column(Text, nullable=False)
    estimated_cost: Mapped[Decimal | None] = mapped_column(Numeric(14, 2))

    __table_args__ = (
        UniqueConstraint("boq_id", "type_name", name="uq_general_cost_type"),
    )


class QuotationModel(Base):
    """Current quotation for a project.

    project_id is unique so concurrent first requests collapse onto one row.
    """

    __tablename__ = "quotations"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    project_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    status: Mapped[str] = mapped_column(Text, nullable=False, default="draft", server_default="draft")
    valid_date: Mapped[date | None] = mapped_column(Date)
    tax_percentage: Mapped[Decimal | None] = mapped_column(Numeric(5, 2))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        CheckConstraint("status IN ('draft', 'approved')", name="check_quotation_status"),
        CheckConstraint(
            "tax_percentage IS NULL OR (tax_percentage >= 0 AND tax_percentage <= 100)",
            name="check_tax_percentage_range",
        ),
    )


class SupplierModel(Base):
    """Material supplier; email is the business key."""

    __tablename__ = "suppliers"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    tel: Mapped[str | None] = mapped_column(Text)
    address: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
