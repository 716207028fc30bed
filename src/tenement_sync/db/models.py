"""
SQLAlchemy ORM Models

The shared tenements table written by the sync pipeline, and the run log
that records each sync's outcome.
"""
from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    String, Integer, Numeric, Date, DateTime, Text, Float,
    CheckConstraint, UniqueConstraint, Index,
)
from sqlalchemy.orm import Mapped, mapped_column

from src.tenement_sync.db.base import Base, TimestampMixin, JSONType


class Tenement(Base, TimestampMixin):
    """
    Mining tenement, one row per (jurisdiction, number).

    The primary key is derived from jurisdiction and number, so an upsert on
    ``id`` overwrites the existing row instead of duplicating it. The sync
    pipeline never deletes rows.
    """
    __tablename__ = "tenements"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        comment="UUID derived from jurisdiction and tenement number"
    )
    jurisdiction: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
        comment="Jurisdiction code: WA, NSW, VIC, NT, QLD, TAS"
    )
    number: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Jurisdiction-local tenement number"
    )

    type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, comment="Tenement type")
    status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, comment="Tenement status")
    holder_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, comment="Primary holder")
    area_ha: Mapped[Optional[float]] = mapped_column(
        Numeric(14, 4),
        nullable=True,
        comment="Legal area in hectares"
    )

    grant_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    application_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    expiry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True, comment="Centroid longitude")
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True, comment="Centroid latitude")
    geometry: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True, comment="Source geometry")

    last_sync_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="Timestamp of the run that last wrote this row"
    )
    source_wfs_ref: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    source_mto_ref: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("jurisdiction", "number", name="uq_tenements_jurisdiction_number"),
        CheckConstraint(
            "jurisdiction IN ('WA', 'NSW', 'VIC', 'NT', 'QLD', 'TAS')",
            name="check_tenement_jurisdiction_valid"
        ),
        Index("idx_tenements_jurisdiction", "jurisdiction"),
        Index("idx_tenements_holder_name", "holder_name"),
        Index("idx_tenements_expiry_date", "expiry_date"),
    )

    def __repr__(self) -> str:
        return f"<Tenement(jurisdiction={self.jurisdiction}, number={self.number})>"


class SyncRun(Base, TimestampMixin):
    """Sync run execution metadata, one row per orchestrator run."""
    __tablename__ = "sync_runs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    jurisdiction: Mapped[str] = mapped_column(String(3), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="Run status: running, success, partial, failure, cancelled"
    )

    records_total: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    records_imported: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    records_failed: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    error_details: Mapped[Optional[dict]] = mapped_column(
        JSONType,
        nullable=True,
        comment="Error list collected during the run"
    )

    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('running', 'success', 'partial', 'failure', 'cancelled')",
            name="check_sync_run_status_valid"
        ),
        Index("idx_sync_runs_jurisdiction", "jurisdiction"),
        Index("idx_sync_runs_started_at", "started_at"),
    )

    def __repr__(self) -> str:
        return f"<SyncRun(jurisdiction={self.jurisdiction}, status={self.status}, imported={self.records_imported})>"
