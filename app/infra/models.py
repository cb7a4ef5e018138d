from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Numeric,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from .db import Base

# JSONB on Postgres, plain JSON on sqlite
JSONType = JSON().with_variant(JSONB(), "postgresql")


# ---------- Family members and holdings ----------


class Person(Base):
    __tablename__ = "people"

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)
    slug = Column(Text, nullable=False, unique=True, index=True)

    investments = relationship("Investment", back_populates="person")


class Investment(Base):
    __tablename__ = "investments"

    id = Column(Text, primary_key=True)
    person_id = Column(Text, ForeignKey("people.id"), nullable=False, index=True)
    investment_name = Column(Text, nullable=False)
    platform = Column(Text, nullable=False)
    l1_category = Column(Text, nullable=True)   # asset class, e.g. "Fixed Income"
    l2_category = Column(Text, nullable=True)   # sub-category, e.g. "FIC"
    country = Column(Text, nullable=True)
    currency = Column(Text, nullable=False, default="USD")
    ter = Column(Numeric, nullable=False, default=0)  # expense ratio, percent
    is_active = Column(Boolean, nullable=False, default=True)

    person = relationship("Person", back_populates="investments")
    snapshots = relationship("MonthlySnapshot", back_populates="investment")


class MonthlySnapshot(Base):
    """
    One balance fact per investment per snapshot date, written by the
    ingestion workflow. Already converted to USD at ingestion time.
    """

    __tablename__ = "monthly_snapshots"
    __table_args__ = (
        UniqueConstraint("investment_id", "snapshot_date", name="uq_monthly_snapshots_inv_date"),
    )

    id = Column(Text, primary_key=True)
    investment_id = Column(Text, ForeignKey("investments.id"), nullable=False, index=True)
    snapshot_date = Column(Date, nullable=False, index=True)
    balance_original = Column(Numeric, nullable=False)
    currency_original = Column(Text, nullable=False)
    balance_usd = Column(Numeric, nullable=False)
    fx_rate = Column(Numeric, nullable=False, default=1)

    investment = relationship("Investment", back_populates="snapshots")


class FxRate(Base):
    __tablename__ = "fx_rates"
    __table_args__ = (UniqueConstraint("rate_date", "pair", name="uq_fx_rates_date_pair"),)

    id = Column(Text, primary_key=True)
    rate_date = Column(Date, nullable=False)
    pair = Column(Text, nullable=False)  # e.g. "USD/COP"
    rate = Column(Numeric, nullable=False)


# ---------- Ingestion workflow audit ----------


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Text, primary_key=True)
    execution_date = Column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
    workflow_name = Column(Text, nullable=True)
    action = Column(Text, nullable=False)
    details = Column(JSONType, nullable=True)
    status = Column(Text, nullable=False)  # "success" | "error" | "partial"
    error_message = Column(Text, nullable=True)
