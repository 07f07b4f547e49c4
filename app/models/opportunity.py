"""Opportunity model — one tracked sales prospect and its call pipeline."""

from datetime import date

from sqlalchemy import JSON, Boolean, Column, Date, Index, Integer, Numeric, String, Text

from .base import Base


class Opportunity(Base):
    """A sales opportunity moving through discovery and closing calls.

    Each of the six call slots has a date (scheduled), a duration in minutes
    (the call happened) and an opaque recording reference.
    """

    __tablename__ = "opportunities"
    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    lead_source = Column(String(100), nullable=False, default="Referrals")
    salesperson = Column(String(255), nullable=False, default="Unknown")

    # Discovery calls
    discovery1_date = Column(Date)
    discovery1_duration = Column(Integer)  # minutes
    discovery1_recording = Column(Text)
    discovery2_date = Column(Date)
    discovery2_duration = Column(Integer)
    discovery2_recording = Column(Text)
    discovery3_date = Column(Date)
    discovery3_duration = Column(Integer)
    discovery3_recording = Column(Text)

    # Closing calls
    closing1_date = Column(Date)
    closing1_duration = Column(Integer)
    closing1_recording = Column(Text)
    closing2_date = Column(Date)
    closing2_duration = Column(Integer)
    closing2_recording = Column(Text)
    closing3_date = Column(Date)
    closing3_duration = Column(Integer)
    closing3_recording = Column(Text)

    # Commercial state
    proposal_status = Column(String(20), nullable=False, default="N/A")  # N/A, Created, Pitched
    revenue = Column(Numeric(12, 2), default=0)
    cash_collected = Column(Numeric(12, 2), default=0)
    deal_status = Column(String(10), nullable=False, default="Open")  # Open, Won, Lost
    is_won = Column(Boolean, default=False)
    is_lost = Column(Boolean, default=False)

    # Ancillary data, not read by the analytics
    contacts = Column(JSON, default=list)
    files = Column(JSON, default=list)
    notes = Column(Text)
    conversation = Column(JSON, default=list)

    created_at = Column(Date, nullable=False, default=date.today)

    __table_args__ = (
        Index("ix_opportunities_created_at", "created_at"),
        Index("ix_opportunities_salesperson", "salesperson"),
        Index("ix_opportunities_lead_source", "lead_source"),
    )
