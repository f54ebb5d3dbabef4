"""SQLAlchemy ORM models for the inspection scoring flow."""
from sqlalchemy import (
    Column, String, Integer, Float, DateTime, ForeignKey,
    Text, Index, Boolean, Numeric
)
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from db.base import Base


class Vehicle(Base):
    """Vehicle under inspection."""
    __tablename__ = "vehicles"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    year = Column(Integer, nullable=True)
    make = Column(String(100), nullable=True)
    model = Column(String(100), nullable=True)
    mileage = Column(Integer, nullable=True)

    # Relationships
    inspections = relationship("Inspection", back_populates="vehicle")


class ShopSettings(Base):
    """Per-shop recommendation and urgency settings."""
    __tablename__ = "shop_settings"

    shop_id = Column(UUID(as_uuid=True), primary_key=True)
    include_cost_estimates = Column(Boolean, nullable=False, default=False)
    include_part_numbers = Column(Boolean, nullable=False, default=False)
    include_timeframes = Column(Boolean, nullable=False, default=True)
    labor_rate = Column(Float, nullable=True)
    markup_percent = Column(Float, nullable=True)
    urgency_thresholds = Column(JSONB, nullable=True)  # {"critical": 85, "high": 60, "normal": 30}


class Inspection(Base):
    """Vehicle inspection with its aggregate urgency."""
    __tablename__ = "inspections"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    shop_id = Column(UUID(as_uuid=True), nullable=False)
    vehicle_id = Column(UUID(as_uuid=True), ForeignKey("vehicles.id"), nullable=True)
    status = Column(String(50), nullable=False, default="draft")
    urgency_level = Column(String(20), nullable=True)
    urgency_score = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    vehicle = relationship("Vehicle", back_populates="inspections")
    items = relationship("InspectionItem", back_populates="inspection")

    __table_args__ = (
        Index("ix_inspections_shop_id", "shop_id"),
    )


class InspectionItem(Base):
    """Single inspected component; scoring results are written back onto this row."""
    __tablename__ = "inspection_items"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    inspection_id = Column(UUID(as_uuid=True), ForeignKey("inspections.id", ondelete="CASCADE"), nullable=False)
    category = Column(String(100), nullable=False)
    component = Column(String(200), nullable=False)
    condition = Column(String(50), nullable=True)  # good, fair, poor, needs_immediate
    measurements = Column(JSONB, nullable=True)
    notes = Column(Text, nullable=True)
    recommendations = Column(Text, nullable=True)
    estimated_cost = Column(Numeric(10, 2), nullable=True)
    priority = Column(Integer, nullable=False, default=5)  # 1-10, 10 most urgent
    requires_immediate_attention = Column(Boolean, nullable=False, default=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    inspection = relationship("Inspection", back_populates="items")

    __table_args__ = (
        Index("ix_inspection_items_inspection_id", "inspection_id"),
        Index("ix_inspection_items_priority", "priority"),
    )
