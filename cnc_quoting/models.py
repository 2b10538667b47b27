from sqlalchemy import Column, Integer, String, Float, DateTime, Boolean, JSON
from datetime import datetime
from .database import Base
import enum
import uuid


def _new_id() -> str:
    return str(uuid.uuid4())


# --- Enums ---

class MachineClass(str, enum.Enum):
    THREE_AXIS = "three_axis"
    FIVE_AXIS = "five_axis"
    TURNING = "turning"


class PartStatus(str, enum.Enum):
    UPLOADED = "uploaded"
    PROCESSED = "processed"
    ERROR = "error"


# --- Part geometry store ---

class Part(Base):
    """Uploaded CAD part. Geometry columns are filled in by the CAD processing step."""
    __tablename__ = "parts"

    id = Column(String, primary_key=True, default=_new_id)
    file_name = Column(String, nullable=True)
    file_url = Column(String, nullable=False)
    file_ext = Column(String, nullable=True)
    size_bytes = Column(Integer, nullable=True)
    volume_mm3 = Column(Float, nullable=True)
    surface_area_mm2 = Column(Float, nullable=True)
    bbox = Column(JSON, nullable=True)  # free-form, e.g. {"x": {"min": 0, "max": 40}, ...}
    status = Column(String, default=PartStatus.UPLOADED.value)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


# --- Catalog store ---

class Material(Base):
    __tablename__ = "materials"

    id = Column(String, primary_key=True, default=_new_id)
    name = Column(String, unique=True, nullable=False)
    density_kg_m3 = Column(Float, nullable=False)
    cost_per_kg = Column(Float, nullable=False)
    machinability_factor = Column(Float, default=1.0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    meta = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Finish(Base):
    __tablename__ = "finishes"

    id = Column(String, primary_key=True, default=_new_id)
    name = Column(String, unique=True, nullable=False)
    type = Column(String, nullable=True)
    cost_per_m2 = Column(Float, default=0.0, nullable=False)
    setup_fee = Column(Float, default=0.0, nullable=False)
    lead_time_days = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    meta = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Tolerance(Base):
    __tablename__ = "tolerances"

    id = Column(String, primary_key=True, default=_new_id)
    name = Column(String, unique=True, nullable=False)
    tol_min_mm = Column(Float, nullable=True)
    tol_max_mm = Column(Float, nullable=True)
    cost_multiplier = Column(Float, default=1.0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    meta = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class RateCard(Base):
    """Region-scoped machine rates, fees and tax. One active card per region."""
    __tablename__ = "rate_cards"

    id = Column(String, primary_key=True, default=_new_id)
    region = Column(String, unique=True, nullable=False)
    currency = Column(String, default="USD", nullable=False)
    three_axis_rate_per_min = Column(Float, nullable=True)
    five_axis_rate_per_min = Column(Float, nullable=True)
    turning_rate_per_min = Column(Float, nullable=True)
    machine_setup_fee = Column(Float, default=0.0, nullable=False)
    tax_rate = Column(Float, default=0.0, nullable=False)
    shipping_flat = Column(Float, default=0.0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    meta = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
