from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from .models import MachineClass


# --- Parts ---

class PartCreate(BaseModel):
    file_url: str = Field(..., min_length=1)
    file_name: Optional[str] = None
    file_ext: Optional[str] = None
    size_bytes: Optional[int] = Field(None, ge=0)


class PartGeometryUpdate(BaseModel):
    volume_mm3: float = Field(..., gt=0)
    surface_area_mm2: float = Field(..., gt=0)
    bbox: Optional[Dict[str, Any]] = None


class Part(BaseModel):
    id: str
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    volume_mm3: Optional[float] = None
    surface_area_mm2: Optional[float] = None
    bbox: Optional[Dict[str, Any]] = None
    status: Optional[str] = None
    updated_at: Optional[datetime] = None
    class Config:
        from_attributes = True


# --- Materials ---

class MaterialBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    density_kg_m3: float = Field(..., gt=0)
    cost_per_kg: float = Field(..., gt=0)
    machinability_factor: float = Field(1.0, ge=0.1, le=5.0)
    is_active: bool = True
    meta: Optional[Dict[str, Any]] = None

class MaterialCreate(MaterialBase):
    pass

class MaterialUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    density_kg_m3: Optional[float] = Field(None, gt=0)
    cost_per_kg: Optional[float] = Field(None, gt=0)
    machinability_factor: Optional[float] = Field(None, ge=0.1, le=5.0)
    is_active: Optional[bool] = None
    meta: Optional[Dict[str, Any]] = None

class Material(MaterialBase):
    id: str
    updated_at: Optional[datetime] = None
    class Config:
        from_attributes = True


# --- Finishes ---

class FinishBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    type: Optional[str] = Field(None, max_length=100)
    cost_per_m2: float = Field(0.0, ge=0)
    setup_fee: float = Field(0.0, ge=0)
    lead_time_days: int = Field(0, ge=0)
    is_active: bool = True
    meta: Optional[Dict[str, Any]] = None

class FinishCreate(FinishBase):
    pass

class FinishUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    type: Optional[str] = Field(None, max_length=100)
    cost_per_m2: Optional[float] = Field(None, ge=0)
    setup_fee: Optional[float] = Field(None, ge=0)
    lead_time_days: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None
    meta: Optional[Dict[str, Any]] = None

class Finish(FinishBase):
    id: str
    updated_at: Optional[datetime] = None
    class Config:
        from_attributes = True


# --- Tolerances ---

def check_tolerance_band(tol_min_mm: Optional[float], tol_max_mm: Optional[float]):
    """Raise ValueError when both bounds are set and max < min."""
    if tol_min_mm is not None and tol_max_mm is not None and tol_max_mm < tol_min_mm:
        raise ValueError("Max tolerance must be greater than or equal to min tolerance.")


class ToleranceBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    tol_min_mm: Optional[float] = None
    tol_max_mm: Optional[float] = None
    cost_multiplier: float = Field(1.0, ge=0.1)
    is_active: bool = True
    meta: Optional[Dict[str, Any]] = None

    @model_validator(mode="after")
    def _band_is_ordered(self):
        check_tolerance_band(self.tol_min_mm, self.tol_max_mm)
        return self

class ToleranceCreate(ToleranceBase):
    pass

class ToleranceUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    tol_min_mm: Optional[float] = None
    tol_max_mm: Optional[float] = None
    cost_multiplier: Optional[float] = Field(None, ge=0.1)
    is_active: Optional[bool] = None
    meta: Optional[Dict[str, Any]] = None

class Tolerance(ToleranceBase):
    id: str
    updated_at: Optional[datetime] = None
    class Config:
        from_attributes = True


# --- Rate cards ---

class RateCardBase(BaseModel):
    region: str = Field(..., min_length=1)
    currency: str = Field("USD", min_length=3, max_length=3)
    three_axis_rate_per_min: Optional[float] = Field(None, ge=0)
    five_axis_rate_per_min: Optional[float] = Field(None, ge=0)
    turning_rate_per_min: Optional[float] = Field(None, ge=0)
    machine_setup_fee: float = Field(0.0, ge=0)
    tax_rate: float = Field(0.0, ge=0, le=1)
    shipping_flat: float = Field(0.0, ge=0)
    is_active: bool = True
    meta: Optional[Dict[str, Any]] = None

    def rate_for(self, machine_class: MachineClass) -> Optional[float]:
        """Per-minute rate for one machine class, or None if the card doesn't price it."""
        return {
            MachineClass.THREE_AXIS: self.three_axis_rate_per_min,
            MachineClass.FIVE_AXIS: self.five_axis_rate_per_min,
            MachineClass.TURNING: self.turning_rate_per_min,
        }[MachineClass(machine_class)]

class RateCardCreate(RateCardBase):
    pass

class RateCardUpdate(BaseModel):
    region: Optional[str] = Field(None, min_length=1)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    three_axis_rate_per_min: Optional[float] = Field(None, ge=0)
    five_axis_rate_per_min: Optional[float] = Field(None, ge=0)
    turning_rate_per_min: Optional[float] = Field(None, ge=0)
    machine_setup_fee: Optional[float] = Field(None, ge=0)
    tax_rate: Optional[float] = Field(None, ge=0, le=1)
    shipping_flat: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None
    meta: Optional[Dict[str, Any]] = None

class RateCard(RateCardBase):
    id: str
    updated_at: Optional[datetime] = None
    class Config:
        from_attributes = True


# --- Instant quote ---

class PricingInput(BaseModel):
    part_id: str = Field(..., min_length=1)
    material_id: str = Field(..., min_length=1)
    finish_id: str = Field(..., min_length=1)
    tolerance_id: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    region: Optional[str] = Field(None, min_length=1)
    machine_class: MachineClass = MachineClass.THREE_AXIS


class PricingBreakdown(BaseModel):
    material_cost_raw: float
    material_cost_total: float
    machining_time_min: float
    machining_cost_raw: float
    machining_cost_total: float
    finish_cost_raw: float
    finish_cost_total: float
    subtotal_before_discount: float
    quantity_discount_percentage: float
    subtotal_after_discount: float
    tolerance_multiplier: float
    final_subtotal: float
    tax_amount: float
    shipping_amount: float
    total_price: float
    currency: str
    machine_class: MachineClass
    region: str
    notes: Optional[str] = None


class QuoteLineItemResult(BaseModel):
    part_id: str
    material_id: str
    finish_id: str
    tolerance_id: str
    quantity: int
    unit_price: float
    line_total: float
    pricing_breakdown: PricingBreakdown


class CatalogOptions(BaseModel):
    """Active catalog rows a customer can pick from on the instant quote form."""
    materials: List[Material] = []
    finishes: List[Finish] = []
    tolerances: List[Tolerance] = []
    regions: List[str] = []
