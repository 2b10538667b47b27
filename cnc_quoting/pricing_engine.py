"""
Instant Pricing Engine.

Turns part geometry + catalog selections + a regional rate card into an
itemized price. Pure math over snapshots handed in by a PricingDataSource:
no writes, no state between calls.

Input: PricingInput (part, material, finish, tolerance, quantity, region, machine class)
Output: QuoteLineItemResult, or None when the part can't be priced
"""

import logging
import math
from typing import Optional

from . import schemas
from .catalog_store import PricingDataSource
from .config import settings

logger = logging.getLogger(__name__)

MM3_PER_M3 = 1e9
MM2_PER_M2 = 1e6


class PricingEngine:
    """
    Computes instant quotes for single line items.

    Any missing or unusable input (part without geometry, inactive catalog
    row, no rate card for the region, no rate for the machine class) yields
    None. The cause is logged; callers only see "could not price".
    """

    def __init__(self, source: PricingDataSource,
                 base_setup_min: Optional[float] = None,
                 volume_scale: Optional[float] = None,
                 max_discount: Optional[float] = None,
                 default_region: Optional[str] = None):
        self.source = source
        self.base_setup_min = settings.MACHINING_BASE_SETUP_MIN if base_setup_min is None else base_setup_min
        self.volume_scale = settings.MACHINING_VOLUME_SCALE if volume_scale is None else volume_scale
        self.max_discount = settings.MAX_QUANTITY_DISCOUNT if max_discount is None else max_discount
        self.default_region = default_region or settings.DEFAULT_REGION

    def calculate_instant_quote(self, pricing_input: schemas.PricingInput) -> Optional[schemas.QuoteLineItemResult]:
        """Price one part. Never raises; returns None when the part can't be priced."""
        try:
            return self._calculate(pricing_input)
        except Exception:
            logger.exception("Instant quote failed for part %s", pricing_input.part_id)
            return None

    def _calculate(self, pricing_input: schemas.PricingInput) -> Optional[schemas.QuoteLineItemResult]:
        part = self.source.get_part(pricing_input.part_id)
        if not self._has_geometry(part):
            logger.warning("Part %s not found or missing geometry", pricing_input.part_id)
            return None

        material = self.source.get_material(pricing_input.material_id)
        finish = self.source.get_finish(pricing_input.finish_id)
        tolerance = self.source.get_tolerance(pricing_input.tolerance_id)
        for label, row, row_id in (
            ("material", material, pricing_input.material_id),
            ("finish", finish, pricing_input.finish_id),
            ("tolerance", tolerance, pricing_input.tolerance_id),
        ):
            if row is None or not row.is_active:
                logger.warning("No active %s %s", label, row_id)
                return None

        region = pricing_input.region or self.default_region
        rate_card = self.source.get_rate_card(region)
        if rate_card is None or not rate_card.is_active:
            logger.warning("No active rate card for region %r", region)
            return None

        machine_class = pricing_input.machine_class
        rate_per_min = rate_card.rate_for(machine_class)
        if rate_per_min is None:
            logger.warning("Rate card %r has no %s rate", region, machine_class.value)
            return None

        qty = pricing_input.quantity

        # Material
        mass_kg = part.volume_mm3 / MM3_PER_M3 * material.density_kg_m3
        material_cost_raw = mass_kg * material.cost_per_kg
        material_cost_total = material_cost_raw * qty

        # Machining
        machining_time_min = self.estimate_machining_time(part.volume_mm3) * material.machinability_factor
        machining_cost_raw = machining_time_min * rate_per_min + rate_card.machine_setup_fee
        machining_cost_total = machining_cost_raw * qty

        # Finish
        finish_cost_raw = part.surface_area_mm2 / MM2_PER_M2 * finish.cost_per_m2 + finish.setup_fee
        finish_cost_total = finish_cost_raw * qty

        subtotal_before_discount = material_cost_total + machining_cost_total + finish_cost_total
        discount = self.quantity_discount(qty)
        subtotal_after_discount = subtotal_before_discount * (1 - discount)

        # Tolerance premium goes on after the quantity discount
        final_subtotal = subtotal_after_discount * tolerance.cost_multiplier

        tax_amount = final_subtotal * rate_card.tax_rate
        shipping_amount = rate_card.shipping_flat
        total_price = final_subtotal + tax_amount + shipping_amount
        unit_price = total_price / qty

        breakdown = schemas.PricingBreakdown(
            material_cost_raw=round(material_cost_raw, 2),
            material_cost_total=round(material_cost_total, 2),
            machining_time_min=round(machining_time_min, 2),
            machining_cost_raw=round(machining_cost_raw, 2),
            machining_cost_total=round(machining_cost_total, 2),
            finish_cost_raw=round(finish_cost_raw, 2),
            finish_cost_total=round(finish_cost_total, 2),
            subtotal_before_discount=round(subtotal_before_discount, 2),
            quantity_discount_percentage=round(discount, 4),
            subtotal_after_discount=round(subtotal_after_discount, 2),
            tolerance_multiplier=tolerance.cost_multiplier,
            final_subtotal=round(final_subtotal, 2),
            tax_amount=round(tax_amount, 2),
            shipping_amount=round(shipping_amount, 2),
            total_price=round(total_price, 2),
            currency=rate_card.currency,
            machine_class=machine_class,
            region=region,
            notes=(
                f"Pricing based on {material.name}, {finish.name}, {tolerance.name}, "
                f"and {region} rate card ({machine_class.value})."
            ),
        )

        return schemas.QuoteLineItemResult(
            part_id=pricing_input.part_id,
            material_id=pricing_input.material_id,
            finish_id=pricing_input.finish_id,
            tolerance_id=pricing_input.tolerance_id,
            quantity=qty,
            unit_price=round(unit_price, 2),
            line_total=round(total_price, 2),
            pricing_breakdown=breakdown,
        )

    def estimate_machining_time(self, volume_mm3: float) -> float:
        """
        Machining minutes for one part before the machinability factor.

        Heuristic: fixed setup time plus the cube root of volume, scaled.
        No tool-path simulation; bigger parts simply take longer.
        """
        return self.base_setup_min + volume_mm3 ** (1.0 / 3.0) / self.volume_scale

    def quantity_discount(self, quantity: int) -> float:
        """Saturating discount: 0 at quantity 1, approaches and caps at max_discount."""
        return min(self.max_discount, 1 - 1 / math.sqrt(quantity))

    def _has_geometry(self, part: Optional[schemas.Part]) -> bool:
        if part is None:
            return False
        volume = part.volume_mm3
        area = part.surface_area_mm2
        return volume is not None and area is not None and volume > 0 and area > 0
