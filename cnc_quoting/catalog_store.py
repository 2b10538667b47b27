"""
Read side of the catalog and part stores.

The pricing engine never talks to the database directly. It receives a
PricingDataSource and asks it for snapshots of the rows it needs. The SQL
implementation below is what the API wires in; tests pass an in-memory one.
"""

from typing import Optional, Protocol

from sqlalchemy.orm import Session

from . import models, schemas


class PricingDataSource(Protocol):
    """Capabilities the pricing engine needs. Each lookup returns None when nothing usable exists."""

    def get_part(self, part_id: str) -> Optional[schemas.Part]:
        ...

    def get_material(self, material_id: str) -> Optional[schemas.Material]:
        ...

    def get_finish(self, finish_id: str) -> Optional[schemas.Finish]:
        ...

    def get_tolerance(self, tolerance_id: str) -> Optional[schemas.Tolerance]:
        ...

    def get_rate_card(self, region: str) -> Optional[schemas.RateCard]:
        ...


class SqlCatalogStore:
    """PricingDataSource backed by the application database. Catalog lookups only see active rows."""

    def __init__(self, db: Session):
        self.db = db

    def get_part(self, part_id: str) -> Optional[schemas.Part]:
        part = self.db.query(models.Part).filter(models.Part.id == part_id).first()
        return schemas.Part.model_validate(part) if part else None

    def get_material(self, material_id: str) -> Optional[schemas.Material]:
        row = self._active(models.Material, material_id)
        return schemas.Material.model_validate(row) if row else None

    def get_finish(self, finish_id: str) -> Optional[schemas.Finish]:
        row = self._active(models.Finish, finish_id)
        return schemas.Finish.model_validate(row) if row else None

    def get_tolerance(self, tolerance_id: str) -> Optional[schemas.Tolerance]:
        row = self._active(models.Tolerance, tolerance_id)
        return schemas.Tolerance.model_validate(row) if row else None

    def get_rate_card(self, region: str) -> Optional[schemas.RateCard]:
        card = self.db.query(models.RateCard).filter(
            models.RateCard.region == region,
            models.RateCard.is_active.is_(True),
        ).first()
        return schemas.RateCard.model_validate(card) if card else None

    def _active(self, model, row_id: str):
        return self.db.query(model).filter(
            model.id == row_id,
            model.is_active.is_(True),
        ).first()
