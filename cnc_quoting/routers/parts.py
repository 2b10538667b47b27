import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from .. import models, schemas
from ..database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/parts", tags=["parts"])


def _get_or_404(part_id: str, db: Session) -> models.Part:
    part = db.query(models.Part).filter(models.Part.id == part_id).first()
    if not part:
        raise HTTPException(status_code=404, detail="Part not found")
    return part


@router.post("/", response_model=schemas.Part)
def register_part(part: schemas.PartCreate, db: Session = Depends(get_db)):
    """Record an uploaded CAD file. Geometry arrives later from the CAD processing step."""
    db_part = models.Part(**part.model_dump())
    db.add(db_part)
    db.commit()
    db.refresh(db_part)
    return db_part


@router.get("/{part_id}", response_model=schemas.Part)
def get_part(part_id: str, db: Session = Depends(get_db)):
    return _get_or_404(part_id, db)


@router.patch("/{part_id}/geometry", response_model=schemas.Part)
def record_geometry(part_id: str, geometry: schemas.PartGeometryUpdate, db: Session = Depends(get_db)):
    """Store volume, surface area and bounding box for a part and mark it processed.

    Geometry is written once. A part that already has it gets a 409; upload the
    file again as a new part instead.
    """
    part = _get_or_404(part_id, db)
    if part.volume_mm3 is not None or part.surface_area_mm2 is not None:
        raise HTTPException(status_code=409, detail="Part geometry already recorded")
    part.volume_mm3 = geometry.volume_mm3
    part.surface_area_mm2 = geometry.surface_area_mm2
    part.bbox = geometry.bbox
    part.status = models.PartStatus.PROCESSED.value
    db.commit()
    db.refresh(part)
    logger.info("Recorded geometry for part %s (%.1f mm3)", part_id, geometry.volume_mm3)
    return part


@router.post("/{part_id}/failed", response_model=schemas.Part)
def mark_failed(part_id: str, db: Session = Depends(get_db)):
    """CAD processing couldn't extract geometry; the part stays unpriceable."""
    part = _get_or_404(part_id, db)
    if part.status == models.PartStatus.PROCESSED.value:
        raise HTTPException(status_code=409, detail="Part already has geometry")
    part.status = models.PartStatus.ERROR.value
    db.commit()
    db.refresh(part)
    logger.warning("CAD processing failed for part %s", part_id)
    return part
