from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from .. import models, schemas
from ..database import commit_or_409, get_db

router = APIRouter(prefix="/materials", tags=["materials"])

# Default machining stock, raw supplier cost per kg
DEFAULT_MATERIALS = {
    "Aluminum 6061": {"density_kg_m3": 2700, "cost_per_kg": 15.00, "machinability_factor": 1.2},
    "Stainless Steel 304": {"density_kg_m3": 8000, "cost_per_kg": 25.00, "machinability_factor": 0.8},
    "Titanium Grade 5": {"density_kg_m3": 4420, "cost_per_kg": 120.00, "machinability_factor": 0.6},
    "ABS Plastic": {"density_kg_m3": 1040, "cost_per_kg": 5.00, "machinability_factor": 1.5},
    "Brass C360": {"density_kg_m3": 8500, "cost_per_kg": 18.00, "machinability_factor": 1.0},
}


def seed_materials(db: Session) -> int:
    """Insert any default material that isn't in the table yet. Returns rows added."""
    seeded = 0
    for name, data in DEFAULT_MATERIALS.items():
        existing = db.query(models.Material).filter(models.Material.name == name).first()
        if not existing:
            db.add(models.Material(name=name, **data))
            seeded += 1
    db.commit()
    return seeded


def _get_or_404(material_id: str, db: Session) -> models.Material:
    material = db.query(models.Material).filter(models.Material.id == material_id).first()
    if not material:
        raise HTTPException(status_code=404, detail="Material not found")
    return material


def _check_name_free(name: str, db: Session, exclude_id: str = None):
    query = db.query(models.Material).filter(models.Material.name == name)
    if exclude_id:
        query = query.filter(models.Material.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=409, detail=f"Material '{name}' already exists")


@router.get("/seed")
def seed_defaults(db: Session = Depends(get_db)):
    """Seed default materials. Safe to run multiple times, skips existing."""
    return {"ok": True, "seeded": seed_materials(db)}


@router.get("/", response_model=List[schemas.Material])
def list_materials(active_only: bool = False, db: Session = Depends(get_db)):
    query = db.query(models.Material)
    if active_only:
        query = query.filter(models.Material.is_active.is_(True))
    return query.order_by(models.Material.name).all()


@router.post("/", response_model=schemas.Material)
def create_material(material: schemas.MaterialCreate, db: Session = Depends(get_db)):
    _check_name_free(material.name, db)
    db_material = models.Material(**material.model_dump())
    db.add(db_material)
    commit_or_409(db, f"Material '{material.name}' already exists")
    db.refresh(db_material)
    return db_material


@router.get("/{material_id}", response_model=schemas.Material)
def get_material(material_id: str, db: Session = Depends(get_db)):
    return _get_or_404(material_id, db)


@router.patch("/{material_id}", response_model=schemas.Material)
def update_material(material_id: str, update: schemas.MaterialUpdate, db: Session = Depends(get_db)):
    material = _get_or_404(material_id, db)
    changes = update.model_dump(exclude_unset=True)
    if changes.get("name"):
        _check_name_free(changes["name"], db, exclude_id=material_id)
    for field, value in changes.items():
        if value is None and field != "meta":
            continue
        setattr(material, field, value)
    commit_or_409(db, "Material name already in use")
    db.refresh(material)
    return material


@router.delete("/{material_id}")
def delete_material(material_id: str, db: Session = Depends(get_db)):
    material = _get_or_404(material_id, db)
    db.delete(material)
    db.commit()
    return {"ok": True, "message": "Material deleted"}
