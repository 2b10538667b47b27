from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from .. import models, schemas
from ..database import commit_or_409, get_db

router = APIRouter(prefix="/tolerances", tags=["tolerances"])

DEFAULT_TOLERANCES = {
    "Standard (+/- 0.1mm)": {"tol_min_mm": -0.1, "tol_max_mm": 0.1, "cost_multiplier": 1.0},
    "Fine (+/- 0.05mm)": {"tol_min_mm": -0.05, "tol_max_mm": 0.05, "cost_multiplier": 1.2},
    "Precision (+/- 0.02mm)": {"tol_min_mm": -0.02, "tol_max_mm": 0.02, "cost_multiplier": 1.5},
}


def seed_tolerances(db: Session) -> int:
    seeded = 0
    for name, data in DEFAULT_TOLERANCES.items():
        existing = db.query(models.Tolerance).filter(models.Tolerance.name == name).first()
        if not existing:
            db.add(models.Tolerance(name=name, **data))
            seeded += 1
    db.commit()
    return seeded


def _get_or_404(tolerance_id: str, db: Session) -> models.Tolerance:
    tolerance = db.query(models.Tolerance).filter(models.Tolerance.id == tolerance_id).first()
    if not tolerance:
        raise HTTPException(status_code=404, detail="Tolerance not found")
    return tolerance


def _check_name_free(name: str, db: Session, exclude_id: str = None):
    query = db.query(models.Tolerance).filter(models.Tolerance.name == name)
    if exclude_id:
        query = query.filter(models.Tolerance.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=409, detail=f"Tolerance '{name}' already exists")


@router.get("/seed")
def seed_defaults(db: Session = Depends(get_db)):
    """Seed default tolerance bands. Skips any that already exist."""
    return {"ok": True, "seeded": seed_tolerances(db)}


@router.get("/", response_model=List[schemas.Tolerance])
def list_tolerances(active_only: bool = False, db: Session = Depends(get_db)):
    query = db.query(models.Tolerance)
    if active_only:
        query = query.filter(models.Tolerance.is_active.is_(True))
    return query.order_by(models.Tolerance.cost_multiplier, models.Tolerance.name).all()


@router.post("/", response_model=schemas.Tolerance)
def create_tolerance(tolerance: schemas.ToleranceCreate, db: Session = Depends(get_db)):
    _check_name_free(tolerance.name, db)
    db_tolerance = models.Tolerance(**tolerance.model_dump())
    db.add(db_tolerance)
    commit_or_409(db, f"Tolerance '{tolerance.name}' already exists")
    db.refresh(db_tolerance)
    return db_tolerance


@router.get("/{tolerance_id}", response_model=schemas.Tolerance)
def get_tolerance(tolerance_id: str, db: Session = Depends(get_db)):
    return _get_or_404(tolerance_id, db)


@router.patch("/{tolerance_id}", response_model=schemas.Tolerance)
def update_tolerance(tolerance_id: str, update: schemas.ToleranceUpdate, db: Session = Depends(get_db)):
    tolerance = _get_or_404(tolerance_id, db)
    changes = update.model_dump(exclude_unset=True)
    if changes.get("name"):
        _check_name_free(changes["name"], db, exclude_id=tolerance_id)

    # Band check has to see the merged row, not just the patch
    tol_min = changes.get("tol_min_mm", tolerance.tol_min_mm)
    tol_max = changes.get("tol_max_mm", tolerance.tol_max_mm)
    try:
        schemas.check_tolerance_band(tol_min, tol_max)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    for field, value in changes.items():
        if value is None and field not in ("meta", "tol_min_mm", "tol_max_mm"):
            continue
        setattr(tolerance, field, value)
    commit_or_409(db, "Tolerance name already in use")
    db.refresh(tolerance)
    return tolerance


@router.delete("/{tolerance_id}")
def delete_tolerance(tolerance_id: str, db: Session = Depends(get_db)):
    tolerance = _get_or_404(tolerance_id, db)
    db.delete(tolerance)
    db.commit()
    return {"ok": True, "message": "Tolerance deleted"}
