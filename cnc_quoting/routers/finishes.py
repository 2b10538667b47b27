from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from .. import models, schemas
from ..database import commit_or_409, get_db

router = APIRouter(prefix="/finishes", tags=["finishes"])

# cost_per_m2 is charged on part surface area; setup_fee once per part
DEFAULT_FINISHES = {
    "As Machined": {"type": "Surface Finish", "cost_per_m2": 0.00, "setup_fee": 0.00, "lead_time_days": 0},
    "Bead Blast": {"type": "Aesthetic Finish", "cost_per_m2": 5.00, "setup_fee": 10.00, "lead_time_days": 1},
    "Anodize - Clear": {"type": "Protective Coating", "cost_per_m2": 8.00, "setup_fee": 15.00, "lead_time_days": 2},
    "Anodize - Black": {"type": "Protective Coating", "cost_per_m2": 10.00, "setup_fee": 15.00, "lead_time_days": 2},
    "Powder Coat": {"type": "Protective Coating", "cost_per_m2": 12.00, "setup_fee": 20.00, "lead_time_days": 3},
}


def seed_finishes(db: Session) -> int:
    seeded = 0
    for name, data in DEFAULT_FINISHES.items():
        existing = db.query(models.Finish).filter(models.Finish.name == name).first()
        if not existing:
            db.add(models.Finish(name=name, **data))
            seeded += 1
    db.commit()
    return seeded


def _get_or_404(finish_id: str, db: Session) -> models.Finish:
    finish = db.query(models.Finish).filter(models.Finish.id == finish_id).first()
    if not finish:
        raise HTTPException(status_code=404, detail="Finish not found")
    return finish


def _check_name_free(name: str, db: Session, exclude_id: str = None):
    query = db.query(models.Finish).filter(models.Finish.name == name)
    if exclude_id:
        query = query.filter(models.Finish.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=409, detail=f"Finish '{name}' already exists")


@router.get("/seed")
def seed_defaults(db: Session = Depends(get_db)):
    """Seed default finishes. Skips any that already exist."""
    return {"ok": True, "seeded": seed_finishes(db)}


@router.get("/", response_model=List[schemas.Finish])
def list_finishes(active_only: bool = False, db: Session = Depends(get_db)):
    query = db.query(models.Finish)
    if active_only:
        query = query.filter(models.Finish.is_active.is_(True))
    return query.order_by(models.Finish.name).all()


@router.post("/", response_model=schemas.Finish)
def create_finish(finish: schemas.FinishCreate, db: Session = Depends(get_db)):
    _check_name_free(finish.name, db)
    db_finish = models.Finish(**finish.model_dump())
    db.add(db_finish)
    commit_or_409(db, f"Finish '{finish.name}' already exists")
    db.refresh(db_finish)
    return db_finish


@router.get("/{finish_id}", response_model=schemas.Finish)
def get_finish(finish_id: str, db: Session = Depends(get_db)):
    return _get_or_404(finish_id, db)


@router.patch("/{finish_id}", response_model=schemas.Finish)
def update_finish(finish_id: str, update: schemas.FinishUpdate, db: Session = Depends(get_db)):
    finish = _get_or_404(finish_id, db)
    changes = update.model_dump(exclude_unset=True)
    if changes.get("name"):
        _check_name_free(changes["name"], db, exclude_id=finish_id)
    for field, value in changes.items():
        if value is None and field not in ("meta", "type"):
            continue
        setattr(finish, field, value)
    commit_or_409(db, "Finish name already in use")
    db.refresh(finish)
    return finish


@router.delete("/{finish_id}")
def delete_finish(finish_id: str, db: Session = Depends(get_db)):
    finish = _get_or_404(finish_id, db)
    db.delete(finish)
    db.commit()
    return {"ok": True, "message": "Finish deleted"}
