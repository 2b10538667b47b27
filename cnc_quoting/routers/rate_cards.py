from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from .. import models, schemas
from ..config import settings
from ..database import commit_or_409, get_db

router = APIRouter(prefix="/rate-cards", tags=["rate-cards"])

# Machine time in currency per minute, by machine class
DEFAULT_RATE_CARDS = {
    "default": {
        "currency": "USD",
        "three_axis_rate_per_min": 0.75,
        "five_axis_rate_per_min": 1.50,
        "turning_rate_per_min": 0.60,
        "machine_setup_fee": 25.00,
        "tax_rate": 0.08,
        "shipping_flat": 15.00,
    },
}


def seed_rate_cards(db: Session) -> int:
    seeded = 0
    for region, data in DEFAULT_RATE_CARDS.items():
        existing = db.query(models.RateCard).filter(models.RateCard.region == region).first()
        if not existing:
            db.add(models.RateCard(region=region, **data))
            seeded += 1
    db.commit()
    return seeded


def _get_or_404(rate_card_id: str, db: Session) -> models.RateCard:
    card = db.query(models.RateCard).filter(models.RateCard.id == rate_card_id).first()
    if not card:
        raise HTTPException(status_code=404, detail="Rate card not found")
    return card


def _check_region_free(region: str, db: Session, exclude_id: str = None):
    query = db.query(models.RateCard).filter(models.RateCard.region == region)
    if exclude_id:
        query = query.filter(models.RateCard.id != exclude_id)
    if query.first():
        raise HTTPException(status_code=409, detail=f"Rate card for region '{region}' already exists")


@router.get("/seed")
def seed_defaults(db: Session = Depends(get_db)):
    """Seed the default rate card. Skips regions that already have one."""
    return {"ok": True, "seeded": seed_rate_cards(db)}


@router.get("/", response_model=List[schemas.RateCard])
def list_rate_cards(active_only: bool = False, db: Session = Depends(get_db)):
    query = db.query(models.RateCard)
    if active_only:
        query = query.filter(models.RateCard.is_active.is_(True))
    return query.order_by(models.RateCard.region).all()


@router.post("/", response_model=schemas.RateCard)
def create_rate_card(card: schemas.RateCardCreate, db: Session = Depends(get_db)):
    _check_region_free(card.region, db)
    db_card = models.RateCard(**card.model_dump())
    db.add(db_card)
    commit_or_409(db, f"Rate card for region '{card.region}' already exists")
    db.refresh(db_card)
    return db_card


@router.get("/{rate_card_id}", response_model=schemas.RateCard)
def get_rate_card(rate_card_id: str, db: Session = Depends(get_db)):
    return _get_or_404(rate_card_id, db)


@router.patch("/{rate_card_id}", response_model=schemas.RateCard)
def update_rate_card(rate_card_id: str, update: schemas.RateCardUpdate, db: Session = Depends(get_db)):
    card = _get_or_404(rate_card_id, db)
    changes = update.model_dump(exclude_unset=True)
    renaming = changes.get("region") not in (None, card.region)
    if renaming and card.region == settings.DEFAULT_REGION:
        raise HTTPException(
            status_code=409,
            detail="The default rate card can't change region",
        )
    if changes.get("region"):
        _check_region_free(changes["region"], db, exclude_id=rate_card_id)
    # A machine rate may be cleared (None) to stop pricing that machine class
    nullable = {"meta", "three_axis_rate_per_min", "five_axis_rate_per_min", "turning_rate_per_min"}
    for field, value in changes.items():
        if value is None and field not in nullable:
            continue
        setattr(card, field, value)
    commit_or_409(db, "Rate card region already in use")
    db.refresh(card)
    return card


@router.delete("/{rate_card_id}")
def delete_rate_card(rate_card_id: str, db: Session = Depends(get_db)):
    card = _get_or_404(rate_card_id, db)
    if card.region == settings.DEFAULT_REGION:
        raise HTTPException(
            status_code=409,
            detail="The default rate card can't be deleted, deactivate it instead",
        )
    db.delete(card)
    db.commit()
    return {"ok": True, "message": "Rate card deleted"}
