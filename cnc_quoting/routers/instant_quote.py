from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from .. import models, schemas
from ..catalog_store import SqlCatalogStore
from ..database import get_db
from ..pricing_engine import PricingEngine

router = APIRouter(prefix="/instant-quote", tags=["instant-quote"])

UNPRICEABLE_DETAIL = "Could not price this part with the selected options."


def get_pricing_engine(db: Session = Depends(get_db)) -> PricingEngine:
    return PricingEngine(SqlCatalogStore(db))


@router.post("/", response_model=schemas.QuoteLineItemResult)
def calculate_instant_quote(
    pricing_input: schemas.PricingInput,
    engine: PricingEngine = Depends(get_pricing_engine),
):
    """
    Price one part against the current catalog and rate card.

    Nothing is saved. Callers that want to keep the price persist the
    returned line item themselves.
    """
    result = engine.calculate_instant_quote(pricing_input)
    if result is None:
        raise HTTPException(status_code=422, detail=UNPRICEABLE_DETAIL)
    return result


@router.get("/options", response_model=schemas.CatalogOptions)
def list_options(db: Session = Depends(get_db)):
    """Active materials, finishes, tolerances and regions for the quote form."""
    materials = db.query(models.Material).filter(
        models.Material.is_active.is_(True)
    ).order_by(models.Material.name).all()
    finishes = db.query(models.Finish).filter(
        models.Finish.is_active.is_(True)
    ).order_by(models.Finish.name).all()
    tolerances = db.query(models.Tolerance).filter(
        models.Tolerance.is_active.is_(True)
    ).order_by(models.Tolerance.cost_multiplier).all()

    return schemas.CatalogOptions(
        materials=[schemas.Material.model_validate(m) for m in materials],
        finishes=[schemas.Finish.model_validate(f) for f in finishes],
        tolerances=[schemas.Tolerance.model_validate(t) for t in tolerances],
        regions=[
            card.region for card in
            db.query(models.RateCard).filter(models.RateCard.is_active.is_(True))
            .order_by(models.RateCard.region).all()
        ],
    )
