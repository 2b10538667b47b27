from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
import os

from .config import settings
from .database import engine, Base
from .routers import materials, finishes, tolerances, rate_cards, parts, instant_quote

logger = logging.getLogger("cnc_quoting")

# Create tables (handles new tables but won't add columns to existing ones)
Base.metadata.create_all(bind=engine)


ALEMBIC_INI = os.path.join(os.path.dirname(__file__), "..", "alembic.ini")


def _alembic_config():
    from alembic.config import Config

    cfg = Config(ALEMBIC_INI)
    cfg.set_main_option("script_location", os.path.join(os.path.dirname(ALEMBIC_INI), "alembic"))
    cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
    return cfg


def _bootstrapped_without_alembic() -> bool:
    """True when create_all built the catalog tables but Alembic never ran."""
    from sqlalchemy import inspect

    existing = set(inspect(engine).get_table_names())
    return "alembic_version" not in existing and set(Base.metadata.tables) <= existing


def _run_migrations():
    """Bring the schema to Alembic head on startup.

    The module-level create_all already builds every table the first
    migration creates, so a fresh database is stamped at the base revision
    before upgrading. Later revisions then apply normally.
    """
    if not os.path.exists(ALEMBIC_INI):
        logger.info("alembic.ini not found, skipping migrations")
        return
    try:
        from alembic import command
        from alembic.script import ScriptDirectory

        cfg = _alembic_config()
        if _bootstrapped_without_alembic():
            base = ScriptDirectory.from_config(cfg).get_base()
            logger.info("Catalog tables predate Alembic, stamping %s", base)
            command.stamp(cfg, base)

        command.upgrade(cfg, "head")
        logger.info("Schema at Alembic head")
    except Exception:
        # A failed migration shouldn't keep the quoting API down
        logger.exception("Alembic migration failed")


app = FastAPI(
    title="CNC Instant Quoting",
    description=f"Instant CNC machining quotes for {settings.COMPANY_NAME}",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(instant_quote.router, prefix="/api")
app.include_router(parts.router, prefix="/api")
app.include_router(materials.router, prefix="/api")
app.include_router(finishes.router, prefix="/api")
app.include_router(tolerances.router, prefix="/api")
app.include_router(rate_cards.router, prefix="/api")


@app.get("/health")
def health():
    return {"status": "ok", "app": "cnc-quoting"}


@app.on_event("startup")
def auto_migrate():
    """Run pending Alembic migrations on startup."""
    _run_migrations()


@app.on_event("startup")
def auto_seed():
    """Seed the default catalog and rate card on first run."""
    if not settings.SEED_ON_STARTUP:
        return
    from .database import SessionLocal
    db = SessionLocal()
    try:
        seeded = (
            materials.seed_materials(db)
            + finishes.seed_finishes(db)
            + tolerances.seed_tolerances(db)
            + rate_cards.seed_rate_cards(db)
        )
        if seeded:
            logger.info("Seeded %d default catalog rows", seeded)
    finally:
        db.close()
