"""
Shared test fixtures: SQLite test database, test client, in-memory catalog.
"""

import os
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Point settings at the test database before importing app modules
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["SEED_ON_STARTUP"] = "false"

from cnc_quoting import schemas
from cnc_quoting.database import Base, get_db
from cnc_quoting.main import app


TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def db():
    """Direct database session for test setup/assertions."""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded_client(client):
    """Test client with the default catalog and rate card loaded."""
    for path in ("/api/materials/seed", "/api/finishes/seed",
                 "/api/tolerances/seed", "/api/rate-cards/seed"):
        assert client.get(path).status_code == 200
    return client


# --- In-memory pricing data source ---

class InMemoryCatalog:
    """PricingDataSource over plain dicts. Mirrors the SQL store: inactive rows are invisible."""

    def __init__(self):
        self.parts = {}
        self.materials = {}
        self.finishes = {}
        self.tolerances = {}
        self.rate_cards = {}
        self.calls = []

    def get_part(self, part_id):
        self.calls.append(("part", part_id))
        return self.parts.get(part_id)

    def get_material(self, material_id):
        self.calls.append(("material", material_id))
        return self._active(self.materials.get(material_id))

    def get_finish(self, finish_id):
        self.calls.append(("finish", finish_id))
        return self._active(self.finishes.get(finish_id))

    def get_tolerance(self, tolerance_id):
        self.calls.append(("tolerance", tolerance_id))
        return self._active(self.tolerances.get(tolerance_id))

    def get_rate_card(self, region):
        self.calls.append(("rate_card", region))
        return self._active(self.rate_cards.get(region))

    def _active(self, row):
        if row is None or not row.is_active:
            return None
        return row


@pytest.fixture
def catalog():
    """
    Catalog matching the worked example: 8000 mm3 aluminum block,
    clear anodize, standard tolerance, $1.20/min three-axis rate.
    """
    store = InMemoryCatalog()
    store.parts["part-1"] = schemas.Part(
        id="part-1", volume_mm3=8000.0, surface_area_mm2=2400.0,
        bbox={"x": {"min": 0, "max": 20}, "y": {"min": 0, "max": 20}, "z": {"min": 0, "max": 20}},
    )
    store.materials["mat-al"] = schemas.Material(
        id="mat-al", name="Aluminum 6061", density_kg_m3=2700, cost_per_kg=15.0,
        machinability_factor=1.0,
    )
    store.finishes["fin-anod"] = schemas.Finish(
        id="fin-anod", name="Anodize - Clear", cost_per_m2=8.0, setup_fee=15.0, lead_time_days=2,
    )
    store.tolerances["tol-std"] = schemas.Tolerance(
        id="tol-std", name="Standard (+/- 0.1mm)", tol_min_mm=-0.1, tol_max_mm=0.1,
        cost_multiplier=1.0,
    )
    store.rate_cards["default"] = schemas.RateCard(
        id="rc-default", region="default", currency="USD",
        three_axis_rate_per_min=1.2, five_axis_rate_per_min=2.0, turning_rate_per_min=None,
        machine_setup_fee=10.0, tax_rate=0.08, shipping_flat=12.0,
    )
    return store


@pytest.fixture
def pricing_input():
    def _build(**overrides):
        data = {
            "part_id": "part-1",
            "material_id": "mat-al",
            "finish_id": "fin-anod",
            "tolerance_id": "tol-std",
            "quantity": 1,
        }
        data.update(overrides)
        return schemas.PricingInput(**data)
    return _build
