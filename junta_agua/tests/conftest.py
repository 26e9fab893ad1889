from __future__ import annotations

from decimal import Decimal
import os
import sys
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

# Ensure the project root (which exposes the ``junta_agua`` package) is on ``sys.path``
PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ["RUN_MIGRATIONS_ON_STARTUP"] = "0"

from junta_agua.app.database import Base, get_db
from junta_agua.app.main import app
from junta_agua.app import models

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture(scope="session", autouse=True)
def setup_database() -> Generator[None, None, None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture
def client(db_session: Session) -> Generator[TestClient, None, None]:
    def override_get_db() -> Generator[Session, None, None]:
        try:
            yield db_session
        finally:
            db_session.expire_all()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.pop(get_db, None)


# Catalog of the water board sheet: 2.00 fixed charge for the first 15 m3,
# then 0.20 / 0.30 / 0.50 per m3 for 16-20, 21-25 and 26 onwards.
STANDARD_TARIFF = (
    {"name": "Básico", "min_consumption": 0, "max_consumption": 15, "fixed_charge": "2.00"},
    {"name": "16-20", "min_consumption": 16, "max_consumption": 20, "price_per_unit": "0.20"},
    {"name": "21-25", "min_consumption": 21, "max_consumption": 25, "price_per_unit": "0.30"},
    {"name": "26+", "min_consumption": 26, "max_consumption": None, "price_per_unit": "0.50"},
)


@pytest.fixture
def seed_basic_data(db_session: Session) -> dict:
    meters = [
        models.Meter(code_meter="M-001", location="Barrio Central", description="Quispe Ana"),
        models.Meter(code_meter="M-002", location="Barrio Alto", description="Mamani Luis"),
        models.Meter(
            code_meter="M-003",
            location="Barrio Bajo",
            description="Condori Rosa",
            status=models.MeterStatus.INACTIVE,
        ),
    ]
    db_session.add_all(meters)

    tariffs = []
    for index, band in enumerate(STANDARD_TARIFF):
        tariff = models.Tariff(
            name=band["name"],
            min_consumption=Decimal(str(band["min_consumption"])),
            max_consumption=(
                None if band["max_consumption"] is None else Decimal(str(band["max_consumption"]))
            ),
            price_per_unit=Decimal(band.get("price_per_unit", "0")),
            fixed_charge=Decimal(band.get("fixed_charge", "0")),
            order_index=index,
        )
        tariffs.append(tariff)
    db_session.add_all(tariffs)

    readings = [
        models.Reading(meter_id="M-001", period="ABRIL 2025", value=Decimal("100")),
        models.Reading(meter_id="M-001", period="MAYO 2025", value=Decimal("130")),
        models.Reading(meter_id="M-002", period="ABRIL 2025", value=Decimal("50")),
        models.Reading(meter_id="M-002", period="MAYO 2025", value=Decimal("60")),
        models.Reading(meter_id="M-003", period="ABRIL 2025", value=Decimal("10")),
        models.Reading(meter_id="M-003", period="MAYO 2025", value=Decimal("40")),
    ]
    db_session.add_all(readings)

    db_session.add(models.Debt(meter_id="M-001", period="MAYO 2025", amount=Decimal("10.00")))
    db_session.add(
        models.MeterFine(
            meter_id="M-001",
            period="MAYO 2025",
            fines_reuniones=Decimal("5.00"),
            fines_mingas=Decimal("3.00"),
            mora_percentage=Decimal("10"),
            mora_amount=Decimal("0"),
        )
    )
    db_session.add(models.GardenValue(meter_id="M-001", period="MAYO 2025", amount=Decimal("1.50")))
    db_session.commit()

    return {"meters": meters, "tariffs": tariffs, "readings": readings}
