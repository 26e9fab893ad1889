from contextlib import contextmanager

from junta_agua.app import models
from junta_agua.app.scripts import calculate_period
from junta_agua.app.services.errors import DataAccessError


def _use_session(monkeypatch, db_session):
    @contextmanager
    def fake_scope():
        yield db_session

    monkeypatch.setattr(calculate_period, "session_scope", fake_scope)


def test_script_previews_period_without_saving(monkeypatch, db_session, seed_basic_data):
    _use_session(monkeypatch, db_session)

    exit_code = calculate_period.main(["--period", "MAYO 2025"])

    assert exit_code == 0
    assert db_session.query(models.Bill).count() == 0


def test_script_saves_bills_when_requested(monkeypatch, db_session, seed_basic_data):
    _use_session(monkeypatch, db_session)

    exit_code = calculate_period.main(["--period", "MAYO 2025", "--save"])

    assert exit_code == 0
    meters = [bill.meter_id for bill in db_session.query(models.Bill).order_by(models.Bill.meter_id)]
    assert meters == ["M-001", "M-002"]


def test_script_reports_failures_with_exit_code(monkeypatch, db_session, seed_basic_data):
    _use_session(monkeypatch, db_session)

    def broken_catalog(db):
        raise DataAccessError("No se pudo cargar el catálogo de tarifas")

    monkeypatch.setattr(
        "junta_agua.app.services.tariff_catalog.TariffCatalogService.load_active_bands",
        broken_catalog,
    )

    assert calculate_period.main(["--period", "MAYO 2025"]) == 1
