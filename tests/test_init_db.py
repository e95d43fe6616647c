from decimal import Decimal

import lucy.init_db as seed
from lucy.models import Role, SaleCounter, Service, User


def test_init_db_seeds_admin_services_and_counter(engine, session_factory, db, monkeypatch):
    monkeypatch.setattr(seed, "engine", engine)
    monkeypatch.setattr(seed, "SessionLocal", session_factory)

    seed.init_db()
    seed.init_db()  # idempotente

    admins = db.query(User).filter(User.role == Role.ADMIN).all()
    assert [u.email for u in admins] == ["admin@lucy3000.com"]

    services = {s.name: s for s in db.query(Service).all()}
    assert set(services) == {"Cera", "Láser", "Limpieza de cara"}
    assert services["Láser"].price == Decimal("60.00")
    assert services["Limpieza de cara"].duration == 60

    assert db.query(SaleCounter).one().value == 0
