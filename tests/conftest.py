import os

# Antes de importar la app: que el engine por defecto no cree lucy.db en disco
os.environ.setdefault("DATABASE_URL", "sqlite://")

from decimal import Decimal

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from lucy.database import get_db
from lucy.main import app
from lucy.models import Base, User, Role, Client, Product, Service
from lucy.security import get_current_user, get_password_hash

USER_EMAIL = "caja@lucy3000.com"
USER_PASSWORD = "Secreto#123"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def user(db):
    user = User(
        email=USER_EMAIL,
        name="Lucía",
        password_hash=get_password_hash(USER_PASSWORD),
        role=Role.ADMIN,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _override_get_db(session_factory):
    def override():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()
    return override


@pytest.fixture
def anon_client(session_factory, user):
    """Cliente HTTP con la autenticación real (token JWT)."""
    app.dependency_overrides[get_db] = _override_get_db(session_factory)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def client(session_factory, user):
    """Cliente HTTP ya autenticado como `user`."""
    def override_current_user(db: Session = Depends(get_db)):
        return db.query(User).filter(User.email == USER_EMAIL).first()

    app.dependency_overrides[get_db] = _override_get_db(session_factory)
    app.dependency_overrides[get_current_user] = override_current_user
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# --- Datos de catálogo ---

@pytest.fixture
def make_product(db):
    def make(sku="CR-001", name="Crema hidratante", price="10.00", stock=10, min_stock=2, **kwargs):
        product = Product(
            sku=sku,
            name=name,
            category=kwargs.pop("category", "Cosmética"),
            price=Decimal(price),
            cost=Decimal(kwargs.pop("cost", "4.00")),
            stock=stock,
            min_stock=min_stock,
            **kwargs,
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product
    return make


@pytest.fixture
def service(db):
    service = Service(name="Cera", category="Depilación", price=Decimal("25.00"), duration=30)
    db.add(service)
    db.commit()
    db.refresh(service)
    return service


@pytest.fixture
def customer(db):
    customer = Client(first_name="Ana", last_name="García", phone="600111222", email="ana@lucy3000.com")
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer
