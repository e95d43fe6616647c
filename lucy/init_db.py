"""
Crea las tablas y carga los datos mínimos para arrancar:

    python -m lucy.init_db
"""
import logging
from decimal import Decimal

from lucy.config import settings
from lucy.database import SessionLocal, engine
from lucy.logging_config import setup_logging
from lucy.models import Base, User, Role, Service, SaleCounter
from lucy.security import get_password_hash
from lucy.utils.folios import highest_issued_number

logger = logging.getLogger(__name__)

DEFAULT_ADMIN = ("admin@lucy3000.com", "Administrador", "admin123")

DEFAULT_SERVICES = [
    {"name": "Cera", "category": "Depilación", "price": Decimal("25.00"), "duration": 30,
     "description": "Depilación con cera"},
    {"name": "Láser", "category": "Depilación", "price": Decimal("60.00"), "duration": 45,
     "description": "Depilación láser"},
    {"name": "Limpieza de cara", "category": "Tratamientos Faciales", "price": Decimal("45.00"), "duration": 60,
     "description": "Limpieza facial profunda"},
]


def init_db():
    logger.info("--- Creando tablas ---")
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        # 1. ADMIN
        email, name, password = DEFAULT_ADMIN
        if not db.query(User).filter(User.email == email).first():
            db.add(User(
                email=email,
                name=name,
                password_hash=get_password_hash(password),
                role=Role.ADMIN,
            ))
            logger.info("✅ Usuario '%s' creado.", email)

        # 2. SERVICIOS
        for data in DEFAULT_SERVICES:
            if not db.query(Service).filter(Service.name == data["name"]).first():
                db.add(Service(**data))
                logger.info("✅ Servicio '%s' creado.", data["name"])

        # 3. CONTADOR DE FOLIOS (así la primera venta ya encuentra la fila)
        if not db.query(SaleCounter).filter(SaleCounter.prefix == settings.SALE_NUMBER_PREFIX).first():
            start = highest_issued_number(db, settings.SALE_NUMBER_PREFIX)
            db.add(SaleCounter(prefix=settings.SALE_NUMBER_PREFIX, value=start))

        db.commit()
        logger.info("--- Base de datos lista ---")
    finally:
        db.close()


if __name__ == "__main__":
    setup_logging(settings.LOG_LEVEL)
    init_db()
