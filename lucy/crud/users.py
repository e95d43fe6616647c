import logging

from sqlalchemy.orm import Session

from lucy.errors import AuthenticationError, ValidationError
from lucy.models import User
from lucy.schemas.users import UserCreate
from lucy.security import get_password_hash, verify_password

logger = logging.getLogger(__name__)


def get_user_by_email(db: Session, email: str):
    return db.query(User).filter(User.email == email).first()


def create_user(db: Session, user_in: UserCreate) -> User:
    if get_user_by_email(db, user_in.email):
        raise ValidationError("Ya existe un usuario con ese email")

    db_user = User(
        email=user_in.email,
        name=user_in.name,
        password_hash=get_password_hash(user_in.password),
        role=user_in.role,
        is_active=user_in.is_active,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    logger.info("Usuario creado: %s (%s)", db_user.email, db_user.role.value)
    return db_user


def authenticate(db: Session, email: str, password: str) -> User:
    """Devuelve el usuario si las credenciales son válidas."""
    user = get_user_by_email(db, email)
    if not user or not user.is_active or not verify_password(password, user.password_hash):
        logger.warning("Login fallido para %s", email)
        raise AuthenticationError()
    return user
