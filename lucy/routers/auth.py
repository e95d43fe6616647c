from datetime import timedelta

from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from lucy.config import settings
from lucy.crud.users import authenticate, create_user
from lucy.database import get_db
from lucy.models import User
from lucy.schemas.auth import LoginRequest, Token
from lucy.schemas.users import UserCreate, UserRead
from lucy.security import create_access_token, get_current_user

router = APIRouter()


def _issue_token(user: User) -> dict:
    access_token = create_access_token(
        data={"sub": str(user.id), "role": user.role.value},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    return {"access_token": access_token, "token_type": "bearer", "user": user}


@router.post("/login", response_model=Token)
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate(db, credentials.email, credentials.password)
    return _issue_token(user)


# Mismo login con formulario OAuth2 (para el botón "Authorize" de /docs)
@router.post("/token", response_model=Token)
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    # OAuth2 siempre manda 'username'; aquí es el email
    user = authenticate(db, form_data.username, form_data.password)
    return _issue_token(user)


@router.post("/register", response_model=Token, status_code=201)
def register(user_in: UserCreate, db: Session = Depends(get_db)):
    user = create_user(db, user_in)
    return _issue_token(user)


@router.get("/me", response_model=UserRead)
def read_me(current_user: User = Depends(get_current_user)):
    return current_user
