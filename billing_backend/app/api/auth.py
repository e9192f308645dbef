"""Registration, login and logout."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from billing_backend.app.core.logging import get_logger
from billing_backend.app.core.security import create_access_token, get_password_hash, verify_password
from billing_backend.app.core.sessions import SessionData, SessionStore, get_session_store, new_session_id
from billing_backend.app.core.time import utc_now
from billing_backend.app.db.session import get_db
from billing_backend.app.dependencies.auth import AuthSession, get_current_session
from billing_backend.app.models.user import User
from billing_backend.app.schemas.login import LoginRequest, TokenResponse
from billing_backend.app.schemas.user import UserCreate, UserRead

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def register_user(user_in: UserCreate, db: Session = Depends(get_db)):
    email = user_in.email.lower()
    existing = db.query(User).filter(User.email == email).first()
    if existing:
        raise HTTPException(status_code=400, detail="Email already registered")
    user = User(email=email, name=user_in.name, hashed_password=get_password_hash(user_in.password))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@router.post("/login", response_model=TokenResponse)
def login(
    credentials: LoginRequest,
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
):
    user = db.query(User).filter(User.email == credentials.email.lower()).first()
    if not user or not verify_password(credentials.password, user.hashed_password):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User is inactive")

    user.last_login = utc_now()
    db.commit()

    session_id = new_session_id()
    store.set(session_id, SessionData(user_id=user.id, email=user.email))
    logger.info("user_logged_in", user_id=user.id)
    return TokenResponse(access_token=create_access_token(user_id=user.id, session_id=session_id))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    auth: AuthSession = Depends(get_current_session),
    store: SessionStore = Depends(get_session_store),
):
    store.clear(auth.session_id)
    logger.info("user_logged_out", user_id=auth.user.id)


@router.get("/me", response_model=UserRead)
def read_me(auth: AuthSession = Depends(get_current_session)):
    return auth.user
