"""Authentication dependencies for resolving the current session."""

from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from billing_backend.app.core.security import decode_access_token
from billing_backend.app.core.sessions import SessionStore, get_session_store
from billing_backend.app.db.session import get_db
from billing_backend.app.models.user import User


@dataclass
class AuthSession:
    user: User
    session_id: str


def get_current_session(
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
    authorization: str | None = Header(default=None),
) -> AuthSession:
    # Expect Authorization: Bearer <token>
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Not authenticated")
    token = authorization.split(" ", 1)[1]
    try:
        payload = decode_access_token(token)
    except ValueError:
        raise HTTPException(status_code=401, detail="Not authenticated")

    session_id = payload.get("sid")
    session = store.get(session_id) if session_id else None
    if session is None:
        raise HTTPException(status_code=401, detail="Session expired")

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Not authenticated")
    if session.user_id != user_id:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return AuthSession(user=user, session_id=session_id)


def get_current_user(auth: AuthSession = Depends(get_current_session)) -> User:
    return auth.user
