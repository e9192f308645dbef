from billing_backend.app.core.security import get_password_hash, verify_password
from billing_backend.app.core.sessions import InMemorySessionStore, SessionData, new_session_id


def test_password_hashing_not_plain():
    plain = "password123"
    hashed = get_password_hash(plain)
    assert hashed and hashed != plain


def test_verify_password():
    hashed = get_password_hash("secret")
    assert verify_password("secret", hashed)
    assert not verify_password("wrong", hashed)


def test_session_store_get_set_clear():
    store = InMemorySessionStore()
    session_id = new_session_id()
    assert store.get(session_id) is None

    store.set(session_id, SessionData(user_id=7, email="owner@example.com"))
    assert store.get(session_id).user_id == 7

    store.clear(session_id)
    assert store.get(session_id) is None
    store.clear(session_id)


def test_session_ids_are_unique():
    assert new_session_id() != new_session_id()
