from datetime import timedelta

from jose import jwt

from achievehub.config import settings
from achievehub import security
from achievehub.security import create_access_token, hash_password, user_id_from_token, verify_password


def test_token_carries_user_id():
    assert user_id_from_token(create_access_token(42)) == 42


def test_bad_tokens_are_ignored():
    assert user_id_from_token(None) is None
    assert user_id_from_token("not-a-jwt") is None
    assert user_id_from_token(create_access_token(1, expires_delta=timedelta(minutes=-1))) is None

    forged = jwt.encode({"sub": "1"}, "some-other-key", algorithm=settings.JWT_ALGORITHM)
    assert user_id_from_token(forged) is None

    no_user = jwt.encode({"sub": "admin"}, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    assert user_id_from_token(no_user) is None


def test_verify_password():
    stored = hash_password("correct horse")

    assert verify_password("correct horse", stored) == (True, None)
    assert verify_password("wrong horse", stored)[0] is False
    assert verify_password("anything", None) == (False, None)
    assert verify_password("anything", "") == (False, None)


def test_missing_hash_still_runs_a_hash(monkeypatch):
    calls = []
    monkeypatch.setattr(security.pwd_context, "dummy_verify", lambda: calls.append(True))

    assert verify_password("anything", None) == (False, None)
    assert calls == [True]

    verify_password("correct horse", hash_password("correct horse"))
    assert calls == [True]
