"""
로그인 실패 누적 잠금 테스트.
"""

import logging
from datetime import datetime, timedelta, timezone

import pytest

from app.core.config import settings
from app.core.errors import InvalidCredentials
from app.models.login_attempt import LoginAttempt
from app.services import auth as auth_service
from app.services import login_attempts
from tests.helpers import DEFAULT_PASSWORD, before_next_flush, create_user_in_db, unique_email


def test_lock_after_max_failures(client, db, caplog):
    caplog.set_level(logging.INFO, logger="app.services.auth")
    user = create_user_in_db(db)

    for _ in range(settings.MAX_LOGIN_ATTEMPTS):
        r = client.post("/auth/login", json={"email": user.email, "password": "Wrong-pass1"})
        assert r.status_code == 401

    # 잠긴 뒤에는 올바른 비밀번호도 거부
    locked = client.post("/auth/login", json={"email": user.email, "password": DEFAULT_PASSWORD})
    assert locked.status_code == 429
    assert locked.json()["code"] == "ACCOUNT_LOCKED"
    assert int(locked.headers["retry-after"]) > 0

    lock_logs = [r for r in caplog.records if r.getMessage().startswith("Login locked")]
    assert len(lock_logs) == 1
    assert lock_logs[0].levelno == logging.WARNING


def test_unknown_email_locks_the_same_way(client):
    email = unique_email()
    for _ in range(settings.MAX_LOGIN_ATTEMPTS):
        client.post("/auth/login", json={"email": email, "password": "Wrong-pass1"})

    r = client.post("/auth/login", json={"email": email, "password": "Wrong-pass1"})
    assert r.status_code == 429


def test_success_clears_failures(client, db):
    user = create_user_in_db(db)

    for _ in range(settings.MAX_LOGIN_ATTEMPTS - 1):
        client.post("/auth/login", json={"email": user.email, "password": "Wrong-pass1"})
    assert client.post("/auth/login", json={"email": user.email, "password": DEFAULT_PASSWORD}).status_code == 200

    r = client.post("/auth/login", json={"email": user.email, "password": "Wrong-pass1"})
    assert r.status_code == 401


def test_lock_expires(db):
    email = unique_email()
    start = datetime.now(timezone.utc)

    locked = False
    for _ in range(settings.MAX_LOGIN_ATTEMPTS):
        locked = login_attempts.record_failure(db, email, now=start)
        db.commit()
    assert locked is True

    assert login_attempts.seconds_until_unlock(db, email, now=start) > 0
    later = start + timedelta(minutes=settings.LOGIN_LOCK_MINUTES, seconds=1)
    assert login_attempts.seconds_until_unlock(db, email, now=later) == 0


def test_old_failures_fall_out_of_window(db):
    email = unique_email()
    start = datetime.now(timezone.utc)

    for _ in range(settings.MAX_LOGIN_ATTEMPTS - 1):
        login_attempts.record_failure(db, email, now=start)
        db.commit()

    later = start + timedelta(minutes=settings.LOGIN_LOCK_MINUTES + 1)
    assert login_attempts.record_failure(db, email, now=later) is False
    db.commit()


def test_concurrent_first_failures_are_both_counted(db, other_db):
    email = unique_email()

    # 다른 요청이 같은 이메일의 첫 실패 행을 먼저 커밋
    def concurrent_failure():
        login_attempts.record_failure(other_db, email)
        other_db.commit()

    before_next_flush(db, concurrent_failure)
    with pytest.raises(InvalidCredentials):
        auth_service.login(db, email, "Wrong-pass1")

    db.expire_all()
    assert db.get(LoginAttempt, email).failed_count == 2
