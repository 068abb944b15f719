"""
계정 관리 테스트.
- 프로필/화면 설정 부분 수정, 이메일 중복, 비밀번호 변경 검증 순서,
  본인 탈퇴(일반 사용자 OK / 관리자 금지)를 검증한다.
"""

import pytest

from app.core.errors import AuthorizationError, PasswordMismatch, WrongCurrentPassword
from app.core.security import verify_password
from app.models.user import User
from app.services import users as user_service
from tests.helpers import (
    DEFAULT_PASSWORD,
    auth_header,
    caller_for,
    create_admin_in_db,
    create_user_in_db,
    login,
)


def test_update_profile_partial(client, db):
    user = create_user_in_db(db)
    token = login(client, user.email)

    r = client.patch("/users/me/profile", headers=auth_header(token), json={"first_name": "Jiwoo"})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["first_name"] == "Jiwoo"
    assert body["last_name"] == "User"
    assert body["email"] == user.email


def test_update_profile_email_taken(client, db):
    user = create_user_in_db(db)
    other = create_user_in_db(db)
    token = login(client, user.email)

    r = client.patch("/users/me/profile", headers=auth_header(token), json={"email": other.email})
    assert r.status_code == 409
    assert r.json()["code"] == "EMAIL_TAKEN"


def test_update_preferences(client, db):
    user = create_user_in_db(db)
    token = login(client, user.email)

    r = client.patch(
        "/users/me/preferences",
        headers=auth_header(token),
        json={"locale": "ko-KR", "theme": "dark"},
    )
    assert r.status_code == 200, r.text
    assert r.json()["locale"] == "ko-KR"
    assert r.json()["theme"] == "dark"

    bad = client.patch("/users/me/preferences", headers=auth_header(token), json={"theme": "neon"})
    assert bad.status_code == 422


def test_change_password_wrong_current_checked_first(db):
    user = create_user_in_db(db)
    before = user.password_hash

    # 현재 비밀번호가 틀리면 확인 값 불일치보다 먼저 실패
    with pytest.raises(WrongCurrentPassword):
        user_service.change_password(db, caller_for(user), "Wrong-pass1", "NewPassw0rd!", "Different1!")

    db.refresh(user)
    assert user.password_hash == before


def test_change_password_mismatch_leaves_hash_unchanged(db):
    user = create_user_in_db(db)
    before = user.password_hash

    with pytest.raises(PasswordMismatch):
        user_service.change_password(db, caller_for(user), DEFAULT_PASSWORD, "NewPassw0rd!", "NewPassw0rd?")

    db.refresh(user)
    assert user.password_hash == before
    assert user.refresh_token_version == 0


def test_change_password_then_login_with_new_password(client, db):
    user = create_user_in_db(db)
    token = login(client, user.email)

    r = client.patch(
        "/users/me/password",
        headers=auth_header(token),
        json={
            "current_password": DEFAULT_PASSWORD,
            "new_password": "NewPassw0rd!",
            "confirm_password": "NewPassw0rd!",
        },
    )
    assert r.status_code == 204, r.text

    old = client.post("/auth/login", json={"email": user.email, "password": DEFAULT_PASSWORD})
    assert old.status_code == 401
    login(client, user.email, "NewPassw0rd!")


def test_change_password_same_as_old_rejected(client, db):
    user = create_user_in_db(db)
    token = login(client, user.email)

    r = client.patch(
        "/users/me/password",
        headers=auth_header(token),
        json={
            "current_password": DEFAULT_PASSWORD,
            "new_password": DEFAULT_PASSWORD,
            "confirm_password": DEFAULT_PASSWORD,
        },
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "New password must be different"


def test_delete_me_disables_account(client, db):
    user = create_user_in_db(db)
    token = login(client, user.email)

    wrong = client.request("DELETE", "/users/me", headers=auth_header(token), json={"password": "Wrong-pass1"})
    assert wrong.status_code == 400
    assert wrong.json()["detail"] == "Invalid password"

    r = client.request("DELETE", "/users/me", headers=auth_header(token), json={"password": DEFAULT_PASSWORD})
    assert r.status_code == 204, r.text

    db.expire_all()
    stored = db.get(User, user.id)
    assert stored is not None
    assert stored.enabled is False

    assert client.get("/users/me", headers=auth_header(token)).status_code == 401
    relogin = client.post("/auth/login", json={"email": user.email, "password": DEFAULT_PASSWORD})
    assert relogin.status_code == 401


def test_admin_cannot_delete_own_account(db):
    admin = create_admin_in_db(db)

    with pytest.raises(AuthorizationError):
        user_service.delete_account(db, caller_for(admin), DEFAULT_PASSWORD)

    db.refresh(admin)
    assert admin.enabled is True
