"""
접근 확인(/auth/verify, /auth/verify/admin) 테스트.
- 체육관 컨텍스트 헤더 유무, 멤버십 상태, 체육관 상태에 따른 허용/거부와 응답 헤더를 검증한다.
"""

import pytest

from app.models.gym import GymStatus
from app.models.membership import GymRole, MembershipStatus, Permission
from tests.helpers import (
    add_membership,
    auth_header,
    create_admin_in_db,
    create_gym_in_db,
    create_user_in_db,
    login,
)


def verify(client, token: str, gym_id=None):
    headers = auth_header(token)
    if gym_id is not None:
        headers["X-Context-Gym-Id"] = str(gym_id)
    return client.get("/auth/verify", headers=headers)


def test_verify_without_gym_context(client, db):
    user = create_user_in_db(db)

    r = verify(client, login(client, user.email))
    assert r.status_code == 200, r.text
    assert r.content == b""
    assert r.headers["X-Auth-User-Id"] == str(user.id)
    assert r.headers["X-Auth-User-Role"] == "USER"
    assert r.headers["X-Auth-User-Locale"] == "en"
    assert "X-Auth-Gym-Id" not in r.headers


def test_verify_with_gym_context_returns_membership_grants(client, db):
    coach = create_user_in_db(db)
    gym = create_gym_in_db(db)
    add_membership(
        db, user=coach, gym=gym, gym_role=GymRole.COACH,
        permissions={Permission.WOD_WRITE, Permission.MANAGE_MEMBERSHIPS},
    )

    r = verify(client, login(client, coach.email), gym.id)
    assert r.status_code == 200, r.text
    assert r.headers["X-Auth-Gym-Id"] == str(gym.id)
    assert r.headers["X-Auth-User-Role"] == "COACH"
    assert r.headers["X-Auth-User-Permissions"] == "MANAGE_MEMBERSHIPS,WOD_WRITE"


@pytest.mark.parametrize("status", [MembershipStatus.PENDING, MembershipStatus.INACTIVE, MembershipStatus.BANNED])
def test_verify_requires_active_membership(client, db, status):
    user = create_user_in_db(db)
    gym = create_gym_in_db(db)
    add_membership(db, user=user, gym=gym, status=status)

    r = verify(client, login(client, user.email), gym.id)
    assert r.status_code == 403


def test_verify_without_membership(client, db):
    user = create_user_in_db(db)
    gym = create_gym_in_db(db)

    assert verify(client, login(client, user.email), gym.id).status_code == 403


def test_suspended_gym_only_lets_owner_through(client, db):
    gym = create_gym_in_db(db, status=GymStatus.SUSPENDED)
    owner = create_user_in_db(db)
    coach = create_user_in_db(db)
    add_membership(db, user=owner, gym=gym, gym_role=GymRole.OWNER, permissions=set(Permission))
    add_membership(
        db, user=coach, gym=gym, gym_role=GymRole.COACH, permissions={Permission.MANAGE_MEMBERSHIPS}
    )

    assert verify(client, login(client, coach.email), gym.id).status_code == 403

    r = verify(client, login(client, owner.email), gym.id)
    assert r.status_code == 200
    assert r.headers["X-Auth-User-Role"] == "OWNER"


def test_verify_rejects_malformed_gym_id(client, db):
    user = create_user_in_db(db)

    r = verify(client, login(client, user.email), "not-a-uuid")
    assert r.status_code == 400
    assert r.json()["code"] == "VALIDATION_ERROR"


def test_verify_requires_token(client):
    assert client.get("/auth/verify").status_code == 401


def test_verify_admin(client, db):
    admin = create_admin_in_db(db)
    user = create_user_in_db(db)

    assert client.get("/auth/verify/admin").status_code == 401
    assert client.get("/auth/verify/admin", headers=auth_header(login(client, user.email))).status_code == 403
    assert client.get("/auth/verify/admin", headers=auth_header(login(client, admin.email))).status_code == 200
